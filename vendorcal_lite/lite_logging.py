"""
Central logging configuration for vendorcal_lite.

Console output goes to stderr through a colorlog formatter so that the CLI's
JSON output on stdout stays clean. Debug verbosity can be forced from the
environment for troubleshooting vendor feeds.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

LITE_MODULES = [
    "vendorcal_lite",
    "vendorcal_lite.calendar.lite_parser",
    "vendorcal_lite.calendar.lite_line_parser",
    "vendorcal_lite.calendar.lite_event_parser",
    "vendorcal_lite.calendar.lite_datetime_utils",
    "vendorcal_lite.core.config_loader",
]

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_lite_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for vendorcal_lite.

    Safe to call more than once; the CLI calls it again once the config
    file has been read.

    Args:
        debug_mode: Whether to enable debug logging for vendorcal_lite modules
        force_debug: Override debug mode setting (None to use env var detection)
        level: Level name (e.g. from the config file's ``log_level``) applied to
            the root logger and vendorcal_lite modules when debug is off

    Environment Variables:
        VENDORCAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        VENDORCAL_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    env_debug = os.getenv("VENDORCAL_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("VENDORCAL_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    configured_level = env_log_level or (level or "").strip().upper()
    if configured_level in _LEVEL_NAMES:
        root_level = getattr(logging, configured_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist, so embedding applications keep theirs.
    # The handler has no level of its own; logger levels do the filtering.
    if not root_logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
        root_logger.addHandler(handler)

    lite_level = logging.DEBUG if final_debug else root_level
    for module in LITE_MODULES:
        logging.getLogger(module).setLevel(lite_level)

    if final_debug:
        root_logger.debug("Debug logging enabled for vendorcal_lite modules")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in LITE_MODULES:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
