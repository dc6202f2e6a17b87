"""vendorcal_lite.core.config_loader

Lightweight config loader for vendorcal_lite.

- Reads YAML (PyYAML ``safe_load``; plain JSON is valid YAML too).
- Environment variables override file values.
- Exposes a typed dataclass `Config`, a `load_config()` helper that accepts
  an optional path override, and `Config.to_parse_options()`.
"""

from __future__ import annotations

import datetime
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..calendar.lite_models import CalendarWindow, ParseOptions
from .timezone_utils import now_utc

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("vendorcal.yaml")

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


class ConfigError(ValueError):
    """Raised when a config file cannot be used."""


def _coerce_bool(key: str, raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return default
    text = str(raw).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    logger.warning("Config %s=%r is not a boolean; using default %s", key, raw, default)
    return default


@dataclass
class Config:
    """Typed configuration for vendorcal_lite.

    Fields:
        include_cancelled: keep events whose STATUS is CANCELLED
        default_timezone: zone for DTSTART/DTEND values lacking TZID
        window_days: optional look-ahead window (days from now) applied when
            no explicit window is requested
        log_level: logging level name
    """

    include_cancelled: bool = False
    default_timezone: str | None = None
    window_days: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Coerces booleans and integers, logging a warning when a value has to
        be replaced by its default. ``window_days`` must be positive.
        """
        if data is None:
            data = {}

        include_cancelled = _coerce_bool("include_cancelled", data.get("include_cancelled"), False)

        default_timezone = data.get("default_timezone")
        if default_timezone is not None:
            default_timezone = str(default_timezone).strip() or None

        window_days = data.get("window_days")
        if window_days is not None:
            try:
                window_days = int(window_days)
            except (TypeError, ValueError):
                logger.warning("Config window_days=%r is not an int; ignoring", window_days)
                window_days = None
            else:
                if window_days <= 0:
                    logger.warning("Config window_days=%d must be positive; ignoring", window_days)
                    window_days = None

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            include_cancelled=include_cancelled,
            default_timezone=default_timezone,
            window_days=window_days,
            log_level=log_level,
        )

    def apply_env_overrides(self, environ: dict[str, str] | None = None) -> Config:
        """Return a copy with VENDORCAL_* environment variables applied."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {
            "include_cancelled": self.include_cancelled,
            "default_timezone": self.default_timezone,
            "window_days": self.window_days,
            "log_level": self.log_level,
        }
        overrides = {
            "include_cancelled": env.get("VENDORCAL_INCLUDE_CANCELLED"),
            "default_timezone": env.get("VENDORCAL_DEFAULT_TIMEZONE"),
            "log_level": env.get("VENDORCAL_LOG_LEVEL"),
        }
        for key, value in overrides.items():
            if value is not None and value != "":
                logger.debug("Config %s overridden from environment", key)
                data[key] = value
        return Config.from_dict(data)

    def to_parse_options(
        self,
        window: CalendarWindow | None = None,
        now: datetime.datetime | None = None,
    ) -> ParseOptions:
        """Build ParseOptions from this config.

        An explicit ``window`` wins over ``window_days``.

        Raises:
            pydantic.ValidationError: If default_timezone is unknown
        """
        if window is None and self.window_days is not None:
            start = now if now is not None else now_utc()
            window = CalendarWindow(start=start, end=start + datetime.timedelta(days=self.window_days))
        return ParseOptions(
            include_cancelled=self.include_cancelled,
            window=window,
            default_timezone=self.default_timezone,
        )


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file (default: ./vendorcal.yaml)

    Returns:
        Config dataclass instance with values from file (or defaults), with
        environment overrides applied.

    Raises:
        ConfigError: If an explicitly given file does not exist, is not valid
            YAML, or its top level is not a mapping
    """
    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        if path:
            raise ConfigError(f"Config file {p} not found")
        logger.info("Config file %s not found; using defaults", p)
        return Config().apply_env_overrides()

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config file {p}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ConfigError("Config file must contain a mapping at top level")

    cfg = Config.from_dict(raw).apply_env_overrides()
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
