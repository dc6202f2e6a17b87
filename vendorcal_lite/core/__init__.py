"""Configuration and timezone helpers for vendorcal_lite."""
