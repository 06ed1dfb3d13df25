"""Utility helpers for repolens."""

from repolens.utils.log_sanitizer import LogSanitizer, get_log_sanitizer, sanitize_logs
from repolens.utils.logging_config import configure_logging

__all__ = [
    "LogSanitizer",
    "configure_logging",
    "get_log_sanitizer",
    "sanitize_logs",
]
