# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Process-level logging setup for the CLI and the API server."""

from __future__ import annotations

import logging
import os

from repolens.utils.log_sanitizer import SanitizingFilter

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(level: str | int | None) -> int:
    """Map a level name (or the LOG_LEVEL env var) to a logging level, INFO on junk."""
    if isinstance(level, int):
        return level
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, None)
    if not isinstance(resolved, int):
        return logging.INFO
    return resolved


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging once, with secret redaction on every handler."""
    logging.basicConfig(level=_resolve_level(level), format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    for handler in root.handlers:
        if not any(isinstance(f, SanitizingFilter) for f in handler.filters):
            handler.addFilter(SanitizingFilter())
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "configure_logging"]
