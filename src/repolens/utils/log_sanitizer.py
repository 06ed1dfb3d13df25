# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Secret redaction for log output.

Provider API keys, GitHub tokens and URL credentials (Redis connection strings
carry a password) must never reach log files. ``sanitize_logs`` is applied to
any value that may contain one; ``SanitizingFilter`` applies it to every
record handled by the root logger once ``configure_logging`` has run.

Usage:
    from repolens.utils.log_sanitizer import sanitize_logs

    logger.info("Connecting to %s", sanitize_logs(redis_url))
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from functools import lru_cache

logger = logging.getLogger(__name__)

# (regex, replacement, description). Order matters: specific before generic.
_DEFAULT_PATTERNS: tuple[tuple[str, str, str], ...] = (
    (r"gsk_[A-Za-z0-9]{20,}", "[GROQ_API_KEY]", "Groq API key"),
    (r"sk-[A-Za-z0-9_-]{20,}", "[OPENAI_API_KEY]", "OpenAI API key"),
    (r"github_pat_[A-Za-z0-9_]{20,}", "[GITHUB_PAT]", "GitHub fine-grained PAT"),
    (r"ghp_[A-Za-z0-9]{36,}", "[GITHUB_TOKEN]", "GitHub personal access token"),
    (r"gho_[A-Za-z0-9]{36,}", "[GITHUB_OAUTH]", "GitHub OAuth token"),
    (
        r"(?i)(authorization:\s*(?:bearer|token)\s+)[^\s,;]+",
        r"\1[REDACTED]",
        "Authorization header value",
    ),
    (
        r"([a-zA-Z][a-zA-Z0-9+.-]*://[^:/@\s]*:)([^@\s]+)(@)",
        r"\1[PASSWORD]\3",
        "Password in URL",
    ),
    (
        r"(?i)\b((?:api_key|access_token|github_token|password)\s*[=:]\s*)['\"]?[^\s'\",;]+['\"]?",
        r"\1[REDACTED]",
        "Key/value secret",
    ),
)

_EMAIL_PATTERN = (r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", "[EMAIL]", "Email")


class LogSanitizer:
    """Replaces secrets in text with placeholder tokens.

    Args:
        enable: When False, text is returned unchanged.
        sanitize_emails: Also redact email addresses.
        custom_patterns: Extra ``(regex, replacement, description)`` triples.
            Patterns that fail to compile are skipped with a warning.
    """

    def __init__(
        self,
        enable: bool = True,
        sanitize_emails: bool = False,
        custom_patterns: Iterable[tuple[str, str, str]] | None = None,
    ) -> None:
        self.enable = enable
        specs = list(_DEFAULT_PATTERNS)
        if sanitize_emails:
            specs.append(_EMAIL_PATTERN)
        if custom_patterns:
            specs.extend(custom_patterns)

        self._patterns: list[tuple[re.Pattern[str], str]] = []
        for regex, replacement, description in specs:
            try:
                self._patterns.append((re.compile(regex), replacement))
            except re.error as exc:
                logger.warning("Skipping invalid sanitizer pattern %r: %s", description, exc)

    def sanitize(self, text: str) -> str:
        if not self.enable or not text:
            return text
        for pattern, replacement in self._patterns:
            text = pattern.sub(replacement, text)
        return text

    def sanitize_lines(self, lines: list[str]) -> list[str]:
        if not self.enable or not lines:
            return lines
        return [self.sanitize(line) for line in lines]


@lru_cache(maxsize=1)
def get_log_sanitizer() -> LogSanitizer:
    """Return the process-wide default sanitizer."""
    return LogSanitizer()


def sanitize_logs(text: str) -> str:
    """Sanitize ``text`` with the process-wide default sanitizer."""
    return get_log_sanitizer().sanitize(text)


class SanitizingFilter(logging.Filter):
    """Logging filter that redacts secrets from the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        sanitized = sanitize_logs(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = None
        return True


__all__ = ["LogSanitizer", "SanitizingFilter", "get_log_sanitizer", "sanitize_logs"]
