"""Summarization: eligibility, prompts and the cache-first generator."""

from repolens.summaries.generator import SummaryGenerator, resolve_api_key
from repolens.summaries.summarizability import (
    NON_SUMMARIZABLE_EXTENSIONS,
    SUMMARIZABLE_EXTENSIONS,
    SUMMARIZABLE_NAMES,
    is_summarizable,
)

__all__ = [
    "NON_SUMMARIZABLE_EXTENSIONS",
    "SUMMARIZABLE_EXTENSIONS",
    "SUMMARIZABLE_NAMES",
    "SummaryGenerator",
    "is_summarizable",
    "resolve_api_key",
]
