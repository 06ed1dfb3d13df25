# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Summarizability classifier.

Decides from a file name alone whether a file is eligible for LLM
summarization. Pure and total: every string gets an answer.

Precedence:
    1. Exact-name allow list (build files without an extension).
    2. Extension allow list.
    3. Extension deny list.
    4. Default deny.

The extension is the substring from the last ``.`` to the end, including the
dot, compared case-sensitively. A name without a ``.`` has no extension.
"""

from __future__ import annotations

from typing import Final

SUMMARIZABLE_NAMES: Final[frozenset[str]] = frozenset({"Makefile", "CMakeLists.txt"})

SUMMARIZABLE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        # Source code
        ".py", ".js", ".ts", ".java", ".cpp", ".cc", ".cxx", ".c", ".cs",
        ".go", ".rb", ".php", ".dart", ".rs", ".kt", ".kts", ".swift",
        ".scala", ".m", ".mm",
        # Web
        ".html", ".htm", ".css", ".scss", ".sass", ".less",
        # Data and docs
        ".xml", ".json", ".yaml", ".yml", ".md",
        # Scripts
        ".sh", ".bash", ".bat", ".ps1",
        # Configuration and build
        ".toml", ".ini", ".cfg", ".env", ".make", ".gradle", ".pom",
        ".tsconfig", ".eslintrc", ".prettierrc", ".babelrc",
    }
)  # fmt: skip

NON_SUMMARIZABLE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        # Documents and images
        ".pdf", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp",
        # Media
        ".mp4", ".mov", ".avi", ".mkv", ".webm", ".mp3", ".wav", ".ogg",
        # Archives
        ".zip", ".tar", ".gz", ".rar", ".7z",
        # Binaries and build output
        ".exe", ".dll", ".so", ".dylib", ".bin", ".pyc", ".class", ".o",
        ".a", ".out",
        # Logs, lockfiles and VCS metadata
        ".log", ".lock", ".gitignore", ".gitattributes", ".DS_Store",
        # Plain text
        ".txt",
    }
)  # fmt: skip


def file_extension(file_name: str) -> str:
    """Return ``.ext`` for ``name.ext``, or ``""`` when the name has no dot."""
    index = file_name.rfind(".")
    return file_name[index:] if index >= 0 else ""


def is_summarizable(file_name: str) -> bool:
    """Return True if ``file_name`` is eligible for summarization.

    Example:
        >>> is_summarizable("Makefile")
        True
        >>> is_summarizable("photo.png")
        False
        >>> is_summarizable("data.unknownext")
        False
    """
    if file_name in SUMMARIZABLE_NAMES:
        return True
    extension = file_extension(file_name)
    if not extension:
        return False
    if extension in SUMMARIZABLE_EXTENSIONS:
        return True
    if extension in NON_SUMMARIZABLE_EXTENSIONS:
        return False
    return False


__all__ = [
    "NON_SUMMARIZABLE_EXTENSIONS",
    "SUMMARIZABLE_EXTENSIONS",
    "SUMMARIZABLE_NAMES",
    "file_extension",
    "is_summarizable",
]
