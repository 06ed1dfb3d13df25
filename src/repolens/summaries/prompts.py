# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Prompt templates for file summaries and directory roll-ups."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.models.model_child_summary import ModelChildSummary

FILE_SYSTEM_PROMPT: Final[str] = (
    "You are a helpful assistant that summarizes code files. Provide concise "
    "summaries focusing on the main purpose, key functions, and overall structure."
)

DIRECTORY_SYSTEM_PROMPT: Final[str] = (
    "You are a helpful assistant that summarizes directories in code repositories. "
    "Provide concise summaries focusing on the main purpose and overall structure "
    "of the directory based on its contents."
)

_FILE_USER_TEMPLATE: Final[str] = (
    'Please provide a concise summary of the following file named "{file_name}". '
    "Focus on the main purpose, key functions, and overall structure. "
    "Keep your summary under 200 words.\n\n"
    "File content:\n```\n{content}\n```"
)

_DIRECTORY_USER_TEMPLATE: Final[str] = (
    'Please provide a concise summary of the directory named "{name}" at path "{path}". '
    "This summary should synthesize the information from the summaries of its "
    "contents listed below. Focus on the overall purpose of this directory, the "
    "main components it contains, and how they relate to each other. "
    "Keep your summary under 250 words.\n\n"
    "Directory contents and their summaries:\n\n{children}"
)

_CHILD_TEMPLATE: Final[str] = "{label}: {name}\nPath: {path}\nSummary: {summary}\n"
_CHILD_SEPARATOR: Final[str] = "\n---\n\n"


def build_file_prompt(file_name: str, content: str) -> str:
    return _FILE_USER_TEMPLATE.format(file_name=file_name, content=content)


def format_child_summary(child: ModelChildSummary) -> str:
    label = "File" if child.kind is EnumNodeKind.FILE else "Directory"
    return _CHILD_TEMPLATE.format(
        label=label, name=child.name, path=child.path, summary=child.summary
    )


def build_directory_prompt(
    name: str, path: str, children: Sequence[ModelChildSummary]
) -> str:
    """Render the roll-up prompt; children appear in the order given."""
    rendered = _CHILD_SEPARATOR.join(format_child_summary(child) for child in children)
    return _DIRECTORY_USER_TEMPLATE.format(name=name, path=path, children=rendered)


__all__ = [
    "DIRECTORY_SYSTEM_PROMPT",
    "FILE_SYSTEM_PROMPT",
    "build_directory_prompt",
    "build_file_prompt",
    "format_child_summary",
]
