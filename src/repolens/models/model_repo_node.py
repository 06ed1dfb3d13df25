# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Repository tree snapshot model.

A snapshot is a single ``ModelRepoNode`` rooted at path ``""``. Directories
own their children exclusively; paths are unique within a snapshot and are
the identity used for diffing and caching.

Example::

    root = ModelRepoNode(
        name="demo",
        path="",
        kind=EnumNodeKind.DIRECTORY,
        children=(
            ModelRepoNode(name="main.py", path="main.py", kind=EnumNodeKind.FILE, size=120),
        ),
    )
    root.find_by_path("main.py").size  # 120
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator

from repolens.enums.enum_node_kind import EnumNodeKind

PATH_SEPARATOR = "/"


class ModelRepoNode(BaseModel):
    """One file or directory in a repository tree snapshot.

    Attributes:
        name: Leaf segment of the path (display name).
        path: Slash-separated path from the repository root; ``""`` is the root.
        kind: File or directory.
        size: Byte length. Files only; the sole change-detection signal.
        url: Optional GitHub HTML URL for the node.
        children: Ordered child nodes. Directories only.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., description="Leaf segment of the path")
    path: str = Field(..., description="Full slash-separated path; empty for root")
    kind: EnumNodeKind = Field(..., description="File or directory")
    size: int | None = Field(default=None, ge=0, description="Byte length (files only)")
    url: str | None = Field(default=None, description="GitHub HTML URL")
    children: tuple[ModelRepoNode, ...] = Field(
        default=(), description="Child nodes (directories only)"
    )

    @model_validator(mode="after")
    def _check_tree_shape(self) -> ModelRepoNode:
        if self.kind is EnumNodeKind.FILE and self.children:
            raise ValueError(f"File node {self.path!r} cannot have children")
        if self.kind is EnumNodeKind.DIRECTORY and self.size is not None:
            raise ValueError(f"Directory node {self.path!r} cannot have a size")

        prefix = f"{self.path}{PATH_SEPARATOR}" if self.path else ""
        seen: set[str] = set()
        for child in self.children:
            if not child.path.startswith(prefix) or child.path == prefix:
                raise ValueError(
                    f"Child path {child.path!r} is not inside directory {self.path!r}"
                )
            # one level down only, so paths stay unique across the whole tree
            if PATH_SEPARATOR in child.path[len(prefix) :]:
                raise ValueError(
                    f"Child path {child.path!r} is not directly inside {self.path!r}"
                )
            if child.path in seen:
                raise ValueError(f"Duplicate path {child.path!r} in {self.path!r}")
            seen.add(child.path)
        return self

    @property
    def is_file(self) -> bool:
        return self.kind is EnumNodeKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is EnumNodeKind.DIRECTORY

    def iter_nodes(self) -> Iterator[ModelRepoNode]:
        """Yield this node and every descendant, depth-first pre-order."""
        stack: list[ModelRepoNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_descendants(self) -> Iterator[ModelRepoNode]:
        """Yield every descendant (not this node), depth-first pre-order."""
        nodes = self.iter_nodes()
        next(nodes)
        yield from nodes

    def for_each_descendant(self, visit: Callable[[ModelRepoNode], None]) -> None:
        """Call ``visit`` on every descendant, depth-first pre-order."""
        for node in self.iter_descendants():
            visit(node)

    def find_by_path(self, path: str) -> ModelRepoNode | None:
        """Return the node with ``path`` in this subtree, or None.

        Only descends into directories whose path is a prefix of ``path``.
        """
        node: ModelRepoNode | None = self
        while node is not None:
            if node.path == path:
                return node
            node = next(
                (
                    child
                    for child in node.children
                    if child.path == path
                    or (
                        child.is_directory
                        and path.startswith(f"{child.path}{PATH_SEPARATOR}")
                    )
                ),
                None,
            )
        return None


__all__ = ["PATH_SEPARATOR", "ModelRepoNode"]
