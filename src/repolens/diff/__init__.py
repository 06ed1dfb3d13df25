"""Tree snapshot differ."""

from repolens.diff.tree_diff import detect_changes, flatten_tree, same_repository, split_changes

__all__ = ["detect_changes", "flatten_tree", "same_repository", "split_changes"]
