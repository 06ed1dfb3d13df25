"""Unit tests for the structured cache key scheme."""

from __future__ import annotations

import pytest

from repolens.cache.cache_keys import (
    ModelChildrenCountKey,
    ModelSummaryKey,
    children_count_key_prefix,
    display_key,
    summary_key_prefix,
)
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.exceptions import InvalidCacheKeyError


@pytest.mark.unit
class TestSummaryKey:
    def test_encode_format(self) -> None:
        key = ModelSummaryKey.build("octo", "demo", "src/main.py", EnumNodeKind.FILE)
        assert key.encode() == "summary:octo/demo:src/main.py:file"

    def test_directory_kind(self) -> None:
        key = ModelSummaryKey.build("octo", "demo", "src", "directory")
        assert key.encode() == "summary:octo/demo:src:directory"

    @pytest.mark.parametrize(
        ("owner", "repo", "path", "kind"),
        [
            ("octo", "demo", "README.md", EnumNodeKind.FILE),
            ("octo", "demo", "a/b/c/d.ts", EnumNodeKind.FILE),
            ("my-org", "repo.js", "src", EnumNodeKind.DIRECTORY),
            ("octo", "demo", "", EnumNodeKind.DIRECTORY),
        ],
    )
    def test_round_trip(self, owner: str, repo: str, path: str, kind: EnumNodeKind) -> None:
        key = ModelSummaryKey.build(owner, repo, path, kind)
        assert ModelSummaryKey.decode(key.encode()) == key

    def test_display_key(self) -> None:
        key = ModelSummaryKey.build("octo", "demo", "src/main.py", EnumNodeKind.FILE)
        assert key.display_key == "octo/demo:src/main.py"
        assert display_key("octo", "demo", "src") == "octo/demo:src"

    def test_children_count_key(self) -> None:
        key = ModelSummaryKey.build("octo", "demo", "src", EnumNodeKind.DIRECTORY)
        assert key.children_count_key().encode() == "summarized-children:octo/demo:src"

    @pytest.mark.parametrize(
        ("owner", "repo", "path"),
        [
            ("oc:to", "demo", "a.py"),
            ("octo", "de/mo", "a.py"),
            ("", "demo", "a.py"),
            ("octo", "demo", "weird:name.py"),
        ],
    )
    def test_build_rejects_separator_characters(self, owner: str, repo: str, path: str) -> None:
        with pytest.raises(InvalidCacheKeyError):
            ModelSummaryKey.build(owner, repo, path, EnumNodeKind.FILE)

    @pytest.mark.parametrize(
        "raw",
        [
            "summary:octo/demo:a.py",
            "summary:octo/demo:a.py:file:extra",
            "other:octo/demo:a.py:file",
            "summary:octodemo:a.py:file",
            "summary:octo/demo:a.py:symlink",
        ],
    )
    def test_decode_rejects_malformed(self, raw: str) -> None:
        with pytest.raises(InvalidCacheKeyError):
            ModelSummaryKey.decode(raw)


@pytest.mark.unit
class TestChildrenCountKey:
    def test_round_trip(self) -> None:
        key = ModelChildrenCountKey.build("octo", "demo", "src/lib")
        assert key.encode() == "summarized-children:octo/demo:src/lib"
        assert ModelChildrenCountKey.decode(key.encode()) == key

    def test_decode_rejects_summary_key(self) -> None:
        with pytest.raises(InvalidCacheKeyError):
            ModelChildrenCountKey.decode("summary:octo/demo:src:directory")


@pytest.mark.unit
class TestPrefixes:
    def test_patterns(self) -> None:
        assert summary_key_prefix("octo", "demo") == "summary:octo/demo:*"
        assert children_count_key_prefix("octo", "demo") == "summarized-children:octo/demo:*"

    def test_patterns_validate_repo(self) -> None:
        with pytest.raises(InvalidCacheKeyError):
            summary_key_prefix("octo", "de:mo")
