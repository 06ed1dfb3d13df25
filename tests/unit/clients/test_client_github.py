"""Unit tests for GitHubContentClient and build_tree."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from repolens.clients.client_github import RATE_LIMIT_MESSAGE, GitHubContentClient, build_tree
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.exceptions import ContentFetchError

TREE_ITEMS = [
    {"path": "README.md", "type": "blob", "size": 40},
    {"path": "src", "type": "tree"},
    {"path": "src/app.py", "type": "blob", "size": 300},
    {"path": "docs/guide/intro.md", "type": "blob", "size": 12},
    {"path": ".git", "type": "tree"},
    {"path": ".git/HEAD", "type": "blob", "size": 21},
    {"path": "vendor", "type": "commit"},
]


def make_client(
    handler: Callable[[httpx.Request], httpx.Response], token: str | None = None
) -> GitHubContentClient:
    return GitHubContentClient(token, transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestBuildTree:
    def test_builds_nested_snapshot(self) -> None:
        root = build_tree(TREE_ITEMS, root_name="demo")

        assert root.name == "demo"
        assert root.path == ""
        assert [child.path for child in root.children] == ["README.md", "src", "docs"]
        app = root.find_by_path("src/app.py")
        assert app is not None
        assert app.kind is EnumNodeKind.FILE
        assert app.size == 300

    def test_parent_directories_are_created_implicitly(self) -> None:
        root = build_tree(TREE_ITEMS, root_name="demo")
        guide = root.find_by_path("docs/guide")
        assert guide is not None
        assert guide.kind is EnumNodeKind.DIRECTORY
        assert guide.name == "guide"

    def test_git_metadata_and_submodules_are_skipped(self) -> None:
        root = build_tree(TREE_ITEMS, root_name="demo")
        paths = {node.path for node in root.iter_nodes()}
        assert ".git" not in paths
        assert ".git/HEAD" not in paths
        assert "vendor" not in paths

    def test_urls(self) -> None:
        root = build_tree(
            TREE_ITEMS,
            root_name="demo",
            url_prefix="https://github.com/octo/demo",
            branch="main",
        )
        assert root.url == "https://github.com/octo/demo"
        assert root.find_by_path("src/app.py").url == (  # type: ignore[union-attr]
            "https://github.com/octo/demo/blob/main/src/app.py"
        )
        assert root.find_by_path("src").url == (  # type: ignore[union-attr]
            "https://github.com/octo/demo/tree/main/src"
        )

    def test_missing_blob_size_defaults_to_zero(self) -> None:
        root = build_tree([{"path": "empty.py", "type": "blob"}], root_name="demo")
        assert root.children[0].size == 0


@pytest.mark.unit
class TestFetchFileContent:
    async def test_returns_raw_text(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="print('hi')\n")

        async with make_client(handler) as client:
            content = await client.fetch_file_content("octo", "demo", "src/app.py", "dev")

        assert content == "print('hi')\n"
        request = seen[0]
        assert request.url.path == "/repos/octo/demo/contents/src/app.py"
        assert request.url.params["ref"] == "dev"
        assert request.headers["Accept"] == "application/vnd.github.v3.raw"
        assert "Authorization" not in request.headers

    async def test_token_is_sent(self) -> None:
        headers: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers["Authorization"])
            return httpx.Response(200, text="")

        async with make_client(handler, token="ghp_secret") as client:
            assert client.has_token
            await client.fetch_file_content("octo", "demo", "a.py")
        assert headers == ["token ghp_secret"]

    async def test_rate_limit_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, headers={"x-ratelimit-remaining": "0"})

        async with make_client(handler) as client:
            with pytest.raises(ContentFetchError) as exc_info:
                await client.fetch_file_content("octo", "demo", "a.py")
        assert str(exc_info.value) == RATE_LIMIT_MESSAGE
        assert exc_info.value.status_code == 403

    async def test_not_found(self) -> None:
        async with make_client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(ContentFetchError, match="Failed to fetch file content: 404"):
                await client.fetch_file_content("octo", "demo", "missing.py")

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ContentFetchError, match="unreachable"):
                await client.fetch_file_content("octo", "demo", "a.py")


@pytest.mark.unit
class TestFetchRepoTree:
    async def test_resolves_default_branch(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path == "/repos/octo/demo":
                return httpx.Response(200, json={"default_branch": "trunk"})
            assert request.url.params["recursive"] == "1"
            return httpx.Response(200, json={"tree": TREE_ITEMS, "truncated": False})

        async with make_client(handler) as client:
            root = await client.fetch_repo_tree("octo", "demo")

        assert paths == ["/repos/octo/demo", "/repos/octo/demo/git/trees/trunk"]
        assert root.name == "demo"
        assert root.find_by_path("src/app.py").url == (  # type: ignore[union-attr]
            "https://github.com/octo/demo/blob/trunk/src/app.py"
        )

    async def test_explicit_branch_skips_lookup(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json={"tree": []})

        async with make_client(handler) as client:
            root = await client.fetch_repo_tree("octo", "demo", "main")

        assert paths == ["/repos/octo/demo/git/trees/main"]
        assert root.children == ()

    async def test_unknown_repository(self) -> None:
        async with make_client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(ContentFetchError, match="Repository not found"):
                await client.fetch_repo_tree("octo", "missing")

    async def test_unexpected_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"tree": "nope"})

        async with make_client(handler) as client:
            with pytest.raises(ContentFetchError, match="Unexpected tree payload"):
                await client.fetch_repo_tree("octo", "demo", "main")
