# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""GitHub REST client for repository trees and raw file content.

Anonymous access works for public repositories but is rate limited; a
personal access token raises the limit and grants access to private
repositories. All failures surface as ``ContentFetchError``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import quote

import httpx

from repolens.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    GITHUB_API_BASE_URL,
    GITHUB_HTML_BASE_URL,
)
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.exceptions import ContentFetchError
from repolens.models.model_repo_node import PATH_SEPARATOR, ModelRepoNode

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

_RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"
_JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_GIT_DIR = ".git"

RATE_LIMIT_MESSAGE = (
    "GitHub API rate limit exceeded. "
    "Please provide a GitHub token to increase the rate limit."
)


class GitHubContentClient:
    """Async GitHub REST client.

    Args:
        token: Optional personal access token, sent as ``Authorization: token ...``.
        base_url: REST API root.
        html_base_url: Web root used to build node URLs.
        timeout_seconds: Per-request timeout.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = GITHUB_API_BASE_URL,
        html_base_url: str = GITHUB_HTML_BASE_URL,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token.strip() if token else None
        self._base_url = base_url.rstrip("/")
        self._html_base_url = html_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def connect(self) -> None:
        """Open the connection pool. Idempotent."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout_seconds),
            transport=self._transport,
        )
        logger.debug("GitHubContentClient connected to %s", self._base_url)

    async def close(self) -> None:
        """Close the connection pool. Idempotent."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GitHubContentClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept}
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    async def _get(
        self,
        url: str,
        *,
        accept: str,
        params: dict[str, str] | None = None,
        what: str,
    ) -> httpx.Response:
        if self._client is None:
            await self.connect()
        client = cast(httpx.AsyncClient, self._client)
        try:
            response = await client.get(
                url, headers=self._headers(accept), params=params
            )
        except httpx.HTTPError as exc:
            raise ContentFetchError(f"Failed to fetch {what}: {exc}") from exc

        if response.is_success:
            return response
        if (
            response.status_code == _HTTP_FORBIDDEN
            and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise ContentFetchError(RATE_LIMIT_MESSAGE, status_code=response.status_code)
        raise ContentFetchError(
            f"Failed to fetch {what}: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
        )

    async def fetch_file_content(
        self, owner: str, repo: str, path: str, branch: str | None = None
    ) -> str:
        """Return the raw content of one file.

        Raises:
            ContentFetchError: Non-2xx response or transport failure.
        """
        params = {"ref": branch} if branch else None
        response = await self._get(
            f"/repos/{owner}/{repo}/contents/{quote(path, safe=PATH_SEPARATOR)}",
            accept=_RAW_MEDIA_TYPE,
            params=params,
            what="file content",
        )
        return response.text

    async def fetch_default_branch(self, owner: str, repo: str) -> str:
        """Return the repository's default branch name."""
        try:
            response = await self._get(
                f"/repos/{owner}/{repo}", accept=_JSON_MEDIA_TYPE, what="repository info"
            )
        except ContentFetchError as exc:
            if exc.status_code == _HTTP_NOT_FOUND:
                raise ContentFetchError(
                    "Repository not found. Please check the username and repository name.",
                    status_code=exc.status_code,
                ) from exc
            raise
        branch = _json(response).get("default_branch")
        if not isinstance(branch, str) or not branch:
            raise ContentFetchError(f"Repository {owner}/{repo} has no default branch")
        return branch

    async def fetch_repo_tree(
        self, owner: str, repo: str, branch: str | None = None
    ) -> ModelRepoNode:
        """Fetch the full recursive tree and build a snapshot rooted at ``""``.

        ``.git`` metadata entries are skipped. Directories that only appear as
        parents of other entries are created implicitly.
        """
        ref = branch or await self.fetch_default_branch(owner, repo)
        response = await self._get(
            f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}",
            accept=_JSON_MEDIA_TYPE,
            params={"recursive": "1"},
            what="repository tree",
        )
        data = _json(response)
        if data.get("truncated"):
            logger.warning(
                "GitHub truncated the tree of %s/%s; some entries are missing", owner, repo
            )
        items = data.get("tree")
        if not isinstance(items, list):
            raise ContentFetchError(f"Unexpected tree payload for {owner}/{repo}")

        root = build_tree(
            items,
            root_name=repo,
            url_prefix=f"{self._html_base_url}/{owner}/{repo}",
            branch=ref,
        )
        logger.info(
            "Fetched tree of %s/%s@%s (%d entries)", owner, repo, ref, len(items)
        )
        return root


def build_tree(
    items: list[dict[str, Any]],
    *,
    root_name: str,
    url_prefix: str | None = None,
    branch: str | None = None,
) -> ModelRepoNode:
    """Build a ``ModelRepoNode`` tree from flat git-tree entries.

    Each entry needs ``path`` and ``type`` (``blob`` or ``tree``); blobs may
    carry ``size``. Children keep the order in which entries were listed.
    """
    kinds: dict[str, EnumNodeKind] = {"": EnumNodeKind.DIRECTORY}
    sizes: dict[str, int] = {}
    children: defaultdict[str, list[str]] = defaultdict(list)

    def _add(path: str, kind: EnumNodeKind) -> None:
        if path in kinds:
            return
        parent = path.rpartition(PATH_SEPARATOR)[0]
        if parent not in kinds:
            _add(parent, EnumNodeKind.DIRECTORY)
        kinds[path] = kind
        children[parent].append(path)

    for item in items:
        path = str(item.get("path", "")).strip(PATH_SEPARATOR)
        if not path or path == _GIT_DIR or path.startswith(f"{_GIT_DIR}{PATH_SEPARATOR}"):
            continue
        if item.get("type") == "tree":
            _add(path, EnumNodeKind.DIRECTORY)
        elif item.get("type") == "blob":
            _add(path, EnumNodeKind.FILE)
            sizes[path] = int(item.get("size") or 0)

    def _url(path: str, kind: EnumNodeKind) -> str | None:
        if url_prefix is None or not path:
            return url_prefix
        if branch is None:
            return None
        segment = "blob" if kind is EnumNodeKind.FILE else "tree"
        return f"{url_prefix}/{segment}/{branch}/{path}"

    def _build(path: str) -> ModelRepoNode:
        kind = kinds[path]
        name = path.rpartition(PATH_SEPARATOR)[2] if path else root_name
        if kind is EnumNodeKind.FILE:
            return ModelRepoNode(
                name=name, path=path, kind=kind, size=sizes.get(path, 0), url=_url(path, kind)
            )
        return ModelRepoNode(
            name=name,
            path=path,
            kind=kind,
            url=_url(path, kind),
            children=tuple(_build(child) for child in children.get(path, ())),
        )

    return _build("")


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise ContentFetchError("GitHub returned a non-JSON response") from exc
    if not isinstance(data, dict):
        raise ContentFetchError("GitHub returned an unexpected response")
    return data


__all__ = ["RATE_LIMIT_MESSAGE", "GitHubContentClient", "build_tree"]
