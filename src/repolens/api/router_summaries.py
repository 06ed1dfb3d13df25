# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""FastAPI router for summary, diff and classifier endpoints.

The router is a thin shell over ``RepoLensServices``: the generator, the
summary cache and the GitHub client do the work. Errors raised by them are
mapped to HTTP statuses by ``repolens.api.errors``.
"""

# NOTE: Do NOT use `from __future__ import annotations` in this module.
# FastAPI requires runtime-accessible type annotations for dependency injection
# and query parameter extraction.

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from repolens.api.models_summaries import (
    ModelCachedSummariesResponse,
    ModelChildrenCountsResponse,
    ModelDeleteSummariesRequest,
    ModelDeleteSummariesResponse,
    ModelDiffRequest,
    ModelDiffResponse,
    ModelDirectorySummaryRequest,
    ModelFileSummaryRequest,
    ModelSummarizableResponse,
    ModelSummaryResponse,
)
from repolens.diff.tree_diff import detect_changes
from repolens.enums.enum_change_type import EnumChangeType
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import UnsummarizableError
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_repo_reference import ModelRepoReference
from repolens.services import RepoLensServices
from repolens.summaries.summarizability import is_summarizable


def _credentials(
    services: RepoLensServices,
    provider: EnumSummaryProvider,
    request: ModelFileSummaryRequest | ModelDirectorySummaryRequest,
) -> ModelProviderCredentials:
    if request.api_key is not None:
        return ModelProviderCredentials.for_provider(
            provider, request.api_key.get_secret_value()
        )
    return services.credentials


def create_summary_router(
    *,
    get_services: Any,
) -> APIRouter:
    """Create the ``/api/v1`` router.

    Args:
        get_services: Dependency callable returning the ``RepoLensServices``.
    """
    router = APIRouter(prefix="/api/v1", tags=["summaries"])

    @router.get(
        "/repos/{owner}/{repo}/summaries",
        response_model=ModelCachedSummariesResponse,
        summary="Load every cached summary of a repository",
    )
    async def get_cached_summaries(
        owner: str,
        repo: str,
        services: Annotated[RepoLensServices, Depends(get_services)],
    ) -> ModelCachedSummariesResponse:
        ref = ModelRepoReference.parse(f"{owner}/{repo}")
        records = await services.cache.load_all_cached_summaries(ref.owner, ref.repo)
        # keyed by path; the owner/repo prefix is implied by the request
        prefix_length = len(ref.full_name) + 1
        paths = {key: key[prefix_length:] for key in records}
        summaries = {
            paths[key]: ModelSummaryResponse.from_record(paths[key], record)
            for key, record in records.items()
        }
        return ModelCachedSummariesResponse(
            owner=ref.owner, repo=ref.repo, count=len(summaries), summaries=summaries
        )

    @router.get(
        "/repos/{owner}/{repo}/children-counts",
        response_model=ModelChildrenCountsResponse,
        summary="Load the summarized-children count of every directory",
    )
    async def get_children_counts(
        owner: str,
        repo: str,
        services: Annotated[RepoLensServices, Depends(get_services)],
    ) -> ModelChildrenCountsResponse:
        ref = ModelRepoReference.parse(f"{owner}/{repo}")
        counts = await services.cache.load_all_children_counts(ref.owner, ref.repo)
        return ModelChildrenCountsResponse(owner=ref.owner, repo=ref.repo, counts=counts)

    @router.post(
        "/repos/{owner}/{repo}/summaries/file",
        response_model=ModelSummaryResponse,
        summary="Summarize one file",
        description=(
            "Fetches the file from GitHub and summarizes it, serving a cached "
            "summary unless force_refresh is set."
        ),
    )
    async def summarize_file(
        owner: str,
        repo: str,
        request: ModelFileSummaryRequest,
        services: Annotated[RepoLensServices, Depends(get_services)],
    ) -> ModelSummaryResponse:
        ref = ModelRepoReference.parse(f"{owner}/{repo}", branch=request.branch)
        provider = request.provider or services.settings.default_provider
        credentials = _credentials(services, provider, request)
        name = request.path.rsplit("/", 1)[-1]
        if not is_summarizable(name):
            raise UnsummarizableError(name)
        content = await services.github.fetch_file_content(
            ref.owner, ref.repo, request.path, ref.branch
        )
        record = await services.generator.summarize_file(
            content,
            name,
            credentials,
            provider=provider,
            owner=ref.owner,
            repo=ref.repo,
            path=request.path,
            force_refresh=request.force_refresh,
        )
        return ModelSummaryResponse.from_record(request.path, record)

    @router.post(
        "/repos/{owner}/{repo}/summaries/directory",
        response_model=ModelSummaryResponse,
        summary="Roll up child summaries into a directory summary",
    )
    async def summarize_directory(
        owner: str,
        repo: str,
        request: ModelDirectorySummaryRequest,
        services: Annotated[RepoLensServices, Depends(get_services)],
    ) -> ModelSummaryResponse:
        ref = ModelRepoReference.parse(f"{owner}/{repo}")
        provider = request.provider or services.settings.default_provider
        record = await services.generator.summarize_directory(
            request.name,
            request.path,
            request.child_summaries,
            _credentials(services, provider, request),
            provider=provider,
            owner=ref.owner,
            repo=ref.repo,
            force_refresh=request.force_refresh,
        )
        return ModelSummaryResponse.from_record(request.path, record)

    @router.delete(
        "/repos/{owner}/{repo}/summaries",
        response_model=ModelDeleteSummariesResponse,
        summary="Delete the summaries of many nodes",
    )
    async def delete_summaries(
        owner: str,
        repo: str,
        request: ModelDeleteSummariesRequest,
        services: Annotated[RepoLensServices, Depends(get_services)],
    ) -> ModelDeleteSummariesResponse:
        ref = ModelRepoReference.parse(f"{owner}/{repo}")
        result = await services.cache.batch_delete_summary_keys(
            ref.owner, ref.repo, [(item.path, item.kind) for item in request.items]
        )
        return ModelDeleteSummariesResponse(
            success=result.success, deleted=list(result.deleted), failed=list(result.failed)
        )

    @router.post(
        "/diff",
        response_model=ModelDiffResponse,
        summary="Diff two snapshots of the same repository tree",
    )
    async def diff_snapshots(request: ModelDiffRequest) -> ModelDiffResponse:
        changes = detect_changes(request.current, request.previous)
        return ModelDiffResponse(
            added=sum(1 for c in changes if c.change_type is EnumChangeType.ADDED),
            updated=sum(1 for c in changes if c.change_type is EnumChangeType.UPDATED),
            deleted=sum(1 for c in changes if c.change_type is EnumChangeType.DELETED),
            changes=changes,
        )

    @router.get(
        "/summarizable",
        response_model=ModelSummarizableResponse,
        summary="Check whether a file name is eligible for summarization",
    )
    async def check_summarizable(
        name: Annotated[str, Query(min_length=1, max_length=255, description="File name")],
    ) -> ModelSummarizableResponse:
        return ModelSummarizableResponse(name=name, summarizable=is_summarizable(name))

    return router


__all__ = ["create_summary_router"]
