"""
Pytest configuration and fixtures for repolens tests.

Shared fixtures: an in-memory key-value store, a summary cache over it, a
fake completion provider and a generator wired to both.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from repolens.cache.store_memory import InMemoryKeyValueStore
from repolens.cache.summary_cache import SummaryCacheStore
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.models.model_provider_credentials import ModelProviderCredentials
from repolens.models.model_repo_node import ModelRepoNode
from repolens.summaries.generator import SummaryGenerator

# =========================================================================
# Cache Fixtures
# =========================================================================


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(memory_store: InMemoryKeyValueStore) -> SummaryCacheStore:
    """Summary cache over the in-memory store."""
    return SummaryCacheStore(memory_store)


# =========================================================================
# Generation Fixtures
# =========================================================================


@pytest.fixture
def fake_provider() -> AsyncMock:
    """Completion provider that answers every prompt with a fixed summary."""
    provider = AsyncMock()
    provider.complete = AsyncMock(return_value="A concise summary.")
    provider.validate_api_key = AsyncMock(return_value=True)
    return provider


@pytest.fixture
def credentials() -> ModelProviderCredentials:
    """Credentials with a Groq key only."""
    return ModelProviderCredentials(groq_api_key="gsk_test_key")


@pytest.fixture
def generator(cache: SummaryCacheStore, fake_provider: AsyncMock) -> SummaryGenerator:
    """Generator wired to the in-memory cache and the fake provider."""
    return SummaryGenerator(cache, fake_provider)


# =========================================================================
# Tree Fixtures
# =========================================================================


@pytest.fixture
def sample_tree() -> ModelRepoNode:
    """Small repository snapshot::

    demo/
        README.md      (40 bytes)
        main.py        (120 bytes)
        src/
            app.py     (300 bytes)
            logo.png   (2048 bytes)
    """
    return ModelRepoNode(
        name="demo",
        path="",
        kind=EnumNodeKind.DIRECTORY,
        children=(
            ModelRepoNode(name="README.md", path="README.md", kind=EnumNodeKind.FILE, size=40),
            ModelRepoNode(name="main.py", path="main.py", kind=EnumNodeKind.FILE, size=120),
            ModelRepoNode(
                name="src",
                path="src",
                kind=EnumNodeKind.DIRECTORY,
                children=(
                    ModelRepoNode(
                        name="app.py", path="src/app.py", kind=EnumNodeKind.FILE, size=300
                    ),
                    ModelRepoNode(
                        name="logo.png", path="src/logo.png", kind=EnumNodeKind.FILE, size=2048
                    ),
                ),
            ),
        ),
    )
