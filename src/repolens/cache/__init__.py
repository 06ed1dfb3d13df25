"""Summary cache: key scheme, key-value adapters and the two-tier store.

Usage:
    from repolens.cache import RedisKeyValueStore, SummaryCacheStore

    cache = SummaryCacheStore(RedisKeyValueStore.from_url(settings.redis_url))
    summaries = await cache.load_all_cached_summaries("octo", "demo")
"""

from repolens.cache.cache_keys import (
    ModelChildrenCountKey,
    ModelSummaryKey,
    children_count_key_prefix,
    display_key,
    summary_key_prefix,
)
from repolens.cache.model_cache_stats import ModelCacheStats, ModelCacheSummaryCounts
from repolens.cache.protocols import ProtocolKeyValueStore
from repolens.cache.store_memory import InMemoryKeyValueStore
from repolens.cache.store_redis import RedisKeyValueStore
from repolens.cache.summary_cache import SummaryCacheStore

__all__ = [
    "InMemoryKeyValueStore",
    "ModelCacheStats",
    "ModelCacheSummaryCounts",
    "ModelChildrenCountKey",
    "ModelSummaryKey",
    "ProtocolKeyValueStore",
    "RedisKeyValueStore",
    "SummaryCacheStore",
    "children_count_key_prefix",
    "display_key",
    "summary_key_prefix",
]
