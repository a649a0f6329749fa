"""Core aggregation modules.

External code (web layer, scripts) should go through GroupFeedService;
the lower-level pieces are exported for tests and embedding.
"""

from feed_aggregator.core.aggregator import (
    Aggregator,
    AggregatorSettings,
    aggregate_group,
    apply_author_override,
    create_aggregator,
    sort_by_recency,
)
from feed_aggregator.core.cache import (
    GroupCache,
    compute_weak_etag,
    fingerprint,
    group_cache_key,
    reslice,
)
from feed_aggregator.core.fetcher import FeedFetcher, FetchResult, FetchStats
from feed_aggregator.core.groups import GroupRegistry, list_groups, normalize_groups
from feed_aggregator.core.parser import FeedParser, FeedSchema, create_parser, detect_schema
from feed_aggregator.core.pool import ConcurrencyPool, TaskOutcome
from feed_aggregator.core.services import GroupFeedService, GroupResponse, create_group_service

__all__ = [
    "Aggregator",
    "AggregatorSettings",
    "ConcurrencyPool",
    "FeedFetcher",
    "FeedParser",
    "FeedSchema",
    "FetchResult",
    "FetchStats",
    "GroupCache",
    "GroupFeedService",
    "GroupRegistry",
    "GroupResponse",
    "TaskOutcome",
    "aggregate_group",
    "apply_author_override",
    "compute_weak_etag",
    "create_aggregator",
    "create_group_service",
    "create_parser",
    "detect_schema",
    "fingerprint",
    "group_cache_key",
    "list_groups",
    "normalize_groups",
    "reslice",
    "sort_by_recency",
]
