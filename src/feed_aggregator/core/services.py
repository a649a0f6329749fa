"""
Facade service for group feeds.

The web layer and the scheduler go through GroupFeedService instead of
wiring the registry, cache and aggregator themselves.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from feed_aggregator.config import Config
from feed_aggregator.core.aggregator import Aggregator, create_aggregator
from feed_aggregator.core.cache import GroupCache, fingerprint, reslice
from feed_aggregator.core.groups import GroupRegistry, list_groups
from feed_aggregator.logger import get_logger
from feed_aggregator.models import AggregatedResult, FeedSource
from feed_aggregator.storage.kv import KeyValueStore

logger = get_logger(__name__)


@dataclass
class GroupResponse:
    """A group result ready to serve, with its weak ETag."""

    result: AggregatedResult
    etag: str
    from_cache: bool = False


class GroupFeedService:
    """Serves group results from cache or fresh aggregation."""

    def __init__(
        self,
        store: KeyValueStore,
        config: Config,
        aggregator: Optional[Aggregator] = None,
    ):
        """Initialize the service.

        Args:
            store: Key-value store for config and cached results
            config: Application configuration
            aggregator: Aggregator to use (built from config if omitted)
        """
        self.store = store
        self.config = config
        self.registry = GroupRegistry(store, inline_json=config.groups.inline_json)
        self.cache = GroupCache(store)
        self.aggregator = aggregator or create_aggregator(config)

    @property
    def ttl_seconds(self) -> int:
        return self.config.cache.ttl_seconds

    def list_groups(self) -> list[str]:
        return list_groups(self.registry.read())

    def get_group(self, group: str, limit: int, fresh: bool = False) -> GroupResponse:
        """Result for a group, served from cache unless ``fresh``.

        Args:
            group: Group name
            limit: Maximum number of items
            fresh: Skip the cache and aggregate now

        Returns:
            GroupResponse

        Raises:
            GroupNotFoundError: If the group is not configured
        """
        sources = self.registry.sources_for(group)

        if not fresh:
            cached = self.cache.get(group)
            if cached is not None:
                view = reslice(cached, limit)
                logger.debug(f"Cache hit for group {group!r} (limit {limit})")
                return GroupResponse(result=view, etag=fingerprint(view), from_cache=True)

        return self.refresh_group(group, limit, sources=sources)

    def refresh_group(
        self,
        group: str,
        limit: int,
        sources: Optional[Sequence[FeedSource]] = None,
    ) -> GroupResponse:
        """Aggregate a group now and store the result in the cache.

        Args:
            group: Group name
            limit: Maximum number of items
            sources: Sources to use (read from the registry if omitted)

        Returns:
            GroupResponse

        Raises:
            GroupNotFoundError: If sources are omitted and the group is not configured
        """
        if sources is None:
            sources = self.registry.sources_for(group)

        result = self.aggregator.aggregate_sync(group, sources, limit)
        self.cache.put(group, result, self.ttl_seconds)
        return GroupResponse(result=result, etag=fingerprint(result), from_cache=False)


def create_group_service(store: KeyValueStore, config: Config, **kwargs) -> GroupFeedService:
    """Create a GroupFeedService.

    Args:
        store: Key-value store
        config: Application configuration
        **kwargs: Passed through to GroupFeedService

    Returns:
        Configured GroupFeedService instance
    """
    return GroupFeedService(store, config, **kwargs)
