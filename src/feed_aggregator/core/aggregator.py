"""
Group aggregation: fetch every source, parse, merge, sort and truncate.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import httpx

from feed_aggregator.config import DEFAULT_ACCEPT, Config
from feed_aggregator.core.fetcher import FeedFetcher
from feed_aggregator.core.parser import FeedParser
from feed_aggregator.core.pool import ConcurrencyPool
from feed_aggregator.logger import get_logger
from feed_aggregator.models import AggregatedResult, FeedItem, FeedSource, format_iso

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregatorSettings:
    """Explicit settings for one aggregation run."""

    user_agent: str = "feed-aggregator/0.1"
    fetch_timeout_ms: int = 8000
    concurrency: int = 6
    accept: str = DEFAULT_ACCEPT
    follow_redirects: bool = True
    max_redirects: int = 5

    @classmethod
    def from_config(cls, config: Config) -> "AggregatorSettings":
        """Build settings from the fetcher section of a Config."""
        return cls(
            user_agent=config.fetcher.user_agent,
            fetch_timeout_ms=config.fetcher.timeout_ms,
            concurrency=config.fetcher.concurrency,
            accept=config.fetcher.accept,
            follow_redirects=config.fetcher.follow_redirects,
            max_redirects=config.fetcher.max_redirects,
        )


def apply_author_override(items: list[FeedItem], author: Optional[str]) -> list[FeedItem]:
    """Set ``author`` on every item that has none; items with an author are kept."""
    if not author:
        return items
    return [item if item.author else item.model_copy(update={"author": author}) for item in items]


def sort_by_recency(items: list[FeedItem]) -> list[FeedItem]:
    """Sort newest first by effective timestamp; undated items last, stable."""
    return sorted(items, key=lambda item: item.effective_timestamp, reverse=True)


class Aggregator:
    """Builds the aggregated result for one group of sources."""

    def __init__(
        self,
        settings: AggregatorSettings,
        parser: Optional[FeedParser] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the aggregator.

        Args:
            settings: Fetch settings for every run
            parser: FeedParser to use (a new one if omitted)
            transport: Optional httpx transport handed to the fetcher
        """
        self.settings = settings
        self.parser = parser or FeedParser()
        self.transport = transport

    async def aggregate(
        self,
        group: str,
        sources: Sequence[FeedSource],
        limit: int,
    ) -> AggregatedResult:
        """Aggregate a group's sources into one ranked, truncated result.

        Args:
            group: Group name stamped on the result
            sources: Sources of the group
            limit: Maximum number of items to keep (>= 0)

        Returns:
            AggregatedResult, empty when no source is reachable
        """
        start_time = time.monotonic()
        pool = ConcurrencyPool(self.settings.concurrency)

        async with FeedFetcher(
            user_agent=self.settings.user_agent,
            timeout_ms=self.settings.fetch_timeout_ms,
            accept=self.settings.accept,
            follow_redirects=self.settings.follow_redirects,
            max_redirects=self.settings.max_redirects,
            transport=self.transport,
        ) as fetcher:

            async def collect(source: FeedSource) -> list[FeedItem]:
                body = await fetcher.fetch(source.url)
                if body is None:
                    return []
                items = self.parser.parse(body, source.url)
                return apply_author_override(items, source.author)

            outcomes = await pool.run(list(sources), collect)

        # Each task returns its own buffer; merging happens here only
        merged: list[FeedItem] = []
        for outcome in outcomes:
            if outcome.ok:
                merged.extend(outcome.result)

        items = sort_by_recency(merged)[: max(limit, 0)]

        logger.info(
            f"Aggregated group {group!r}: {len(merged)} items from "
            f"{fetcher.stats.successful_fetches}/{len(sources)} sources, kept {len(items)} "
            f"in {time.monotonic() - start_time:.2f}s"
        )

        return AggregatedResult(
            group=group,
            items=items,
            generated_at=format_iso(datetime.now(timezone.utc), timespec="milliseconds"),
            limit=limit,
        )

    def aggregate_sync(
        self,
        group: str,
        sources: Sequence[FeedSource],
        limit: int,
    ) -> AggregatedResult:
        """Run ``aggregate`` on a fresh event loop, for synchronous callers."""
        return asyncio.run(self.aggregate(group, sources, limit))


async def aggregate_group(
    group: str,
    sources: Sequence[FeedSource],
    limit: int,
    settings: AggregatorSettings,
) -> AggregatedResult:
    """Aggregate one group with the given settings.

    Args:
        group: Group name
        sources: Sources of the group
        limit: Maximum number of items to keep
        settings: Fetch settings

    Returns:
        AggregatedResult
    """
    return await Aggregator(settings).aggregate(group, sources, limit)


def create_aggregator(config: Config, **kwargs) -> Aggregator:
    """Create an Aggregator configured from a Config.

    Args:
        config: Application configuration
        **kwargs: Passed through to Aggregator

    Returns:
        Configured Aggregator instance
    """
    return Aggregator(AggregatorSettings.from_config(config), **kwargs)
