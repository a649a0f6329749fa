"""Data models for the feed aggregator."""

from feed_aggregator.models.base import Base
from feed_aggregator.models.feed import (
    EPOCH,
    AggregatedResult,
    FeedItem,
    FeedSource,
    format_iso,
    parse_iso,
)
from feed_aggregator.models.kv import KVEntryModel

__all__ = [
    "Base",
    "EPOCH",
    "AggregatedResult",
    "FeedItem",
    "FeedSource",
    "KVEntryModel",
    "format_iso",
    "parse_iso",
]
