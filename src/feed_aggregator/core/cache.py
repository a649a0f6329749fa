"""
Cache fingerprinting and the group result cache.

The fingerprint covers the group, the generation time and each item's
identity and dates. Title, summary, link and author are left out, so edits
to those alone keep the same weak ETag.
"""

import hashlib
import json
from typing import Optional

from pydantic import ValidationError

from feed_aggregator.logger import get_logger
from feed_aggregator.models import AggregatedResult
from feed_aggregator.storage.kv import KeyValueStore

logger = get_logger(__name__)

GROUP_KEY_PREFIX = "group:"


def compute_weak_etag(text: str) -> str:
    """Hash text with SHA-1 and render it as a weak validator."""
    digest = hashlib.sha1(text.encode("utf-8")).hexdigest()
    return f'W/"{digest}"'


def fingerprint_basis(result: AggregatedResult) -> str:
    """Deterministic JSON basis for a result's fingerprint."""
    ids = []
    for item in result.items:
        triple = {"id": item.id}
        if item.updated_at is not None:
            triple["updatedAt"] = item.updated_at
        if item.published_at is not None:
            triple["publishedAt"] = item.published_at
        ids.append(triple)

    basis = {"group": result.group, "generatedAt": result.generated_at, "ids": ids}
    return json.dumps(basis, separators=(",", ":"), ensure_ascii=False)


def fingerprint(result: AggregatedResult) -> str:
    """Weak ETag of a result.

    Args:
        result: AggregatedResult to fingerprint

    Returns:
        Token of the form ``W/"<sha1 hex>"``
    """
    return compute_weak_etag(fingerprint_basis(result))


def reslice(result: AggregatedResult, limit: int) -> AggregatedResult:
    """View of a result truncated to another limit.

    The input is never mutated. When the limit matches, the same object is returned.
    """
    if result.limit == limit:
        return result
    return result.model_copy(update={"items": list(result.items[:limit]), "limit": limit})


def group_cache_key(group: str) -> str:
    return f"{GROUP_KEY_PREFIX}{group}"


class GroupCache:
    """Stores aggregated results in the key-value store, one envelope per group."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, group: str) -> Optional[AggregatedResult]:
        """Load a group's cached result.

        Args:
            group: Group name

        Returns:
            AggregatedResult, or None when absent, expired or unreadable
        """
        envelope = self.store.get(group_cache_key(group))
        if envelope is None:
            return None

        try:
            return AggregatedResult.from_envelope(envelope)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry for group {group!r}: {e}")
            return None

    def put(self, group: str, result: AggregatedResult, ttl_seconds: int) -> None:
        """Store a group's result.

        Args:
            group: Group name
            result: Result to store
            ttl_seconds: Time-to-live passed through to the store
        """
        self.store.put(group_cache_key(group), result.to_envelope(), ttl_seconds=ttl_seconds)
        logger.debug(f"Cached {len(result.items)} items for group {group!r} (ttl {ttl_seconds}s)")
