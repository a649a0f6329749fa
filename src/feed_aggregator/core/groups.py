"""
Group configuration: normalization and persistence of group -> sources maps.

A raw config document maps group names to lists whose entries are either URL
strings or ``{"url": ..., "author": ...}`` objects.
"""

import json
from typing import Any, Optional

import httpx

from feed_aggregator.core.fetcher import FeedFetcher
from feed_aggregator.exceptions import ConfigDocumentError, GroupNotFoundError
from feed_aggregator.logger import get_logger
from feed_aggregator.models import FeedSource
from feed_aggregator.storage.kv import KeyValueStore

logger = get_logger(__name__)

CONFIG_KEY = "config"

NormalizedGroups = dict[str, list[FeedSource]]


def _normalize_entry(entry: Any) -> Optional[FeedSource]:
    if isinstance(entry, str):
        url = entry.strip()
        return FeedSource(url=url) if url else None

    if isinstance(entry, dict):
        url = entry.get("url")
        url = url.strip() if isinstance(url, str) else ""
        if not url:
            return None
        author = entry.get("author")
        author = author.strip() if isinstance(author, str) else None
        return FeedSource(url=url, author=author or None)

    return None


def normalize_groups(document: Any) -> NormalizedGroups:
    """Normalize a raw group config document.

    Entries without a usable URL are dropped, as are groups left empty.

    Args:
        document: Parsed JSON document

    Returns:
        Mapping of group name to sources, in document order
    """
    if not isinstance(document, dict):
        return {}

    normalized: NormalizedGroups = {}
    for group, entries in document.items():
        if not isinstance(entries, list):
            continue

        sources = []
        for entry in entries:
            source = _normalize_entry(entry)
            if source is None:
                continue
            valid, reason = FeedFetcher.validate_url(source.url)
            if not valid:
                logger.warning(f"Group {group!r} source {source.url!r} looks unusable: {reason}")
            sources.append(source)

        if sources:
            normalized[group] = sources

    return normalized


def groups_to_document(groups: NormalizedGroups) -> dict[str, list[dict]]:
    """JSON-ready form of normalized groups."""
    return {
        group: [source.model_dump(exclude_none=True) for source in sources]
        for group, sources in groups.items()
    }


def list_groups(groups: NormalizedGroups) -> list[str]:
    return list(groups.keys())


class GroupRegistry:
    """Reads and writes the group configuration in the key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        inline_json: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the registry.

        Args:
            store: Key-value store holding the config under ``"config"``
            inline_json: Fallback config JSON used when the store has none
            transport: Optional httpx transport for remote config documents
        """
        self.store = store
        self.inline_json = inline_json
        self.transport = transport

    def read(self) -> NormalizedGroups:
        """Current group configuration, from the store or the inline fallback."""
        stored = self.store.get(CONFIG_KEY)
        if isinstance(stored, dict):
            return normalize_groups(stored)

        if self.inline_json:
            try:
                return normalize_groups(json.loads(self.inline_json))
            except json.JSONDecodeError as e:
                logger.warning(f"Ignoring invalid inline group config: {e}")

        return {}

    def write(self, document: Any) -> NormalizedGroups:
        """Normalize and store a group config document.

        Args:
            document: Parsed JSON document

        Returns:
            The normalized configuration that was stored
        """
        groups = normalize_groups(document)
        self.store.put(CONFIG_KEY, groups_to_document(groups))
        logger.info(f"Stored group config with {len(groups)} groups")
        return groups

    def sources_for(self, group: str) -> list[FeedSource]:
        """Sources of one group.

        Raises:
            GroupNotFoundError: If the group is not configured or has no sources
        """
        sources = self.read().get(group)
        if not sources:
            raise GroupNotFoundError(group)
        return sources

    def reload_from_url(self, url: str, timeout_seconds: float = 30.0) -> NormalizedGroups:
        """Replace the stored config with a remote JSON document.

        Args:
            url: Config document URL
            timeout_seconds: Request timeout

        Returns:
            The normalized configuration that was stored

        Raises:
            ConfigDocumentError: On non-success status or invalid JSON
            httpx.RequestError: On network error
        """
        with httpx.Client(timeout=timeout_seconds, transport=self.transport) as client:
            response = client.get(url, headers={"Accept": "application/json"})

        if not response.is_success:
            raise ConfigDocumentError(
                f"Fetch failed: {response.status_code}", status=response.status_code
            )

        try:
            document = response.json()
        except ValueError as e:
            raise ConfigDocumentError(f"Invalid JSON in config document: {e}") from e

        logger.info(f"Reloading group config from {url}")
        return self.write(document)
