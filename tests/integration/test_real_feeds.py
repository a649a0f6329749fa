"""Integration tests with real RSS/Atom feeds.

These tests make real HTTP requests and exercise the complete
fetch → parse → merge → sort → cache pipeline. Deselected by default;
run with ``pytest -m integration``.
"""

import pytest

from feed_aggregator.config import Config
from feed_aggregator.core.aggregator import create_aggregator
from feed_aggregator.core.cache import fingerprint
from feed_aggregator.core.services import GroupFeedService
from feed_aggregator.models import FeedSource
from feed_aggregator.storage.kv import MemoryKeyValueStore

PYTHON_BLOG = "https://blog.python.org/feeds/posts/default"
PLANET_PYTHON = "https://planetpython.org/rss20.xml"


class TestRealFeedIntegration:
    """Integration tests against public feeds."""

    @pytest.mark.integration
    @pytest.mark.slow
    def test_aggregate_real_group(self):
        """Atom and RSS sources merge into one sorted, truncated result."""
        aggregator = create_aggregator(Config())
        sources = [
            FeedSource(url=PYTHON_BLOG, author="Python Insider"),
            FeedSource(url=PLANET_PYTHON),
        ]

        result = aggregator.aggregate_sync("python", sources, limit=20)

        assert 0 < len(result.items) <= 20
        stamps = [item.effective_timestamp for item in result.items]
        assert stamps == sorted(stamps, reverse=True)
        assert all(item.id and item.link for item in result.items)

    @pytest.mark.integration
    @pytest.mark.slow
    def test_service_serves_from_cache(self):
        """Second request for a group is a cache hit with the same ETag."""
        store = MemoryKeyValueStore()
        service = GroupFeedService(store, Config())
        service.registry.write({"python": [PYTHON_BLOG]})

        first = service.get_group("python", limit=10)
        second = service.get_group("python", limit=10)

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.etag == first.etag == fingerprint(first.result)
