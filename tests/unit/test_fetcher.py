"""Unit tests for feed fetcher."""

import asyncio

import httpx
import pytest

from feed_aggregator.config import DEFAULT_ACCEPT
from feed_aggregator.core.fetcher import FeedFetcher, FetchResult, FetchStats
from tests.samples import RSS_FEED, make_transport

URL = "http://feeds.example/rss"


def make_fetcher(transport, timeout_ms: int = 1000) -> FeedFetcher:
    return FeedFetcher(user_agent="test-agent/1.0", timeout_ms=timeout_ms, transport=transport)


class TestFetchResult:
    """Tests for FetchResult dataclass."""

    def test_successful_result(self):
        result = FetchResult(success=True, url=URL, content=b"body", http_status=200)

        assert result.success is True
        assert result.error is None

    def test_failed_result_gets_default_error(self):
        result = FetchResult(success=False, url=URL)

        assert result.error == "Unknown error"

    def test_result_validation(self):
        """A successful result cannot carry an error."""
        with pytest.raises(ValueError):
            FetchResult(success=True, url=URL, error="Should not have error")


class TestFetchStats:
    """Tests for FetchStats dataclass."""

    def test_empty_stats(self):
        stats = FetchStats()

        assert stats.success_rate == 0.0
        assert stats.avg_time_seconds == 0.0

    def test_add_results(self):
        stats = FetchStats()
        stats.add_result(FetchResult(success=True, url=URL, content=b"abc", fetch_time_seconds=1.0))
        stats.add_result(FetchResult(success=False, url=URL, error="Timeout: 10ms exceeded", fetch_time_seconds=3.0))

        assert stats.total_fetches == 2
        assert stats.successful_fetches == 1
        assert stats.failed_fetches == 1
        assert stats.total_bytes == 3
        assert stats.errors_by_type == {"Timeout": 1}
        assert stats.success_rate == 0.5
        assert stats.avg_time_seconds == 2.0


class TestFeedFetcher:
    """Tests for FeedFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_success_sends_headers(self):
        """Body is returned and User-Agent/Accept are sent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(200, content=RSS_FEED)

        async with make_fetcher(httpx.MockTransport(handler)) as fetcher:
            body = await fetcher.fetch(URL)

        assert body == RSS_FEED
        assert seen["user-agent"] == "test-agent/1.0"
        assert seen["accept"] == DEFAULT_ACCEPT

    @pytest.mark.asyncio
    async def test_fetch_without_context_manager(self):
        fetcher = make_fetcher(make_transport({URL: RSS_FEED}))

        assert await fetcher.fetch(URL) == RSS_FEED

    @pytest.mark.asyncio
    async def test_non_success_status_returns_none(self):
        async with make_fetcher(make_transport({URL: 500})) as fetcher:
            body = await fetcher.fetch(URL)
            result = await fetcher.fetch_result(URL)

        assert body is None
        assert result.success is False
        assert result.http_status == 500
        assert result.error.startswith("HTTP 500")

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_fetcher(httpx.MockTransport(handler)) as fetcher:
            body = await fetcher.fetch(URL)

        assert body is None
        assert fetcher.stats.failed_fetches == 1
        assert "Request error" in fetcher.stats.errors_by_type

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        """A source slower than the timeout is abandoned."""
        transport = make_transport({URL: RSS_FEED}, delays={URL: 2.0})

        async with make_fetcher(transport, timeout_ms=50) as fetcher:
            loop = asyncio.get_running_loop()
            start = loop.time()
            body = await fetcher.fetch(URL)
            elapsed = loop.time() - start

        assert body is None
        assert elapsed < 1.0
        assert fetcher.stats.errors_by_type == {"Timeout": 1}

    @pytest.mark.asyncio
    async def test_stats_track_successes(self):
        async with make_fetcher(make_transport({URL: RSS_FEED})) as fetcher:
            await fetcher.fetch(URL)
            await fetcher.fetch(URL)

        assert fetcher.stats.successful_fetches == 2
        assert fetcher.stats.total_bytes == 2 * len(RSS_FEED)


class TestValidateUrl:
    """Tests for URL validation."""

    @pytest.mark.parametrize("url", ["http://example.com/feed", "https://example.com/rss.xml"])
    def test_valid(self, url):
        assert FeedFetcher.validate_url(url) == (True, None)

    def test_missing_scheme(self):
        valid, reason = FeedFetcher.validate_url("example.com/feed")

        assert valid is False
        assert reason == "Invalid URL format"

    def test_unsupported_scheme(self):
        valid, reason = FeedFetcher.validate_url("ftp://example.com/feed")

        assert valid is False
        assert "ftp" in reason
