"""
Remote feed fetcher with a per-request timeout and failure isolation.

A failed fetch never raises: callers get an empty result and the failure is
logged and counted.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx

from feed_aggregator.config import DEFAULT_ACCEPT
from feed_aggregator.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Result of a single fetch."""

    success: bool
    url: str
    content: Optional[bytes] = None
    error: Optional[str] = None
    fetch_time_seconds: float = 0.0
    http_status: Optional[int] = None

    def __post_init__(self):
        """Validate fetch result."""
        if self.success and self.error:
            raise ValueError("Successful fetch cannot have an error")
        if not self.success and not self.error:
            self.error = "Unknown error"


@dataclass
class FetchStats:
    """Statistics for fetch operations."""

    total_fetches: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    total_bytes: int = 0
    total_time_seconds: float = 0.0
    errors_by_type: dict = field(default_factory=dict)

    def add_result(self, result: FetchResult) -> None:
        """Add a fetch result to statistics.

        Args:
            result: FetchResult to add
        """
        self.total_fetches += 1
        self.total_time_seconds += result.fetch_time_seconds

        if result.success:
            self.successful_fetches += 1
            self.total_bytes += len(result.content or b"")
        else:
            self.failed_fetches += 1
            error_type = result.error.split(":")[0] if result.error else "unknown"
            self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_fetches == 0:
            return 0.0
        return self.successful_fetches / self.total_fetches

    @property
    def avg_time_seconds(self) -> float:
        """Calculate average fetch time."""
        if self.total_fetches == 0:
            return 0.0
        return self.total_time_seconds / self.total_fetches


class FeedFetcher:
    """Async feed fetcher. Use as ``async with`` to share one HTTP client."""

    def __init__(
        self,
        user_agent: str,
        timeout_ms: int,
        accept: str = DEFAULT_ACCEPT,
        follow_redirects: bool = True,
        max_redirects: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize feed fetcher.

        Args:
            user_agent: User-Agent header for HTTP requests
            timeout_ms: Whole-request timeout in milliseconds
            accept: Accept header for HTTP requests
            follow_redirects: Whether to follow redirects
            max_redirects: Maximum redirects to follow
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self.accept = accept
        self.follow_redirects = follow_redirects
        self.max_redirects = max_redirects
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self.stats = FetchStats()

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": self.accept}

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_ms / 1000,
            follow_redirects=self.follow_redirects,
            max_redirects=self.max_redirects,
            transport=self.transport,
        )

    async def __aenter__(self) -> "FeedFetcher":
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> Optional[bytes]:
        """Fetch a document body.

        Args:
            url: URL to fetch

        Returns:
            Response body, or None on timeout, non-success status or network error
        """
        result = await self.fetch_result(url)
        return result.content if result.success else None

    async def fetch_result(self, url: str) -> FetchResult:
        """Fetch a URL and describe the outcome.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with the body or an error
        """
        start_time = time.monotonic()
        http_status = None
        error = None
        content = None

        logger.debug(f"Fetching {url}")

        try:
            # wait_for bounds the whole request, including a server that trickles bytes
            response = await asyncio.wait_for(
                self._get(url), timeout=self.timeout_ms / 1000
            )
            http_status = response.status_code
            if response.is_success:
                content = response.content
            else:
                error = f"HTTP {http_status}: {response.reason_phrase}"
                logger.warning(f"Non-success status fetching {url}: {error}")

        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            error = f"Timeout: {self.timeout_ms}ms exceeded"
            logger.warning(f"Timeout fetching {url} after {self.timeout_ms}ms ({type(e).__name__})")

        except httpx.RequestError as e:
            error = f"Request error: {str(e)}"
            logger.warning(f"Network error fetching {url}: {e}")

        except Exception as e:
            error = f"Unexpected error: {type(e).__name__}: {str(e)}"
            logger.error(f"Error fetching {url}: {error}")

        fetch_time = time.monotonic() - start_time
        if error is None:
            result = FetchResult(
                success=True,
                url=url,
                content=content,
                fetch_time_seconds=fetch_time,
                http_status=http_status,
            )
            logger.debug(f"Fetched {len(content)} bytes from {url} in {fetch_time:.2f}s")
        else:
            result = FetchResult(
                success=False,
                url=url,
                error=error,
                fetch_time_seconds=fetch_time,
                http_status=http_status,
            )

        self.stats.add_result(result)
        return result

    async def _get(self, url: str) -> httpx.Response:
        """Issue the GET, on the shared client when one is open.

        Raises:
            httpx.TimeoutException: On timeout
            httpx.RequestError: On network error
        """
        if self._client is not None:
            return await self._client.get(url, headers=self.headers)

        async with self._create_client() as client:
            return await client.get(url, headers=self.headers)

    @staticmethod
    def validate_url(url: str) -> tuple[bool, Optional[str]]:
        """Validate a feed URL.

        Args:
            url: URL to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        result = urlparse(url)
        if not result.scheme or not result.netloc:
            return False, "Invalid URL format"

        if result.scheme not in ("http", "https"):
            return False, f"Unsupported scheme: {result.scheme}"

        return True, None
