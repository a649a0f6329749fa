"""HTTP layer for the feed aggregator."""

from feed_aggregator.web.app import create_app

__all__ = ["create_app"]
