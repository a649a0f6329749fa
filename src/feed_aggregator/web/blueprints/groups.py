"""
Group feed API blueprint.

Routes:
    GET /api/_groups          list configured groups
    GET /api/<group>          aggregated items of one group
"""

import re

from flask import Blueprint, Response, request

from feed_aggregator.config import Config
from feed_aggregator.core.services import GroupFeedService
from feed_aggregator.logger import get_logger
from feed_aggregator.web.responses import error_json, ok_json

logger = get_logger(__name__)

# "10abc" reads as 10
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class GroupsBlueprint:
    """Blueprint serving aggregated group feeds with conditional-response support."""

    def __init__(self, service: GroupFeedService, config: Config):
        """Initialize the blueprint.

        Args:
            service: GroupFeedService backing the routes
            config: Application configuration
        """
        self.service = service
        self.config = config
        self.blueprint = Blueprint("groups", __name__, url_prefix="/api")
        self._register_routes()

    def _register_routes(self):
        self.blueprint.add_url_rule("/_groups", view_func=self._list_groups, methods=["GET"])
        self.blueprint.add_url_rule("/<path:group>", view_func=self._get_group, methods=["GET"])

    @property
    def cache_control(self) -> str:
        max_age = min(self.config.cache.max_age_cap_seconds, self.config.cache.ttl_seconds)
        return f"public, max-age={max_age}"

    def _parse_limit(self) -> int:
        """Leading integer of ``?limit=``; default when missing or not positive."""
        match = _LEADING_INT.match(request.args.get("limit", ""))
        limit = int(match.group(1)) if match else 0
        if limit <= 0:
            return self.config.cache.default_limit
        return limit

    def _list_groups(self):
        """List configured group names."""
        return ok_json({"groups": self.service.list_groups()})

    def _get_group(self, group: str):
        """Serve one group, from cache unless ``fresh=1``."""
        group = group.lstrip("/")
        limit = self._parse_limit()
        fmt = request.args.get("format", "json").lower()
        fresh = request.args.get("fresh") == "1"

        if fmt != "json":
            return error_json("Unsupported format", 400)

        # GroupNotFoundError is turned into a 404 by the app error handler
        served = self.service.get_group(group, limit, fresh=fresh)

        headers = {"ETag": served.etag, "Cache-Control": self.cache_control}

        if served.from_cache and request.headers.get("If-None-Match") == served.etag:
            response = Response(status=304)
            response.headers.update(headers)
            return response

        return ok_json(served.result.to_envelope(), headers=headers)
