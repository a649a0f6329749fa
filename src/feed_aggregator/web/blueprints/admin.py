"""
Admin blueprint for replacing the group configuration.

Routes:
    PUT  /admin/config          store a new config document (request body)
    POST /admin/reload-config   fetch the config document from GROUPS_CONFIG_URL

Both require ``?token=`` to match the configured admin token.
"""

import hmac

import httpx
from flask import Blueprint, request

from feed_aggregator.config import Config
from feed_aggregator.core.groups import list_groups
from feed_aggregator.core.services import GroupFeedService
from feed_aggregator.exceptions import ConfigDocumentError, UnauthorizedError
from feed_aggregator.logger import get_logger
from feed_aggregator.web.responses import error_json, method_not_allowed, ok_json

logger = get_logger(__name__)

# Registered with every method so the token is checked before the method
_ANY_METHOD = ["GET", "PUT", "POST", "PATCH", "DELETE"]


class AdminBlueprint:
    """Blueprint with token-protected config management routes."""

    def __init__(self, service: GroupFeedService, config: Config):
        """Initialize the blueprint.

        Args:
            service: GroupFeedService whose registry is updated
            config: Application configuration
        """
        self.service = service
        self.config = config
        self.blueprint = Blueprint("admin", __name__, url_prefix="/admin")
        self._register_routes()

    def _register_routes(self):
        self.blueprint.add_url_rule("/config", view_func=self._put_config, methods=_ANY_METHOD)
        self.blueprint.add_url_rule(
            "/reload-config", view_func=self._reload_config, methods=_ANY_METHOD
        )

    def _require_token(self) -> None:
        """Raise UnauthorizedError unless ``?token=`` matches the admin token."""
        expected = self.config.web.admin_token
        token = request.args.get("token", "")
        if not expected or not hmac.compare_digest(token, expected):
            raise UnauthorizedError("Unauthorized")

    def _put_config(self):
        """Replace the group config with the request body."""
        self._require_token()
        if request.method != "PUT":
            return method_not_allowed()

        body = request.get_json(force=True, silent=True)
        if body is None:
            return error_json("Invalid JSON", 400)

        groups = self.service.registry.write(body)
        return ok_json({"ok": True, "groups": list_groups(groups)})

    def _reload_config(self):
        """Replace the group config with the document at the configured URL."""
        self._require_token()
        if request.method != "POST":
            return method_not_allowed()

        config_url = self.config.groups.config_url
        if not config_url:
            return error_json("CONFIG_URL not set", 400)

        try:
            groups = self.service.registry.reload_from_url(config_url)
        except ConfigDocumentError as e:
            if e.status is not None:
                return error_json(str(e), 502)
            logger.error(f"Config reload from {config_url} failed: {e}")
            return error_json(f"Reload failed: {e}", 500)
        except httpx.HTTPError as e:
            logger.error(f"Config reload from {config_url} failed: {e}")
            return error_json(f"Reload failed: {e}", 500)

        return ok_json({"ok": True, "groups": list_groups(groups)})
