"""
Flask application serving aggregated group feeds.
"""

from typing import Optional

from flask import Flask, Response, request
from werkzeug.exceptions import MethodNotAllowed, NotFound

from feed_aggregator.config import Config, get_config
from feed_aggregator.core.services import GroupFeedService, create_group_service
from feed_aggregator.exceptions import GroupNotFoundError, UnauthorizedError
from feed_aggregator.logger import get_logger, setup_logger
from feed_aggregator.storage.kv import KeyValueStore, create_store
from feed_aggregator.web.responses import (
    apply_cors,
    error_json,
    method_not_allowed,
    not_found,
    ok_json,
    preflight_response,
)

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    store: Optional[KeyValueStore] = None,
    service: Optional[GroupFeedService] = None,
    start_scheduler: bool = False,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Application configuration (global config if omitted)
        store: Key-value store (created from config if omitted)
        service: GroupFeedService (created from store and config if omitted)
        start_scheduler: Start the prewarm scheduler when enabled in config

    Returns:
        Configured Flask application
    """
    config = config or get_config()
    if service is None:
        store = store or create_store(config.storage)
        service = create_group_service(store, config)

    app = Flask(__name__)
    app.config["DEBUG"] = config.web.debug
    app.extensions["group_service"] = service

    allow_origin = config.web.cors_allow_origin

    from feed_aggregator.web.blueprints import AdminBlueprint, GroupsBlueprint

    app.register_blueprint(GroupsBlueprint(service, config).blueprint)
    app.register_blueprint(AdminBlueprint(service, config).blueprint)

    @app.route("/")
    def index():
        """Plain-text greeting."""
        return Response("Hello world", mimetype="text/plain")

    @app.route("/health")
    def health():
        """Liveness probe."""
        return ok_json({"ok": True})

    @app.before_request
    def handle_preflight():
        if request.method == "OPTIONS":
            return preflight_response(allow_origin)
        return None

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        return apply_cors(response, allow_origin)

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.errorhandler(GroupNotFoundError)
    def group_not_found(e):
        logger.debug(str(e))
        return not_found()

    @app.errorhandler(UnauthorizedError)
    def unauthorized(e):
        return error_json("Unauthorized", 401)

    @app.errorhandler(NotFound)
    def route_not_found(e):
        return not_found()

    @app.errorhandler(MethodNotAllowed)
    def wrong_method(e):
        return method_not_allowed()

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f"Server error: {e}")
        return error_json("Internal Server Error", 500)

    if start_scheduler and config.scheduler.enabled:
        from feed_aggregator.core.scheduler import create_scheduler

        scheduler = create_scheduler(service, config.scheduler)
        scheduler.start()
        app.extensions["prewarm_scheduler"] = scheduler

    logger.info(f"Web app created ({len(service.list_groups())} groups configured)")

    return app


def main() -> None:
    """Run the development server with the prewarm scheduler."""
    config = get_config()
    setup_logger(log_config=config.logging)

    app = create_app(config, start_scheduler=True)
    app.run(host=config.web.host, port=config.web.port, debug=config.web.debug, use_reloader=False)


if __name__ == "__main__":
    main()
