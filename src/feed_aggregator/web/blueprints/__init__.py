"""API blueprints."""

from feed_aggregator.web.blueprints.admin import AdminBlueprint
from feed_aggregator.web.blueprints.groups import GroupsBlueprint

__all__ = ["AdminBlueprint", "GroupsBlueprint"]
