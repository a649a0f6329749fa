"""Exceptions raised by the glue around the aggregation core."""


class AggregatorError(Exception):
    """Base class for feed aggregator errors."""


class GroupNotFoundError(AggregatorError):
    """Requested group is not configured or has no sources."""

    def __init__(self, group: str):
        super().__init__(f"Group not found: {group}")
        self.group = group


class ConfigDocumentError(AggregatorError):
    """A group configuration document could not be read.

    ``status`` is the upstream HTTP status when the document came from a
    remote URL that answered with a non-success code.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class UnauthorizedError(AggregatorError):
    """Admin token missing or mismatched."""
