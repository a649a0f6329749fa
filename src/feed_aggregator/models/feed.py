"""
Feed data models: sources, normalized items and aggregated group results.

The camelCase aliases are the JSON wire shape and the cache envelope shape.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime (UTC if naive)."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_iso(value: datetime, timespec: str = "seconds") -> str:
    """Render a datetime as an ISO-8601 UTC string with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")


class FeedSource(BaseModel):
    """One remote feed document plus an optional author override."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, max_length=2048, description="Feed URL")
    author: Optional[str] = Field(None, description="Author applied to items without one")


class FeedItem(BaseModel):
    """A feed entry normalized to the common item shape."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = ""
    link: str
    author: Optional[str] = None
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    summary: Optional[str] = None
    source_url: str

    @property
    def effective_timestamp(self) -> datetime:
        """Sort key: updated, else published, else the epoch."""
        return parse_iso(self.updated_at) or parse_iso(self.published_at) or EPOCH


class AggregatedResult(BaseModel):
    """Merged, sorted and truncated items for one group."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    group: str
    items: list[FeedItem] = Field(default_factory=list)
    generated_at: str
    limit: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_items_within_limit(self) -> "AggregatedResult":
        if len(self.items) > self.limit:
            raise ValueError(f"{len(self.items)} items exceed limit {self.limit}")
        return self

    def to_envelope(self) -> dict:
        """Serialize to the JSON-ready envelope shape."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_envelope(cls, data: dict) -> "AggregatedResult":
        """Rebuild a result from a stored envelope."""
        return cls.model_validate(data)
