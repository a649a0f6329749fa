"""
Feed document parser normalizing Atom, RSS 2.0 and RSS 1.0 (RDF) entries.

The document is parsed with feedparser, the schema family is detected once,
and every output field is resolved through that family's ordered list of
candidate extractors. The first candidate yielding non-empty text wins.
"""

import io
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

import feedparser

from feed_aggregator.logger import get_logger
from feed_aggregator.models import FeedItem, format_iso

logger = get_logger(__name__)

Extractor = Callable[[dict], Any]


class FeedSchema(str, Enum):
    """Supported feed schema families."""

    ATOM = "atom"
    RSS2 = "rss2"
    RDF = "rdf"


# feedparser version strings per family
_RDF_VERSIONS = {"rss090", "rss10"}


def detect_schema(parsed: Any) -> Optional[FeedSchema]:
    """Detect the schema family of a feedparser result.

    Args:
        parsed: Result of ``feedparser.parse``

    Returns:
        FeedSchema, or None for unrecognized documents
    """
    version = str(parsed.get("version") or "").lower()
    if version.startswith("atom"):
        return FeedSchema.ATOM
    if version in _RDF_VERSIONS:
        return FeedSchema.RDF
    if version.startswith("rss"):
        return FeedSchema.RSS2
    return None


def as_text(value: Any) -> Optional[str]:
    """Coerce a parsed node to its plain-text value.

    Handles feedparser detail dicts (``{"value": ...}``), content lists,
    and scalars.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return as_text(value[0]) if value else None
    if isinstance(value, dict):
        return as_text(value.get("value"))
    text = str(value).strip()
    return text or None


def first_text(entry: dict, extractors: Sequence[Extractor]) -> Optional[str]:
    """Evaluate extractors in order and return the first non-empty text."""
    for extract in extractors:
        text = as_text(extract(entry))
        if text:
            return text
    return None


def raw(entry: dict, name: str) -> Any:
    """Stored value of ``name``, without FeedParserDict key aliasing."""
    # FeedParserDict.get maps "updated" to "published" with a DeprecationWarning
    return dict.get(entry, name)


def pick_date(entry: dict, *fields: str) -> Optional[str]:
    """Return the first candidate date field that parses, as ISO-8601.

    Args:
        entry: feedparser entry
        fields: Candidate date fields in priority order (e.g. "updated")

    Returns:
        ISO-8601 UTC string, or None if no candidate parses
    """
    for name in fields:
        parsed = raw(entry, f"{name}_parsed")
        if not parsed:
            continue
        try:
            value = datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            continue
        return format_iso(value)
    return None


def key(name: str) -> Extractor:
    return lambda entry: raw(entry, name)


def detail(name: str, attr: str) -> Extractor:
    return lambda entry: (raw(entry, name) or {}).get(attr)


def alternate_link(entry: dict) -> Optional[str]:
    """The rel="alternate" href when the entry carries several links."""
    links = raw(entry, "links") or []
    if len(links) > 1:
        for link in links:
            if link.get("rel") == "alternate" and link.get("href"):
                return link["href"]
    return None


def first_link(entry: dict) -> Optional[str]:
    links = raw(entry, "links") or []
    return links[0].get("href") if links else None


def content_value(entry: dict) -> Optional[str]:
    return as_text(raw(entry, "content"))


@dataclass(frozen=True)
class SchemaRules:
    """Ordered field extractors for one schema family."""

    id: Sequence[Extractor]
    link: Sequence[Extractor]
    title: Sequence[Extractor]
    author: Sequence[Extractor]
    summary: Sequence[Extractor]
    published: Sequence[str]
    updated: Sequence[str]
    # Raw fields tried for the synthesized id suffix
    fallback_id: Sequence[Extractor]


_TITLE = (detail("title_detail", "value"), key("title"))

SCHEMA_RULES: dict[FeedSchema, SchemaRules] = {
    FeedSchema.ATOM: SchemaRules(
        id=(key("id"),),
        link=(alternate_link, first_link, key("link")),
        title=_TITLE,
        author=(detail("author_detail", "name"), key("author")),
        summary=(detail("summary_detail", "value"), key("summary"), content_value),
        published=("published", "updated"),
        updated=("updated", "published"),
        fallback_id=(key("updated"), key("published"), key("title")),
    ),
    FeedSchema.RSS2: SchemaRules(
        id=(key("id"),),
        link=(key("link"),),
        title=_TITLE,
        author=(key("author"), detail("author_detail", "name")),
        summary=(key("summary"), content_value),
        published=("published",),
        updated=("updated", "published"),
        fallback_id=(key("published"), key("title")),
    ),
    FeedSchema.RDF: SchemaRules(
        id=(key("id"),),
        link=(key("link"),),
        title=_TITLE,
        author=(key("author"), detail("author_detail", "name")),
        summary=(key("summary"),),
        # dc:date surfaces as "updated"
        published=("updated", "published"),
        updated=("updated", "published"),
        fallback_id=(key("updated"), key("title")),
    ),
}


class FeedParser:
    """Parser turning raw feed documents into normalized FeedItems."""

    def parse(self, document: Union[bytes, str], source_url: str) -> list[FeedItem]:
        """Parse a feed document.

        Never raises: malformed or unrecognized documents yield an empty list.

        Args:
            document: Raw document body
            source_url: URL the document was fetched from

        Returns:
            Normalized items in document order
        """
        if not document:
            return []

        data = document.encode("utf-8") if isinstance(document, str) else document

        try:
            # A file-like object keeps feedparser from treating the input as a URL or path
            parsed = feedparser.parse(io.BytesIO(data))
        except Exception as e:
            logger.warning(f"Failed to parse feed from {source_url}: {type(e).__name__}: {e}")
            return []

        schema = detect_schema(parsed)
        if schema is None:
            logger.warning(f"Unrecognized feed document from {source_url}")
            return []

        rules = SCHEMA_RULES[schema]
        items = []
        for entry in parsed.get("entries", []):
            try:
                items.append(self.parse_entry(entry, rules, source_url))
            except Exception as e:
                logger.warning(f"Skipping malformed entry from {source_url}: {e}")

        logger.debug(f"Parsed {len(items)} {schema.value} entries from {source_url}")
        return items

    def parse_entry(self, entry: dict, rules: SchemaRules, source_url: str) -> FeedItem:
        """Normalize one feedparser entry using a schema's extractor chains.

        Args:
            entry: feedparser entry
            rules: SchemaRules of the detected schema
            source_url: URL the document was fetched from

        Returns:
            FeedItem
        """
        link = first_text(entry, rules.link)
        item_id = first_text(entry, rules.id) or link or self._fallback_id(entry, rules, source_url)

        return FeedItem(
            id=item_id,
            title=first_text(entry, rules.title) or "",
            link=link or source_url,
            author=first_text(entry, rules.author) or "",
            published_at=pick_date(entry, *rules.published),
            updated_at=pick_date(entry, *rules.updated),
            summary=first_text(entry, rules.summary) or "",
            source_url=source_url,
        )

    def _fallback_id(self, entry: dict, rules: SchemaRules, source_url: str) -> str:
        suffix = first_text(entry, rules.fallback_id) or uuid.uuid4().hex
        return f"{source_url}#{suffix}"


def create_parser() -> FeedParser:
    """Create a FeedParser instance."""
    return FeedParser()
