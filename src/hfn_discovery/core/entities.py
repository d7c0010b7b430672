"""Core domain entities."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

VISIBLE_TAG_LIMIT = 3


class ItemType(str, Enum):
    """Type of saved or searchable content."""

    PROFILE = "profile"
    JOB = "job"
    EVENT = "event"
    GROUP = "group"
    ARTICLE = "article"
    POST = "post"

    @classmethod
    def parse(cls, value: "str | ItemType") -> "ItemType":
        """Parse a type name, accepting the legacy ``user`` alias for profiles."""
        if isinstance(value, ItemType):
            return value
        normalized = str(value).strip().lower()
        if normalized == "user":
            return cls.PROFILE
        return cls(normalized)


class SortOrder(str, Enum):
    """Ordering of saved items."""

    RECENT = "recent"
    OLDEST = "oldest"
    ALPHABETICAL = "alphabetical"


class TagMatch(str, Enum):
    """How a selected tag set is matched against item tags."""

    ANY = "any"
    ALL = "all"


def _as_naive_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC so mixed inputs stay comparable."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _validate_reference(item_id: str, title: str, item_type: Any) -> None:
    if not isinstance(item_type, ItemType):
        raise ValueError(f"Unknown item type: {item_type!r}")
    if not item_id:
        raise ValueError("ID cannot be empty")
    if not title or not title.strip():
        raise ValueError("Title cannot be empty")


@dataclass
class SavedItemInput:
    """Candidate passed to the store; the store stamps ``saved_at``."""

    id: str
    type: ItemType
    title: str
    url: str = ""
    description: Optional[str] = None
    image_url: Optional[str] = None
    date: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _validate_reference(self.id, self.title, self.type)


@dataclass
class SavedItem:
    """A bookmarked reference to a piece of content."""

    id: str
    type: ItemType
    title: str
    url: str
    saved_at: datetime
    description: Optional[str] = None
    image_url: Optional[str] = None
    date: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _validate_reference(self.id, self.title, self.type)

    @property
    def key(self) -> tuple[ItemType, str]:
        return (self.type, self.id)

    @property
    def visible_tags(self) -> list[str]:
        return self.tags[:VISIBLE_TAG_LIMIT]

    @property
    def hidden_tag_count(self) -> int:
        return max(0, len(self.tags) - VISIBLE_TAG_LIMIT)

    @classmethod
    def from_input(cls, candidate: SavedItemInput, saved_at: datetime) -> "SavedItem":
        return cls(
            id=candidate.id,
            type=candidate.type,
            title=candidate.title,
            url=candidate.url,
            saved_at=saved_at,
            description=candidate.description,
            image_url=candidate.image_url,
            date=candidate.date,
            tags=list(candidate.tags),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain mapping suitable for YAML persistence."""
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "image_url": self.image_url,
            "date": self.date.isoformat() if self.date else None,
            "tags": list(self.tags),
            "saved_at": self.saved_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavedItem":
        date_value = data.get("date")
        return cls(
            id=str(data["id"]),
            type=ItemType.parse(data["type"]),
            title=data["title"],
            url=data.get("url") or "",
            saved_at=datetime.fromisoformat(data["saved_at"]),
            description=data.get("description"),
            image_url=data.get("image_url"),
            date=datetime.fromisoformat(date_value) if date_value else None,
            tags=[str(tag) for tag in data.get("tags") or []],
        )


@dataclass
class SearchResult:
    """Single hit returned by a search provider. Not persisted."""

    id: str
    type: ItemType
    title: str
    url: str = ""
    description: Optional[str] = None
    image_url: Optional[str] = None
    date: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.id = str(self.id)
        _validate_reference(self.id, self.title, self.type)

    @property
    def key(self) -> tuple[ItemType, str]:
        return (self.type, self.id)

    def to_saved_input(self) -> SavedItemInput:
        return SavedItemInput(
            id=self.id,
            type=self.type,
            title=self.title,
            url=self.url,
            description=self.description,
            image_url=self.image_url,
            date=self.date,
            tags=list(self.tags),
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive content-date window; either end may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: Optional[datetime]) -> bool:
        if self.is_empty:
            return True
        if value is None:
            return False
        value = _as_naive_utc(value)
        if self.start is not None and value < _as_naive_utc(self.start):
            return False
        if self.end is not None and value > _as_naive_utc(self.end):
            return False
        return True


@dataclass(frozen=True)
class SearchFilters:
    """Structured facets applied on top of the text query.

    ``None`` and empty sets both mean "no constraint" for a facet.
    """

    types: Optional[frozenset[ItemType]] = None
    tags: Optional[frozenset[str]] = None
    date: Optional[DateRange] = None

    @property
    def is_empty(self) -> bool:
        return not self.types and not self.tags and (self.date is None or self.date.is_empty)

    @property
    def active_count(self) -> int:
        """Number of active facet selections, as shown on the filter badge."""
        count = len(self.types or ()) + len(self.tags or ())
        if self.date is not None and not self.date.is_empty:
            count += 1
        return count

    def merge(self, patch: "SearchFilters | dict[str, Any]") -> "SearchFilters":
        """Shallow merge: provided fields replace current ones wholesale."""
        if isinstance(patch, SearchFilters):
            changes = {
                name: getattr(patch, name)
                for name in ("types", "tags", "date")
                if getattr(patch, name) is not None
            }
        else:
            unknown = set(patch) - {"types", "tags", "date"}
            if unknown:
                raise ValueError(f"Unknown filter fields: {sorted(unknown)}")
            changes = _coerce_patch(patch)
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "types": sorted(t.value for t in self.types) if self.types else [],
            "tags": sorted(self.tags) if self.tags else [],
            "date": {
                "from": self.date.start.isoformat() if self.date.start else None,
                "to": self.date.end.isoformat() if self.date.end else None,
            }
            if self.date is not None and not self.date.is_empty
            else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "SearchFilters":
        if not data:
            return cls()
        return cls().merge(
            {
                "types": data.get("types") or None,
                "tags": data.get("tags") or None,
                "date": data.get("date"),
            }
        )


def _coerce_patch(patch: dict[str, Any]) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    if "types" in patch:
        types = patch["types"]
        changes["types"] = (
            frozenset(ItemType.parse(t) for t in types) if types is not None else None
        )
    if "tags" in patch:
        tags = patch["tags"]
        changes["tags"] = frozenset(str(t) for t in tags) if tags is not None else None
    if "date" in patch:
        changes["date"] = _coerce_date_range(patch["date"])
    return changes


def _coerce_date_range(value: Any) -> Optional[DateRange]:
    if value is None or isinstance(value, DateRange):
        return value

    def parse(raw: Any) -> Optional[datetime]:
        if raw is None or isinstance(raw, datetime):
            return raw
        return datetime.fromisoformat(str(raw))

    return DateRange(start=parse(value.get("from")), end=parse(value.get("to")))


@dataclass
class SavedSearch:
    """A query and its filters kept for later replay."""

    id: str
    query: str
    filters: SearchFilters
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.query.strip():
            raise ValueError("Query cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "filters": self.filters.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavedSearch":
        return cls(
            id=str(data["id"]),
            query=data["query"],
            filters=SearchFilters.from_dict(data.get("filters")),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
