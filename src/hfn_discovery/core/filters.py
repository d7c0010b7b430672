"""Shared filtering and sorting utilities."""

import locale
import unicodedata
from collections import Counter
from typing import Iterable, Optional, Sequence, TypeVar, Union

from hfn_discovery.core.entities import (
    ItemType,
    SavedItem,
    SearchFilters,
    SearchResult,
    SortOrder,
    TagMatch,
)

Entry = Union[SavedItem, SearchResult]
E = TypeVar("E", SavedItem, SearchResult)


def matches_text(entry: Entry, query: Optional[str]) -> bool:
    """
    Check if the query occurs in the title, description or any tag.

    Args:
        entry: Saved item or search result
        query: Free text; blank means no text constraint

    Returns:
        True if the case-folded query is a substring of any searchable field
    """
    if not query or not query.strip():
        return True

    needle = query.strip().casefold()
    if needle in entry.title.casefold():
        return True
    if entry.description and needle in entry.description.casefold():
        return True
    return any(needle in tag.casefold() for tag in entry.tags)


def matches_tags(
    entry_tags: Iterable[str], selected: Optional[Iterable[str]], mode: TagMatch = TagMatch.ANY
) -> bool:
    """Check item tags against the selected tag facet (exact tag values)."""
    wanted = set(selected or ())
    if not wanted:
        return True

    present = set(entry_tags)
    if mode == TagMatch.ALL:
        return wanted <= present
    return bool(wanted & present)


def matches_filters(entry: Entry, filters: SearchFilters, tag_mode: TagMatch = TagMatch.ANY) -> bool:
    """Conjunction of the type, tag and date facets."""
    if filters.types and entry.type not in filters.types:
        return False
    if not matches_tags(entry.tags, filters.tags, tag_mode):
        return False
    if filters.date is not None and not filters.date.contains(entry.date):
        return False
    return True


def apply_search(
    entries: Iterable[E],
    query: Optional[str],
    filters: SearchFilters,
    tag_mode: TagMatch = TagMatch.ANY,
) -> list[E]:
    """Filter entries by text and facets, preserving input order."""
    return [
        entry
        for entry in entries
        if matches_text(entry, query) and matches_filters(entry, filters, tag_mode)
    ]


def count_by_type(entries: Iterable[Entry]) -> dict[ItemType, int]:
    """Count entries per type. Every type is present, zero included."""
    counts = {item_type: 0 for item_type in ItemType}
    for entry in entries:
        counts[entry.type] += 1
    return counts


def count_tags(entries: Iterable[Entry]) -> dict[str, int]:
    """Count tag occurrences, most common first."""
    counter: Counter[str] = Counter()
    for entry in entries:
        counter.update(set(entry.tags))
    return dict(counter.most_common())


def title_collation_key(title: str) -> str:
    """Collation key for titles: accents folded onto their base letter, then locale order."""
    decomposed = unicodedata.normalize("NFKD", title)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(folded.casefold())


def sort_saved_items(items: Sequence[SavedItem], order: SortOrder) -> list[SavedItem]:
    """Order saved items. Python's sort is stable, so equal keys keep insertion order."""
    if order == SortOrder.RECENT:
        return sorted(items, key=lambda item: item.saved_at, reverse=True)
    if order == SortOrder.OLDEST:
        return sorted(items, key=lambda item: item.saved_at)
    return sorted(
        items,
        key=lambda item: (title_collation_key(item.title), item.saved_at),
    )
