"""Tests for shared filtering utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from hfn_discovery.core import ItemType, SavedItem, SearchFilters, SearchResult, SortOrder, TagMatch
from hfn_discovery.core.filters import (
    apply_search,
    count_by_type,
    count_tags,
    matches_filters,
    matches_tags,
    matches_text,
    sort_saved_items,
)


@pytest.fixture
def results():
    """A job and an article that both mention fintech."""
    return [
        SearchResult(
            id="1",
            type=ItemType.JOB,
            title="Fintech Analyst",
            description="Analyse payment flows",
            tags=["finance", "full-time"],
            date=datetime(2023, 11, 15),
        ),
        SearchResult(
            id="2",
            type=ItemType.ARTICLE,
            title="Payments in India",
            description="A market overview",
            tags=["fintech", "guide"],
            date=datetime(2023, 10, 5),
        ),
        SearchResult(
            id="3",
            type=ItemType.GROUP,
            title="Bangalore Tech Founders",
            tags=["bangalore", "tech"],
        ),
    ]


def make_saved(title: str, minutes: int, item_id: str = "") -> SavedItem:
    return SavedItem(
        id=item_id or title,
        type=ItemType.ARTICLE,
        title=title,
        url=f"/articles/{title}",
        saved_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


def test_matches_text_in_title(results):
    """Test matching in title, case-insensitive."""
    assert matches_text(results[0], "FINTECH")


def test_matches_text_in_description(results):
    assert matches_text(results[1], "market")


def test_matches_text_in_tags(results):
    """Tag values match by substring too."""
    assert matches_text(results[1], "fin")
    assert not matches_text(results[2], "fintech")


def test_blank_query_matches_everything(results):
    assert all(matches_text(result, "  ") for result in results)
    assert all(matches_text(result, None) for result in results)


def test_matches_tags_any_and_all():
    tags = ["tech", "remote"]
    
    assert matches_tags(tags, ["remote", "onsite"])
    assert not matches_tags(tags, ["remote", "onsite"], TagMatch.ALL)
    assert matches_tags(tags, ["remote", "tech"], TagMatch.ALL)
    assert matches_tags(tags, None)
    assert not matches_tags([], ["tech"])


def test_type_filter_excludes_text_match(results):
    """The type facet drops the article even though it matches the text."""
    filters = SearchFilters().merge({"types": ["job"]})
    
    matched = apply_search(results, "fintech", filters)
    
    assert [r.id for r in matched] == ["1"]


def test_filters_are_conjunctive(results):
    filters = SearchFilters().merge({"types": ["job", "article"], "tags": ["guide", "tech"]})
    
    matched = apply_search(results, None, filters)
    
    assert [r.id for r in matched] == ["2"]
    for result in matched:
        assert result.type in filters.types
        assert set(result.tags) & filters.tags


def test_date_filter_drops_undated(results):
    filters = SearchFilters().merge({"date": {"from": "2023-11-01", "to": "2023-11-30"}})
    
    assert matches_filters(results[0], filters)
    assert not matches_filters(results[1], filters)
    assert not matches_filters(results[2], filters)


def test_apply_search_keeps_input_order(results):
    matched = apply_search(list(reversed(results)), None, SearchFilters())
    
    assert [r.id for r in matched] == ["3", "2", "1"]


def test_count_by_type_includes_zero_types(results):
    counts = count_by_type(results)
    
    assert set(counts) == set(ItemType)
    assert counts[ItemType.JOB] == 1
    assert counts[ItemType.PROFILE] == 0
    assert sum(counts.values()) == len(results)


def test_count_tags(results):
    counts = count_tags(results + results[:1])
    
    assert counts["finance"] == 2
    assert counts["tech"] == 1


def test_sort_recent_and_oldest():
    items = [make_saved("b", 1), make_saved("a", 3), make_saved("c", 2)]
    
    assert [i.title for i in sort_saved_items(items, SortOrder.RECENT)] == ["a", "c", "b"]
    assert [i.title for i in sort_saved_items(items, SortOrder.OLDEST)] == ["b", "c", "a"]


def test_sort_alphabetical_is_case_insensitive_and_deterministic():
    items = [
        make_saved("charlie", 1),
        make_saved("Beta", 2),
        make_saved("alpha", 3),
        make_saved("alpha", 0, item_id="alpha-older"),
    ]
    
    first = sort_saved_items(items, SortOrder.ALPHABETICAL)
    second = sort_saved_items(list(reversed(items)), SortOrder.ALPHABETICAL)
    
    assert [i.title for i in first] == ["alpha", "alpha", "Beta", "charlie"]
    # Ties on title break by saved_at ascending
    assert first[0].id == "alpha-older"
    assert [i.id for i in first] == [i.id for i in second]


def test_sort_alphabetical_ties_on_case_break_by_saved_at():
    items = [make_saved("Alpha", 5), make_saved("alpha", 1)]
    
    ordered = sort_saved_items(items, SortOrder.ALPHABETICAL)
    
    assert [i.title for i in ordered] == ["alpha", "Alpha"]


def test_sort_alphabetical_folds_accents():
    items = [make_saved("Zara Ventures", 1), make_saved("Émile Capital", 2), make_saved("apple", 3)]
    
    ordered = sort_saved_items(items, SortOrder.ALPHABETICAL)
    
    assert [i.title for i in ordered] == ["apple", "Émile Capital", "Zara Ventures"]
