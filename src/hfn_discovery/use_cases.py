"""Business logic use cases."""

import asyncio
from enum import Enum
from typing import Any, Optional

import structlog

from hfn_discovery.core import (
    FailureKind,
    ItemType,
    Outcome,
    SavedItem,
    SavedItemStore,
    SavedSearch,
    SavedSearchStore,
    SearchFilters,
    SearchProvider,
    SearchResult,
    TagMatch,
)
from hfn_discovery.core.filters import apply_search, count_by_type, count_tags

logger = structlog.get_logger(__name__)

COMMON_TERMS = [
    "startup",
    "funding",
    "venture capital",
    "pitch deck",
    "networking",
    "investors",
    "entrepreneurship",
    "business model",
    "product launch",
    "marketing strategy",
    "tech startup",
    "seed funding",
    "angel investors",
    "series A",
    "MVP",
]

MAX_SUGGESTIONS = 5


class SearchState(str, Enum):
    """Lifecycle of a search engine instance."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    EXECUTING = "executing"
    READY = "ready"
    FAILED = "failed"


class SearchEngine:
    """Turn a query plus filters into a result list from a search provider.

    Typing goes through a debounce window; filter changes run immediately.
    Every request takes a generation number and only the newest generation
    may publish results, so a slow response never overwrites a fresher one.
    """

    def __init__(
        self,
        provider: SearchProvider,
        saved_items: Optional[SavedItemStore] = None,
        saved_searches: Optional[SavedSearchStore] = None,
        debounce_seconds: float = 0.3,
        provider_timeout: float = 10.0,
        tag_match: TagMatch = TagMatch.ANY,
    ) -> None:
        self.provider = provider
        self.saved_items = saved_items
        self.saved_searches = saved_searches
        self.debounce_seconds = debounce_seconds
        self.provider_timeout = provider_timeout
        self.tag_match = tag_match

        self._query = ""
        self._filters = SearchFilters()
        self._results: list[SearchResult] = []
        self._state = SearchState.IDLE
        self._last_failure: Optional[str] = None
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def filters(self) -> SearchFilters:
        return self._filters

    @property
    def results(self) -> list[SearchResult]:
        return list(self._results)

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def last_failure(self) -> Optional[str]:
        return self._last_failure

    def set_query(self, text: str) -> None:
        """Update the query and restart the debounce window."""
        self._query = text
        if self._is_blank():
            self._reset_to_idle()
            return

        self._generation += 1
        self._state = SearchState.DEBOUNCING
        self._schedule(self.debounce_seconds)

    def set_filters(self, patch: "SearchFilters | dict[str, Any]") -> None:
        """Merge a filter patch and re-run the search right away."""
        self._filters = self._filters.merge(patch)
        self._rerun()

    def toggle_type(self, item_type: ItemType) -> None:
        selected = set(self._filters.types or ())
        selected ^= {item_type}
        self.set_filters({"types": selected})

    def toggle_tag(self, tag: str) -> None:
        selected = set(self._filters.tags or ())
        selected ^= {tag}
        self.set_filters({"tags": selected})

    def clear_filters(self) -> None:
        """Drop every facet; the query is kept."""
        self._filters = SearchFilters()
        self._rerun()

    async def execute(self) -> Outcome[list[SearchResult]]:
        """Run the current query and filters against the provider.

        Returns:
            Outcome with the matching results in provider order. Fails with
            SUPERSEDED when a newer request was issued meanwhile, or with
            PROVIDER_FAILURE when the provider errors or times out.
        """
        self._cancel_pending()
        self._generation += 1
        generation = self._generation
        query, filters = self._query, self._filters

        if self._is_blank():
            self._reset_to_idle()
            return Outcome.success([])

        self._state = SearchState.EXECUTING
        logger.debug("Executing search", query=query, generation=generation)

        try:
            raw_results = await asyncio.wait_for(
                self.provider.search(query.strip(), filters),
                timeout=self.provider_timeout,
            )
        except asyncio.TimeoutError:
            return self._fail(generation, f"Search provider timed out after {self.provider_timeout}s")
        except Exception as e:
            return self._fail(generation, f"Search provider failed: {e}")

        try:
            raw_results = list(raw_results)
            results = apply_search(raw_results, query, filters, self.tag_match)
        except (AttributeError, TypeError) as e:
            return self._fail(generation, f"Search provider returned malformed results: {e}")

        if generation != self._generation:
            logger.debug("Discarding superseded results", query=query, generation=generation)
            return Outcome.fail(FailureKind.SUPERSEDED, "A newer search was issued")

        self._results = results
        self._state = SearchState.READY
        self._last_failure = None

        if query.strip() and self.saved_searches is not None:
            if not self.saved_searches.record_recent(query):
                logger.warning("Could not record recent search", query=query)

        logger.info(
            "Search completed",
            query=query,
            total_results=len(results),
            provider_results=len(raw_results),
        )
        return Outcome.success(list(results))

    async def wait_idle(self) -> None:
        """Wait until no debounced or scheduled search is pending."""
        while self._pending is not None and not self._pending.done():
            await asyncio.wait({self._pending})

    def close(self) -> None:
        """Cancel any pending search."""
        self._cancel_pending()

    def type_counts(self) -> dict[ItemType, int]:
        """Per-type counts of the full result list, zero included."""
        return count_by_type(self._results)

    def tag_counts(self) -> dict[str, int]:
        return count_tags(self._results)

    def results_for(self, item_type: Optional[ItemType] = None) -> list[SearchResult]:
        """Results for one type tab, derived from the same list as the counts."""
        if item_type is None:
            return list(self._results)
        return [r for r in self._results if r.type == item_type]

    def is_result_saved(self, result: SearchResult) -> bool:
        if self.saved_items is None:
            return False
        return self.saved_items.is_saved(result.type, result.id)

    def save_result(self, result: SearchResult) -> Outcome[SavedItem]:
        return self._require_saved_items().save_item(result.to_saved_input())

    def toggle_saved(self, result: SearchResult) -> Outcome[bool]:
        """Remove the result if saved, save it otherwise.

        Returns:
            Outcome with the new saved state
        """
        store = self._require_saved_items()
        if store.is_saved(result.type, result.id):
            removed = store.remove(result.type, result.id)
            if not removed.ok:
                return Outcome(failure=removed.failure)
            return Outcome.success(False)

        saved = store.save_item(result.to_saved_input())
        if not saved.ok:
            return Outcome(failure=saved.failure)
        return Outcome.success(True)

    def save_search(self) -> Outcome[str]:
        """Persist the current query and filters; returns the new search id."""
        if not self._query.strip():
            return Outcome.fail(FailureKind.EMPTY_QUERY, "Cannot save an empty search")

        saved = self._require_saved_searches().add(self._query, self._filters)
        if not saved.ok:
            return Outcome(failure=saved.failure)
        return Outcome.success(saved.value.id)

    def apply_saved_search(self, search_id: str) -> bool:
        """Restore a saved search and run it without debounce."""
        search = self._require_saved_searches().get(search_id)
        if search is None:
            return False

        self._query = search.query
        self._filters = search.filters
        self._rerun()
        return True

    def delete_saved_search(self, search_id: str) -> bool:
        return self._require_saved_searches().delete(search_id)

    def list_saved_searches(self) -> list[SavedSearch]:
        if self.saved_searches is None:
            return []
        return self.saved_searches.list_searches()

    def recent_searches(self) -> list[str]:
        if self.saved_searches is None:
            return []
        return self.saved_searches.recent()

    def suggestions(self, text: Optional[str] = None) -> list[str]:
        """Common terms containing the text, once it is longer than one character."""
        text = (self._query if text is None else text).strip().casefold()
        if len(text) < 2:
            return []
        return [term for term in COMMON_TERMS if text in term.casefold()][:MAX_SUGGESTIONS]

    def _is_blank(self) -> bool:
        return not self._query.strip() and self._filters.is_empty

    def _rerun(self) -> None:
        if self._is_blank():
            self._reset_to_idle()
            return
        self._generation += 1
        self._schedule(0)

    def _reset_to_idle(self) -> None:
        self._cancel_pending()
        self._generation += 1
        self._results = []
        self._state = SearchState.IDLE
        self._last_failure = None

    def _fail(self, generation: int, message: str) -> Outcome[list[SearchResult]]:
        if generation != self._generation:
            return Outcome.fail(FailureKind.SUPERSEDED, "A newer search was issued")

        self._state = SearchState.FAILED
        self._last_failure = message
        logger.warning("Search failed", query=self._query, error=message)
        return Outcome.fail(FailureKind.PROVIDER_FAILURE, message)

    def _schedule(self, delay: float) -> None:
        self._cancel_pending()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, search waits for execute()")
            return
        self._pending = loop.create_task(self._run_after(delay))

    async def _run_after(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await self.execute()

    def _cancel_pending(self) -> None:
        task = self._pending
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()
            self._pending = None

    def _require_saved_items(self) -> SavedItemStore:
        if self.saved_items is None:
            raise RuntimeError("SearchEngine has no saved item store")
        return self.saved_items

    def _require_saved_searches(self) -> SavedSearchStore:
        if self.saved_searches is None:
            raise RuntimeError("SearchEngine has no saved search store")
        return self.saved_searches
