"""Persisted saved searches and recent queries."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from hfn_discovery.core.codec import decode_document, encode_document
from hfn_discovery.core.entities import SavedSearch, SearchFilters
from hfn_discovery.core.exceptions import CorruptStoreError, PersistenceError
from hfn_discovery.core.interfaces import Storage
from hfn_discovery.core.results import Failure, FailureKind, Outcome

logger = structlog.get_logger(__name__)


class SavedSearchStore:
    """Keep named searches for replay plus a short list of recent queries."""

    def __init__(
        self,
        storage: Storage,
        recent_limit: int = 10,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.storage = storage
        self.recent_limit = recent_limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._searches: list[SavedSearch] = []
        self._recent: list[str] = []

    def init(self, reset_on_corrupt: bool = True) -> Outcome[int]:
        """Load saved searches; returns how many were loaded."""
        try:
            payload = self.storage.load()
        except PersistenceError as e:
            logger.error("Failed to load saved searches", error=str(e))
            return Outcome.fail(FailureKind.PERSISTENCE_FAILURE, str(e))

        try:
            searches, recent = self._decode(payload)
        except CorruptStoreError as e:
            if not reset_on_corrupt:
                raise
            logger.warning("Saved searches are corrupt, resetting store", error=str(e))
            searches, recent = [], []
            self._searches, self._recent = searches, recent
            failure = self._persist()
            if failure:
                return Outcome(failure=failure)

        self._searches = searches
        self._recent = recent[: self.recent_limit]
        return Outcome.success(len(self._searches))

    def add(self, query: str, filters: SearchFilters) -> Outcome[SavedSearch]:
        """Save a search, newest first. Blank queries are rejected."""
        if not query.strip():
            return Outcome.fail(FailureKind.EMPTY_QUERY, "Cannot save an empty search")

        search = SavedSearch(
            id=self._id_factory(),
            query=query,
            filters=filters,
            created_at=self._clock(),
        )
        self._searches.insert(0, search)

        failure = self._persist()
        if failure:
            self._searches.remove(search)
            return Outcome(failure=failure)

        logger.info("Search saved", id=search.id, query=query)
        return Outcome.success(search)

    def delete(self, search_id: str) -> bool:
        for index, search in enumerate(self._searches):
            if search.id == search_id:
                del self._searches[index]
                if self._persist():
                    self._searches.insert(index, search)
                    return False
                return True
        return False

    def get(self, search_id: str) -> Optional[SavedSearch]:
        return next((s for s in self._searches if s.id == search_id), None)

    def list_searches(self) -> list[SavedSearch]:
        return list(self._searches)

    def record_recent(self, query: str) -> bool:
        """Move query to the front of the recent list.

        Returns False when the updated list could not be written; the
        previous list is kept in that case.
        """
        query = query.strip()
        if not query:
            return True
        if self._recent and self._recent[0] == query:
            return True

        previous = list(self._recent)
        self._recent = [query] + [q for q in self._recent if q != query]
        self._recent = self._recent[: self.recent_limit]

        if self._persist():
            self._recent = previous
            return False
        return True

    def recent(self) -> list[str]:
        return list(self._recent)

    def clear_recent(self) -> bool:
        previous = self._recent
        self._recent = []
        if self._persist():
            self._recent = previous
            return False
        return True

    def _persist(self) -> Optional[Failure]:
        try:
            self.storage.save(
                encode_document({
                    "searches": [s.to_dict() for s in self._searches],
                    "recent": list(self._recent),
                })
            )
        except PersistenceError as e:
            logger.error("Failed to persist saved searches", error=str(e))
            return Failure(FailureKind.PERSISTENCE_FAILURE, str(e))
        return None

    @staticmethod
    def _decode(payload: Optional[bytes]) -> tuple[list[SavedSearch], list[str]]:
        document = decode_document(payload)
        if document is None:
            return [], []

        raw_searches = document.get("searches") or []
        raw_recent = document.get("recent") or []
        if not isinstance(raw_searches, list) or not isinstance(raw_recent, list):
            raise CorruptStoreError("'searches' and 'recent' must be lists")

        try:
            searches = [SavedSearch.from_dict(raw) for raw in raw_searches]
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStoreError(f"Invalid saved search: {e}") from e

        return searches, [str(q) for q in raw_recent]
