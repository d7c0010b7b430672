"""Deduplicated, persisted collection of saved items."""

from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from hfn_discovery.core.codec import decode_document, encode_document
from hfn_discovery.core.entities import ItemType, SavedItem, SavedItemInput, SortOrder
from hfn_discovery.core.exceptions import CorruptStoreError, PersistenceError
from hfn_discovery.core.filters import count_by_type, matches_text, sort_saved_items
from hfn_discovery.core.interfaces import Storage
from hfn_discovery.core.results import Failure, FailureKind, Outcome

logger = structlog.get_logger(__name__)

ItemKey = tuple[ItemType, str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SavedItemStore:
    """Single source of truth for what the user has saved.

    Items are unique by ``(type, id)``. Every mutation is written through to
    storage before returning; when the write fails the in-memory change is
    reverted and a ``PERSISTENCE_FAILURE`` outcome is returned.
    """

    def __init__(self, storage: Storage, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.storage = storage
        self._clock = clock or _utc_now
        self._items: dict[ItemKey, SavedItem] = {}
        self._id_counts: Counter[str] = Counter()

    def init(self, reset_on_corrupt: bool = True) -> Outcome[int]:
        """Load items from storage.

        Args:
            reset_on_corrupt: Reset to an empty store instead of raising
                ``CorruptStoreError`` when the payload cannot be decoded.

        Returns:
            Outcome with the number of loaded items
        """
        try:
            payload = self.storage.load()
        except PersistenceError as e:
            logger.error("Failed to load saved items", error=str(e))
            return Outcome.fail(FailureKind.PERSISTENCE_FAILURE, str(e))

        try:
            items = self._decode(payload)
        except CorruptStoreError as e:
            if not reset_on_corrupt:
                raise
            logger.warning("Saved items are corrupt, resetting store", error=str(e))
            self._replace([])
            failure = self._persist()
            if failure:
                return Outcome(failure=failure)
            return Outcome.success(0)

        self._replace(items)
        logger.debug("Saved items loaded", count=len(self._items))
        return Outcome.success(len(self._items))

    def save_item(self, candidate: SavedItemInput) -> Outcome[SavedItem]:
        """Save a candidate, stamping ``saved_at``.

        Returns ``ALREADY_SAVED`` without touching state when ``(type, id)``
        is already present.
        """
        key = (candidate.type, candidate.id)
        if key in self._items:
            return Outcome.fail(
                FailureKind.ALREADY_SAVED,
                f"{candidate.type.value} {candidate.id!r} is already saved",
            )

        item = SavedItem.from_input(candidate, saved_at=self._clock())
        self._insert(item)

        failure = self._persist()
        if failure:
            self._discard(key)
            return Outcome(failure=failure)

        logger.info("Item saved", type=item.type.value, id=item.id)
        return Outcome.success(item)

    def remove(self, item_type: ItemType, item_id: str) -> Outcome[bool]:
        """Remove the item with the given composite key.

        Returns:
            Outcome with True when an item was removed, False when none matched
        """
        if (item_type, item_id) not in self._items:
            return Outcome.success(False)
        return self._remove_key((item_type, item_id))

    def remove_item(self, item_id: str) -> Outcome[bool]:
        """Remove by bare id, whatever the type.

        Ids are only unique per type, so when several types share the id the
        first match in insertion order is removed. Prefer ``remove``.
        """
        matches = [key for key in self._items if key[1] == item_id]
        if not matches:
            return Outcome.success(False)
        if len(matches) > 1:
            logger.warning(
                "Ambiguous removal by bare id, removing first match",
                id=item_id,
                types=[key[0].value for key in matches],
            )
        return self._remove_key(matches[0])

    def clear_all_items(self) -> Outcome[int]:
        """Remove every item; returns how many were removed."""
        snapshot = dict(self._items)
        self._replace([])

        failure = self._persist()
        if failure:
            self._replace(snapshot.values())
            return Outcome(failure=failure)

        logger.info("Saved items cleared", removed=len(snapshot))
        return Outcome.success(len(snapshot))

    def is_item_saved(self, item_id: str) -> bool:
        return self._id_counts[item_id] > 0

    def is_saved(self, item_type: ItemType, item_id: str) -> bool:
        return (item_type, item_id) in self._items

    def get(self, item_type: ItemType, item_id: str) -> Optional[SavedItem]:
        return self._items.get((item_type, item_id))

    def get_item_type_counts(self) -> dict[ItemType, int]:
        return count_by_type(self._items.values())

    def get_items_by_type(self, item_type: ItemType) -> list[SavedItem]:
        return [item for item in self._items.values() if item.type == item_type]

    def list_items(
        self,
        sort_by: SortOrder = SortOrder.RECENT,
        item_type: Optional[ItemType] = None,
        query: Optional[str] = None,
    ) -> list[SavedItem]:
        """List items for a type tab and text query in the requested order."""
        items = [
            item
            for item in self._items.values()
            if (item_type is None or item.type == item_type) and matches_text(item, query)
        ]
        return sort_saved_items(items, sort_by)

    def __len__(self) -> int:
        return len(self._items)

    def _remove_key(self, key: ItemKey) -> Outcome[bool]:
        snapshot = dict(self._items)
        self._discard(key)

        failure = self._persist()
        if failure:
            self._replace(snapshot.values())
            return Outcome(failure=failure)

        logger.info("Item removed", type=key[0].value, id=key[1])
        return Outcome.success(True)

    def _insert(self, item: SavedItem) -> None:
        self._items[item.key] = item
        self._id_counts[item.id] += 1

    def _discard(self, key: ItemKey) -> None:
        del self._items[key]
        self._id_counts[key[1]] -= 1
        if self._id_counts[key[1]] <= 0:
            del self._id_counts[key[1]]

    def _replace(self, items) -> None:
        self._items = {}
        self._id_counts = Counter()
        for item in items:
            if item.key not in self._items:
                self._insert(item)

    def _persist(self) -> Optional[Failure]:
        """Write the full collection; return a failure instead of raising."""
        try:
            data = encode_document({"items": [item.to_dict() for item in self._items.values()]})
            self.storage.save(data)
        except PersistenceError as e:
            logger.error("Failed to persist saved items", error=str(e), count=len(self._items))
            return Failure(FailureKind.PERSISTENCE_FAILURE, str(e))
        return None

    @staticmethod
    def _decode(payload: Optional[bytes]) -> list[SavedItem]:
        document = decode_document(payload)
        if document is None:
            return []

        raw_items = document.get("items") or []
        if not isinstance(raw_items, list):
            raise CorruptStoreError("'items' is not a list")

        try:
            return [SavedItem.from_dict(raw) for raw in raw_items]
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStoreError(f"Invalid saved item: {e}") from e
