"""Tests for the saved item store."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from hfn_discovery.adapters.storage import FileStorage, MemoryStorage
from hfn_discovery.core import (
    CorruptStoreError,
    FailureKind,
    ItemType,
    PersistenceError,
    SavedItemInput,
    SavedItemStore,
    SortOrder,
)


class FakeClock:
    """Clock that advances one minute per call."""
    
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    
    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


class FailingStorage(MemoryStorage):
    """Memory storage whose writes can be switched off."""
    
    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
    
    def save(self, data: bytes) -> None:
        if self.fail_writes:
            raise PersistenceError("quota exceeded")
        super().save(data)


def job(item_id: str = "5", title: str = "Backend Engineer", **kwargs) -> SavedItemInput:
    return SavedItemInput(id=item_id, type=ItemType.JOB, title=title, url=f"/jobs/{item_id}", **kwargs)


def article(item_id: str, title: str = "Pitch Deck Guide") -> SavedItemInput:
    return SavedItemInput(id=item_id, type=ItemType.ARTICLE, title=title, url=f"/articles/{item_id}")


@pytest.fixture
def store() -> SavedItemStore:
    store = SavedItemStore(MemoryStorage(), clock=FakeClock())
    assert store.init().ok
    return store


def test_save_and_duplicate(store) -> None:
    """Saving the same (type, id) twice is rejected and changes nothing."""
    first = store.save_item(job())
    
    assert first.ok
    assert first.value.saved_at == datetime(2024, 1, 1, 0, 1, tzinfo=timezone.utc)
    assert store.is_item_saved("5")
    
    second = store.save_item(job(title="Backend Engineer (copy)"))
    
    assert second.kind == FailureKind.ALREADY_SAVED
    items = store.list_items()
    assert len(items) == 1
    assert items[0].title == "Backend Engineer"
    assert items[0].saved_at == first.value.saved_at


def test_same_id_different_types_are_distinct(store) -> None:
    assert store.save_item(job("5")).ok
    assert store.save_item(article("5")).ok
    
    assert len(store) == 2
    assert store.is_saved(ItemType.JOB, "5")
    assert store.is_saved(ItemType.ARTICLE, "5")
    assert not store.is_saved(ItemType.EVENT, "5")


def test_remove_is_idempotent(store) -> None:
    store.save_item(job("1"))
    store.save_item(job("2", title="Marketing Director"))
    
    assert store.remove_item("1").value is True
    after_first = store.list_items()
    
    assert store.remove_item("1").value is False
    assert store.list_items() == after_first
    assert not store.is_item_saved("1")


def test_bare_id_removal_takes_first_inserted(store) -> None:
    store.save_item(article("5"))
    store.save_item(job("5"))
    
    assert store.remove_item("5").value
    
    assert not store.is_saved(ItemType.ARTICLE, "5")
    assert store.is_saved(ItemType.JOB, "5")
    assert store.is_item_saved("5")


def test_remove_by_composite_key(store) -> None:
    store.save_item(article("5"))
    store.save_item(job("5"))
    
    assert store.remove(ItemType.JOB, "5").value
    assert not store.remove(ItemType.JOB, "5").value
    assert store.is_saved(ItemType.ARTICLE, "5")


def test_type_counts(store) -> None:
    store.save_item(job("1"))
    store.save_item(job("2", title="Marketing Director"))
    store.save_item(article("3"))
    
    assert store.get_item_type_counts() == {
        ItemType.PROFILE: 0,
        ItemType.JOB: 2,
        ItemType.EVENT: 0,
        ItemType.GROUP: 0,
        ItemType.ARTICLE: 1,
        ItemType.POST: 0,
    }
    assert [i.id for i in store.get_items_by_type(ItemType.JOB)] == ["1", "2"]


def test_counts_match_listing_after_mixed_operations(store) -> None:
    for i in range(6):
        store.save_item(job(str(i), title=f"Job {i}"))
        store.save_item(article(str(i), title=f"Article {i}"))
    store.remove_item("2")
    store.remove(ItemType.ARTICLE, "4")
    store.save_item(job("2", title="Job 2 again"))
    
    assert sum(store.get_item_type_counts().values()) == len(store.list_items())


def test_clear_all_items(store) -> None:
    for i in range(10):
        store.save_item(job(str(i), title=f"Job {i}"))
    
    cleared = store.clear_all_items()
    
    assert cleared.ok
    assert cleared.value == 10
    assert store.list_items() == []
    assert all(count == 0 for count in store.get_item_type_counts().values())


def test_list_items_sorting(store) -> None:
    store.save_item(job("1", title="charlie"))
    store.save_item(job("2", title="Alpha"))
    store.save_item(job("3", title="bravo"))
    
    assert [i.id for i in store.list_items(SortOrder.RECENT)] == ["3", "2", "1"]
    assert [i.id for i in store.list_items(SortOrder.OLDEST)] == ["1", "2", "3"]
    assert [i.title for i in store.list_items(SortOrder.ALPHABETICAL)] == ["Alpha", "bravo", "charlie"]


def test_list_items_alphabetical_with_accents(store) -> None:
    store.save_item(job("1", title="Zara Ventures"))
    store.save_item(job("2", title="Émile Capital"))
    store.save_item(job("3", title="apple"))
    
    titles = [i.title for i in store.list_items(SortOrder.ALPHABETICAL)]
    
    assert titles == ["apple", "Émile Capital", "Zara Ventures"]


def test_list_items_by_tab_and_query(store) -> None:
    store.save_item(job("1", title="Fintech Analyst"))
    store.save_item(article("2", title="Fintech trends"))
    store.save_item(job("3", title="Marketing Director", tags=["growth"]))
    
    assert [i.id for i in store.list_items(item_type=ItemType.JOB, query="fintech")] == ["1"]
    assert [i.id for i in store.list_items(query="GROW")] == ["3"]


def test_persistence_failure_rolls_back() -> None:
    """A failed write leaves the store as it was before the call."""
    storage = FailingStorage()
    store = SavedItemStore(storage, clock=FakeClock())
    store.init()
    store.save_item(job("1"))
    
    storage.fail_writes = True
    
    saved = store.save_item(job("2", title="Marketing Director"))
    assert saved.kind == FailureKind.PERSISTENCE_FAILURE
    assert not store.is_item_saved("2")
    
    removed = store.remove_item("1")
    assert removed.kind == FailureKind.PERSISTENCE_FAILURE
    assert store.is_item_saved("1")
    
    removed = store.remove(ItemType.JOB, "1")
    assert removed.kind == FailureKind.PERSISTENCE_FAILURE
    assert store.is_saved(ItemType.JOB, "1")
    
    missing = store.remove_item("nope")
    assert missing.ok
    assert missing.value is False
    
    cleared = store.clear_all_items()
    assert cleared.kind == FailureKind.PERSISTENCE_FAILURE
    assert len(store) == 1


def test_items_survive_reload() -> None:
    """Test loading from a new store instance."""
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "saved_items.yaml"
        store = SavedItemStore(FileStorage(path), clock=FakeClock())
        store.init()
        store.save_item(job("5", tags=["python", "remote"], date=datetime(2023, 11, 15)))
        store.save_item(article("5"))
        
        assert path.exists()
        
        reloaded = SavedItemStore(FileStorage(path))
        loaded = reloaded.init()
        
        assert loaded.ok
        assert loaded.value == 2
        assert reloaded.list_items(SortOrder.OLDEST) == store.list_items(SortOrder.OLDEST)


def test_corrupt_payload_resets_store() -> None:
    storage = MemoryStorage(b"items: [unclosed")
    store = SavedItemStore(storage)
    
    loaded = store.init()
    
    assert loaded.ok
    assert loaded.value == 0
    assert len(store) == 0
    assert storage.writes == 1


def test_corrupt_payload_raises_when_asked() -> None:
    store = SavedItemStore(MemoryStorage(b"format_version: 1\nitems:\n  - id: '1'\n"))
    
    with pytest.raises(CorruptStoreError):
        store.init(reset_on_corrupt=False)


def test_load_failure_is_reported() -> None:
    class UnreadableStorage(MemoryStorage):
        def load(self):
            raise PersistenceError("disk unavailable")
    
    loaded = SavedItemStore(UnreadableStorage()).init()
    
    assert loaded.kind == FailureKind.PERSISTENCE_FAILURE
