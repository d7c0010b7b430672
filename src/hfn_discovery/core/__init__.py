"""Core domain layer."""

from hfn_discovery.core.entities import (
    DateRange,
    ItemType,
    SavedItem,
    SavedItemInput,
    SavedSearch,
    SearchFilters,
    SearchResult,
    SortOrder,
    TagMatch,
)
from hfn_discovery.core.exceptions import (
    CorruptStoreError,
    DiscoveryError,
    PersistenceError,
    ProviderError,
)
from hfn_discovery.core.interfaces import SearchProvider, Storage
from hfn_discovery.core.results import Failure, FailureKind, Outcome
from hfn_discovery.core.saved_items import SavedItemStore
from hfn_discovery.core.saved_searches import SavedSearchStore

__all__ = [
    "DateRange",
    "ItemType",
    "SavedItem",
    "SavedItemInput",
    "SavedSearch",
    "SearchFilters",
    "SearchResult",
    "SortOrder",
    "TagMatch",
    "CorruptStoreError",
    "DiscoveryError",
    "PersistenceError",
    "ProviderError",
    "SearchProvider",
    "Storage",
    "Failure",
    "FailureKind",
    "Outcome",
    "SavedItemStore",
    "SavedSearchStore",
]
