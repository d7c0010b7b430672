"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Optional

from hfn_discovery.core.entities import SearchFilters, SearchResult


class SearchProvider(ABC):
    """Interface for the backing resource set a search runs against."""
    
    @abstractmethod
    async def search(self, query: str, filters: SearchFilters) -> list[SearchResult]:
        """Return results for query and filters in provider order."""
        pass


class Storage(ABC):
    """Interface for durable client-local key-value storage.
    
    Implementations raise ``PersistenceError`` when the underlying medium fails.
    """
    
    @abstractmethod
    def load(self) -> Optional[bytes]:
        """Return the stored payload, or None if nothing was saved yet."""
        pass
    
    @abstractmethod
    def save(self, data: bytes) -> None:
        """Replace the stored payload."""
        pass
    
    @abstractmethod
    def clear(self) -> None:
        """Remove the stored payload."""
        pass
