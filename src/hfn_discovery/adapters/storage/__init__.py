"""Persistence adapters."""

from hfn_discovery.adapters.storage.file_storage import FileStorage
from hfn_discovery.adapters.storage.memory_storage import MemoryStorage

__all__ = ["FileStorage", "MemoryStorage"]
