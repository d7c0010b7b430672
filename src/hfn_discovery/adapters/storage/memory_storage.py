"""In-process storage scoped to one session."""

from typing import Optional

from hfn_discovery.core import Storage


class MemoryStorage(Storage):
    """Hold the payload in memory; nothing survives the process."""
    
    def __init__(self, data: Optional[bytes] = None) -> None:
        self.data = data
        self.writes = 0
    
    def load(self) -> Optional[bytes]:
        return self.data
    
    def save(self, data: bytes) -> None:
        self.data = bytes(data)
        self.writes += 1
    
    def clear(self) -> None:
        self.data = None
