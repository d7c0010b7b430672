"""File-backed storage for persisted collections."""

import os
from pathlib import Path
from typing import Optional

from hfn_discovery.core import PersistenceError, Storage


class FileStorage(Storage):
    """Keep one payload per file, replaced atomically on every save."""
    
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
    
    def load(self) -> Optional[bytes]:
        """Read the payload, or None if the file does not exist yet."""
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
    
    def save(self, data: bytes) -> None:
        """Write to a sibling temp file, then swap it in place."""
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
    
    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Could not remove {self.path}: {e}") from e
