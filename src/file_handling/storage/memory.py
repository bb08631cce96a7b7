"""In-memory file managers, intended for tests."""

import logging
import threading
from typing import List, Optional, Tuple

from ..storage_models import FileAddress, SavedFile
from .base import BaseFileManager

logger = logging.getLogger(__name__)


class InMemoryFileStore:
    """
    Ordered collection of saved files.

    Lookups go by storage key, so a file saved through any in-memory
    manager is found with the same (container, id/date, name) as on disk
    or in Azure.
    """

    def __init__(self):
        self._files: List[SavedFile] = []
        self._lock = threading.Lock()

    @property
    def records(self) -> Tuple[SavedFile, ...]:
        """Snapshot of all saved files, oldest first."""
        with self._lock:
            return tuple(self._files)

    def find(self, key: str) -> Optional[SavedFile]:
        with self._lock:
            return next((f for f in self._files if f.key == key), None)

    def put(self, record: SavedFile) -> None:
        """Add a record, replacing an existing one with the same key in place."""
        with self._lock:
            for i, existing in enumerate(self._files):
                if existing.key == record.key:
                    self._files[i] = record
                    return
            self._files.append(record)

    def remove(self, key: str) -> bool:
        """Remove the record for key; returns whether one existed."""
        with self._lock:
            for i, existing in enumerate(self._files):
                if existing.key == key:
                    del self._files[i]
                    return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._files.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)


class _StoreBackedFileManager(BaseFileManager):
    """File manager over an InMemoryFileStore."""

    store: InMemoryFileStore

    @property
    def saved_files(self) -> Tuple[SavedFile, ...]:
        return self.store.records

    def _read(self, key: str) -> bytes:
        record = self.store.find(key)
        if record is None:
            raise FileNotFoundError(f"File not found: {key}")
        return record.content

    def _write(self, key: str, data: bytes, address: FileAddress) -> None:
        self.store.put(SavedFile(
            container=address.container,
            file_name=address.file_name,
            file_id=address.file_id,
            file_date=address.file_date,
            key=key,
            content=data,
        ))

    def _delete(self, key: str) -> None:
        # Deleting a missing file is not an error here
        if not self.store.remove(key):
            logger.debug("Nothing to delete for %s", key)

    def _exists(self, key: str) -> bool:
        return self.store.find(key) is not None


class InMemoryFileManager(_StoreBackedFileManager):
    """
    In-memory manager sharing one process-wide store across all instances.

    Call ``InMemoryFileManager.clear_files()`` in test teardown.
    """

    shared_store = InMemoryFileStore()

    def __init__(self):
        self.store = type(self).shared_store

    @classmethod
    def clear_files(cls) -> None:
        cls.shared_store.clear()


class InstanceInMemoryFileManager(_StoreBackedFileManager):
    """In-memory manager with its own store, isolating parallel tests."""

    def __init__(self, store: Optional[InMemoryFileStore] = None):
        self.store = store if store is not None else InMemoryFileStore()

    def clear_files(self) -> None:
        self.store.clear()
