"""
Partitioned JSON Store Base

Shared machinery for the syllabus and document stores: a per-partition
in-memory cache guarded by a re-entrant lock, optionally backed by one JSON
file per partition under ``DATA_ROOT/<store_name>/<KEY>.json``.

Design choices
--------------
- In-memory only when no data root is configured.
- Cache-first reads; the backing file is consulted on a cache miss.
- Writes replace the whole partition file.
- Thread-safe access using a re-entrant lock.
"""

from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Any, Dict, Optional

from ..partition import ensure_store_directory, get_partition_file
from .errors import StoragePersistenceError

logger = logging.getLogger("srag.storage")


class PartitionedJsonStore:
    """
    Base class for process-scoped, partition-keyed stores.

    Subclasses decide what a partition holds; this class only moves raw JSON
    data between memory and disk.
    """

    store_name: str = "store"

    def __init__(self, data_root: Optional[str] = None) -> None:
        """
        Parameters
        ----------
        data_root : Optional[str]
            Directory under which partition files are kept. If None, the
            store never touches the filesystem.
        """
        self._data_root = data_root
        self._lock = RLock()

        if data_root is not None:
            ensure_store_directory(data_root, self.store_name)

    @property
    def persistent(self) -> bool:
        return self._data_root is not None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read_partition(self, key: str) -> Optional[Any]:
        """
        Load raw JSON data for a partition, or None if no file exists.
        """
        if self._data_root is None:
            return None

        path = get_partition_file(self._data_root, self.store_name, key)
        if not path.exists():
            return None

        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read %s partition %s: %s", self.store_name, key, exc)
            raise StoragePersistenceError(
                f"Failed to read {self.store_name} partition {key}: {type(exc).__name__}"
            ) from exc

    def _write_partition(self, key: str, data: Any) -> None:
        """
        Overwrite the backing file of a partition.
        """
        if self._data_root is None:
            return

        path = get_partition_file(self._data_root, self.store_name, key)
        tmp_path = path.with_suffix(".json.tmp")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)
        except OSError as exc:
            logger.error("Failed to write %s partition %s: %s", self.store_name, key, exc)
            raise StoragePersistenceError(
                f"Failed to write {self.store_name} partition {key}: {type(exc).__name__}"
            ) from exc

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def _cached_keys(self, cache: Dict[str, Any]) -> list:
        with self._lock:
            return sorted(cache.keys())
