"""
Syllabus Store

Process-scoped cache of one frozen Syllabus per partition key, optionally
persisted as JSON. A syllabus is only ever replaced wholesale.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import Syllabus
from ..core.errors import StoragePersistenceError
from ..core.storage import PartitionedJsonStore

logger = logging.getLogger("srag.syllabus")


class SyllabusStore(PartitionedJsonStore):
    """
    Mapping of partition key -> Syllabus snapshot.

    Syllabus models are immutable, so readers can share the cached instance.
    """

    store_name = "syllabus"

    def __init__(self, data_root: Optional[str] = None) -> None:
        super().__init__(data_root)
        self._cache: Dict[str, Syllabus] = {}

    def get(self, key: str) -> Optional[Syllabus]:
        """
        Return the syllabus for a partition, or None if none was stored.
        """
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            raw = self._read_partition(key)
            if raw is None:
                return None

            try:
                syllabus = Syllabus.model_validate(raw)
            except ValueError as exc:
                raise StoragePersistenceError(
                    f"Stored syllabus {key} is invalid"
                ) from exc

            self._cache[key] = syllabus
            return syllabus

    def put(self, key: str, syllabus: Syllabus) -> None:
        """
        Replace the syllabus for a partition (cache and backing file).
        """
        with self._lock:
            self._write_partition(key, syllabus.model_dump(mode="json"))
            self._cache[key] = syllabus

        logger.info("Syllabus stored: %s (version %s)", key, syllabus.version)

    def keys(self) -> List[str]:
        return self._cached_keys(self._cache)

    def clear(self) -> None:
        """Drop cached snapshots (backing files are kept)."""
        with self._lock:
            self._cache.clear()
