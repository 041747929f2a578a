"""
Document Store

Process-scoped, append-only list of ContentDocuments per partition key,
optionally persisted as JSON.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .models import ContentDocument
from ..core.errors import StoragePersistenceError
from ..core.storage import PartitionedJsonStore

logger = logging.getLogger("srag.content")

_documents_adapter = TypeAdapter(List[ContentDocument])


class DocumentStore(PartitionedJsonStore):
    """
    Mapping of partition key -> ordered document list.

    Reads return copies so callers cannot mutate the cached list.
    """

    store_name = "content"

    def __init__(self, data_root: Optional[str] = None) -> None:
        super().__init__(data_root)
        self._cache: Dict[str, List[ContentDocument]] = {}

    def _load(self, key: str) -> List[ContentDocument]:
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        raw = self._read_partition(key)
        if raw is None:
            documents: List[ContentDocument] = []
        else:
            try:
                documents = _documents_adapter.validate_python(raw)
            except ValidationError as exc:
                raise StoragePersistenceError(
                    f"Stored content for {key} is invalid"
                ) from exc

        self._cache[key] = documents
        return documents

    def get_all(self, key: str) -> List[ContentDocument]:
        """
        Return all documents of a partition in insertion order.
        """
        with self._lock:
            return list(self._load(key))

    def append(self, key: str, document: ContentDocument) -> None:
        """
        Append one document to a partition and persist the partition.
        """
        with self._lock:
            documents = self._load(key) + [document]
            self._write_partition(key, _documents_adapter.dump_python(documents, mode="json"))
            self._cache[key] = documents

        logger.info("Document %s appended to %s", document.document_id, key)

    def keys(self) -> List[str]:
        return self._cached_keys(self._cache)

    def clear(self) -> None:
        """Drop cached partitions (backing files are kept)."""
        with self._lock:
            self._cache.clear()
