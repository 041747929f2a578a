"""
In-Memory Vector Store

This module implements the process-lifetime vector store used for semantic
search over embedded curriculum content.

Key Properties
--------------
- Replace-by-id upserts (no duplicate ids)
- Exact cosine similarity over every stored vector
- Topic / unit membership filters
- Stable ranking (ties keep insertion order)
- Concurrency-safe (thread locking)
- Hard failure on dimensionality mismatch
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from .models import EmbeddingVector, VectorFilter, VectorSearchResult
from ..core.errors import SyllabusRAGError

logger = logging.getLogger("srag.vector_store")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class DimensionMismatchError(SyllabusRAGError):
    """Raised when vectors of different dimensionality meet in one store."""

    error_code = "dimension_mismatch"


# ---------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------

def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vectors must have the same length ({len(a)} != {len(b)})"
        )

    va = np.asarray(a, dtype="float64")
    vb = np.asarray(b, dtype="float64")

    denominator = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denominator == 0.0:
        return 0.0

    score = float(np.dot(va, vb)) / denominator
    # Rounding can push the ratio a hair outside [-1, 1]
    return max(-1.0, min(1.0, score))


# ---------------------------------------------------------------------
# Vector Store
# ---------------------------------------------------------------------

class InMemoryVectorStore:
    """
    Thread-safe mapping of id -> EmbeddingVector with filtered search.

    A single instance is shared for the lifetime of the process; tests create
    their own isolated instances.
    """

    def __init__(self) -> None:
        self._vectors: Dict[str, EmbeddingVector] = {}
        self._dimension: Optional[int] = None
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upsert(self, vectors: Iterable[EmbeddingVector]) -> None:
        """
        Insert or replace vectors by id.

        The batch is validated before anything is written, so a mismatched
        vector leaves the store untouched.
        """
        batch = list(vectors)
        if not batch:
            return

        with self._lock:
            dim = self._dimension
            if dim is None or not self._vectors:
                dim = len(batch[0].vector)

            for item in batch:
                if len(item.vector) == 0:
                    raise DimensionMismatchError(
                        f"Embedding for '{item.id}' is empty."
                    )
                if len(item.vector) != dim:
                    raise DimensionMismatchError(
                        f"Embedding for '{item.id}' has dimension "
                        f"{len(item.vector)}, store expects {dim}."
                    )

            for item in batch:
                # Re-inserting an existing id keeps its original position
                self._vectors[item.id] = item
            self._dimension = dim

            total = len(self._vectors)

        logger.info("Upserted %d vectors. Total: %d", len(batch), total)

    def delete(self, ids: Iterable[str]) -> None:
        """
        Remove vectors by id. Unknown ids are ignored.
        """
        removed = 0
        with self._lock:
            for vector_id in ids:
                if self._vectors.pop(vector_id, None) is not None:
                    removed += 1
            if not self._vectors:
                self._dimension = None

        logger.info("Deleted %d vectors", removed)

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()
            self._dimension = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, vector_id: str) -> Optional[EmbeddingVector]:
        """
        Return the stored vector, or None if the id is unknown.
        """
        with self._lock:
            return self._vectors.get(vector_id)

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int = 10,
        filter: Optional[VectorFilter] = None,
        min_score: float = 0.0,
    ) -> List[VectorSearchResult]:
        """
        Rank stored vectors by cosine similarity to ``query_vector``.

        Parameters
        ----------
        query_vector : Sequence[float]
            The query embedding.

        top_k : int
            Maximum number of results.

        filter : Optional[VectorFilter]
            Topic / unit membership constraints.

        min_score : float
            Results scoring below this are discarded.

        Returns
        -------
        List[VectorSearchResult]
            At most ``top_k`` results, best first.

        Raises
        ------
        DimensionMismatchError
            If any stored vector differs in dimension from the query.
        """
        query_dim = len(query_vector)

        with self._lock:
            snapshot = list(self._vectors.values())

        results: List[VectorSearchResult] = []

        for item in snapshot:
            if len(item.vector) != query_dim:
                raise DimensionMismatchError(
                    f"Stored vector '{item.id}' has dimension {len(item.vector)}, "
                    f"query has {query_dim}."
                )

            if filter is not None and not filter.accepts(item.metadata):
                continue

            score = cosine_similarity(query_vector, item.vector)
            if score < min_score:
                continue

            results.append(
                VectorSearchResult(id=item.id, score=score, metadata=item.metadata)
            )

        # sorted() is stable, so equal scores keep insertion order
        results = sorted(results, key=lambda r: r.score, reverse=True)
        return results[: max(top_k, 0)]

    def get_stats(self) -> dict:
        """
        Return store statistics for diagnostics.
        """
        with self._lock:
            return {
                "total_vectors": len(self._vectors),
                "dimension": self._dimension,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors)
