"""
Embed-and-store helper shared by document ingestion and chunking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from .embedder import EmbeddingProvider, EmbeddingProviderError
from .models import EmbeddingVector, VectorMetadata
from .vector_store import InMemoryVectorStore

logger = logging.getLogger("srag.indexer")


@dataclass(frozen=True)
class IndexItem:
    """One piece of text to embed, with the metadata it is stored under."""
    id: str
    text: str
    metadata: VectorMetadata


async def embed_and_store(
    provider: EmbeddingProvider,
    store: InMemoryVectorStore,
    items: Sequence[IndexItem],
) -> int:
    """
    Embed all item texts in one batch and upsert the resulting vectors.

    Returns the number of vectors stored. Provider and store errors propagate;
    nothing is stored unless the provider returns one vector per item.
    """
    if not items:
        return 0

    embeddings = await provider.embed_batch([item.text for item in items])

    if len(embeddings) != len(items):
        raise EmbeddingProviderError(
            f"Expected {len(items)} embeddings, received {len(embeddings)}."
        )

    vectors: List[EmbeddingVector] = [
        EmbeddingVector(id=item.id, vector=embedding, metadata=item.metadata)
        for item, embedding in zip(items, embeddings)
    ]

    store.upsert(vectors)
    logger.info("Stored %d embeddings in batch", len(vectors))
    return len(vectors)
