"""
Content Chunker

Splits a document into size-bounded chunks on sentence boundaries, then
embeds and stores the chunks when an embedding provider is available.

Chunking
--------
- Content is split on runs of ``.``, ``!`` and ``?``; blank fragments are
  dropped.
- Fragments are accumulated greedily into a buffer joined by ``". "``.
- A chunk is closed when adding the next fragment would push the buffer past
  ``chunk_size`` and the buffer is not empty; the fragment starts the next
  buffer. A single oversized fragment therefore becomes its own chunk.

Embedding failures never fail chunking: the chunk list is returned either way.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .models import ChunkMetadata, ContentChunk, ContentDocument
from ..core.errors import InvalidRequestError
from ..embeddings.embedder import EmbeddingProvider
from ..embeddings.indexer import IndexItem, embed_and_store
from ..embeddings.models import VectorMetadata
from ..embeddings.vector_store import InMemoryVectorStore

logger = logging.getLogger("srag.chunker")

SENTENCE_TERMINATORS = re.compile(r"[.!?]+")
SENTENCE_JOINER = ". "
DEFAULT_CHUNK_SIZE = 500


def split_sentences(text: str) -> List[str]:
    """
    Split text on sentence terminators, keeping non-blank fragments as-is.
    """
    return [s for s in SENTENCE_TERMINATORS.split(text) if s.strip()]


def build_chunks(
    document: ContentDocument,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> List[ContentChunk]:
    """
    Produce the chunks of a document without embedding them.
    """
    if chunk_size < 1:
        raise InvalidRequestError("chunk_size must be a positive integer")

    buffers: List[str] = []
    current = ""

    for sentence in split_sentences(document.content):
        if len(current) + len(sentence) > chunk_size and current:
            buffers.append(current)
            current = sentence
        else:
            current += (SENTENCE_JOINER if current else "") + sentence

    if current.strip():
        buffers.append(current)

    base_meta = document.metadata.model_dump(exclude_none=True)

    return [
        ContentChunk(
            chunk_id=f"{document.document_id}_CHUNK_{index}",
            topic_id=document.topic_id,
            unit_id=document.unit_id,
            content=text.strip(),
            metadata=ChunkMetadata(**base_meta, section=f"Chunk {index + 1}"),
        )
        for index, text in enumerate(buffers)
    ]


class ContentChunker:
    """
    Chunk documents and feed the chunks to the vector store.

    ``provider`` is optional: without one, chunks are produced but not
    embedded.
    """

    def __init__(
        self,
        vector_store: InMemoryVectorStore,
        provider: Optional[EmbeddingProvider] = None,
    ) -> None:
        self._vector_store = vector_store
        self._provider = provider

    async def chunk(
        self,
        document: ContentDocument,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> List[ContentChunk]:
        """
        Chunk a document, then embed and store its chunks.

        Returns
        -------
        List[ContentChunk]
            The chunks, whether or not embedding succeeded.
        """
        chunks = build_chunks(document, chunk_size)

        if not chunks:
            return chunks

        if self._provider is None:
            logger.warning(
                "No embedding provider configured; %d chunks of %s not embedded",
                len(chunks),
                document.document_id,
            )
            return chunks

        # TODO: tag each chunk with its own index; every vector in the batch
        # currently carries the index of the last chunk.
        last_index = len(chunks) - 1

        items = [
            IndexItem(
                id=chunk.chunk_id,
                text=chunk.content,
                metadata=VectorMetadata(
                    document_id=document.document_id,
                    topic_id=chunk.topic_id,
                    unit_id=chunk.unit_id,
                    content=chunk.content,
                    title=document.title,
                    chunk_index=last_index,
                ),
            )
            for chunk in chunks
        ]

        try:
            await embed_and_store(self._provider, self._vector_store, items)
            logger.info("Generated embeddings for %d chunks", len(chunks))
        except Exception as exc:
            logger.warning(
                "Failed to generate chunk embeddings for %s: %s",
                document.document_id,
                exc,
            )

        return chunks
