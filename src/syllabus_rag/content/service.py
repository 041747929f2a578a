"""
Content Service

Document ingestion, lookup, and the two retrieval paths used by the RAG
pipeline:

- Lexical search: case-insensitive substring match over title and content,
  ranked by how often the query occurs in the content.
- Semantic search: query embedding + cosine similarity over the vector
  store, mapped back to the partition's documents.

The embedding provider is optional. Without it, ingestion skips the embedding
step and semantic search is unavailable.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Dict, List, Optional, Sequence

from .chunker import ContentChunker, DEFAULT_CHUNK_SIZE
from .models import (
    ContentChunk,
    ContentDocument,
    CreateContentRequest,
    DocumentMetadata,
    ScoredDocument,
)
from .store import DocumentStore
from ..core.errors import SyllabusRAGError
from ..embeddings.embedder import EmbeddingProvider
from ..embeddings.indexer import IndexItem, embed_and_store
from ..embeddings.models import VectorFilter, VectorMetadata
from ..embeddings.vector_store import InMemoryVectorStore
from ..partition import partition_key

logger = logging.getLogger("srag.content")

DEFAULT_SEARCH_LIMIT = 10
DEFAULT_SEMANTIC_MIN_SCORE = 0.5

_ID_ALPHABET = string.ascii_lowercase + string.digits


class SemanticSearchUnavailableError(SyllabusRAGError):
    """Raised when semantic search is requested without an embedding provider."""

    status_code = 503
    error_code = "semantic_search_unavailable"


def generate_document_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"DOC_{int(time.time() * 1000)}_{suffix}"


def _normalize_topic_ids(topic_ids: Optional[Sequence[str]]) -> Optional[List[str]]:
    return list(topic_ids) if topic_ids else None


class ContentService:
    def __init__(
        self,
        store: DocumentStore,
        vector_store: InMemoryVectorStore,
        provider: Optional[EmbeddingProvider] = None,
    ) -> None:
        self._store = store
        self._vector_store = vector_store
        self._provider = provider
        self._chunker = ContentChunker(vector_store, provider)

    @property
    def embeddings_enabled(self) -> bool:
        return self._provider is not None

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def create_content(self, req: CreateContentRequest) -> ContentDocument:
        """
        Append a new document to its partition and embed it.

        Embedding failures are logged and do not fail the ingestion.
        """
        key = partition_key(req.board, req.grade, req.subject)

        source = req.metadata.model_dump() if req.metadata else {}
        document = ContentDocument(
            document_id=generate_document_id(),
            board=req.board,
            grade=req.grade,
            subject=req.subject,
            unit_id=req.unit_id,
            topic_id=req.topic_id,
            title=req.title,
            content=req.content,
            metadata=DocumentMetadata(**source),
        )

        self._store.append(key, document)

        if self._provider is None:
            logger.warning(
                "No embedding provider configured; %s stored without embedding",
                document.document_id,
            )
        else:
            item = IndexItem(
                id=document.document_id,
                text=f"{document.title}\n\n{document.content}",
                metadata=VectorMetadata(
                    document_id=document.document_id,
                    topic_id=document.topic_id,
                    unit_id=document.unit_id,
                    content=document.content,
                    title=document.title,
                ),
            )
            try:
                await embed_and_store(self._provider, self._vector_store, [item])
                logger.info("Embeddings generated for %s", document.document_id)
            except Exception as exc:
                logger.warning(
                    "Failed to generate embeddings for %s: %s",
                    document.document_id,
                    exc,
                )

        logger.info("Content created: %s", document.document_id)
        return document

    async def chunk_content(
        self,
        document: ContentDocument,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> List[ContentChunk]:
        return await self._chunker.chunk(document, chunk_size)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_all_content(
        self, board: str, grade: str, subject: str
    ) -> List[ContentDocument]:
        return self._store.get_all(partition_key(board, grade, subject))

    def get_content_by_topic(
        self, board: str, grade: str, subject: str, topic_id: str
    ) -> List[ContentDocument]:
        return [
            doc
            for doc in self.get_all_content(board, grade, subject)
            if doc.topic_id == topic_id
        ]

    def get_content_by_unit(
        self, board: str, grade: str, subject: str, unit_id: str
    ) -> List[ContentDocument]:
        return [
            doc
            for doc in self.get_all_content(board, grade, subject)
            if doc.unit_id == unit_id
        ]

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def search_content(
        self,
        board: str,
        grade: str,
        subject: str,
        query: str,
        topic_ids: Optional[Sequence[str]] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> List[ContentDocument]:
        """
        Lexical search over one partition.

        Documents whose title or content contains the query (ignoring case)
        are ranked by the number of occurrences of the query in their content.
        """
        documents = self.get_all_content(board, grade, subject)

        wanted = _normalize_topic_ids(topic_ids)
        if wanted is not None:
            documents = [doc for doc in documents if doc.topic_id in wanted]

        query_lower = query.lower()
        matching = [
            doc
            for doc in documents
            if query_lower in doc.content.lower() or query_lower in doc.title.lower()
        ]

        matching.sort(key=lambda doc: doc.content.lower().count(query_lower), reverse=True)

        return matching[:limit]

    async def semantic_search(
        self,
        board: str,
        grade: str,
        subject: str,
        query: str,
        topic_ids: Optional[Sequence[str]] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_score: float = DEFAULT_SEMANTIC_MIN_SCORE,
    ) -> List[ScoredDocument]:
        """
        Vector search over embedded content of one partition.

        Raises
        ------
        SemanticSearchUnavailableError
            If no embedding provider is configured.
        EmbeddingProviderError
            If the query cannot be embedded.
        DimensionMismatchError
            If the store holds vectors of another dimensionality.
        """
        if self._provider is None:
            raise SemanticSearchUnavailableError(
                "Semantic search requires an embedding provider"
            )

        query_embedding = await self._provider.embed(query)

        wanted = _normalize_topic_ids(topic_ids)
        hits = self._vector_store.search(
            query_embedding,
            top_k=limit,
            filter=VectorFilter(topic_ids=wanted) if wanted is not None else None,
            min_score=min_score,
        )

        documents: Dict[str, ContentDocument] = {
            doc.document_id: doc for doc in self.get_all_content(board, grade, subject)
        }

        results: List[ScoredDocument] = []
        for hit in hits:
            document = documents.get(hit.metadata.document_id)
            if document is not None:
                results.append(
                    ScoredDocument(**document.model_dump(), similarity_score=hit.score)
                )

        logger.info(
            "Semantic search found %d results for query: %s",
            len(results),
            query[:50],
        )
        return results

    async def semantic_search_with_fallback(
        self,
        board: str,
        grade: str,
        subject: str,
        query: str,
        topic_ids: Optional[Sequence[str]] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_score: float = DEFAULT_SEMANTIC_MIN_SCORE,
    ) -> List[ScoredDocument]:
        """
        Semantic search that degrades to lexical search (score 0) on failure.
        """
        try:
            return await self.semantic_search(
                board, grade, subject, query, topic_ids, limit, min_score
            )
        except Exception as exc:
            logger.warning("Semantic search failed, using text search: %s", exc)

        return self.lexical_as_scored(board, grade, subject, query, topic_ids, limit)

    def lexical_as_scored(
        self,
        board: str,
        grade: str,
        subject: str,
        query: str,
        topic_ids: Optional[Sequence[str]] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> List[ScoredDocument]:
        """Lexical search results tagged with a similarity score of 0."""
        return [
            ScoredDocument(**doc.model_dump(), similarity_score=0.0)
            for doc in self.search_content(board, grade, subject, query, topic_ids, limit)
        ]

    def get_embedding_stats(self) -> dict:
        return {
            "embeddings_enabled": self.embeddings_enabled,
            **self._vector_store.get_stats(),
        }
