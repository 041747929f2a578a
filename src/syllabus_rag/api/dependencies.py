"""
Dependency providers.

Stores and the embedding provider are process-scoped singletons; services are
cheap views over them and are built per request. Tests replace the singletons
through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from ..config import settings
from ..content.service import ContentService
from ..content.store import DocumentStore
from ..embeddings.embedder import EmbeddingProvider, OpenAIEmbeddingProvider
from ..embeddings.vector_store import InMemoryVectorStore
from ..rag.orchestrator import RAGOrchestrator
from ..syllabus.service import SyllabusService
from ..syllabus.store import SyllabusStore


@lru_cache
def get_vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@lru_cache
def get_embedding_provider() -> Optional[EmbeddingProvider]:
    if not settings.embeddings_enabled:
        return None
    return OpenAIEmbeddingProvider()


@lru_cache
def get_document_store() -> DocumentStore:
    return DocumentStore(settings.data_root_path)


@lru_cache
def get_syllabus_store() -> SyllabusStore:
    return SyllabusStore(settings.data_root_path)


def get_syllabus_service(
    store: Annotated[SyllabusStore, Depends(get_syllabus_store)],
) -> SyllabusService:
    return SyllabusService(store)


def get_content_service(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    vector_store: Annotated[InMemoryVectorStore, Depends(get_vector_store)],
    provider: Annotated[Optional[EmbeddingProvider], Depends(get_embedding_provider)],
) -> ContentService:
    return ContentService(store, vector_store, provider)


def get_orchestrator(
    syllabus_service: Annotated[SyllabusService, Depends(get_syllabus_service)],
    content_service: Annotated[ContentService, Depends(get_content_service)],
) -> RAGOrchestrator:
    return RAGOrchestrator(syllabus_service, content_service)
