"""
Content Routes

This module exposes endpoints for:
- Ingesting curriculum documents
- Listing documents by partition, topic or unit
- Lexical and semantic search
- Chunking a document for vector storage
- Vector store statistics
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Annotated

from .dependencies import get_content_service
from .models import EmbeddingStatsResponse
from ..config import settings
from ..content.models import (
    ContentChunk,
    ContentDocument,
    CreateContentRequest,
    ScoredDocument,
    SearchContentRequest,
    SemanticSearchRequest,
)
from ..content.service import ContentService

router = APIRouter(prefix="/content", tags=["content"])

ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]


# ---------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------

@router.post(
    "",
    response_model=ContentDocument,
    summary="Create a content document",
    status_code=status.HTTP_201_CREATED,
)
async def create_content(
    req: CreateContentRequest,
    service: ContentServiceDep,
) -> ContentDocument:
    """
    Store a document and embed it when embeddings are enabled.

    Embedding failures are logged and do not fail the request.
    """
    return await service.create_content(req)


@router.post(
    "/chunk",
    response_model=List[ContentChunk],
    summary="Chunk a content document for vector storage",
    status_code=status.HTTP_200_OK,
)
async def chunk_content(
    document: ContentDocument,
    service: ContentServiceDep,
    chunk_size: Annotated[int, Query(ge=1)] = settings.default_chunk_size,
) -> List[ContentChunk]:
    return await service.chunk_content(document, chunk_size)


@router.get(
    "/embeddings/stats",
    response_model=EmbeddingStatsResponse,
    summary="Get vector store statistics",
)
async def get_embedding_stats(service: ContentServiceDep) -> EmbeddingStatsResponse:
    return EmbeddingStatsResponse(**service.get_embedding_stats())


# ---------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------

@router.get(
    "/{board}/{grade}/{subject}",
    response_model=List[ContentDocument],
    summary="Get all content for a syllabus",
)
async def get_all_content(
    board: str, grade: str, subject: str, service: ContentServiceDep
) -> List[ContentDocument]:
    return service.get_all_content(board, grade, subject)


@router.get(
    "/{board}/{grade}/{subject}/topic/{topic_id}",
    response_model=List[ContentDocument],
    summary="Get content by topic ID",
)
async def get_content_by_topic(
    board: str, grade: str, subject: str, topic_id: str, service: ContentServiceDep
) -> List[ContentDocument]:
    return service.get_content_by_topic(board, grade, subject, topic_id)


@router.get(
    "/{board}/{grade}/{subject}/unit/{unit_id}",
    response_model=List[ContentDocument],
    summary="Get content by unit ID",
)
async def get_content_by_unit(
    board: str, grade: str, subject: str, unit_id: str, service: ContentServiceDep
) -> List[ContentDocument]:
    return service.get_content_by_unit(board, grade, subject, unit_id)


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------

@router.post(
    "/{board}/{grade}/{subject}/search",
    response_model=List[ContentDocument],
    summary="Text-based content search",
    status_code=status.HTTP_200_OK,
)
async def search_content(
    board: str,
    grade: str,
    subject: str,
    req: SearchContentRequest,
    service: ContentServiceDep,
) -> List[ContentDocument]:
    return service.search_content(
        board, grade, subject, req.query, topic_ids=req.topic_ids, limit=req.limit
    )


@router.post(
    "/{board}/{grade}/{subject}/semantic-search",
    response_model=List[ScoredDocument],
    summary="Semantic search using vector embeddings",
    status_code=status.HTTP_200_OK,
)
async def semantic_search(
    board: str,
    grade: str,
    subject: str,
    req: SemanticSearchRequest,
    service: ContentServiceDep,
) -> List[ScoredDocument]:
    """
    Rank content by embedding similarity. Falls back to text search, with a
    similarity score of 0, when semantic search is unavailable or fails.
    """
    return await service.semantic_search_with_fallback(
        board,
        grade,
        subject,
        req.query,
        topic_ids=req.topic_ids,
        limit=req.limit,
        min_score=req.min_score,
    )
