"""
Content Data Models

ContentDocument is the unit of ingestion and retrieval. ContentChunk is
derived from a document only to be embedded; it is never stored as a record
of its own.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentMetadata(BaseModel):
    source: Optional[str] = None
    page: Optional[int] = Field(default=None, ge=0)
    created_at: str = Field(default_factory=utc_now_iso)

    model_config = ConfigDict(extra="forbid")


class ContentDocument(BaseModel):
    """
    A piece of curriculum content attached to one syllabus topic.

    Documents are append-only within their partition.
    """

    document_id: str = Field(..., min_length=1)
    board: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    unit_id: str = Field(..., min_length=1)
    topic_id: str = Field(..., min_length=1)
    title: str
    content: str
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    model_config = ConfigDict(extra="forbid")


class ScoredDocument(ContentDocument):
    """
    A retrieved document with its similarity score (0 for lexical hits).
    """

    similarity_score: float = 0.0


class ChunkMetadata(BaseModel):
    section: str
    created_at: str
    source: Optional[str] = None
    page: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class ContentChunk(BaseModel):
    chunk_id: str
    topic_id: str
    unit_id: str
    content: str
    metadata: ChunkMetadata

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------

class ContentSourceInfo(BaseModel):
    source: Optional[str] = None
    page: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class CreateContentRequest(BaseModel):
    """
    Payload for ingesting a new document.
    """
    board: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    unit_id: str = Field(..., min_length=1)
    topic_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    metadata: Optional[ContentSourceInfo] = None

    model_config = ConfigDict(extra="forbid")


class SearchContentRequest(BaseModel):
    query: str = Field(..., min_length=1)
    topic_ids: Optional[List[str]] = None
    limit: int = Field(default=10, ge=1, le=100)

    model_config = ConfigDict(extra="forbid")


class SemanticSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    topic_ids: Optional[List[str]] = None
    limit: int = Field(default=10, ge=1, le=100)
    min_score: float = Field(default=0.5, ge=-1.0, le=1.0)

    model_config = ConfigDict(extra="forbid")
