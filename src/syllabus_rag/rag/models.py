"""
RAG API Models

Request and response contracts of the syllabus-gated RAG pipeline. Field
aliases keep the camelCase names of the public JSON contract.
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from ..config import settings


class RAGQueryContext(BaseModel):
    topic_ids: Optional[List[str]] = None
    learning_outcomes: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")


class RAGQueryRequest(BaseModel):
    """
    A question scoped to one board / grade / subject.
    """
    query: str = Field(..., min_length=1)
    board: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    context: Optional[RAGQueryContext] = None

    model_config = ConfigDict(extra="forbid")


class ValidateQueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    board: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class ValidateQueryResponse(BaseModel):
    allowed: bool
    filtered_query: Optional[str] = Field(default=None, alias="filteredQuery")
    reason: str

    model_config = ConfigDict(populate_by_name=True)


class ScopeValidation(BaseModel):
    allowed: bool
    reason: str
    matched_topics: Optional[List[str]] = None
    matched_outcomes: Optional[List[str]] = None


class RAGSource(BaseModel):
    document_id: str
    title: str
    topic_id: str
    relevance_score: Optional[float] = None


class RAGResponseMetadata(BaseModel):
    query: str
    timestamp: str
    processing_time_ms: int = Field(..., ge=0)


class RAGResponse(BaseModel):
    answer: str
    is_in_scope: bool = Field(..., alias="isInScope")
    scope_validation: ScopeValidation = Field(..., alias="scopeValidation")
    sources: List[RAGSource] = Field(default_factory=list)
    metadata: RAGResponseMetadata

    model_config = ConfigDict(populate_by_name=True)


class RAGConfig(BaseModel):
    """
    Pipeline tuning. Defaults come from application settings.
    """
    max_sources: int = Field(default_factory=lambda: settings.rag_max_sources, ge=1)
    reject_out_of_scope: bool = Field(
        default_factory=lambda: settings.rag_reject_out_of_scope
    )
    min_score: float = Field(default_factory=lambda: settings.rag_min_score)
    semantic_timeout_seconds: float = Field(
        default_factory=lambda: settings.embedding_timeout_seconds, gt=0
    )
