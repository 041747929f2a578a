"""
API Models

Pydantic models used only at the HTTP boundary. Domain records (syllabus,
content, RAG responses) are defined next to the code that owns them and are
reused directly as request/response schemas.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class HealthResponse(BaseModel):
    status: str
    embeddings_enabled: bool

    model_config = ConfigDict(extra="forbid")


class QueryTextRequest(BaseModel):
    """
    Body of the per-syllabus query mapping / validation endpoints.
    """
    query: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class EmbeddingStatsResponse(BaseModel):
    """
    Statistics for the in-memory vector store.
    """
    embeddings_enabled: bool
    total_vectors: int = Field(..., ge=0)
    dimension: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")
