"""
Embedding Data Models

This module defines the canonical records held by the in-memory vector store.

Each EmbeddingVector corresponds to ONE embedding and ONE piece of curriculum
content (a whole document or a single chunk of it).
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class VectorMetadata(BaseModel):
    """
    Content metadata stored alongside each vector.

    The topic and unit identifiers are what search filters match against.
    """

    document_id: str = Field(..., min_length=1)
    topic_id: str
    unit_id: str
    content: str
    title: Optional[str] = None
    chunk_index: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class EmbeddingVector(BaseModel):
    """
    A single stored embedding.

    Upserting a vector with an existing id replaces the previous entry.
    """

    id: str = Field(..., min_length=1)
    vector: List[float]
    metadata: VectorMetadata

    model_config = ConfigDict(extra="forbid", frozen=True)


class VectorFilter(BaseModel):
    """
    Membership filters for similarity search.

    Each supplied list is an independent constraint; both are ANDed.
    """

    topic_ids: Optional[List[str]] = None
    unit_ids: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")

    def accepts(self, metadata: VectorMetadata) -> bool:
        if self.topic_ids is not None and metadata.topic_id not in self.topic_ids:
            return False
        if self.unit_ids is not None and metadata.unit_id not in self.unit_ids:
            return False
        return True


class VectorSearchResult(BaseModel):
    """
    One ranked search hit. ``score`` is cosine similarity, not a probability.
    """

    id: str
    score: float
    metadata: VectorMetadata

    model_config = ConfigDict(extra="forbid")
