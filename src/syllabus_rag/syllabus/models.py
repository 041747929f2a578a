"""
Syllabus Data Models

A syllabus is frozen retrieval policy: it is loaded once per partition,
replaced only by a full overwrite, and never patched in place.
"""

from __future__ import annotations

from typing import List, Tuple
from pydantic import BaseModel, Field, ConfigDict, model_validator


class Topic(BaseModel):
    topic_id: str = Field(..., min_length=1)
    topic_name: str = Field(..., min_length=1)
    learning_outcomes: Tuple[str, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)


class Unit(BaseModel):
    unit_id: str = Field(..., min_length=1)
    unit_name: str = Field(..., min_length=1)
    topics: Tuple[Topic, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)


class Syllabus(BaseModel):
    """
    Curriculum tree for one board / grade / subject.

    ``topic_id`` values are unique across the whole syllabus.
    """

    board: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    language: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    units: Tuple[Unit, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _unique_topic_ids(self) -> "Syllabus":
        seen = set()
        for topic in self.all_topics():
            if topic.topic_id in seen:
                raise ValueError(f"Duplicate topic_id '{topic.topic_id}' in syllabus")
            seen.add(topic.topic_id)
        return self

    def all_topics(self) -> List[Topic]:
        """All topics, units flattened, in syllabus order."""
        return [topic for unit in self.units for topic in unit.topics]


class QueryMapping(BaseModel):
    """
    Result of mapping a query onto syllabus topics. Recomputed per call.
    """

    query: str
    topic_ids: List[str] = Field(default_factory=list)
    learning_outcomes: List[str] = Field(default_factory=list)
    is_in_scope: bool = Field(..., alias="isInScope")
    reason: str

    model_config = ConfigDict(populate_by_name=True)


class ScopeDecision(BaseModel):
    """Outcome of the scope gate."""
    allowed: bool
    reason: str
