"""
RAG Orchestrator

Runs the syllabus-gated question answering pipeline for one query.

Pipeline
--------
1. Validate  - scope decision against the partition's syllabus snapshot
2. Map       - query -> matched topic ids / learning outcomes (same snapshot)
3. Gate      - reject out-of-scope queries when configured to
4. Retrieve  - semantic search, degrading to lexical search on any failure
5. Synthesize- template/extractive answer from the retrieved sources
6. Assemble  - RAGResponse with scope details, sources and timing

The orchestrator holds no state between queries. The semantic step reports
failure as a value (StepFailure) rather than raising, so the fallback is an
explicit branch of the pipeline.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Literal, Optional, Sequence, Union

from .models import (
    RAGConfig,
    RAGQueryRequest,
    RAGResponse,
    RAGResponseMetadata,
    RAGSource,
    ScopeValidation,
    ValidateQueryResponse,
)
from ..content.models import ScoredDocument
from ..content.service import ContentService
from ..core.errors import InvalidRequestError, OutOfScopeError, describe
from ..syllabus.mapper import map_query_to_syllabus, validate_query_scope
from ..syllabus.models import QueryMapping, Syllabus
from ..syllabus.service import SyllabusService, resolve_topic_names

logger = logging.getLogger("srag.rag")

SINGLE_SOURCE_EXCERPT = 500
MULTI_SOURCE_EXCERPT = 300


# ---------------------------------------------------------------------
# Step results
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class StepFailure:
    """A pipeline step that failed in a recoverable way."""
    step: str
    error: BaseException


@dataclass(frozen=True)
class RetrievalOutcome:
    documents: List[ScoredDocument]
    strategy: Literal["semantic", "lexical"]
    failure: Optional[StepFailure] = None


# ---------------------------------------------------------------------
# Answer synthesis
# ---------------------------------------------------------------------

def synthesize_answer(
    query: str,
    sources: Sequence[ScoredDocument],
    topic_names: Sequence[str],
) -> str:
    """
    Build the extractive answer text from ranked sources.
    """
    if not sources:
        return (
            f"I couldn't find relevant content for your query about \"{query}\". "
            "This might be outside the syllabus scope or the content hasn't been uploaded yet."
        )

    names = ", ".join(topic_names) or "the topic"
    answer = f"Based on the syllabus content for {names}, "

    if len(sources) == 1:
        answer += f"here's what I found:\n\n{sources[0].content[:SINGLE_SOURCE_EXCERPT]}..."
    else:
        answer += f"I found {len(sources)} relevant sources. "
        answer += "Here's a summary based on the most relevant content:\n\n"
        answer += sources[0].content[:MULTI_SOURCE_EXCERPT] + "..."
        answer += "\n\nAdditional information from other sources is also available."

    return answer


# ---------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------

class RAGOrchestrator:
    def __init__(
        self,
        syllabus_service: SyllabusService,
        content_service: ContentService,
        config: Optional[RAGConfig] = None,
    ) -> None:
        self._syllabi = syllabus_service
        self._content = content_service
        self.config = config or RAGConfig()

    async def process_query(self, request: RAGQueryRequest) -> RAGResponse:
        """
        Answer a query within the bounds of its syllabus.

        Raises
        ------
        InvalidRequestError
            If the query is blank.
        NotFoundError
            If the partition has no syllabus.
        OutOfScopeError
            If the gate is closed and rejection is enabled.
        """
        if not request.query.strip():
            raise InvalidRequestError("Query must not be blank")

        started = time.perf_counter()
        syllabus = self._syllabi.get_syllabus(request.board, request.grade, request.subject)

        # 1 + 2: both read the same immutable snapshot
        scope = validate_query_scope(request.query, syllabus)
        mapping = map_query_to_syllabus(request.query, syllabus)

        # 3
        if self.config.reject_out_of_scope and not scope.allowed:
            logger.info("Rejected out-of-scope query: %s", request.query[:80])
            raise OutOfScopeError(reason=scope.reason, query=request.query)

        # 4
        topic_ids = self._effective_topic_ids(request, mapping)
        outcome = await self._retrieve(request, topic_ids)

        # 5
        answer = synthesize_answer(
            request.query,
            outcome.documents,
            self._matched_topic_names(syllabus, mapping),
        )

        processing_time_ms = int((time.perf_counter() - started) * 1000)

        # 6
        return RAGResponse(
            answer=answer,
            is_in_scope=scope.allowed,
            scope_validation=ScopeValidation(
                allowed=scope.allowed,
                reason=scope.reason,
                matched_topics=mapping.topic_ids,
                matched_outcomes=mapping.learning_outcomes,
            ),
            sources=[
                RAGSource(
                    document_id=doc.document_id,
                    title=doc.title,
                    topic_id=doc.topic_id,
                )
                for doc in outcome.documents
            ],
            metadata=RAGResponseMetadata(
                query=request.query,
                timestamp=datetime.now(timezone.utc).isoformat(),
                processing_time_ms=processing_time_ms,
            ),
        )

    def validate_and_filter(
        self, query: str, board: str, grade: str, subject: str
    ) -> ValidateQueryResponse:
        result = self._syllabi.validate_and_filter(query, board, grade, subject)
        return ValidateQueryResponse.model_validate(result)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _effective_topic_ids(
        request: RAGQueryRequest, mapping: QueryMapping
    ) -> Optional[List[str]]:
        """Caller-supplied topics win over mapped topics; empty means no filter."""
        if request.context and request.context.topic_ids:
            return list(request.context.topic_ids)
        if mapping.topic_ids:
            return list(mapping.topic_ids)
        return None

    @staticmethod
    def _matched_topic_names(syllabus: Syllabus, mapping: QueryMapping) -> List[str]:
        return resolve_topic_names(syllabus, mapping.topic_ids)

    async def _semantic_step(
        self,
        request: RAGQueryRequest,
        topic_ids: Optional[List[str]],
    ) -> Union[List[ScoredDocument], StepFailure]:
        try:
            return await asyncio.wait_for(
                self._content.semantic_search(
                    request.board,
                    request.grade,
                    request.subject,
                    request.query,
                    topic_ids=topic_ids,
                    limit=self.config.max_sources,
                    min_score=self.config.min_score,
                ),
                timeout=self.config.semantic_timeout_seconds,
            )
        except Exception as exc:
            return StepFailure(step="semantic_search", error=exc)

    def _lexical_step(
        self,
        request: RAGQueryRequest,
        topic_ids: Optional[List[str]],
    ) -> List[ScoredDocument]:
        return self._content.lexical_as_scored(
            request.board,
            request.grade,
            request.subject,
            request.query,
            topic_ids=topic_ids,
            limit=self.config.max_sources,
        )

    async def _retrieve(
        self,
        request: RAGQueryRequest,
        topic_ids: Optional[List[str]],
    ) -> RetrievalOutcome:
        semantic = await self._semantic_step(request, topic_ids)

        if not isinstance(semantic, StepFailure):
            logger.info(
                "Semantic search found %d results with scores: %s",
                len(semantic),
                ", ".join(f"{doc.similarity_score:.2f}" for doc in semantic),
            )
            return RetrievalOutcome(documents=semantic, strategy="semantic")

        logger.warning(
            "Semantic search failed, falling back to text search: %s",
            describe(semantic.error),
        )
        return RetrievalOutcome(
            documents=self._lexical_step(request, topic_ids),
            strategy="lexical",
            failure=semantic,
        )
