"""
RAG Routes

Syllabus-gated question answering. Scope rejections surface as HTTP 403
through the OutOfScopeError handler registered in ``main.create_app``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from .dependencies import get_orchestrator
from ..rag.models import (
    RAGQueryRequest,
    RAGResponse,
    ValidateQueryRequest,
    ValidateQueryResponse,
)
from ..rag.orchestrator import RAGOrchestrator

router = APIRouter(prefix="/rag", tags=["rag"])


@router.post(
    "/query",
    response_model=RAGResponse,
    response_model_exclude_none=True,
    summary="Answer a query within syllabus boundaries",
    status_code=status.HTTP_200_OK,
    responses={403: {"description": "Query is outside syllabus scope"}},
)
async def process_query(
    req: RAGQueryRequest,
    orchestrator: Annotated[RAGOrchestrator, Depends(get_orchestrator)],
) -> RAGResponse:
    """
    Validate the query against the syllabus, retrieve relevant content and
    assemble an answer restricted to it.
    """
    return await orchestrator.process_query(req)


@router.post(
    "/validate",
    response_model=ValidateQueryResponse,
    response_model_exclude_none=True,
    summary="Check whether a query is within syllabus scope",
    status_code=status.HTTP_200_OK,
)
async def validate_query(
    req: ValidateQueryRequest,
    orchestrator: Annotated[RAGOrchestrator, Depends(get_orchestrator)],
) -> ValidateQueryResponse:
    """
    Scope check without running retrieval.
    """
    return orchestrator.validate_and_filter(req.query, req.board, req.grade, req.subject)
