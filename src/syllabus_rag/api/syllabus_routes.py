"""
Syllabus Routes

Syllabus CRUD and the scope utilities (query mapping and validation) that
the RAG pipeline is built on.
"""

from fastapi import APIRouter, Depends, status
from typing import List, Annotated

from .dependencies import get_syllabus_service
from .models import QueryTextRequest
from ..syllabus.models import QueryMapping, ScopeDecision, Syllabus, Topic
from ..syllabus.service import SyllabusService

router = APIRouter(prefix="/syllabus", tags=["syllabus"])

SyllabusServiceDep = Annotated[SyllabusService, Depends(get_syllabus_service)]


@router.post(
    "",
    response_model=Syllabus,
    summary="Create or replace a syllabus",
    status_code=status.HTTP_201_CREATED,
)
async def create_syllabus(req: Syllabus, service: SyllabusServiceDep) -> Syllabus:
    return service.create_syllabus(req)


@router.get(
    "/{board}/{grade}/{subject}",
    response_model=Syllabus,
    summary="Get a syllabus by board, grade and subject",
)
async def get_syllabus(
    board: str, grade: str, subject: str, service: SyllabusServiceDep
) -> Syllabus:
    return service.get_syllabus(board, grade, subject)


@router.get(
    "/{board}/{grade}/{subject}/topics",
    response_model=List[Topic],
    summary="Get all topics of a syllabus",
)
async def get_all_topics(
    board: str, grade: str, subject: str, service: SyllabusServiceDep
) -> List[Topic]:
    return service.get_all_topics(board, grade, subject)


@router.get(
    "/{board}/{grade}/{subject}/topics/{topic_id}",
    response_model=Topic,
    summary="Get a topic by ID",
)
async def get_topic(
    board: str, grade: str, subject: str, topic_id: str, service: SyllabusServiceDep
) -> Topic:
    return service.get_topic_by_id(board, grade, subject, topic_id)


@router.get(
    "/{board}/{grade}/{subject}/learning-outcomes",
    response_model=List[str],
    summary="Get all learning outcomes of a syllabus",
)
async def get_all_learning_outcomes(
    board: str, grade: str, subject: str, service: SyllabusServiceDep
) -> List[str]:
    return service.get_all_learning_outcomes(board, grade, subject)


@router.post(
    "/{board}/{grade}/{subject}/query/map",
    response_model=QueryMapping,
    summary="Map a query to syllabus topics and learning outcomes",
    status_code=status.HTTP_200_OK,
)
async def map_query(
    board: str,
    grade: str,
    subject: str,
    req: QueryTextRequest,
    service: SyllabusServiceDep,
) -> QueryMapping:
    return service.map_query(req.query, board, grade, subject)


@router.post(
    "/{board}/{grade}/{subject}/query/validate",
    response_model=ScopeDecision,
    summary="Check whether a query is within syllabus scope",
    status_code=status.HTTP_200_OK,
)
async def validate_query(
    board: str,
    grade: str,
    subject: str,
    req: QueryTextRequest,
    service: SyllabusServiceDep,
) -> ScopeDecision:
    return service.validate_query_scope(req.query, board, grade, subject)
