import pytest
from unittest.mock import AsyncMock

from syllabus_rag.content.models import ContentDocument
from syllabus_rag.content.service import ContentService
from syllabus_rag.content.store import DocumentStore
from syllabus_rag.embeddings.embedder import EmbeddingProvider
from syllabus_rag.embeddings.vector_store import InMemoryVectorStore
from syllabus_rag.syllabus.models import Syllabus
from syllabus_rag.syllabus.service import SyllabusService
from syllabus_rag.syllabus.store import SyllabusStore


BOARD, GRADE, SUBJECT = "CBSE", "10", "Science"


def make_syllabus() -> Syllabus:
    return Syllabus.model_validate(
        {
            "board": BOARD,
            "grade": GRADE,
            "subject": SUBJECT,
            "language": "en",
            "version": "2024.1",
            "units": [
                {
                    "unit_id": "U1",
                    "unit_name": "Life Processes",
                    "topics": [
                        {
                            "topic_id": "T1",
                            "topic_name": "Photosynthesis",
                            "learning_outcomes": ["Explain the role of chlorophyll"],
                        },
                        {
                            "topic_id": "T2",
                            "topic_name": "Respiration",
                            "learning_outcomes": [
                                "Compare aerobic and anaerobic pathways",
                                "Describe cellular energy release",
                            ],
                        },
                    ],
                },
                {
                    "unit_id": "U2",
                    "unit_name": "Natural Phenomena",
                    "topics": [
                        {
                            "topic_id": "T3",
                            "topic_name": "Refraction",
                            "learning_outcomes": ["State Snell's law of lenses"],
                        },
                    ],
                },
            ],
        }
    )


def make_document(
    document_id: str,
    content: str,
    topic_id: str = "T1",
    unit_id: str = "U1",
    title: str = "Notes",
) -> ContentDocument:
    return ContentDocument(
        document_id=document_id,
        board=BOARD,
        grade=GRADE,
        subject=SUBJECT,
        unit_id=unit_id,
        topic_id=topic_id,
        title=title,
        content=content,
    )


@pytest.fixture
def syllabus() -> Syllabus:
    return make_syllabus()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def document_store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def syllabus_store() -> SyllabusStore:
    return SyllabusStore()


@pytest.fixture
def mock_provider():
    provider = AsyncMock(spec=EmbeddingProvider)
    provider.embed.return_value = [1.0, 0.0, 0.0]
    provider.embed_batch.side_effect = lambda texts: [[1.0, 0.0, 0.0] for _ in texts]
    return provider


@pytest.fixture
def syllabus_service(syllabus_store, syllabus) -> SyllabusService:
    service = SyllabusService(syllabus_store)
    service.create_syllabus(syllabus)
    return service


@pytest.fixture
def content_service(document_store, vector_store, mock_provider) -> ContentService:
    return ContentService(document_store, vector_store, mock_provider)
