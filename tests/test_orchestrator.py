import asyncio
from unittest.mock import MagicMock

import pytest

from conftest import BOARD, GRADE, SUBJECT
from syllabus_rag.content.models import CreateContentRequest
from syllabus_rag.content.service import ContentService
from syllabus_rag.core.errors import InvalidRequestError, NotFoundError, OutOfScopeError
from syllabus_rag.embeddings.embedder import EmbeddingProviderError
from syllabus_rag.embeddings.models import EmbeddingVector, VectorMetadata
from syllabus_rag.embeddings.vector_store import DimensionMismatchError
from syllabus_rag.rag.models import RAGConfig, RAGQueryContext, RAGQueryRequest
from syllabus_rag.rag.orchestrator import RAGOrchestrator, synthesize_answer
from syllabus_rag.syllabus.mapper import NO_MATCH_REASON


PHOTOSYNTHESIS_TEXT = "Photosynthesis converts light energy into chemical energy in leaves."
RESPIRATION_TEXT = "Respiration releases energy stored in glucose. Photosynthesis stores it."


def make_config(**overrides):
    values = {
        "max_sources": 5,
        "reject_out_of_scope": True,
        "min_score": 0.5,
        "semantic_timeout_seconds": 1.0,
    }
    values.update(overrides)
    return RAGConfig(**values)


def make_request(query, **kwargs):
    return RAGQueryRequest(query=query, board=BOARD, grade=GRADE, subject=SUBJECT, **kwargs)


async def add_document(content_service, content, topic_id="T1", unit_id="U1", title="Notes"):
    return await content_service.create_content(
        CreateContentRequest(
            board=BOARD,
            grade=GRADE,
            subject=SUBJECT,
            unit_id=unit_id,
            topic_id=topic_id,
            title=title,
            content=content,
        )
    )


@pytest.fixture
def orchestrator(syllabus_service, content_service):
    return RAGOrchestrator(syllabus_service, content_service, make_config())


# ---------------------------------------------------------------------
# Scope gate
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_out_of_scope_query_never_reaches_retrieval(syllabus_service):
    content = MagicMock(spec=ContentService)
    orchestrator = RAGOrchestrator(syllabus_service, content, make_config())

    with pytest.raises(OutOfScopeError) as exc_info:
        await orchestrator.process_query(make_request("quantum entanglement"))

    assert exc_info.value.reason == NO_MATCH_REASON
    assert exc_info.value.query == "quantum entanglement"
    content.semantic_search.assert_not_called()
    content.lexical_as_scored.assert_not_called()


@pytest.mark.asyncio
async def test_rejection_disabled_answers_without_topic_filter(syllabus_service, content_service):
    await add_document(content_service, PHOTOSYNTHESIS_TEXT, topic_id="T1")
    await add_document(content_service, "Light bends at a boundary.", topic_id="T3", unit_id="U2")

    orchestrator = RAGOrchestrator(
        syllabus_service, content_service, make_config(reject_out_of_scope=False)
    )
    response = await orchestrator.process_query(make_request("quantum entanglement"))

    assert response.is_in_scope is False
    assert response.scope_validation.reason == NO_MATCH_REASON
    assert response.scope_validation.matched_topics == []
    assert {s.topic_id for s in response.sources} == {"T1", "T3"}
    assert response.answer.startswith("Based on the syllabus content for the topic, ")


@pytest.mark.asyncio
async def test_blank_query_rejected(orchestrator):
    with pytest.raises(InvalidRequestError):
        await orchestrator.process_query(make_request("   "))


@pytest.mark.asyncio
async def test_unknown_partition_raises_not_found(orchestrator):
    request = RAGQueryRequest(
        query="photosynthesis", board="ICSE", grade="9", subject="Biology"
    )
    with pytest.raises(NotFoundError):
        await orchestrator.process_query(request)


# ---------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_semantic_path_single_source(orchestrator, content_service, mock_provider):
    document = await add_document(content_service, PHOTOSYNTHESIS_TEXT, title="Leaves")

    response = await orchestrator.process_query(make_request("How does photosynthesis work?"))

    mock_provider.embed.assert_awaited_once_with("How does photosynthesis work?")
    assert response.is_in_scope is True
    assert response.scope_validation.allowed is True
    assert response.scope_validation.matched_topics == ["T1"]
    assert response.scope_validation.matched_outcomes == ["Explain the role of chlorophyll"]

    assert [s.document_id for s in response.sources] == [document.document_id]
    assert response.sources[0].title == "Leaves"
    assert response.sources[0].relevance_score is None

    assert response.answer == (
        "Based on the syllabus content for Photosynthesis, here's what I found:\n\n"
        f"{PHOTOSYNTHESIS_TEXT}..."
    )
    assert response.metadata.query == "How does photosynthesis work?"
    assert response.metadata.processing_time_ms >= 0


@pytest.mark.asyncio
async def test_multiple_sources_summary(orchestrator, content_service):
    long_text = "Chlorophyll absorbs light. " * 30
    await add_document(content_service, long_text)
    await add_document(content_service, PHOTOSYNTHESIS_TEXT)

    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert len(response.sources) == 2
    assert response.answer == (
        "Based on the syllabus content for Photosynthesis, I found 2 relevant sources. "
        "Here's a summary based on the most relevant content:\n\n"
        f"{long_text[:300]}..."
        "\n\nAdditional information from other sources is also available."
    )


@pytest.mark.asyncio
async def test_mapped_topics_filter_retrieval(orchestrator, content_service):
    await add_document(content_service, PHOTOSYNTHESIS_TEXT, topic_id="T1")
    await add_document(content_service, RESPIRATION_TEXT, topic_id="T2")

    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert [s.topic_id for s in response.sources] == ["T1"]


@pytest.mark.asyncio
async def test_caller_topics_take_precedence(orchestrator, content_service):
    await add_document(content_service, PHOTOSYNTHESIS_TEXT, topic_id="T1")
    await add_document(content_service, RESPIRATION_TEXT, topic_id="T2")

    response = await orchestrator.process_query(
        make_request("photosynthesis", context=RAGQueryContext(topic_ids=["T2"]))
    )

    assert [s.topic_id for s in response.sources] == ["T2"]
    # scope details still come from the mapping
    assert response.scope_validation.matched_topics == ["T1"]


@pytest.mark.asyncio
async def test_sources_capped_at_max_sources(syllabus_service, content_service):
    for i in range(4):
        await add_document(content_service, f"{PHOTOSYNTHESIS_TEXT} Part {i}.")

    orchestrator = RAGOrchestrator(
        syllabus_service, content_service, make_config(max_sources=2)
    )
    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert len(response.sources) == 2


@pytest.mark.asyncio
async def test_embedding_failure_falls_back_to_lexical(
    orchestrator, content_service, mock_provider
):
    await add_document(content_service, PHOTOSYNTHESIS_TEXT, topic_id="T1")
    await add_document(content_service, "Notes on leaves.", topic_id="T1")
    mock_provider.embed.side_effect = EmbeddingProviderError("down")

    response = await orchestrator.process_query(make_request("photosynthesis"))

    mock_provider.embed.assert_awaited_once()
    assert len(response.sources) == 1
    assert response.sources[0].topic_id == "T1"
    assert response.answer.endswith(f"{PHOTOSYNTHESIS_TEXT}...")


@pytest.mark.asyncio
async def test_vector_store_dimension_mismatch_falls_back_to_lexical(
    orchestrator, content_service, vector_store, mock_provider
):
    # 2-d vector in the store; the provider embeds queries in 3-d
    vector_store.upsert(
        [
            EmbeddingVector(
                id="LEGACY",
                vector=[1.0, 0.0],
                metadata=VectorMetadata(
                    document_id="LEGACY", topic_id="T1", unit_id="U1", content="old"
                ),
            )
        ]
    )
    document = await add_document(content_service, PHOTOSYNTHESIS_TEXT)

    with pytest.raises(DimensionMismatchError):
        vector_store.search([1.0, 0.0, 0.0])

    response = await orchestrator.process_query(make_request("photosynthesis"))

    mock_provider.embed.assert_awaited_once_with("photosynthesis")
    assert [s.document_id for s in response.sources] == [document.document_id]
    assert response.answer.endswith(f"{PHOTOSYNTHESIS_TEXT}...")


@pytest.mark.asyncio
async def test_missing_provider_falls_back_to_lexical(
    syllabus_service, document_store, vector_store
):
    content_service = ContentService(document_store, vector_store, provider=None)
    await add_document(content_service, PHOTOSYNTHESIS_TEXT)

    orchestrator = RAGOrchestrator(syllabus_service, content_service, make_config())
    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert len(response.sources) == 1


@pytest.mark.asyncio
async def test_slow_semantic_search_falls_back_to_lexical(
    syllabus_service, content_service, mock_provider
):
    await add_document(content_service, PHOTOSYNTHESIS_TEXT)

    async def slow_embed(text):
        await asyncio.sleep(1)
        return [1.0, 0.0, 0.0]

    mock_provider.embed.side_effect = slow_embed

    orchestrator = RAGOrchestrator(
        syllabus_service, content_service, make_config(semantic_timeout_seconds=0.01)
    )
    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert len(response.sources) == 1


@pytest.mark.asyncio
async def test_no_content_gives_not_found_answer(orchestrator):
    response = await orchestrator.process_query(make_request("photosynthesis"))

    assert response.sources == []
    assert response.answer == (
        "I couldn't find relevant content for your query about \"photosynthesis\". "
        "This might be outside the syllabus scope or the content hasn't been uploaded yet."
    )


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def test_response_serializes_public_field_names():
    from syllabus_rag.rag.models import RAGResponse

    response = RAGResponse.model_validate(
        {
            "answer": "a",
            "isInScope": True,
            "scopeValidation": {"allowed": True, "reason": "ok"},
            "metadata": {"query": "q", "timestamp": "t", "processing_time_ms": 0},
        }
    )
    dumped = response.model_dump(by_alias=True)

    assert dumped["isInScope"] is True
    assert dumped["scopeValidation"]["reason"] == "ok"


def test_synthesize_answer_lists_topic_names():
    from conftest import make_document
    from syllabus_rag.content.models import ScoredDocument

    doc = ScoredDocument(**make_document("DOC_1", "abc").model_dump())
    answer = synthesize_answer("q", [doc], ["Photosynthesis", "Respiration"])

    assert answer.startswith("Based on the syllabus content for Photosynthesis, Respiration, ")


def test_validate_and_filter(orchestrator):
    allowed = orchestrator.validate_and_filter("photosynthesis basics", BOARD, GRADE, SUBJECT)
    rejected = orchestrator.validate_and_filter("quantum entanglement", BOARD, GRADE, SUBJECT)

    assert allowed.allowed is True
    assert allowed.filtered_query == "photosynthesis basics"
    assert allowed.reason == "Query maps to 1 topic(s)"

    assert rejected.allowed is False
    assert rejected.filtered_query is None
    assert rejected.reason == NO_MATCH_REASON
