"""
Syllabus Service

Store-backed access to syllabi and the scope utilities built on the mapper.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .mapper import IN_SCOPE_REASON, map_query_to_syllabus, validate_query_scope
from .models import QueryMapping, ScopeDecision, Syllabus, Topic
from .store import SyllabusStore
from ..core.errors import NotFoundError
from ..partition import partition_key

logger = logging.getLogger("srag.syllabus")


class SyllabusService:
    def __init__(self, store: SyllabusStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_syllabus(self, syllabus: Syllabus) -> Syllabus:
        """
        Create or fully overwrite the syllabus of a partition.
        """
        key = partition_key(syllabus.board, syllabus.grade, syllabus.subject)
        self._store.put(key, syllabus)
        logger.info("Syllabus created: %s", key)
        return syllabus

    def get_syllabus(self, board: str, grade: str, subject: str) -> Syllabus:
        """
        Return the current syllabus snapshot.

        Raises
        ------
        NotFoundError
            If no syllabus exists for the partition.
        """
        key = partition_key(board, grade, subject)
        syllabus = self._store.get(key)
        if syllabus is None:
            raise NotFoundError(f"Syllabus not found for {board} {grade} {subject}")
        return syllabus

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_all_topics(self, board: str, grade: str, subject: str) -> List[Topic]:
        return self.get_syllabus(board, grade, subject).all_topics()

    def get_topic_by_id(
        self, board: str, grade: str, subject: str, topic_id: str
    ) -> Topic:
        topic = find_topic(self.get_syllabus(board, grade, subject), topic_id)
        if topic is None:
            raise NotFoundError(f"Topic {topic_id} not found")
        return topic

    def get_all_learning_outcomes(
        self, board: str, grade: str, subject: str
    ) -> List[str]:
        return [
            outcome
            for topic in self.get_all_topics(board, grade, subject)
            for outcome in topic.learning_outcomes
        ]

    # ------------------------------------------------------------------
    # Scope utilities
    # ------------------------------------------------------------------

    def map_query(
        self, query: str, board: str, grade: str, subject: str
    ) -> QueryMapping:
        return map_query_to_syllabus(query, self.get_syllabus(board, grade, subject))

    def validate_query_scope(
        self, query: str, board: str, grade: str, subject: str
    ) -> ScopeDecision:
        return validate_query_scope(query, self.get_syllabus(board, grade, subject))

    def validate_and_filter(
        self, query: str, board: str, grade: str, subject: str
    ) -> Dict[str, object]:
        """
        Scope check returning the (currently unmodified) query when allowed.
        """
        mapping = self.map_query(query, board, grade, subject)

        if not mapping.is_in_scope:
            return {"allowed": False, "reason": mapping.reason}

        return {
            "allowed": True,
            "filteredQuery": query,
            "reason": IN_SCOPE_REASON.format(count=len(mapping.topic_ids)),
        }


def resolve_topic_names(syllabus: Syllabus, topic_ids: Sequence[str]) -> List[str]:
    """
    Topic names for the given ids, in the given order. Unknown ids are
    returned unchanged.
    """
    names: Dict[str, str] = {t.topic_id: t.topic_name for t in syllabus.all_topics()}
    return [names.get(topic_id, topic_id) for topic_id in topic_ids]


def find_topic(syllabus: Syllabus, topic_id: str) -> Optional[Topic]:
    for topic in syllabus.all_topics():
        if topic.topic_id == topic_id:
            return topic
    return None
