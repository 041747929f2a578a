"""
Syllabus Scope Mapper

Lexical classifier mapping a free-text query onto syllabus topics and
learning outcomes. Both functions here are pure: the same (query, syllabus)
pair always produces the same result, and downstream retrieval filtering
depends on the exact topic ids produced.

Matching rules, per topic in syllabus order
-------------------------------------------
1. Title rule: any word of the lowercased topic name (split on single
   spaces) occurring as a substring of the lowercased query matches the
   topic and contributes all of its learning outcomes.
2. Outcome rule, only when the title rule did not match: any word longer
   than three characters of a lowercased learning outcome occurring in the
   query matches that outcome and its topic.
"""

from __future__ import annotations

from typing import List

from .models import QueryMapping, ScopeDecision, Syllabus, Topic

IN_SCOPE_REASON = "Query maps to {count} topic(s)"
NO_MATCH_REASON = "Query does not match any syllabus topics or learning outcomes"

MIN_OUTCOME_KEYWORD_LENGTH = 4


def _title_matches(topic: Topic, query_lower: str) -> bool:
    return any(word in query_lower for word in topic.topic_name.lower().split(" "))


def _outcome_keywords(outcome: str) -> List[str]:
    return [
        word
        for word in outcome.lower().split(" ")
        if len(word) >= MIN_OUTCOME_KEYWORD_LENGTH
    ]


def map_query_to_syllabus(query: str, syllabus: Syllabus) -> QueryMapping:
    """
    Map a query to the syllabus topics and learning outcomes it mentions.
    """
    query_lower = query.lower()
    matched_topics: List[Topic] = []
    matched_outcomes: List[str] = []

    for topic in syllabus.all_topics():
        if _title_matches(topic, query_lower):
            matched_topics.append(topic)
            matched_outcomes.extend(topic.learning_outcomes)
            continue

        for outcome in topic.learning_outcomes:
            if any(keyword in query_lower for keyword in _outcome_keywords(outcome)):
                if topic not in matched_topics:
                    matched_topics.append(topic)
                if outcome not in matched_outcomes:
                    matched_outcomes.append(outcome)

    is_in_scope = len(matched_topics) > 0

    return QueryMapping(
        query=query,
        topic_ids=[t.topic_id for t in matched_topics],
        learning_outcomes=matched_outcomes,
        is_in_scope=is_in_scope,
        reason=(
            IN_SCOPE_REASON.format(count=len(matched_topics))
            if is_in_scope
            else NO_MATCH_REASON
        ),
    )


def validate_query_scope(query: str, syllabus: Syllabus) -> ScopeDecision:
    """Scope gate decision: a projection of the query mapping."""
    mapping = map_query_to_syllabus(query, syllabus)
    return ScopeDecision(allowed=mapping.is_in_scope, reason=mapping.reason)
