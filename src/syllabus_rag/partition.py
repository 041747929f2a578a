"""
Partition Keys

Syllabus, content and their caches are isolated per curriculum partition,
identified by board, grade and subject.

Architecture
------------
- The partition key is ``BOARD_GRADE_SUBJECT`` in upper case
- Each partition maps to one JSON file per store under DATA_ROOT/<store>/
- Key components are validated to prevent path traversal
"""

from __future__ import annotations

import re
from pathlib import Path

from .core.errors import InvalidRequestError


# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------

COMPONENT_PATTERN = re.compile(r"^[A-Za-z0-9 _.\-]{1,64}$")


# ---------------------------------------------------------------------
# Key Construction
# ---------------------------------------------------------------------

def _validate_component(name: str, value: str) -> str:
    if not value or not isinstance(value, str):
        raise InvalidRequestError(f"{name} is required")

    if not COMPONENT_PATTERN.match(value):
        raise InvalidRequestError(
            f"Invalid {name} '{value}': must be 1-64 letters, digits, spaces, dots, hyphens or underscores"
        )

    if ".." in value or "/" in value or "\\" in value:
        raise InvalidRequestError(f"Invalid {name} '{value}': path traversal detected")

    return value


def partition_key(board: str, grade: str, subject: str) -> str:
    """
    Build the storage partition key for a curriculum.

    Raises
    ------
    InvalidRequestError
        If any component is empty or contains unsafe characters.
    """
    board = _validate_component("board", board)
    grade = _validate_component("grade", grade)
    subject = _validate_component("subject", subject)
    return f"{board}_{grade}_{subject}".upper()


# ---------------------------------------------------------------------
# Path Utilities
# ---------------------------------------------------------------------

def get_partition_file(root: str, store_name: str, key: str) -> Path:
    """
    Get the JSON file backing one partition of a store.
    """
    return Path(root) / store_name / f"{key}.json"


def ensure_store_directory(root: str, store_name: str) -> Path:
    """
    Ensure the store's data directory exists and return it.
    """
    path = Path(root) / store_name
    path.mkdir(parents=True, exist_ok=True)
    return path
