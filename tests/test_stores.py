import json

import pytest

from conftest import make_document, make_syllabus
from syllabus_rag.content.store import DocumentStore
from syllabus_rag.core.errors import InvalidRequestError, StoragePersistenceError
from syllabus_rag.partition import get_partition_file, partition_key
from syllabus_rag.syllabus.store import SyllabusStore


KEY = "CBSE_10_SCIENCE"


# ---------------------------------------------------------------------
# Partition keys
# ---------------------------------------------------------------------

def test_partition_key_is_upper_case():
    assert partition_key("cbse", "10", "Science") == KEY
    assert partition_key("State Board", "12", "Physics") == "STATE BOARD_12_PHYSICS"


@pytest.mark.parametrize(
    "board,grade,subject",
    [
        ("", "10", "Science"),
        ("CBSE", "../10", "Science"),
        ("CBSE", "10", "Sci/ence"),
        ("CBSE", "10", "Sci\\ence"),
        ("CBSE", "10", "x" * 65),
    ],
)
def test_partition_key_rejects_unsafe_components(board, grade, subject):
    with pytest.raises(InvalidRequestError):
        partition_key(board, grade, subject)


# ---------------------------------------------------------------------
# Syllabus store
# ---------------------------------------------------------------------

def test_syllabus_store_in_memory():
    store = SyllabusStore()
    assert store.persistent is False
    assert store.get(KEY) is None

    syllabus = make_syllabus()
    store.put(KEY, syllabus)

    assert store.get(KEY) is syllabus
    assert store.keys() == [KEY]

    store.clear()
    assert store.get(KEY) is None


def test_syllabus_store_persists_across_instances(tmp_path):
    SyllabusStore(str(tmp_path)).put(KEY, make_syllabus())

    assert get_partition_file(str(tmp_path), "syllabus", KEY).exists()

    reloaded = SyllabusStore(str(tmp_path)).get(KEY)
    assert reloaded == make_syllabus()


def test_syllabus_put_overwrites(tmp_path):
    store = SyllabusStore(str(tmp_path))
    store.put(KEY, make_syllabus())

    updated = make_syllabus().model_copy(update={"version": "2025.1"})
    store.put(KEY, updated)

    assert SyllabusStore(str(tmp_path)).get(KEY).version == "2025.1"


def test_corrupt_syllabus_file_raises(tmp_path):
    SyllabusStore(str(tmp_path))
    get_partition_file(str(tmp_path), "syllabus", KEY).write_text("{not json", encoding="utf-8")

    with pytest.raises(StoragePersistenceError):
        SyllabusStore(str(tmp_path)).get(KEY)


# ---------------------------------------------------------------------
# Document store
# ---------------------------------------------------------------------

def test_document_store_appends_in_order():
    store = DocumentStore()
    store.append(KEY, make_document("DOC_1", "first"))
    store.append(KEY, make_document("DOC_2", "second"))

    assert [d.document_id for d in store.get_all(KEY)] == ["DOC_1", "DOC_2"]
    assert store.get_all("OTHER_1_KEY") == []


def test_document_store_returns_copies():
    store = DocumentStore()
    store.append(KEY, make_document("DOC_1", "first"))

    store.get_all(KEY).clear()

    assert len(store.get_all(KEY)) == 1


def test_document_store_persists_across_instances(tmp_path):
    store = DocumentStore(str(tmp_path))
    store.append(KEY, make_document("DOC_1", "first", topic_id="T2"))
    store.append(KEY, make_document("DOC_2", "second"))

    path = get_partition_file(str(tmp_path), "content", KEY)
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert [d["document_id"] for d in raw] == ["DOC_1", "DOC_2"]

    reloaded = DocumentStore(str(tmp_path)).get_all(KEY)
    assert [d.document_id for d in reloaded] == ["DOC_1", "DOC_2"]
    assert reloaded[0].topic_id == "T2"


def test_invalid_document_file_raises(tmp_path):
    DocumentStore(str(tmp_path))
    get_partition_file(str(tmp_path), "content", KEY).write_text(
        json.dumps([{"document_id": "DOC_1"}]), encoding="utf-8"
    )

    with pytest.raises(StoragePersistenceError):
        DocumentStore(str(tmp_path)).get_all(KEY)
