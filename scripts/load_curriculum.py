"""
Load a syllabus and its content documents into the persisted stores.

Usage:
    DATA_ROOT_PATH=./data python scripts/load_curriculum.py syllabus.json content.json

``content.json`` holds a list of objects shaped like the POST /content body
(board / grade / subject may be omitted; they default to the syllabus').

Vectors live only as long as the server process, so this script stores
documents without embedding them; documents ingested through POST /content
on a running server are embedded there.

Warning: with OPENAI_API_KEY set, a server started on this data has an empty
vector store. Semantic search then succeeds with zero hits, which does not
trigger the text-search fallback, so /rag/query finds nothing for documents
loaded here. Either run the server without an API key (text search only) or
ingest the documents through POST /content on the running server instead,
e.g. by replaying content.json against it.
"""

import argparse
import asyncio
import json
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from syllabus_rag.config import settings  # noqa: E402
from syllabus_rag.content.models import CreateContentRequest  # noqa: E402
from syllabus_rag.content.service import ContentService  # noqa: E402
from syllabus_rag.content.store import DocumentStore  # noqa: E402
from syllabus_rag.embeddings.vector_store import InMemoryVectorStore  # noqa: E402
from syllabus_rag.syllabus.models import Syllabus  # noqa: E402
from syllabus_rag.syllabus.service import SyllabusService  # noqa: E402
from syllabus_rag.syllabus.store import SyllabusStore  # noqa: E402


async def main(syllabus_path: str, content_path: str) -> None:
    if not settings.data_root_path:
        print("DATA_ROOT_PATH is not set; nothing would be persisted.")
        sys.exit(1)

    with open(syllabus_path, encoding="utf-8") as f:
        syllabus = Syllabus.model_validate(json.load(f))

    syllabus_service = SyllabusService(SyllabusStore(settings.data_root_path))
    syllabus_service.create_syllabus(syllabus)
    print(f"Syllabus stored: {syllabus.board} {syllabus.grade} {syllabus.subject}")

    content_service = ContentService(
        DocumentStore(settings.data_root_path),
        InMemoryVectorStore(),
        provider=None,
    )

    with open(content_path, encoding="utf-8") as f:
        raw_documents = json.load(f)

    for i, raw in enumerate(raw_documents):
        raw.setdefault("board", syllabus.board)
        raw.setdefault("grade", syllabus.grade)
        raw.setdefault("subject", syllabus.subject)

        document = await content_service.create_content(
            CreateContentRequest.model_validate(raw)
        )
        print(f"({i + 1}/{len(raw_documents)}) {document.document_id}: {document.title}")

    print("Done!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load a syllabus and its content documents.")
    parser.add_argument("syllabus")
    parser.add_argument("content")
    args = parser.parse_args()

    asyncio.run(main(args.syllabus, args.content))
