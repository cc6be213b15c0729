"""
Example: Document ingestion and RAG retrieval

Demonstrates:
1. Persistent SQLite stores via SQLAlchemy
2. Observing ingestion progress through ProcessingStatusTracker
3. Retrieving the chunks most relevant to a chat message

Install required dependencies:
    pip install knowledge-recall[embeddings-transformers]
"""

import asyncio
import logging

from sqlalchemy import create_engine

from knowledge_recall import KnowledgeBaseService, RecallSettings
from knowledge_recall.ingestion import Idle, ProcessingStatusTracker
from knowledge_recall.storage import SQLAlchemyDocumentStore

DOCUMENT = """
Project Falcon kicks off in March. The team is five engineers and one designer.
The first milestone is a working prototype of the ingestion service by the end
of April. Budget reviews happen every second Friday. The staging environment
runs in the Frankfurt region and production will run in Dublin.
""" * 4


async def watch(tracker: ProcessingStatusTracker):
    """Print every status change."""
    while True:
        status = await tracker.next_update()
        if isinstance(status, Idle):
            print("  status: idle")
        elif status.kind in ("processing", "deleting"):
            print(f"  status: {status.kind} {status.progress}% {getattr(status, 'step', '')}")
        else:
            print(f"  status: {status}")


async def main():
    try:
        from knowledge_recall.embeddings import SentenceTransformerEmbedding
    except ImportError:
        print("⚠️  Install with: pip install knowledge-recall[embeddings-transformers]")
        return

    logging.basicConfig(level=logging.INFO)

    engine = create_engine("sqlite:///knowledge.db")
    store = SQLAlchemyDocumentStore(engine)
    store.create_tables()

    tracker = ProcessingStatusTracker()
    watcher = asyncio.create_task(watch(tracker))

    service = KnowledgeBaseService(
        store,
        SentenceTransformerEmbedding(),
        settings=RecallSettings(chunk_size=256, chunk_overlap=32),
        status=tracker,
    )

    document = await service.create_document("falcon.txt", DOCUMENT)
    print(f"Ingested {document.name}: {document.chunk_count} chunks")

    query = "Where does production run?"
    print(f"\nSearch: '{query}'")
    for chunk, score in await service.search_similar_chunks(query, top_k=3):
        print(f"  [{score:.3f}] #{chunk.chunk_index}: {chunk.content[:70]}...")

    await service.delete_document(document.id)
    await asyncio.sleep(1)
    watcher.cancel()


if __name__ == "__main__":
    asyncio.run(main())
