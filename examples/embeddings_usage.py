"""
Example: Using Text Embeddings with knowledge-recall

Demonstrates:
1. SentenceTransformerEmbedding (local, on-device)
2. OpenAIEmbedding (API) embeddings
3. Sharing one serialized provider between services
4. Re-embedding stored memories after switching models

Install required dependencies:
    pip install knowledge-recall[embeddings-transformers]  # For sentence-transformers
    pip install knowledge-recall[embeddings-openai]        # For OpenAI
    pip install knowledge-recall[embeddings-all]           # For both
"""

import asyncio
import os
from datetime import datetime, timedelta


async def example_local_embedding():
    """Example: Local embedding with sentence-transformers."""
    try:
        from knowledge_recall.embeddings import SentenceTransformerEmbedding
    except ImportError:
        print("⚠️  Skipping local example - install with: pip install knowledge-recall[embeddings-transformers]")
        return

    print("\n=== Local Embedding ===")

    embedder = SentenceTransformerEmbedding(device="cpu")

    print(f"Model: {embedder.model_name}")
    print(f"Dimension: {embedder.dimension}")

    vector = await embedder.generate_embedding("I live in London and work as a software engineer.")
    print(f"Vector length: {len(vector)}")

    vectors = await embedder.generate_embeddings(
        ["I like pizza", "I enjoy hiking", "Python is my favorite language"]
    )
    print(f"Batch embedded {len(vectors)} texts")


async def example_openai():
    """Example: Cloud embedding with OpenAI."""
    if not os.getenv("OPENAI_API_KEY"):
        print("\n⚠️  Skipping OpenAI example - set OPENAI_API_KEY environment variable")
        return

    try:
        from knowledge_recall.embeddings import OpenAIEmbedding
    except ImportError:
        print("⚠️  Skipping OpenAI example - install with: pip install knowledge-recall[embeddings-openai]")
        return

    print("\n=== OpenAI Embedding ===")

    # Configure dimensions to match the local model
    embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=384)

    print(f"Model: {embedder.model_name}")
    print(f"Dimension: {embedder.dimension}")

    vector = await embedder.generate_embedding("I live in London and work as a software engineer.")
    print(f"Vector length: {len(vector)}")


async def example_memory_recall():
    """Example: Memory recall and re-embedding with one shared provider."""
    try:
        from knowledge_recall.embeddings import SentenceTransformerEmbedding
    except ImportError:
        print("⚠️  Skipping memory example - SentenceTransformerEmbedding not available")
        return

    from knowledge_recall import MemoryService
    from knowledge_recall.embeddings import SerializedEmbeddingProvider
    from knowledge_recall.models import MemoryEntry
    from knowledge_recall.storage import InMemoryMemoryStore

    print("\n=== Memory Recall ===")

    embedding = SerializedEmbeddingProvider(SentenceTransformerEmbedding())
    store = InMemoryMemoryStore()
    service = MemoryService(store, embedding)

    # Facts from earlier conversations, stored without embeddings
    facts = ["I live in London", "I work as a software engineer", "I like pizza and pasta"]
    for i, fact in enumerate(facts):
        store.add_memory(
            MemoryEntry(
                conversation_id="conv_1",
                message_id=f"msg_{i}",
                fact=fact,
                created_at=datetime.now() - timedelta(days=7),
            )
        )

    query = "Where do I live?"
    results = await service.find_similar_memories(query, limit=2)

    print(f"Search: '{query}'")
    for memory in results:
        print(f"  {memory.fact}")
    print(f"Backfilled embeddings: {service.last_search_stats.backfilled}")

    # After switching models every stored vector must be regenerated
    result = await service.recalculate_all_embeddings(
        on_progress=lambda current, total, fraction: print(f"  re-embedded {current}/{total}")
    )
    print(f"Re-embedded {result.processed}/{result.total} memories")


async def main():
    """Run all examples."""
    print("🚀 knowledge-recall Embedding Examples\n")
    print("=" * 60)

    await example_local_embedding()
    await example_openai()
    await example_memory_recall()

    print("\n" + "=" * 60)
    print("✅ All examples completed!")


if __name__ == "__main__":
    asyncio.run(main())
