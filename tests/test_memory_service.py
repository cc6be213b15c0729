"""
Unit tests for MemoryService.

Tests the age-filtered similarity search, lazy embedding backfill and bulk
re-embedding against an in-memory store and a deterministic embedder.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from knowledge_recall.config import RecallSettings
from knowledge_recall.memory_service import MemoryService
from knowledge_recall.models import MemoryEntry

NOW = datetime(2026, 1, 10, 12, 0)

LONDON = [0.9, 0.1, 0.0]
PIZZA = [0.0, 1.0, 0.0]
WHERE_DO_I_LIVE = [1.0, 0.0, 0.0]


def _memory(fact, days_old, embedding=None, **kwargs):
    return MemoryEntry(
        conversation_id="conv1",
        message_id=f"msg_{fact}",
        fact=fact,
        created_at=NOW - timedelta(days=days_old),
        embedding=embedding,
        **kwargs,
    )


@pytest.fixture
def embedding(make_embedding):
    return make_embedding(
        vectors={
            "Where do I live?": WHERE_DO_I_LIVE,
            "I live in London": LONDON,
            "I like pizza": PIZZA,
        },
        fail_on=("FAIL",),
    )


@pytest.fixture
def memory_service(memory_store, embedding):
    """Create memory service with a fixed clock."""
    return MemoryService(memory_store=memory_store, embedding=embedding, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_most_relevant_first(memory_service, memory_store):
    memory_store.add_memory(_memory("I like pizza", 5, PIZZA))
    memory_store.add_memory(_memory("I live in London", 5, LONDON))

    results = await memory_service.find_similar_memories("Where do I live?")

    assert [memory.fact for memory in results] == ["I live in London", "I like pizza"]


@pytest.mark.asyncio
async def test_recent_memories_excluded(memory_service, memory_store):
    """Memories younger than min_age_days are removed before scoring."""
    for days in range(10):
        memory_store.add_memory(_memory(f"fact {days}", days, [1.0, 1.0, 1.0]))

    results = await memory_service.find_similar_memories("anything", limit=5, min_age_days=2)

    assert len(results) == 5
    assert all(NOW - memory.created_at >= timedelta(days=2) for memory in results)


@pytest.mark.asyncio
async def test_recent_exact_match_still_excluded(memory_service, memory_store):
    memory_store.add_memory(_memory("I live in London", 1, LONDON))
    memory_store.add_memory(_memory("I like pizza", 3, PIZZA))

    results = await memory_service.find_similar_memories("I live in London", min_age_days=2)

    assert [memory.fact for memory in results] == ["I like pizza"]


@pytest.mark.asyncio
async def test_age_boundary_inclusive(memory_service, memory_store):
    memory_store.add_memory(_memory("exactly two days", 2, [1.0, 1.0, 1.0]))

    results = await memory_service.find_similar_memories("query", min_age_days=2)

    assert [memory.fact for memory in results] == ["exactly two days"]


@pytest.mark.asyncio
async def test_zero_age_includes_everything(memory_service, memory_store):
    memory_store.add_memory(_memory("just now", 0, [1.0, 1.0, 1.0]))

    results = await memory_service.find_similar_memories("query", min_age_days=0)

    assert len(results) == 1


@pytest.mark.asyncio
async def test_archived_memories_excluded(memory_service, memory_store):
    memory_store.add_memory(_memory("I live in London", 5, LONDON, is_archived=True))

    assert await memory_service.find_similar_memories("Where do I live?") == []


@pytest.mark.asyncio
async def test_missing_embeddings_backfilled(memory_service, memory_store):
    first = _memory("I live in London", 5)
    second = _memory("I like pizza", 5, [0.5])  # stale vector from another model
    memory_store.add_memory(first)
    memory_store.add_memory(second)

    results = await memory_service.find_similar_memories("Where do I live?")

    assert [memory.fact for memory in results] == ["I live in London", "I like pizza"]
    assert memory_service.last_search_stats.backfilled == 2
    assert memory_store.get_memory(first.id).embedding == LONDON
    assert memory_store.get_memory(second.id).embedding == PIZZA


@pytest.mark.asyncio
async def test_failed_backfill_skips_memory(memory_service, memory_store):
    broken = _memory("FAIL to embed", 5)
    memory_store.add_memory(broken)
    memory_store.add_memory(_memory("I live in London", 5, LONDON))

    results = await memory_service.find_similar_memories("Where do I live?")

    assert [memory.fact for memory in results] == ["I live in London"]
    assert memory_service.last_search_stats.backfill_failures == 1
    assert memory_store.get_memory(broken.id).embedding is None


@pytest.mark.asyncio
async def test_backfill_save_failure_still_scores_memory(memory_service, memory_store):
    """A failed write of a backfilled vector does not drop the memory or the query."""
    unembedded = _memory("I live in London", 5)
    memory_store.add_memory(unembedded)
    memory_store.add_memory(_memory("I like pizza", 5, PIZZA))
    memory_store.update_embedding = Mock(side_effect=RuntimeError("database is locked"))

    results = await memory_service.find_similar_memories("Where do I live?")

    assert [memory.fact for memory in results] == ["I live in London", "I like pizza"]
    assert results[0].embedding == LONDON
    assert memory_service.last_search_stats.backfilled == 0
    assert memory_service.last_search_stats.backfill_failures == 1
    assert memory_store.get_memory(unembedded.id).embedding is None


@pytest.mark.asyncio
async def test_query_embedding_failure_returns_empty(memory_service, memory_store):
    memory_store.add_memory(_memory("I live in London", 5, LONDON))

    assert await memory_service.find_similar_memories("FAIL query") == []


@pytest.mark.asyncio
async def test_blank_query_returns_empty(memory_service, memory_store, embedding):
    memory_store.add_memory(_memory("I live in London", 5, LONDON))

    assert await memory_service.find_similar_memories("   ") == []
    assert embedding.calls == []


@pytest.mark.asyncio
async def test_store_failure_returns_empty(embedding):
    store = Mock()
    store.list_memories = Mock(side_effect=RuntimeError("database is locked"))
    service = MemoryService(memory_store=store, embedding=embedding, clock=lambda: NOW)

    assert await service.find_similar_memories("Where do I live?") == []


@pytest.mark.asyncio
async def test_limit_clamped(memory_service, memory_store):
    for i in range(12):
        memory_store.add_memory(_memory(f"fact {i}", 5, [1.0, 1.0, 1.0]))

    assert len(await memory_service.find_similar_memories("query", limit=50)) == 10
    assert len(await memory_service.find_similar_memories("query", limit=0)) == 1


@pytest.mark.asyncio
async def test_settings_defaults(memory_store, embedding):
    settings = RecallSettings(memory_limit=2, memory_min_age_days=7)
    service = MemoryService(memory_store, embedding, settings=settings, clock=lambda: NOW)
    for days in (1, 8, 9, 10):
        memory_store.add_memory(_memory(f"{days} days", days, [1.0, 1.0, 1.0]))

    results = await service.find_similar_memories("query")

    assert len(results) == 2
    assert service.last_search_stats.candidates == 3


@pytest.mark.asyncio
async def test_add_memory_embeds_fact(memory_service, memory_store):
    memory = await memory_service.add_memory("conv1", "msg1", "  I live in London ")

    stored = memory_store.get_memory(memory.id)
    assert stored.fact == "I live in London"
    assert stored.embedding == LONDON
    assert memory_service.get_memory_for_message("msg1").id == memory.id


@pytest.mark.asyncio
async def test_add_memory_without_embedding_on_failure(memory_service, memory_store):
    memory = await memory_service.add_memory("conv1", "msg1", "FAIL fact")

    assert memory_store.get_memory(memory.id).embedding is None


@pytest.mark.asyncio
async def test_update_memory_recomputes_embedding(memory_service, memory_store):
    memory = await memory_service.add_memory("conv1", "msg1", "I live in London")

    assert await memory_service.update_memory(memory.model_copy(update={"fact": "I like pizza"}))

    assert memory_store.get_memory(memory.id).embedding == PIZZA


@pytest.mark.asyncio
async def test_recalculate_all_embeddings(memory_service, memory_store):
    memory_store.add_memory(_memory("I live in London", 3, [0.1, 0.1, 0.1]))
    memory_store.add_memory(_memory("I like pizza", 2, None, is_archived=True))
    broken = _memory("FAIL forever", 1, [0.3, 0.3, 0.3])
    memory_store.add_memory(broken)

    progress = []
    result = await memory_service.recalculate_all_embeddings(
        on_progress=lambda current, total, fraction: progress.append((current, total, fraction))
    )

    assert result.total == 3
    assert result.processed == 2
    assert result.failed_ids == [broken.id]
    assert [(current, total) for current, total, _ in progress] == [(1, 3), (2, 3), (3, 3)]
    assert progress[-1][2] == pytest.approx(1.0)

    facts = {m.fact: m.embedding for m in memory_store.list_memories(include_archived=True)}
    assert facts["I live in London"] == LONDON
    assert facts["I like pizza"] == PIZZA
    assert facts["FAIL forever"] == [0.3, 0.3, 0.3]


@pytest.mark.asyncio
async def test_recalculate_empty_store(memory_service):
    progress = Mock()

    result = await memory_service.recalculate_all_embeddings(on_progress=progress)

    assert result.total == 0
    assert result.processed == 0
    progress.assert_not_called()


def test_crud_passthrough(memory_service, memory_store):
    memory_store.add_memory(_memory("I live in London", 1))
    archived = _memory("old", 9)
    memory_store.add_memory(archived)

    assert memory_service.archive_memory(archived.id)
    assert memory_service.count_memories() == 1
    assert [m.fact for m in memory_service.search_memories("london")] == ["I live in London"]
    assert memory_service.delete_archived_memories() == 1
    assert memory_service.delete_conversation_memories("conv1") == 1
    assert memory_service.list_memories() == []


@pytest.mark.asyncio
async def test_memory_disabled(memory_store, embedding):
    settings = RecallSettings(memory_enabled=False)
    service = MemoryService(memory_store, embedding, settings=settings, clock=lambda: NOW)
    memory_store.add_memory(_memory("I live in London", 5, LONDON))

    assert await service.find_similar_memories("Where do I live?") == []
    assert embedding.calls == []
