"""
Unit tests for memory storage.

Every test runs against the in-memory store and the SQLAlchemy store on
in-memory SQLite.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine

from knowledge_recall.models import MemoryEntry
from knowledge_recall.storage import InMemoryMemoryStore, SQLAlchemyMemoryStore

NOW = datetime(2026, 1, 10, 12, 0)


def _sqlalchemy_store():
    engine = create_engine("sqlite:///:memory:")
    store = SQLAlchemyMemoryStore(engine)
    store.create_tables()
    return store


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request):
    """Create a fresh memory store for each backend."""
    if request.param == "memory":
        return InMemoryMemoryStore()
    return _sqlalchemy_store()


def _memory(fact, conversation_id="conv1", message_id=None, days_old=0, **kwargs):
    return MemoryEntry(
        conversation_id=conversation_id,
        message_id=message_id or f"msg_{fact}",
        fact=fact,
        created_at=NOW - timedelta(days=days_old),
        **kwargs,
    )


def test_add_and_get_memory(store):
    memory = _memory("I live in London", embedding=[0.1, 0.2, 0.3])

    assert store.add_memory(memory) == memory.id

    stored = store.get_memory(memory.id)
    assert stored is not None
    assert stored.fact == "I live in London"
    assert stored.embedding == [0.1, 0.2, 0.3]
    assert stored.created_at == memory.created_at
    assert not stored.is_archived


def test_get_memory_nonexistent(store):
    assert store.get_memory("mem_missing") is None


def test_get_memory_for_message(store):
    memory = _memory("I like pizza", message_id="msg_42")
    store.add_memory(memory)

    assert store.get_memory_for_message("msg_42").id == memory.id
    assert store.get_memory_for_message("msg_0") is None


def test_list_memories_newest_first(store):
    for days in (3, 1, 2):
        store.add_memory(_memory(f"fact {days}", days_old=days))

    assert [memory.fact for memory in store.list_memories()] == ["fact 1", "fact 2", "fact 3"]


def test_list_memories_filters(store):
    store.add_memory(_memory("kept", conversation_id="conv1"))
    store.add_memory(_memory("other conversation", conversation_id="conv2"))
    archived = _memory("archived", conversation_id="conv1")
    store.add_memory(archived)
    store.archive_memory(archived.id)

    assert {m.fact for m in store.list_memories()} == {"kept", "other conversation"}
    assert {m.fact for m in store.list_memories(include_archived=True)} == {
        "kept",
        "other conversation",
        "archived",
    }
    assert [m.fact for m in store.list_memories(conversation_id="conv1")] == ["kept"]


def test_list_memories_created_before_is_inclusive(store):
    for days in (0, 1, 2, 5):
        store.add_memory(_memory(f"{days} days", days_old=days))

    cutoff = NOW - timedelta(days=2)
    facts = [memory.fact for memory in store.list_memories(created_before=cutoff)]

    assert facts == ["2 days", "5 days"]


def test_search_memories_case_insensitive(store):
    store.add_memory(_memory("I live in London"))
    store.add_memory(_memory("I like pizza"))

    assert [memory.fact for memory in store.search_memories("LONDON")] == ["I live in London"]
    assert store.search_memories("paris") == []


def test_update_memory(store):
    memory = _memory("I live in London")
    store.add_memory(memory)

    assert store.update_memory(memory.model_copy(update={"fact": "I live in Paris"}))
    assert store.get_memory(memory.id).fact == "I live in Paris"

    assert not store.update_memory(_memory("never stored"))


def test_update_embedding(store):
    memory = _memory("I live in London")
    store.add_memory(memory)

    assert store.update_embedding(memory.id, [0.5, 0.5, 0.5])

    stored = store.get_memory(memory.id)
    assert stored.embedding == [0.5, 0.5, 0.5]
    assert stored.fact == "I live in London"

    assert not store.update_embedding("mem_missing", [1.0])


def test_archive_memory(store):
    memory = _memory("I live in London")
    store.add_memory(memory)

    assert store.archive_memory(memory.id)
    assert store.get_memory(memory.id).is_archived
    assert store.count_memories() == 0
    assert not store.archive_memory("mem_missing")


def test_delete_memory(store):
    memory = _memory("I live in London")
    store.add_memory(memory)

    assert store.delete_memory(memory.id)
    assert store.get_memory(memory.id) is None
    assert not store.delete_memory(memory.id)


def test_delete_conversation_memories(store):
    store.add_memory(_memory("a", conversation_id="conv1"))
    store.add_memory(_memory("b", conversation_id="conv1"))
    store.add_memory(_memory("c", conversation_id="conv2"))

    assert store.delete_conversation_memories("conv1") == 2
    assert [memory.fact for memory in store.list_memories()] == ["c"]


def test_delete_archived_memories(store):
    kept = _memory("kept")
    archived = _memory("archived")
    store.add_memory(kept)
    store.add_memory(archived)
    store.archive_memory(archived.id)

    assert store.delete_archived_memories() == 1
    assert store.get_memory(archived.id) is None
    assert store.get_memory(kept.id) is not None


def test_count_memories(store):
    assert store.count_memories() == 0

    for i in range(3):
        store.add_memory(_memory(f"fact {i}"))

    assert store.count_memories() == 3
