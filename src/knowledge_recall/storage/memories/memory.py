"""
In-memory memory storage implementation.

Provides a simple in-memory store for memory entries, suitable for testing
and development. For persistence, use the SQLAlchemy implementation.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from knowledge_recall.models import MemoryEntry

logger = logging.getLogger(__name__)


class InMemoryMemoryStore:
    """
    In-memory implementation of the MemoryStore protocol.

    Stores entries in a dictionary keyed by ID. Data is lost on restart.
    """

    def __init__(self):
        self._memories: Dict[str, MemoryEntry] = {}

        logger.info("InMemoryMemoryStore initialized")

    def add_memory(self, memory: MemoryEntry) -> str:
        """Add a memory to the store."""
        self._memories[memory.id] = memory.model_copy(deep=True)
        logger.debug(f"Inserted memory {memory.id}: '{memory.fact[:50]}...'")
        return memory.id

    def get_memory(self, memory_id: str) -> Optional[MemoryEntry]:
        """Retrieve a memory by ID."""
        memory = self._memories.get(memory_id)
        return memory.model_copy(deep=True) if memory else None

    def get_memory_for_message(self, message_id: str) -> Optional[MemoryEntry]:
        """Retrieve the memory extracted from a message, if any."""
        for memory in self._memories.values():
            if memory.message_id == message_id:
                return memory.model_copy(deep=True)
        return None

    def list_memories(
        self,
        include_archived: bool = False,
        conversation_id: Optional[str] = None,
        created_before: Optional[datetime] = None,
    ) -> List[MemoryEntry]:
        """List memories, newest first."""
        results = []

        for memory in self._memories.values():
            if not include_archived and memory.is_archived:
                continue
            if conversation_id and memory.conversation_id != conversation_id:
                continue
            if created_before and memory.created_at > created_before:
                continue
            results.append(memory.model_copy(deep=True))

        results.sort(key=lambda m: m.created_at, reverse=True)
        return results

    def search_memories(self, query: str) -> List[MemoryEntry]:
        """Case-insensitive substring search over non-archived facts."""
        needle = query.lower()
        return [memory for memory in self.list_memories() if needle in memory.fact.lower()]

    def update_memory(self, memory: MemoryEntry) -> bool:
        """Replace a stored memory."""
        if memory.id not in self._memories:
            logger.error(f"Memory {memory.id} not found")
            return False

        self._memories[memory.id] = memory.model_copy(deep=True)
        logger.debug(f"Updated memory {memory.id}")
        return True

    def update_embedding(self, memory_id: str, embedding: Optional[List[float]]) -> bool:
        """Replace only the embedding of a memory."""
        memory = self._memories.get(memory_id)
        if memory is None:
            logger.error(f"Memory {memory_id} not found")
            return False

        self._memories[memory_id] = memory.model_copy(
            update={"embedding": list(embedding) if embedding is not None else None}
        )
        return True

    def archive_memory(self, memory_id: str) -> bool:
        """Archive (soft-delete) a memory."""
        memory = self._memories.get(memory_id)
        if memory is None:
            logger.warning(f"Cannot archive memory {memory_id}: not found")
            return False

        self._memories[memory_id] = memory.model_copy(update={"is_archived": True})
        logger.info(f"Archived memory {memory_id}")
        return True

    def delete_memory(self, memory_id: str) -> bool:
        """Permanently delete a memory."""
        if self._memories.pop(memory_id, None) is None:
            return False

        logger.info(f"Deleted memory {memory_id}")
        return True

    def delete_conversation_memories(self, conversation_id: str) -> int:
        """Delete all memories of a conversation."""
        return self._delete_where(lambda m: m.conversation_id == conversation_id)

    def delete_archived_memories(self) -> int:
        """Permanently delete every archived memory."""
        return self._delete_where(lambda m: m.is_archived)

    def count_memories(self) -> int:
        """Count non-archived memories."""
        return sum(1 for memory in self._memories.values() if not memory.is_archived)

    def _delete_where(self, predicate) -> int:
        memory_ids_to_delete = [
            memory_id for memory_id, memory in self._memories.items() if predicate(memory)
        ]

        for memory_id in memory_ids_to_delete:
            del self._memories[memory_id]

        logger.info(f"Deleted {len(memory_ids_to_delete)} memories")
        return len(memory_ids_to_delete)

    def clear(self):
        """Clear ALL memories from the store."""
        count = len(self._memories)
        self._memories.clear()
        logger.info(f"Cleared all memories ({count} total)")
