from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging

from knowledge_recall.config import (
    MAX_MEMORY_AGE_DAYS,
    MAX_RESULT_LIMIT,
    MIN_MEMORY_AGE_DAYS,
    MIN_RESULT_LIMIT,
    RecallSettings,
    clamp,
)
from knowledge_recall.embeddings import EmbeddingProvider, SerializedEmbeddingProvider
from knowledge_recall.errors import EmbeddingError
from knowledge_recall.models import MemoryEntry
from knowledge_recall.search import find_similar
from knowledge_recall.storage import MemoryStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, float], None]


@dataclass
class MemorySearchStats:
    """Counters from the most recent find_similar_memories() call."""

    candidates: int = 0
    backfilled: int = 0
    backfill_failures: int = 0
    results: int = 0


@dataclass
class ReembedResult:
    """
    Outcome of recalculate_all_embeddings().

    Attributes:
        total: Number of memories visited
        processed: Memories whose embedding was regenerated and saved
        failed_ids: Memories that kept their previous embedding
    """

    total: int = 0
    processed: int = 0
    failed_ids: List[str] = field(default_factory=list)


class MemoryService:
    def __init__(
        self,
        memory_store: MemoryStore,
        embedding: EmbeddingProvider,
        settings: Optional[RecallSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.memory_store = memory_store
        self.embedding = SerializedEmbeddingProvider.wrap(embedding)
        self.settings = settings or RecallSettings()
        self.clock = clock
        self.last_search_stats = MemorySearchStats()

    async def _embed_or_none(self, text: str) -> Optional[List[float]]:
        try:
            return await self.embedding.generate_embedding(text)
        except EmbeddingError as e:
            logger.warning(f"Failed to embed memory fact: {e}")
            return None

    async def add_memory(self, conversation_id: str, message_id: str, fact: str) -> MemoryEntry:
        memory = MemoryEntry(conversation_id=conversation_id, message_id=message_id, fact=fact.strip())
        return await self.insert_memory(memory)

    async def insert_memory(self, memory: MemoryEntry) -> MemoryEntry:
        """Store a memory with its embedding; stored without one if embedding fails."""
        vector = await self._embed_or_none(memory.fact)
        memory = memory.model_copy(update={"embedding": vector})
        self.memory_store.add_memory(memory)

        logger.info(f"Memory added: {memory.id} (embedded={vector is not None})")
        return memory

    async def update_memory(self, memory: MemoryEntry) -> bool:
        """Save an edited memory and recompute its embedding."""
        vector = await self._embed_or_none(memory.fact)
        return self.memory_store.update_memory(memory.model_copy(update={"embedding": vector}))

    def archive_memory(self, memory_id: str) -> bool:
        return self.memory_store.archive_memory(memory_id)

    def delete_memory(self, memory_id: str) -> bool:
        return self.memory_store.delete_memory(memory_id)

    def delete_conversation_memories(self, conversation_id: str) -> int:
        return self.memory_store.delete_conversation_memories(conversation_id)

    def delete_archived_memories(self) -> int:
        return self.memory_store.delete_archived_memories()

    def get_memory(self, memory_id: str) -> Optional[MemoryEntry]:
        return self.memory_store.get_memory(memory_id)

    def get_memory_for_message(self, message_id: str) -> Optional[MemoryEntry]:
        return self.memory_store.get_memory_for_message(message_id)

    def list_memories(self, conversation_id: Optional[str] = None) -> List[MemoryEntry]:
        return self.memory_store.list_memories(conversation_id=conversation_id)

    def search_memories(self, query: str) -> List[MemoryEntry]:
        return self.memory_store.search_memories(query)

    def count_memories(self) -> int:
        return self.memory_store.count_memories()

    async def find_similar_memories(
        self,
        query: str,
        limit: Optional[int] = None,
        min_age_days: Optional[int] = None,
    ) -> List[MemoryEntry]:
        """
        Find the memories most relevant to a message.

        Memories younger than ``min_age_days`` are removed before scoring so
        that facts stated in the current session are not echoed straight
        back. Entries without a usable vector are embedded on demand; the
        new vector is saved. An entry whose backfill fails is skipped for
        this query only.

        Args:
            query: The user's current message
            limit: Maximum number of memories (clamped to 1-10)
            min_age_days: Minimum memory age in days (clamped to 0-30)

        Returns:
            Up to ``limit`` memories, most relevant first. Empty on any
            failure, so the chat request can proceed without memory context.
        """
        stats = MemorySearchStats()
        self.last_search_stats = stats

        limit = clamp(
            self.settings.memory_limit if limit is None else limit,
            MIN_RESULT_LIMIT,
            MAX_RESULT_LIMIT,
        )
        min_age_days = clamp(
            self.settings.memory_min_age_days if min_age_days is None else min_age_days,
            MIN_MEMORY_AGE_DAYS,
            MAX_MEMORY_AGE_DAYS,
        )

        if not self.settings.memory_enabled:
            return []

        if not query or not query.strip():
            return []

        try:
            return await self._find_similar_memories(query, limit, min_age_days, stats)
        except Exception as e:
            logger.error(f"Error finding similar memories: {e}")
            return []

    async def _find_similar_memories(
        self, query: str, limit: int, min_age_days: int, stats: MemorySearchStats
    ) -> List[MemoryEntry]:
        cutoff = self.clock() - timedelta(days=min_age_days)
        candidates = self.memory_store.list_memories(created_before=cutoff)
        stats.candidates = len(candidates)

        if not candidates:
            logger.debug(f"No memories older than {min_age_days} days")
            return []

        try:
            query_vector = await self.embedding.generate_embedding(query)
        except EmbeddingError as e:
            logger.warning(f"Failed to generate query embedding for memory search: {e}")
            return []

        dimension = len(query_vector)
        scorable: List[MemoryEntry] = []

        for memory in candidates:
            if memory.embedding is not None and len(memory.embedding) == dimension:
                scorable.append(memory)
                continue

            logger.warning(f"Missing embedding for memory {memory.id}, generating...")
            try:
                vector = await self.embedding.generate_embedding(memory.fact)
            except EmbeddingError as e:
                logger.warning(f"Backfill failed for memory {memory.id}: {e}")
                stats.backfill_failures += 1
                continue

            try:
                self.memory_store.update_embedding(memory.id, vector)
            except Exception as e:
                # Scored with the fresh vector anyway; saved on a later backfill
                logger.warning(f"Could not save backfilled embedding for memory {memory.id}: {e}")
                stats.backfill_failures += 1
            else:
                stats.backfilled += 1
            scorable.append(memory.model_copy(update={"embedding": vector}))

        results = find_similar(
            query=query,
            query_embedding=query_vector,
            candidates=scorable,
            k=limit,
            get_text=lambda memory: memory.fact,
            get_embedding=lambda memory: memory.embedding,
            weights=self.settings.scoring,
        )
        stats.results = len(results)

        logger.info(
            f"{len(results)} similar memories found "
            f"(candidates={stats.candidates}, backfilled={stats.backfilled}, "
            f"backfill_failures={stats.backfill_failures})"
        )
        return [result.item for result in results]

    async def recalculate_all_embeddings(
        self, on_progress: Optional[ProgressCallback] = None
    ) -> ReembedResult:
        """
        Regenerate the embedding of every memory, archived ones included.

        Use after switching embedding models: vectors from different models
        are not comparable. A memory whose regeneration fails keeps its
        previous embedding.

        Args:
            on_progress: Called with (current, total, fraction) after each memory

        Returns:
            ReembedResult with processed and failed counts
        """
        memories = self.memory_store.list_memories(include_archived=True)
        result = ReembedResult(total=len(memories))

        for index, memory in enumerate(memories):
            try:
                vector = await self.embedding.generate_embedding(memory.fact)
            except EmbeddingError as e:
                logger.warning(f"Failed to re-embed memory {memory.id}: {e}")
                result.failed_ids.append(memory.id)
            else:
                if self.memory_store.update_embedding(memory.id, vector):
                    result.processed += 1
                else:
                    result.failed_ids.append(memory.id)

            if on_progress:
                on_progress(index + 1, result.total, (index + 1) / result.total)

        logger.info(
            f"Recalculated embeddings for {result.processed}/{result.total} memories "
            f"(model={self.embedding.model_name})"
        )
        return result
