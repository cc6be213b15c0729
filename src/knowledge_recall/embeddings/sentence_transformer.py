"""On-device embeddings with sentence-transformers."""

import asyncio
import logging
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


class SentenceTransformerEmbedding:
    """
    Embeddings from a locally loaded sentence-transformers model.

    Encoding runs in a worker thread. The model is not safe for concurrent
    use, so services wrap it in SerializedEmbeddingProvider.

    Chunks, facts and queries are all embedded the same way. Models trained
    with instruction prefixes take a single ``prefix`` applied to every
    input, e.g. ``prefix="query: "`` for intfloat/e5-small-v2.

    Example:
        >>> embedder = SentenceTransformerEmbedding(device="cpu")
        >>> embedder.dimension
        384
    """

    def __init__(
        self,
        model_name: str = DEFAULT_LOCAL_MODEL,
        device: Optional[str] = None,
        prefix: str = "",
        normalize_embeddings: bool = True,
        batch_size: int = 32,
        cache_folder: Optional[str] = None,
        trust_remote_code: bool = False,
    ):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "SentenceTransformerEmbedding needs sentence-transformers: "
                "pip install knowledge-recall[embeddings-transformers]"
            ) from e

        self._model_name = model_name
        self._prefix = prefix
        self._encode_options = {
            "normalize_embeddings": normalize_embeddings,
            "batch_size": batch_size,
            "show_progress_bar": False,
        }

        logger.info(f"Loading sentence-transformers model {model_name} (device={device or 'auto'})")
        self._model = SentenceTransformer(
            model_name,
            device=device,
            cache_folder=cache_folder,
            trust_remote_code=trust_remote_code,
        )
        self._dimension = self._model.get_sentence_embedding_dimension()
        logger.info(f"{model_name} ready, {self._dimension}-dimensional vectors")

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _run(self, inputs: Union[str, List[str]]):
        if isinstance(inputs, str):
            inputs = self._prefix + inputs
        else:
            inputs = [self._prefix + text for text in inputs]
        return await asyncio.to_thread(self._model.encode, inputs, **self._encode_options)

    async def generate_embedding(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Embedding input must contain non-whitespace text")
        return (await self._run(text)).tolist()

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts; the model batches them internally."""
        if not texts:
            return []
        if any(not text or not text.strip() for text in texts):
            raise ValueError("Embedding input must contain non-whitespace text")
        return (await self._run(texts)).tolist()
