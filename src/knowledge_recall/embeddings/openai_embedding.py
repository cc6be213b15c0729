"""Remote embeddings through the OpenAI API or any server speaking its protocol."""

import logging
import os
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Output size when no explicit dimensions are requested
KNOWN_MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


def _reject_blank(texts: List[str]) -> None:
    for text in texts:
        if not text or not text.strip():
            raise ValueError("Embedding input must contain non-whitespace text")


class OpenAIEmbedding:
    """
    Embeddings computed by a remote OpenAI-compatible endpoint.

    The text-embedding-3 family accepts a reduced output size, which lets a
    hosted model produce vectors of the same length as a local one. For
    self-hosted servers (Ollama, vLLM, LM Studio) point ``base_url`` at the
    server and give ``dimensions``, since their model names are not known here.

    Example:
        >>> embedder = OpenAIEmbedding(dimensions=384)
        >>> len(await embedder.generate_embedding("Production runs in Dublin"))
        384
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Args:
            model: Embedding model to request
            api_key: Falls back to the OPENAI_API_KEY environment variable
            base_url: Alternative endpoint; official API when None
            dimensions: Requested vector length; mandatory for unlisted models
            timeout: Seconds before a request is abandoned
            max_retries: Client-side retries on transient errors

        Raises:
            ValueError: ``model`` is not in KNOWN_MODEL_DIMENSIONS and no
                ``dimensions`` were given
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "OpenAIEmbedding needs the openai package: "
                "pip install knowledge-recall[embeddings-openai]"
            ) from e

        if dimensions is None and model not in KNOWN_MODEL_DIMENSIONS:
            raise ValueError(f"Cannot infer vector size of {model!r}; set dimensions")

        self._model = model
        self._requested_dimensions = dimensions
        self._dimension = dimensions or KNOWN_MODEL_DIMENSIONS[model]
        self._client = AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(
            f"Using OpenAI-compatible embeddings: model={model}, "
            f"dimension={self._dimension}, endpoint={base_url or 'default'}"
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    async def _request(self, payload: Union[str, List[str]]) -> List[List[float]]:
        params = {"model": self._model, "input": payload}
        if self._requested_dimensions is not None:
            params["dimensions"] = self._requested_dimensions

        response = await self._client.embeddings.create(**params)
        # data is returned in input order
        return [entry.embedding for entry in response.data]

    async def generate_embedding(self, text: str) -> List[float]:
        """Embed one text. Blank input raises ValueError without a request."""
        _reject_blank([text])
        (vector,) = await self._request(text)
        return vector

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts with a single request."""
        if not texts:
            return []
        _reject_blank(texts)
        return await self._request(texts)
