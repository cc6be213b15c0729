"""
Fixed-window text chunking with overlap.

The window advances by ``chunk_size - overlap`` characters, so the overlap
must be strictly smaller than the window or the scan would never advance.
"""

from dataclasses import dataclass
from typing import Iterator, List

from knowledge_recall.config import (
    MAX_CHUNK_OVERLAP,
    MAX_CHUNK_SIZE,
    MIN_CHUNK_OVERLAP,
    MIN_CHUNK_SIZE,
)
from knowledge_recall.errors import ConfigurationError


@dataclass(frozen=True)
class ChunkSpan:
    """A trimmed chunk and the [start, end) window it was cut from."""

    start: int
    end: int
    text: str


def validate_chunking(chunk_size: int, overlap: int) -> None:
    """
    Check chunking parameters against the accepted configuration ranges.

    Raises:
        ConfigurationError: If chunk_size is outside [128, 2048], overlap is
            outside [0, 256], or overlap is not smaller than chunk_size
    """
    if not MIN_CHUNK_SIZE <= chunk_size <= MAX_CHUNK_SIZE:
        raise ConfigurationError(
            f"chunk_size must be between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE}, got {chunk_size}"
        )
    if not MIN_CHUNK_OVERLAP <= overlap <= MAX_CHUNK_OVERLAP:
        raise ConfigurationError(
            f"overlap must be between {MIN_CHUNK_OVERLAP} and {MAX_CHUNK_OVERLAP}, got {overlap}"
        )
    _check_window(chunk_size, overlap)


def _check_window(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ConfigurationError(f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise ConfigurationError(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def iter_chunk_spans(text: str, chunk_size: int, overlap: int) -> Iterator[ChunkSpan]:
    """
    Walk the text with a sliding window and yield each non-blank chunk.

    Args:
        text: Source text
        chunk_size: Window width in characters
        overlap: Characters shared by consecutive windows

    Yields:
        ChunkSpan for every window whose trimmed text is non-empty

    Raises:
        ConfigurationError: If the window would never advance
    """
    _check_window(chunk_size, overlap)

    step = chunk_size - overlap
    start = 0
    length = len(text)

    while start < length:
        end = min(start + chunk_size, length)
        chunk = text[start:end].strip()

        if chunk:
            yield ChunkSpan(start=start, end=end, text=chunk)

        if end >= length:
            break

        start += step


def chunk_text(text: str, chunk_size: int, overlap: int) -> List[str]:
    """
    Split text into overlapping, trimmed, non-empty chunks.

    Args:
        text: Source text
        chunk_size: Window width in characters
        overlap: Characters shared by consecutive windows

    Returns:
        Chunks in source order; empty for empty or blank text

    Example:
        >>> [len(chunk) for chunk in chunk_text("a" * 1000, chunk_size=300, overlap=50)]
        [300, 300, 300, 250]
    """
    return [span.text for span in iter_chunk_spans(text, chunk_size, overlap)]
