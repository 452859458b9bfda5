"""
Fixed-size text chunking task.

Splits extracted text into contiguous, non-overlapping slices so that
chunk indices map one-to-one onto character ranges of the source text.

Dependencies: None
System role: Chunking stage of the indexing pipeline
"""

from knowledge_backend.core.exceptions import ValidationError


def chunk_text(text: str, max_chars: int = 1200) -> list[str]:
    """
    Split text into slices of at most max_chars characters.

    Concatenating the result reproduces the input exactly.

    Args:
        text: Text to split
        max_chars: Maximum slice length

    Returns:
        list[str]: ceil(len(text) / max_chars) chunks, [] for empty text

    Raises:
        ValidationError: When max_chars < 1
    """
    if max_chars < 1:
        raise ValidationError("max_chars must be >= 1", field="max_chars")
    if not text:
        return []
    return [text[i : i + max_chars] for i in range(0, len(text), max_chars)]


class ChunkingTask:
    """Split text into fixed-size chunks."""

    def __init__(self, chunk_size: int = 1200) -> None:
        """
        Initialize chunking task.

        Args:
            chunk_size: Maximum chunk size in characters

        Raises:
            ValidationError: When chunk_size < 1
        """
        if chunk_size < 1:
            raise ValidationError("chunk_size must be >= 1", field="chunk_size")
        self.chunk_size = chunk_size

    def chunk(self, text: str) -> list[str]:
        return chunk_text(text, self.chunk_size)
