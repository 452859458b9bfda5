"""
Embedding provider abstraction.

Concrete backends implement `_embed`; the base class truncates input,
validates the returned vector and records the dimension of the first
successful call.

Dependencies: knowledge_backend.core.exceptions
System role: Text -> vector boundary
"""

from abc import ABC, abstractmethod
import logging

from knowledge_backend.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Pluggable text embedding backend."""

    name: str = "base"

    def __init__(self, max_input_chars: int = 8000) -> None:
        self._max_input_chars = max_input_chars
        self._dimension: int | None = None

    @property
    def dimension(self) -> int | None:
        """Vector length of the first successful embedding, if any."""
        return self._dimension

    def embed(self, text: str) -> list[float]:
        """
        Embed text into a fixed-dimension vector.

        Args:
            text: Input text (truncated to max_input_chars)

        Returns:
            list[float]: Embedding vector

        Raises:
            EmbeddingError: Backend call failed or returned no vector
        """
        truncated = (text or "")[: self._max_input_chars]
        try:
            vector = self._embed(truncated)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(
                f"{self.name} embeddings call failed: {e}", provider=self.name
            ) from e

        if not isinstance(vector, list) or not vector:
            raise EmbeddingError(
                f"{self.name} embeddings response missing embedding", provider=self.name
            )

        vector = [float(v) for v in vector]
        if self._dimension is None:
            self._dimension = len(vector)
            logger.info(
                f"{__name__}:embed - First {self.name} embedding, dimension={self._dimension}"
            )
        return vector

    @abstractmethod
    def _embed(self, text: str) -> list[float]:
        """Call the concrete backend."""
