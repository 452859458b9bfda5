"""
OpenAI embedding provider.

Dependencies: openai
System role: OpenAI embedding backend
"""

import logging

from openai import OpenAI

from knowledge_backend.boundary.embeddings.base import EmbeddingProvider
from knowledge_backend.core.exceptions import NotConfiguredError

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text with the OpenAI embeddings API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        max_input_chars: int = 8000,
        client: OpenAI | None = None,
    ) -> None:
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Embedding model name
            max_input_chars: Truncation bound
            client: Pre-built client (tests inject a stub)

        Raises:
            NotConfiguredError: When api_key is empty and no client is given
        """
        if client is None and not api_key:
            raise NotConfiguredError("Missing OPENAI_API_KEY", {"provider": self.name})
        super().__init__(max_input_chars=max_input_chars)
        self.model = model
        self._client = client or OpenAI(api_key=api_key)

    def _embed(self, text: str) -> list[float]:
        resp = self._client.embeddings.create(model=self.model, input=text)
        if not resp.data:
            return []
        return list(resp.data[0].embedding)
