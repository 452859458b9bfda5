"""
Amazon Bedrock embedding provider.

Uses Titan Text Embeddings v2 through langchain_aws.BedrockEmbeddings.

Dependencies: langchain_aws, boto3
System role: Bedrock embedding backend
"""

import logging

import boto3
from langchain_aws import BedrockEmbeddings

from knowledge_backend.boundary.embeddings.base import EmbeddingProvider
from knowledge_backend.core.exceptions import NotConfiguredError

logger = logging.getLogger(__name__)


class BedrockEmbeddingProvider(EmbeddingProvider):
    """Embed text with a Bedrock embedding model."""

    name = "bedrock"

    def __init__(
        self,
        model_id: str = "amazon.titan-embed-text-v2:0",
        region: str = "us-east-1",
        max_input_chars: int = 8000,
        embeddings: BedrockEmbeddings | None = None,
    ) -> None:
        """
        Initialize Bedrock embeddings client.

        Args:
            model_id: Bedrock model ID
            region: AWS region for Bedrock runtime
            max_input_chars: Truncation bound
            embeddings: Pre-built client (tests inject a stub)

        Raises:
            ValueError: When model_id is empty
            NotConfiguredError: When no AWS credentials can be resolved
        """
        if not model_id:
            raise ValueError("model_id cannot be empty")
        super().__init__(max_input_chars=max_input_chars)
        self.model_id = model_id

        if embeddings is None:
            if boto3.Session().get_credentials() is None:
                raise NotConfiguredError(
                    "No AWS credentials available for Bedrock embeddings",
                    {"provider": self.name, "model_id": model_id},
                )
            embeddings = BedrockEmbeddings(model_id=model_id, region_name=region)
            logger.info(
                f"{__name__}:__init__ - Bedrock embeddings initialized",
                extra={"model_id": model_id, "region": region},
            )
        self._embeddings = embeddings

    def _embed(self, text: str) -> list[float]:
        return self._embeddings.embed_query(text)
