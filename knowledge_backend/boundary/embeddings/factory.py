"""
Embedding provider factory.

Resolves the backend once from EmbeddingSettings: explicit provider choice
first, otherwise OpenAI when an API key is configured, else Bedrock.

Dependencies: knowledge_backend.configs, knowledge_backend.boundary.embeddings
System role: Embedding provider instantiation and selection
"""

import logging

from knowledge_backend.boundary.embeddings.base import EmbeddingProvider
from knowledge_backend.configs import EmbeddingSettings

logger = logging.getLogger(__name__)


def get_embedding_provider(settings: EmbeddingSettings) -> EmbeddingProvider:
    """
    Build the configured embedding provider.

    Args:
        settings: Embedding settings

    Returns:
        EmbeddingProvider: OpenAI or Bedrock provider

    Raises:
        NotConfiguredError: Selected backend has no credentials
    """
    provider = settings.resolved_provider()

    if provider == "openai":
        from knowledge_backend.boundary.embeddings.openai_embeddings import (
            OpenAIEmbeddingProvider,
        )

        logger.info(f"{__name__}:get_embedding_provider - Using OpenAI ({settings.openai_model})")
        return OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_input_chars=settings.max_input_chars,
        )

    from knowledge_backend.boundary.embeddings.bedrock_embeddings import (
        BedrockEmbeddingProvider,
    )

    logger.info(f"{__name__}:get_embedding_provider - Using Bedrock ({settings.bedrock_model_id})")
    return BedrockEmbeddingProvider(
        model_id=settings.bedrock_model_id,
        region=settings.aws_region,
        max_input_chars=settings.max_input_chars,
    )
