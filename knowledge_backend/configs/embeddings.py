"""
Embedding provider configuration.

Resolves which embedding backend is used (OpenAI or Amazon Bedrock) and
holds the model identifiers for each.

Dependencies: pydantic, pydantic_settings
System role: Embedding backend selection
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDINGS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    provider: str = Field(
        default="",
        description="Explicit backend: 'openai', 'bedrock', or empty to auto-detect",
    )
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("EMBEDDINGS_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key; its presence selects OpenAI when provider is empty",
    )
    openai_model: str = Field(
        default="text-embedding-3-small",
        validation_alias=AliasChoices("EMBEDDINGS_OPENAI_MODEL", "OPENAI_EMBED_MODEL"),
        description="OpenAI embedding model",
    )
    bedrock_model_id: str = Field(
        default="amazon.titan-embed-text-v2:0",
        validation_alias=AliasChoices("EMBEDDINGS_BEDROCK_MODEL_ID", "BEDROCK_EMBED_MODEL_ID"),
        description="Bedrock embedding model ID",
    )
    aws_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("EMBEDDINGS_AWS_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region for Bedrock runtime",
    )
    max_input_chars: int = Field(
        default=8000,
        description="Input text is truncated to this many characters before embedding",
    )

    def resolved_provider(self) -> str:
        """
        Resolve the backend name from explicit choice or credential availability.

        Returns:
            str: 'openai' or 'bedrock'
        """
        explicit = self.provider.strip().lower()
        if explicit in ("openai", "bedrock"):
            return explicit
        return "openai" if self.openai_api_key else "bedrock"
