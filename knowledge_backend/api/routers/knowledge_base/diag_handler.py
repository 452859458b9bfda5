"""
Diagnostics handler.

Reports which pieces of configuration are missing without exposing any
secret values.

Dependencies: boto3
System role: Production wiring checks for GET /kb/diag
"""

import os

import boto3

from knowledge_backend.configs import Settings
from knowledge_backend.models.knowledge import DiagResponse


def build_diagnostics(settings: Settings, session: boto3.Session | None = None) -> DiagResponse:
    """
    Check region, credentials, vector index and embedding configuration.

    Args:
        settings: Application settings
        session: boto3 session used to resolve credentials (tests inject one)

    Returns:
        DiagResponse: ok is True only when nothing is missing
    """
    missing: list[str] = []
    region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
    if not region:
        missing.append("AWS_REGION")

    session = session or boto3.Session()
    if session.get_credentials() is None:
        missing.append("AWS_CREDENTIALS")

    index_settings = settings.vector_index
    index_configured = index_settings.backend == "faiss" or bool(
        index_settings.vectors_bucket and index_settings.index_name
    )
    if not index_configured:
        missing.append("VECTOR_INDEX_VECTORS_BUCKET")

    embeddings = settings.embeddings
    provider = embeddings.resolved_provider()
    if provider == "openai" and not embeddings.openai_api_key:
        missing.append("OPENAI_API_KEY")

    return DiagResponse(
        ok=not missing,
        missing=missing,
        region=region,
        vector_index_backend=index_settings.backend,
        vector_index_configured=index_configured,
        embeddings_provider=embeddings.provider or None,
        bedrock_embed_model=embeddings.bedrock_model_id,
    )
