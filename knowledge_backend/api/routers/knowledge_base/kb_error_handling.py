"""
Knowledge base error handling utilities.

Provides a decorator that maps domain exceptions to HTTPExceptions so
every /kb route reports failures the same way.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from knowledge_backend.core.exceptions import (
    BlobStoreError,
    DimensionMismatchError,
    IndexProviderError,
    KnowledgeBaseException,
    NotConfiguredError,
    UpstreamFetchError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])

# Order matters: subclasses before their parents.
STATUS_BY_EXCEPTION: list[tuple[type[KnowledgeBaseException], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DimensionMismatchError, status.HTTP_409_CONFLICT),
    (IndexProviderError, status.HTTP_502_BAD_GATEWAY),
    (UpstreamFetchError, status.HTTP_502_BAD_GATEWAY),
    (BlobStoreError, status.HTTP_502_BAD_GATEWAY),
    (NotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: KnowledgeBaseException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_kb_errors(func: F) -> F:
    """
    Decorator to transform knowledge base errors into HTTPExceptions.

    This centralizes:
    - Logging of errors with their structured details
    - Mapping exception types to HTTP status codes
    - Passing the upstream message through as the response detail
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except KnowledgeBaseException as e:
            status_code = status_for(e)
            log = logger.warning if status_code < 500 else logger.error
            log(
                f"{func.__name__} failed: {e.message}",
                extra={"error_type": type(e).__name__, "status_code": status_code, "details": e.details},
            )
            raise HTTPException(status_code=status_code, detail=str(e))

        except Exception as e:
            logger.exception(
                f"Unexpected failure in {func.__name__}",
                extra={"error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred: {e}",
            )

    return wrapper  # type: ignore
