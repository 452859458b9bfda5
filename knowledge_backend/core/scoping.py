"""
Scope validation shared by ingestion and retrieval.

Dependencies: knowledge_backend.boundary.vdb.vector_schemas
System role: Request partition resolution
"""

from knowledge_backend.boundary.vdb.vector_schemas import Scope
from knowledge_backend.core.exceptions import ValidationError


def resolve_scope(scope: Scope | str, tenant_id: str | None) -> tuple[Scope, str | None]:
    """
    Validate a scope/tenant pair.

    Global scope discards tenant_id; tenant scope requires one.

    Raises:
        ValidationError: Unknown scope or missing tenant_id
    """
    try:
        resolved = Scope(scope)
    except ValueError as e:
        raise ValidationError("Invalid scope", field="scope") from e

    if resolved == Scope.GLOBAL:
        return resolved, None

    tenant = str(tenant_id or "").strip()
    if not tenant:
        raise ValidationError("tenantId required for tenant scope", field="tenant_id")
    return resolved, tenant
