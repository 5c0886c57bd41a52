"""
Tenant guard -- every entity belongs to exactly one company.

A row loaded by id must be checked against the company the caller is
acting for before it is read or written.  A mismatch is never tolerated
silently: it is logged and raised as CrossTenantAccessError.
"""

from uuid import UUID

from costbook_kernel.exceptions import CrossTenantAccessError, MissingFieldError
from costbook_kernel.logging_config import get_logger

logger = get_logger("services.tenancy")


def require_company(company_id: UUID | None) -> UUID:
    """Reject a missing company id before any query is issued."""
    if company_id is None:
        raise MissingFieldError("company_id")
    return company_id


def ensure_same_tenant(
    entity_type: str,
    entity_id: UUID | str,
    owner_company_id: UUID,
    company_id: UUID,
) -> None:
    """Raise CrossTenantAccessError unless the entity is owned by ``company_id``."""
    if owner_company_id != company_id:
        logger.warning(
            "cross_tenant_access_blocked",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "owner_company_id": str(owner_company_id),
                "company_id": str(company_id),
            },
        )
        raise CrossTenantAccessError(entity_type, str(entity_id), str(company_id))
