"""Services for the costbook kernel (write side)."""

from costbook_kernel.services.base import BaseService
from costbook_kernel.services.sequence_service import SequenceCounter, SequenceService
from costbook_kernel.services.tenancy import ensure_same_tenant, require_company

__all__ = [
    "BaseService",
    "SequenceCounter",
    "SequenceService",
    "ensure_same_tenant",
    "require_company",
]
