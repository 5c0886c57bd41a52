"""
costbook_modules.fiscal.config
==============================

Responsibility:
    Configuration schema for the fiscal calendar manager.

Invariants enforced:
    - ``default_settlement_month`` is within 1..12.

Failure modes:
    - Invalid configuration values -> ``ValueError`` from ``__post_init__``.
"""

from dataclasses import dataclass
from typing import Self

from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.logging_config import get_logger

logger = get_logger("modules.fiscal.config")


@dataclass
class FiscalConfig:
    """
    Fiscal calendar settings.

    ``require_change_reason`` makes a reason mandatory on every fiscal
    period change.  ``default_settlement_month`` is used by ``initialize``
    when the caller gives none (March, the common Japanese year end).
    """

    currency: str = CurrencyRegistry.DEFAULT_CURRENCY
    default_settlement_month: int = 3
    require_change_reason: bool = False

    def __post_init__(self):
        if not 1 <= self.default_settlement_month <= 12:
            raise ValueError("default_settlement_month must be within 1..12")
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency!r}")
        self.currency = CurrencyRegistry.validate(self.currency)

        logger.info(
            "fiscal_config_initialized",
            extra={
                "currency": self.currency,
                "default_settlement_month": self.default_settlement_month,
                "require_change_reason": self.require_change_reason,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("fiscal_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "fiscal_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
