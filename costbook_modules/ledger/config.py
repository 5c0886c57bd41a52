"""
costbook_modules.ledger.config
==============================

Configuration schema for the bank balance ledger.

Failure modes:
    - Invalid configuration values -> ``ValueError`` from ``__post_init__``.
"""

from dataclasses import dataclass
from typing import Self

from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.logging_config import get_logger

logger = get_logger("modules.ledger.config")


@dataclass
class LedgerConfig:
    """
    Ledger settings.

    ``allow_negative_balances`` permits overdrawn opening/closing balances.
    Income and expense are never negative regardless of this flag.
    """

    currency: str = CurrencyRegistry.DEFAULT_CURRENCY
    allow_negative_balances: bool = True

    def __post_init__(self):
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency!r}")
        self.currency = CurrencyRegistry.validate(self.currency)

        logger.info(
            "ledger_config_initialized",
            extra={
                "currency": self.currency,
                "allow_negative_balances": self.allow_negative_balances,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("ledger_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "ledger_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
