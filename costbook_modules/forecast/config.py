"""
costbook_modules.forecast.config
================================

Configuration schema for the cash-flow forecaster.

Failure modes:
    - Invalid configuration values -> ``ValueError`` from ``__post_init__``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.logging_config import get_logger

logger = get_logger("modules.forecast.config")


@dataclass
class ForecastConfig:
    """
    Forecast settings.

    A month whose running balance falls below ``minimum_cash_threshold``
    is flagged and counted in the forecast summary.
    """

    currency: str = CurrencyRegistry.DEFAULT_CURRENCY
    minimum_cash_threshold: Decimal = Decimal("0")

    def __post_init__(self):
        if not isinstance(self.minimum_cash_threshold, Decimal):
            self.minimum_cash_threshold = Decimal(str(self.minimum_cash_threshold))
        if self.minimum_cash_threshold < 0:
            raise ValueError("minimum_cash_threshold cannot be negative")
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency!r}")
        self.currency = CurrencyRegistry.validate(self.currency)

        logger.info(
            "forecast_config_initialized",
            extra={
                "currency": self.currency,
                "minimum_cash_threshold": str(self.minimum_cash_threshold),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("forecast_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "forecast_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
