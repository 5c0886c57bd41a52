"""
costbook_modules.revenue.config
===============================

Responsibility:
    Configuration schema for revenue recognition: the reporting currency
    and the project classification rule table.  Reclassifying a project
    family (a new subscription product prefix, a renamed overhead bucket)
    is a configuration change, not a migration.

Failure modes:
    - Invalid configuration values -> ``ValueError`` from ``__post_init__``.
"""

from dataclasses import dataclass, field
from typing import Self

from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.logging_config import get_logger
from costbook_modules.project.classification import ClassificationRules

logger = get_logger("modules.revenue.config")


@dataclass
class RevenueConfig:
    """
    Configuration schema for the revenue module.

    Guarantees:
        - ``currency`` is a registered ISO 4217 code.
        - At least one marker identifies subscription projects.
    """

    currency: str = CurrencyRegistry.DEFAULT_CURRENCY
    classification: ClassificationRules = field(default_factory=ClassificationRules)

    def __post_init__(self):
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency!r}")
        self.currency = CurrencyRegistry.validate(self.currency)

        if isinstance(self.classification, dict):
            self.classification = ClassificationRules.from_dict(self.classification)

        rules = self.classification
        if not (rules.subscription_number_prefixes or rules.subscription_name_markers):
            raise ValueError("classification needs at least one subscription marker")

        logger.info(
            "revenue_config_initialized",
            extra={
                "currency": self.currency,
                "subscription_prefixes": list(rules.subscription_number_prefixes),
                "overhead_numbers": list(rules.overhead_business_numbers),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("revenue_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "revenue_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
