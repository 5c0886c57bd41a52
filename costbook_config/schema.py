"""
CostbookSettings schema.

The typed runtime settings assembled from a YAML document.  Module
sections are the module configuration dataclasses themselves; the loader
threads the top-level ``currency`` into every section that does not name
its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from costbook_modules.fiscal.config import FiscalConfig
from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.project.classification import ClassificationRules
from costbook_modules.revenue.config import RevenueConfig


@dataclass(frozen=True)
class CostbookSettings:
    """Resolved settings for one process."""

    config_id: str
    version: int
    database_url: str
    currency: str
    fiscal: FiscalConfig
    revenue: RevenueConfig
    ledger: LedgerConfig
    forecast: ForecastConfig
    checksum: str = field(default="", compare=False)

    @property
    def classification(self) -> ClassificationRules:
        return self.revenue.classification
