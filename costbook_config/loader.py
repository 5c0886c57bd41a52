"""
Configuration Loader (``costbook_config.loader``).

Responsibility
--------------
Loads a YAML settings document and parses it into ``CostbookSettings``.
Callers use ``costbook_config.get_active_config()``; this module is the
parsing layer underneath it.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid section values  -> ``ValueError`` from the section dataclass.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any

import yaml

from costbook_config.schema import CostbookSettings
from costbook_modules.fiscal.config import FiscalConfig
from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.revenue.config import RevenueConfig

CONFIG_PATH_ENV = "COSTBOOK_CONFIG"
DATABASE_URL_ENV = "COSTBOOK_DATABASE_URL"

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization.  Deterministic."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(data: dict[str, Any], name: str, currency: str) -> dict[str, Any]:
    section = dict(data.get(name) or {})
    section.setdefault("currency", currency)
    return section


def parse_settings(data: dict[str, Any], database_url: str | None = None) -> CostbookSettings:
    """Build ``CostbookSettings`` from a parsed YAML mapping.

    ``database_url`` overrides the document's value when given.
    """
    currency = data.get("currency", "JPY")
    return CostbookSettings(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        database_url=database_url or data["database_url"],
        currency=currency,
        fiscal=FiscalConfig.from_dict(_section(data, "fiscal", currency)),
        revenue=RevenueConfig.from_dict(_section(data, "revenue", currency)),
        ledger=LedgerConfig.from_dict(_section(data, "ledger", currency)),
        forecast=ForecastConfig.from_dict(_section(data, "forecast", currency)),
        checksum=compute_checksum(data),
    )


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit path, then ``$COSTBOOK_CONFIG``, then the packaged defaults."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULTS_PATH


def load_settings(path: Path | str | None = None) -> CostbookSettings:
    config_path = resolve_config_path(path)
    data = load_yaml_file(config_path)
    return parse_settings(data, database_url=os.environ.get(DATABASE_URL_ENV) or None)
