"""
costbook_config -- single public entrypoint for costbook settings.

Responsibility:
    ``get_active_config()`` is the one way to obtain settings at runtime.
    Services receive the module config sections from it; nothing else
    reads YAML files or environment variables.

Resolution order:
    1. the ``path`` argument
    2. ``$COSTBOOK_CONFIG``
    3. ``costbook_config/defaults.yaml``

``$COSTBOOK_DATABASE_URL`` overrides ``database_url`` from any source.

Failure modes:
    - ``FileNotFoundError`` -- the named settings file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.

Every successful call emits a ``COSTBOOK_CONFIG_TRACE`` log entry with the
config_id, version, checksum and source path.
"""

from __future__ import annotations

from pathlib import Path

from costbook_config.loader import compute_checksum, load_settings, resolve_config_path
from costbook_config.schema import CostbookSettings
from costbook_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_active_config(path: Path | str | None = None) -> CostbookSettings:
    """Load, validate and return the active settings."""
    source = resolve_config_path(path)
    settings = load_settings(source)
    _logger.info(
        "COSTBOOK_CONFIG_TRACE",
        extra={
            "config_id": settings.config_id,
            "config_version": settings.version,
            "config_checksum": settings.checksum,
            "source": str(source),
        },
    )
    return settings


__all__ = [
    "CostbookSettings",
    "compute_checksum",
    "get_active_config",
]
