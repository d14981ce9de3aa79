"""
fieldops_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` returns the frozen ``FieldOpsConfig`` used by
    services and ingestion.  Defaults ship with the package
    (``defaults.yaml``); an override file may be named explicitly or via
    the ``FIELDOPS_CONFIG`` environment variable.

Failure modes:
    - ``FileNotFoundError`` -- the override file does not exist.
    - ``ConfigurationError`` -- unknown keys or invalid values.

Audit relevance:
    Every load emits a ``FIELDOPS_CONFIG_TRACE`` log entry with the source
    path and checksum of the configuration that governed the run.
"""

from __future__ import annotations

import os
from pathlib import Path

from fieldops_config.loader import compute_checksum, load_config, parse_config
from fieldops_config.schema import (
    ClientIdPolicy,
    FieldOpsConfig,
    IngestionDefaults,
    LedgerTexts,
)
from fieldops_kernel.logging_config import get_logger

logger = get_logger("config")

CONFIG_ENV_VAR = "FIELDOPS_CONFIG"

_active: FieldOpsConfig | None = None


def get_active_config(path: Path | None = None, *, reload: bool = False) -> FieldOpsConfig:
    """
    Return the active configuration, loading it on first use.

    An explicit ``path`` or ``reload=True`` forces a fresh load; otherwise
    the cached configuration is returned.
    """
    global _active
    if _active is not None and path is None and not reload:
        return _active

    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else None

    config = load_config(path)
    logger.info(
        "FIELDOPS_CONFIG_TRACE",
        extra={
            "config_source": str(path) if path else "defaults",
            "checksum": compute_checksum(config),
            "palette_size": len(config.client_palette),
        },
    )
    _active = config
    return config


def reset_active_config() -> None:
    """Drop the cached configuration. FOR TESTING ONLY."""
    global _active
    _active = None


__all__ = [
    "CONFIG_ENV_VAR",
    "ClientIdPolicy",
    "FieldOpsConfig",
    "IngestionDefaults",
    "LedgerTexts",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "parse_config",
    "reset_active_config",
]
