"""
Configuration Loader (``fieldops_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the frozen ``FieldOpsConfig``
dataclasses.  Runtime callers go through ``fieldops_config.get_active_config``.

Invariants enforced
-------------------
* Unknown keys raise ``ConfigurationError`` -- a typo never silently
  falls back to a default.
* Override files are merged key-by-key over the packaged defaults; nested
  sections merge one level deep.
* ``compute_checksum`` is deterministic for equal configurations.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key or wrong section shape -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from fieldops_config.schema import SECTION_TYPES, FieldOpsConfig, field_names
from fieldops_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` over ``base``; section dicts merge one level deep."""
    merged = dict(base)
    for key, value in override.items():
        if key in SECTION_TYPES and isinstance(value, dict):
            merged[key] = {**(base.get(key) or {}), **value}
        else:
            merged[key] = value
    return merged


def _parse_section(key: str, value: Any) -> Any:
    section_type = SECTION_TYPES[key]
    if not isinstance(value, dict):
        raise ConfigurationError(f"Section {key!r} must be a mapping", key=key)
    unknown = set(value) - field_names(section_type)
    if unknown:
        name = sorted(unknown)[0]
        raise ConfigurationError(f"Unknown key {key}.{name}", key=f"{key}.{name}")
    return section_type(**value)


def parse_config(data: dict[str, Any]) -> FieldOpsConfig:
    """
    Parse a ``FieldOpsConfig`` from a dict.

    Raises:
        ConfigurationError: on unknown keys or invalid values.
    """
    unknown = set(data) - field_names(FieldOpsConfig)
    if unknown:
        name = sorted(unknown)[0]
        raise ConfigurationError(f"Unknown configuration key {name!r}", key=name)

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in SECTION_TYPES:
            kwargs[key] = _parse_section(key, value)
        elif key == "client_palette":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError("client_palette must be a list of strings", key=key)
            kwargs[key] = tuple(value)
        else:
            kwargs[key] = value

    try:
        return FieldOpsConfig(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(str(exc)) from exc


def load_config(path: Path | None = None) -> FieldOpsConfig:
    """Load packaged defaults, optionally merged with the override at ``path``."""
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge_config_data(data, load_yaml_file(path))
    return parse_config(data)


def compute_checksum(config: FieldOpsConfig) -> str:
    """Deterministic SHA-256 of the configuration contents."""
    canonical = json.dumps(asdict(config), sort_keys=True, default=list)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
