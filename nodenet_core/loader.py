"""
YAML configuration loader for the node network engine.

This module turns a YAML (or already-parsed dictionary) description into a
`SimulationConfig`. Keys may use the camelCase names of the external
interface or the snake_case field names.

YAML schema (all keys optional):

nodeCount: 30
nodeSize: 4
connectionCapacity: 300
connectionDistance: 200
connectionDuration: 800      # ms
connectionInterval: 100      # ms
connectionOpacity: 50        # 0..100
lineThickness: 2
mouseRadius: 200
mouseForce: 0.05
clusterForce: 0.01
repulsionForce: 0.03
connectionStrength: 0.02
theme: warm                  # preset name, or a mapping:
# theme:
#   base: night
#   nodeColor: "#ffffff"
#   connectionColor: {from: "#ff0080", to: "#00e0ff"}
#   nodeBrightness: 1.2

Notes:
- Unknown keys are logged and ignored.
- Pairs such as ``strengthRange`` accept two-element lists.
- Values that cannot be converted to the field type are logged and the base
  value is kept.
- Values are clamped by `SimulationConfig.normalized()`, never rejected.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping

import yaml

from .config import CONFIG_FIELDS, SimulationConfig
from .themes import get_theme, theme_from_dict

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

_PAIR_FIELDS = ("strength_range", "opacity_range")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _coerce(value: Any, current: Any) -> Any:
    """Convert `value` to the type of the field's current value."""
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        raise ValueError(f"expected true/false, got {value!r}")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


def config_from_dict(spec: Mapping[str, Any] | None, base: SimulationConfig | None = None) -> SimulationConfig:
    """
    Build a `SimulationConfig` from a parsed mapping.

    Args:
        spec: Parsed YAML dictionary (None is treated as empty)
        base: Configuration supplying values for keys not present in `spec`

    Returns:
        SimulationConfig: Normalized configuration
    """
    base = base or SimulationConfig()
    overrides: Dict[str, Any] = {}

    for raw_key, value in (spec or {}).items():
        key = _snake(str(raw_key))
        if key not in CONFIG_FIELDS:
            logger.warning("Ignoring unknown config key %r", raw_key)
            continue
        if key == "theme":
            if isinstance(value, Mapping):
                overrides[key] = theme_from_dict(value)
            else:
                overrides[key] = get_theme(str(value))
        elif key in _PAIR_FIELDS:
            try:
                lo, hi = value
                overrides[key] = (float(lo), float(hi))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Config %s=%r is not a [low, high] pair; keeping %r", raw_key, value, getattr(base, key))
        else:
            try:
                overrides[key] = _coerce(value, getattr(base, key))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Config %s=%r is not a valid value; keeping %r", raw_key, value, getattr(base, key))

    return base.with_overrides(**overrides)


def config_from_yaml(yaml_text: str, base: SimulationConfig | None = None) -> SimulationConfig:
    """Load a configuration from YAML text."""
    data = yaml.safe_load(yaml_text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("configuration YAML must be a mapping at the top level")
    return config_from_dict(data, base)


def config_from_file(path: str, base: SimulationConfig | None = None) -> SimulationConfig:
    """Load a configuration from a YAML file path."""
    with open(path, "r", encoding="utf-8") as f:
        txt = f.read()
    logger.info("Loaded configuration from %s", path)
    return config_from_yaml(txt, base)
