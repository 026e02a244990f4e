"""
Theme definitions for the node network renderer.

Node and connection colors are tagged variants, either ``Solid`` or
``Gradient``, so the renderer can dispatch on ``spec.kind`` instead of
inspecting value types at draw time. Raw values (strings or
``{"from": ..., "to": ...}`` mappings) are converted once by
:func:`color_spec`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from .colors import clamp
from .enums import ColorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Solid:
    """A single theme color."""

    color: str
    kind: ColorKind = field(default=ColorKind.SOLID, init=False)

    @property
    def primary(self) -> str:
        return self.color


@dataclass(frozen=True)
class Gradient:
    """A two-stop gradient running from `start` to `end`."""

    start: str
    end: str
    kind: ColorKind = field(default=ColorKind.GRADIENT, init=False)

    @property
    def primary(self) -> str:
        return self.start


ColorSpec = Union[Solid, Gradient]


def color_spec(value: Any) -> ColorSpec:
    """
    Convert a raw theme value into a tagged color specification.

    Accepts an existing spec, a color string, or a mapping with ``from``/``to``
    (or ``start``/``end``) keys. Anything else falls back to an empty solid,
    which the color parser resolves to its default color.
    """
    if isinstance(value, (Solid, Gradient)):
        return value
    if isinstance(value, str):
        return Solid(value)
    if isinstance(value, Mapping):
        start = value.get("from", value.get("start"))
        end = value.get("to", value.get("end"))
        if start and end:
            return Gradient(str(start), str(end))
        if start or end:
            return Solid(str(start or end))
    logger.warning("Unrecognised theme color %r; using fallback", value)
    return Solid("")


@dataclass(frozen=True)
class Theme:
    """
    Colors and brightness used to draw one frame.

    Attributes:
        background: Surface clear color
        node_color: Solid or gradient fill for nodes
        connection_color: Solid or gradient stroke for connections
        pulse_color: Color of the ambient overlay glow
        node_brightness: Global node brightness multiplier (0..2)
    """

    background: str
    node_color: ColorSpec
    connection_color: ColorSpec
    pulse_color: str
    node_brightness: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "node_color", color_spec(self.node_color))
        object.__setattr__(self, "connection_color", color_spec(self.connection_color))
        object.__setattr__(self, "node_brightness", clamp(float(self.node_brightness), 0.0, 2.0))


THEME_VARIANTS: Dict[str, Theme] = {
    "default": Theme("#0a1929", Solid("#4dabf5"), Solid("#4dabf5"), "rgba(77, 171, 245, 0.5)"),
    "warm": Theme("#271a10", Solid("#ffb74d"), Solid("#ffb74d"), "rgba(255, 183, 77, 0.5)"),
    "cool": Theme("#092a2e", Solid("#4dd0e1"), Solid("#4dd0e1"), "rgba(77, 208, 225, 0.5)"),
    "night": Theme("#0d0a29", Solid("#b39ddb"), Solid("#b39ddb"), "rgba(179, 157, 219, 0.5)"),
    "highContrast": Theme("#000000", Solid("#ffffff"), Solid("#ffffff"), "rgba(255, 255, 255, 0.5)"),
    "neon": Theme("#0a0a0a", Solid("#39ff14"), Solid("#39ff14"), "rgba(57, 255, 20, 0.5)"),
}

DEFAULT_THEME = THEME_VARIANTS["default"]


def get_theme(name: str) -> Theme:
    """Look up a preset theme by name, falling back to ``default``."""
    theme = THEME_VARIANTS.get(name)
    if theme is None:
        logger.warning("Unknown theme %r; falling back to 'default'", name)
        return DEFAULT_THEME
    return theme


def theme_from_dict(data: Mapping[str, Any]) -> Theme:
    """
    Build a custom theme from a mapping.

    Keys may be camelCase (``nodeColor``) or snake_case (``node_color``).
    Missing entries are taken from the default theme, or from the preset named
    by an optional ``base`` key.
    """
    base = get_theme(str(data["base"])) if "base" in data else DEFAULT_THEME

    def pick(camel: str, snake: str, fallback):
        if camel in data:
            return data[camel]
        return data.get(snake, fallback)

    return Theme(
        background=pick("background", "background", base.background),
        node_color=pick("nodeColor", "node_color", base.node_color),
        connection_color=pick("connectionColor", "connection_color", base.connection_color),
        pulse_color=pick("pulseColor", "pulse_color", base.pulse_color),
        node_brightness=float(pick("nodeBrightness", "node_brightness", base.node_brightness)),
    )
