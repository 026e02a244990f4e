"""
Core enumerations for the node network engine.

This module defines the lifecycle states of connections and the tags used to
distinguish solid from gradient theme colors.
"""

from enum import Enum, auto


class ConnectionState(Enum):
    """
    Lifecycle states of a connection between two nodes.

    Connections only ever move forward through these states:
    - GROWING: The line is animating from its origin node toward its target
    - COMPLETED: The line is fully drawn and eligible for eviction
    """

    GROWING = auto()
    """Connection is still animating; never evicted in this state."""

    COMPLETED = auto()
    """Connection has finished growing and rests at steady opacity."""


class ColorKind(Enum):
    """
    Tags for theme color specifications.

    - SOLID: A single color string
    - GRADIENT: A two-stop gradient between a start and an end color
    """

    SOLID = auto()
    """Single color."""

    GRADIENT = auto()
    """Two-stop gradient (start -> end)."""
