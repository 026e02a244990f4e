"""
Node Network Core Package.

This package contains the simulation side of the animated node network,
including:

- Core data structures (Node, Connection, SimulationState)
- The force model (pointer, cluster, repulsion, connection springs, jitter)
- The connection lifecycle manager (growth, eviction, creation)
- The per-tick engine and its configuration
- Theme and color utilities

Rendering lives in the separate `nodenet_render` package so the simulation
can run headless.
"""

__version__ = "0.1.0"

from .enums import ConnectionState, ColorKind
from .config import SimulationConfig
from .themes import Theme, Solid, Gradient, THEME_VARIANTS, get_theme, theme_from_dict
from .state import Node, Connection, SimulationState
from .engine import Engine
from .loader import config_from_dict, config_from_yaml, config_from_file

# expose metrics utilities
from .metrics import (
    kinetic_energy,
    mean_speed,
    max_speed,
    connection_counts,
    cluster_sizes,
    connection_churn,
)
