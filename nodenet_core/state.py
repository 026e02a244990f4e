"""
Simulation state for the node network.

This module defines the data containers the engine mutates every tick:
- Node: A simulated point with position, velocity, and rendering attributes
- Connection: A transient, animated line between two nodes
- SimulationState: Container for nodes and connections with invariant checks
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from .enums import ConnectionState

try:
    import networkx as nx

    HAS_NETWORKX = True
except ImportError:
    HAS_NETWORKX = False


Pair = Tuple[int, int]


@dataclass
class Node:
    """
    A simulated point in the network.

    Attributes:
        x, y: Position in surface space (logical units)
        vx, vy: Velocity in units per tick
        radius: Base draw radius
        phase: Pulsation phase in [0, 2π)
        brightness: Per-node brightness multiplier (0..1)
        mass: Inertia for force response (>= 0.5)
        cluster: Cluster identifier assigned at creation
        connections: Live connection count, recomputed by the engine each tick
    """

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    radius: float = 4.0
    phase: float = 0.0
    brightness: float = 1.0
    mass: float = 1.0
    cluster: int = 0
    connections: int = 0

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)


def ease_out_quart(x: float) -> float:
    """Ease-out curve ``1 - (1 - x)^4`` for x clamped to [0, 1]."""
    x = max(0.0, min(1.0, x))
    return 1.0 - (1.0 - x) ** 4


@dataclass
class Connection:
    """
    An animated line between two nodes.

    Node indices are stored in canonical order (``from_node < to_node``); use
    `Connection.between` to build one from an arbitrary pair.

    Attributes:
        from_node: Smaller node index (growth origin)
        to_node: Larger node index (growth target)
        start_time: Creation timestamp in ms
        duration: Growth duration in ms
        strength: Spring coefficient multiplier
        opacity: Per-connection opacity multiplier (0..1)
        state: GROWING or COMPLETED
        progress: Raw growth progress (0..1), non-decreasing
    """

    from_node: int
    to_node: int
    start_time: float
    duration: float
    strength: float = 1.0
    opacity: float = 1.0
    state: ConnectionState = ConnectionState.GROWING
    progress: float = 0.0

    def __post_init__(self):
        if self.from_node == self.to_node:
            raise ValueError(f"connection endpoints must differ (got {self.from_node})")
        if self.from_node > self.to_node:
            raise ValueError(
                f"connection endpoints must be canonical (from < to), got ({self.from_node}, {self.to_node})"
            )

    @classmethod
    def between(cls, i: int, j: int, **kwargs) -> "Connection":
        """Create a connection for the unordered pair (i, j)."""
        a, b = (i, j) if i < j else (j, i)
        return cls(a, b, **kwargs)

    @property
    def pair(self) -> Pair:
        return (self.from_node, self.to_node)

    @property
    def is_growing(self) -> bool:
        return self.state == ConnectionState.GROWING

    @property
    def is_completed(self) -> bool:
        return self.state == ConnectionState.COMPLETED

    @property
    def eased_progress(self) -> float:
        """Progress after the ease-out curve; 1.0 once completed."""
        return 1.0 if self.is_completed else ease_out_quart(self.progress)

    def other(self, index: int) -> int:
        return self.to_node if index == self.from_node else self.from_node


class SimulationState:
    """
    Container for the nodes and connections of one simulation run.

    The state owns no behavior beyond bookkeeping: the force model and the
    connection lifecycle manager mutate it, the renderer only reads it.

    Attributes:
        nodes: Node list; indices are the identity used by connections
        connections: Live connections in creation order
        width, height: Logical surface dimensions bounding node positions
    """

    def __init__(self, width: float = 0.0, height: float = 0.0, nodes: Iterable[Node] | None = None):
        self.width = float(width)
        self.height = float(height)
        self.nodes: List[Node] = list(nodes or [])
        self.connections: List[Connection] = []
        self._pairs: Set[Pair] = set()

    # ----- connections -----
    def has_connection(self, i: int, j: int) -> bool:
        """Return True if the unordered pair (i, j) is already connected."""
        return ((i, j) if i < j else (j, i)) in self._pairs

    def add_connection(self, conn: Connection) -> Connection:
        """
        Add a connection, enforcing one connection per unordered pair.

        Raises:
            ValueError: If the pair is already connected or an endpoint does
                not exist.
        """
        if conn.to_node >= len(self.nodes) or conn.from_node < 0:
            raise ValueError(f"connection {conn.pair} references a missing node")
        if conn.pair in self._pairs:
            raise ValueError(f"connection {conn.pair} already exists")
        self.connections.append(conn)
        self._pairs.add(conn.pair)
        return conn

    def remove_connection(self, conn: Connection) -> None:
        self.connections.remove(conn)
        self._pairs.discard(conn.pair)

    def remove_connections(self, doomed: Iterable[Connection]) -> int:
        doomed_ids = {id(c) for c in doomed}
        if not doomed_ids:
            return 0
        before = len(self.connections)
        self.connections = [c for c in self.connections if id(c) not in doomed_ids]
        self._pairs = {c.pair for c in self.connections}
        return before - len(self.connections)

    def connections_for(self, index: int) -> List[Connection]:
        return [c for c in self.connections if c.from_node == index or c.to_node == index]

    def growing(self) -> List[Connection]:
        return [c for c in self.connections if c.is_growing]

    def completed(self) -> List[Connection]:
        return [c for c in self.connections if c.is_completed]

    def prune_invalid(self) -> int:
        """Drop connections whose endpoints are no longer in the node list."""
        n = len(self.nodes)
        return self.remove_connections([c for c in self.connections if c.to_node >= n or c.from_node < 0])

    def recount_connections(self) -> None:
        """Refresh each node's derived live-connection count."""
        for node in self.nodes:
            node.connections = 0
        for c in self.connections:
            self.nodes[c.from_node].connections += 1
            self.nodes[c.to_node].connections += 1

    # ----- nodes -----
    def replace_nodes(self, nodes: Iterable[Node], width: float | None = None, height: float | None = None) -> None:
        """Swap in a new node batch; every existing connection is dropped."""
        if width is not None:
            self.width = float(width)
        if height is not None:
            self.height = float(height)
        self.nodes = list(nodes)
        self.connections = []
        self._pairs = set()

    def distance(self, i: int, j: int) -> float:
        a, b = self.nodes[i], self.nodes[j]
        return math.hypot(b.x - a.x, b.y - a.y)

    def clone(self) -> "SimulationState":
        return copy.deepcopy(self)

    # ----- validation -----
    def validate_invariants(self, capacity: int | None = None) -> Dict[str, List[str]]:
        """
        Check the structural invariants of the state.

        Args:
            capacity: Optional connection capacity to check against

        Returns:
            Dict with lists of issue descriptions under keys ``bounds``,
            ``duplicates``, ``ordering``, ``progress`` and ``capacity``.
            Empty lists mean the invariant holds.
        """
        issues: Dict[str, List[str]] = {
            "bounds": [],
            "duplicates": [],
            "ordering": [],
            "progress": [],
            "capacity": [],
        }

        for idx, node in enumerate(self.nodes):
            if not (0.0 <= node.x <= self.width and 0.0 <= node.y <= self.height):
                issues["bounds"].append(f"node {idx} at ({node.x:.2f}, {node.y:.2f}) outside {self.width}x{self.height}")

        seen: Set[Pair] = set()
        for c in self.connections:
            key = (min(c.from_node, c.to_node), max(c.from_node, c.to_node))
            if key in seen:
                issues["duplicates"].append(f"pair {key} connected more than once")
            seen.add(key)
            if c.from_node >= c.to_node:
                issues["ordering"].append(f"connection {c.pair} not canonical")
            if not 0.0 <= c.progress <= 1.0:
                issues["progress"].append(f"connection {c.pair} progress {c.progress}")
            if c.is_completed and c.progress != 1.0:
                issues["progress"].append(f"completed connection {c.pair} progress {c.progress}")

        if capacity is not None and len(self.connections) > capacity:
            issues["capacity"].append(f"{len(self.connections)} connections exceed capacity {capacity}")

        return issues

    def is_valid(self, capacity: int | None = None) -> bool:
        return not any(self.validate_invariants(capacity).values())

    # ----- export -----
    def to_networkx(self) -> "nx.Graph":
        """
        Convert the current nodes and connections into a NetworkX graph.

        Returns:
            nx.Graph with node attributes (x, y, cluster, mass) and edge
            attributes (state, progress, strength, start_time).

        Raises:
            ImportError: If NetworkX is not installed
        """
        if not HAS_NETWORKX:
            raise ImportError(
                "NetworkX is required for graph export. Install with: pip install networkx"
            )

        G = nx.Graph()
        for idx, node in enumerate(self.nodes):
            G.add_node(
                idx,
                x=float(node.x),
                y=float(node.y),
                cluster=int(node.cluster),
                mass=float(node.mass),
                radius=float(node.radius),
            )
        for c in self.connections:
            G.add_edge(
                c.from_node,
                c.to_node,
                state=c.state.name,
                progress=float(c.progress),
                strength=float(c.strength),
                start_time=float(c.start_time),
            )
        return G

    def export_graphml(self, filepath: str) -> None:
        """Write the current state to a GraphML file via NetworkX."""
        nx.write_graphml(self.to_networkx(), filepath)
