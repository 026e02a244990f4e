"""
Force model for the node network.

Each tick every node accumulates force from four independent contributors:

1. Pointer: attraction toward the pointer inside ``mouse_radius``
2. Cluster: mild attraction to same-cluster peers inside a distance band,
   plus short-range repulsion, producing loose "breathing" clusters
3. Connection springs: attraction/repulsion toward a minimum separation for
   every connection touching the node
4. Jitter: a small random perturbation that breaks periodic motion

Forces are computed for all nodes from the pre-step positions, then each node
is integrated (damping, velocity ceiling, reflective boundaries). Coincident
nodes (distance 0) contribute zero force rather than NaN.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Tuple

from .config import SimulationConfig
from .state import Connection, Node, SimulationState

Vector = Tuple[float, float]
Point = Tuple[float, float]

TWO_PI = 2.0 * math.pi


def calculate_force(distance: float, strength: float, min_distance: float, max_distance: float) -> float:
    """
    Scalar force for a pair at `distance`.

    Below `min_distance` the result is a repulsive ``-2 * strength``; beyond
    `max_distance` it is zero; in between it falls off linearly from
    `strength` to zero.
    """
    if distance < min_distance:
        return -strength * 2.0
    if distance > max_distance or max_distance <= min_distance:
        return 0.0
    return strength * (1.0 - (distance - min_distance) / (max_distance - min_distance))


def _direction(dx: float, dy: float) -> Optional[Tuple[float, float, float]]:
    """Unit vector and length for (dx, dy), or None when the length is 0."""
    distance = math.hypot(dx, dy)
    if distance == 0.0 or not math.isfinite(distance):
        return None
    return dx / distance, dy / distance, distance


def pointer_force(node: Node, pointer: Optional[Point], config: SimulationConfig) -> Vector:
    if pointer is None or config.mouse_radius <= 0:
        return 0.0, 0.0
    d = _direction(pointer[0] - node.x, pointer[1] - node.y)
    if d is None:
        return 0.0, 0.0
    ux, uy, distance = d
    if distance >= config.mouse_radius:
        return 0.0, 0.0
    magnitude = (1.0 - distance / config.mouse_radius) * config.mouse_force
    return ux * magnitude, uy * magnitude


def cluster_force(index: int, nodes: List[Node], config: SimulationConfig) -> Vector:
    node = nodes[index]
    fx = fy = 0.0
    for j, other in enumerate(nodes):
        if j == index or other.cluster != node.cluster:
            continue
        d = _direction(other.x - node.x, other.y - node.y)
        if d is None:
            continue
        ux, uy, distance = d
        attraction = calculate_force(
            distance, config.cluster_force, config.cluster_min_distance, config.cluster_max_distance
        )
        repulsion = calculate_force(distance, config.repulsion_force, 0.0, config.repulsion_distance)
        fx += ux * (attraction - repulsion)
        fy += uy * (attraction - repulsion)
    return fx, fy


def connection_force(
    index: int,
    state: SimulationState,
    config: SimulationConfig,
    incident: Optional[List[Connection]] = None,
) -> Vector:
    node = state.nodes[index]
    min_distance = config.node_size * 4.0
    if incident is None:
        incident = state.connections_for(index)
    fx = fy = 0.0
    for conn in incident:
        other = state.nodes[conn.other(index)]
        d = _direction(other.x - node.x, other.y - node.y)
        if d is None:
            continue
        ux, uy, distance = d
        magnitude = calculate_force(
            distance,
            config.connection_strength * conn.strength,
            min_distance,
            config.connection_distance,
        )
        fx += ux * magnitude
        fy += uy * magnitude
    return fx, fy


def jitter_force(rng: random.Random, config: SimulationConfig) -> Vector:
    if config.jitter <= 0:
        return 0.0, 0.0
    return (rng.random() - 0.5) * config.jitter, (rng.random() - 0.5) * config.jitter


def integrate(node: Node, fx: float, fy: float, width: float, height: float, config: SimulationConfig) -> None:
    """
    Advance one node by one tick under force (fx, fy).

    Velocity is damped, accelerated by ``F / mass`` and capped at
    ``max_velocity``; the position is then advanced and reflected back into
    ``[0, width] x [0, height]`` with ``restitution`` energy loss.
    """
    mass = max(node.mass, 0.5)
    node.vx = node.vx * config.damping + fx / mass
    node.vy = node.vy * config.damping + fy / mass

    speed = math.hypot(node.vx, node.vy)
    if not math.isfinite(speed):
        node.vx = node.vy = 0.0
    elif speed > config.max_velocity:
        scale = config.max_velocity / speed
        node.vx *= scale
        node.vy *= scale

    node.x += node.vx
    node.y += node.vy

    if node.x < 0.0 or node.x > width:
        node.vx *= -config.restitution
        node.x = max(0.0, min(width, node.x))
    if node.y < 0.0 or node.y > height:
        node.vy *= -config.restitution
        node.y = max(0.0, min(height, node.y))

    node.phase = (node.phase + config.phase_step) % TWO_PI


def compute_forces(
    state: SimulationState,
    pointer: Optional[Point],
    config: SimulationConfig,
    rng: random.Random,
) -> List[Vector]:
    """Net force on every node, evaluated against the current positions."""
    incidence: List[List[Connection]] = [[] for _ in state.nodes]
    for conn in state.connections:
        incidence[conn.from_node].append(conn)
        incidence[conn.to_node].append(conn)

    forces: List[Vector] = []
    for i, node in enumerate(state.nodes):
        px, py = pointer_force(node, pointer, config)
        cx, cy = cluster_force(i, state.nodes, config)
        sx, sy = connection_force(i, state, config, incidence[i])
        jx, jy = jitter_force(rng, config)
        forces.append((px + cx + sx + jx, py + cy + sy + jy))
    return forces


def apply_forces(
    state: SimulationState,
    pointer: Optional[Point],
    config: SimulationConfig,
    rng: random.Random,
) -> None:
    """Compute all forces, then integrate every node in place."""
    forces = compute_forces(state, pointer, config, rng)
    for node, (fx, fy) in zip(state.nodes, forces):
        integrate(node, fx, fy, state.width, state.height, config)
