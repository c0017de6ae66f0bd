"""
Layout algorithms for scene graph nodes.

Provides interchangeable layout strategies that share one output contract:
- Force: Force-directed layout using repulsion, springs and center gravity
- Grid: Row-major grid centered in the usable canvas
- Circular: Even spacing around a circle, clockwise from 12 o'clock
- Smart: Force layout only when the current positions overlap

Every function takes a position map and returns a new one; inputs are
never mutated. Free node positions are always clamped to
[padding + half, dim - padding - half] on each axis.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from .models import LayoutConfig, NodePosition

logger = logging.getLogger(__name__)

Positions = dict[str, NodePosition]

# Standalone overlap check spacing (smart layout passes min_node_spacing instead)
DEFAULT_OVERLAP_SPACING = 20
# Distances are floored here so coincident nodes cannot divide by zero
MIN_DISTANCE = 1.0


@dataclass
class ForceNode:
    """A node in the force simulation (center coordinates)."""
    id: str
    x: float
    y: float
    width: float
    height: float
    fixed: bool = False


@dataclass
class ForceEdge:
    """An edge pulling two nodes together."""
    source: str
    target: str


@dataclass
class SimulationResult:
    """Final positions plus how the simulation terminated."""
    positions: Positions
    iterations: int
    converged: bool


# --- Geometry helpers ---

def _distance(x1: float, y1: float, x2: float, y2: float) -> float:
    dx = x2 - x1
    dy = y2 - y1
    return math.sqrt(dx * dx + dy * dy)


def _clamp_axis(value: float, size: float, padding: float, half: float) -> float:
    """Clamp one coordinate; collapse to the canvas center when nothing fits."""
    low = padding + half
    high = size - padding - half
    if low > high:
        return size / 2
    return max(low, min(high, value))


def clamp_position(x: float, y: float, config: LayoutConfig,
                   width: Optional[float] = None,
                   height: Optional[float] = None) -> NodePosition:
    """Clamp a node center so its footprint stays inside the padded canvas."""
    half_w = (config.node_width if width is None else width) / 2
    half_h = (config.node_height if height is None else height) / 2
    return NodePosition(
        x=_clamp_axis(x, config.width, config.padding, half_w),
        y=_clamp_axis(y, config.height, config.padding, half_h),
    )


def nodes_overlap(n1: ForceNode, n2: ForceNode, spacing: float) -> bool:
    """
    Axis-aligned bounding-box overlap test.

    Each box is grown by half the spacing on every side, so two nodes
    overlap when their gap is smaller than `spacing` on both axes.
    """
    half_w1 = n1.width / 2 + spacing / 2
    half_h1 = n1.height / 2 + spacing / 2
    half_w2 = n2.width / 2 + spacing / 2
    half_h2 = n2.height / 2 + spacing / 2

    return (
        abs(n1.x - n2.x) < half_w1 + half_w2
        and abs(n1.y - n2.y) < half_h1 + half_h2
    )


def has_overlap(
    positions: Positions,
    node_width: float = 160,
    node_height: float = 80,
    spacing: float = DEFAULT_OVERLAP_SPACING
) -> bool:
    """
    Check whether any pair of nodes overlaps.

    Args:
        positions: Node centers by ID
        node_width: Footprint width shared by all nodes
        node_height: Footprint height shared by all nodes
        spacing: Minimum clearance between nodes

    Returns:
        True as soon as one overlapping pair is found
    """
    nodes = [
        ForceNode(id=node_id, x=pos.x, y=pos.y, width=node_width, height=node_height)
        for node_id, pos in positions.items()
    ]
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            if nodes_overlap(nodes[i], nodes[j], spacing):
                return True
    return False


# --- Force simulation ---

Velocity = dict[str, tuple[float, float]]

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


def _separation_direction(i: int, j: int, count: int) -> tuple[float, float]:
    """Unit vector for pushing apart two coincident nodes, fixed per pair."""
    angle = GOLDEN_ANGLE * (i * count + j)
    return (math.cos(angle), math.sin(angle))


def _accumulate_repulsion(nodes: list[ForceNode], velocity: Velocity, cfg: LayoutConfig):
    """Inverse-square push between every unordered pair."""
    for i, node_a in enumerate(nodes):
        for j in range(i + 1, len(nodes)):
            node_b = nodes[j]
            if node_a.fixed and node_b.fixed:
                continue

            dx = node_a.x - node_b.x
            dy = node_a.y - node_b.y
            if dx == 0 and dy == 0:
                dx, dy = _separation_direction(i, j, len(nodes))
            dist = max(MIN_DISTANCE, _distance(node_a.x, node_a.y, node_b.x, node_b.y))

            # Closer than the safe distance: push twice as hard
            min_dist = (node_a.width + node_b.width) / 2 + cfg.min_node_spacing
            strength = cfg.repulsion_strength * 2 if dist < min_dist else cfg.repulsion_strength
            force = strength / (dist * dist)

            fx = dx / dist * force
            fy = dy / dist * force

            if not node_a.fixed:
                vx, vy = velocity[node_a.id]
                velocity[node_a.id] = (vx + fx, vy + fy)
            if not node_b.fixed:
                vx, vy = velocity[node_b.id]
                velocity[node_b.id] = (vx - fx, vy - fy)


def _accumulate_attraction(node_map: dict[str, ForceNode], edges: Iterable[ForceEdge],
                           velocity: Velocity, cfg: LayoutConfig):
    """Linear spring toward the ideal edge length; dangling edges are skipped."""
    for edge in edges:
        source = node_map.get(edge.source)
        target = node_map.get(edge.target)
        if source is None or target is None:
            continue

        dx = target.x - source.x
        dy = target.y - source.y
        dist = max(MIN_DISTANCE, _distance(source.x, source.y, target.x, target.y))

        # Hooke's law: F = k * (d - d0)
        force = cfg.attraction_strength * (dist - cfg.ideal_edge_length)
        fx = dx / dist * force
        fy = dy / dist * force

        if not source.fixed:
            vx, vy = velocity[source.id]
            velocity[source.id] = (vx + fx, vy + fy)
        if not target.fixed:
            vx, vy = velocity[target.id]
            velocity[target.id] = (vx - fx, vy - fy)


def _accumulate_center_gravity(nodes: list[ForceNode], velocity: Velocity, cfg: LayoutConfig):
    center_x = cfg.width / 2
    center_y = cfg.height / 2
    for node in nodes:
        if node.fixed:
            continue
        vx, vy = velocity[node.id]
        velocity[node.id] = (
            vx + (center_x - node.x) * cfg.center_gravity,
            vy + (center_y - node.y) * cfg.center_gravity,
        )


def _apply_velocity(nodes: list[ForceNode], velocity: Velocity, cfg: LayoutConfig) -> float:
    """
    Damp, cap and apply each free node's velocity, then clamp to the canvas.

    Returns:
        Total movement, the sum of |dx| + |dy| over free nodes
    """
    total_movement = 0.0

    for node in nodes:
        if node.fixed:
            continue

        vx, vy = velocity[node.id]
        vx *= cfg.damping
        vy *= cfg.damping

        speed = math.sqrt(vx * vx + vy * vy)
        if speed > cfg.max_velocity:
            vx = vx / speed * cfg.max_velocity
            vy = vy / speed * cfg.max_velocity

        clamped = clamp_position(node.x + vx, node.y + vy, cfg, node.width, node.height)
        # Measured after clamping: a node pressed against the border is at rest
        total_movement += abs(clamped.x - node.x) + abs(clamped.y - node.y)

        node.x = clamped.x
        node.y = clamped.y

    return total_movement


def simulate(
    nodes: list[ForceNode],
    edges: list[ForceEdge],
    config: "LayoutConfig | dict | None" = None
) -> SimulationResult:
    """
    Run the force-directed simulation over a prepared node set.

    Each iteration starts from a fresh zero velocity buffer, accumulates
    repulsion, edge attraction and center gravity, then applies it once.
    The loop stops after `max_iterations` or as soon as total movement
    drops below `min_movement * len(nodes)`.

    Args:
        nodes: Simulation nodes; these are copied, never mutated
        edges: Edges between node IDs (unknown IDs are ignored)
        config: LayoutConfig, partial override dict, or None for defaults

    Returns:
        SimulationResult with final positions and termination info
    """
    cfg = LayoutConfig.resolve(config)
    working = [ForceNode(n.id, n.x, n.y, n.width, n.height, n.fixed) for n in nodes]

    if not working:
        return SimulationResult(positions={}, iterations=0, converged=True)

    if len(working) == 1:
        # A lone node is always centered, pinned or not
        position = NodePosition(x=cfg.width / 2, y=cfg.height / 2)
        return SimulationResult(positions={working[0].id: position}, iterations=0, converged=True)

    node_map = {n.id: n for n in working}
    edge_list = list(edges)
    threshold = cfg.min_movement * len(working)

    logger.debug("Force simulation: %d nodes, %d edges, threshold %.2f",
                 len(working), len(edge_list), threshold)

    iterations = 0
    converged = False
    for iteration in range(cfg.max_iterations):
        velocity: Velocity = {n.id: (0.0, 0.0) for n in working}

        _accumulate_repulsion(working, velocity, cfg)
        _accumulate_attraction(node_map, edge_list, velocity, cfg)
        _accumulate_center_gravity(working, velocity, cfg)

        movement = _apply_velocity(working, velocity, cfg)
        iterations = iteration + 1

        if movement < threshold:
            converged = True
            break

    logger.debug("Force simulation finished after %d iterations (converged=%s)",
                 iterations, converged)

    positions: Positions = {}
    for node in working:
        if node.fixed:
            positions[node.id] = NodePosition(x=node.x, y=node.y)
        else:
            # max_iterations=0 still honours the bounds
            positions[node.id] = clamp_position(node.x, node.y, cfg, node.width, node.height)

    return SimulationResult(positions=positions, iterations=iterations, converged=converged)


def force_layout(
    positions: Positions,
    edges: list[ForceEdge],
    config: "LayoutConfig | dict | None" = None,
    fixed: Optional[Iterable[str]] = None
) -> Positions:
    """
    Arrange nodes using a force-directed layout.

    Simulates physical forces:
    - All nodes repel each other (like charged particles)
    - Connected nodes are pulled toward the ideal edge length (springs)
    - Every node drifts gently toward the canvas center

    Args:
        positions: Initial node centers by ID
        edges: Edges between node IDs
        config: LayoutConfig, partial override dict, or None for defaults
        fixed: IDs of pinned nodes that must not move

    Returns:
        New position map with one entry per input node. Zero nodes
        returns the input unchanged; a single node is centered even when
        it is pinned.
    """
    if not positions:
        return positions

    cfg = LayoutConfig.resolve(config)
    pinned = set(fixed or ())
    nodes = [
        ForceNode(
            id=node_id, x=pos.x, y=pos.y,
            width=cfg.node_width, height=cfg.node_height,
            fixed=node_id in pinned,
        )
        for node_id, pos in positions.items()
    ]
    return simulate(nodes, edges, cfg).positions


def smart_layout(
    positions: Positions,
    edges: list[ForceEdge],
    config: "LayoutConfig | dict | None" = None,
    fixed: Optional[Iterable[str]] = None
) -> Positions:
    """
    Run force layout only if the current positions overlap.

    Returns the input map itself when no pair overlaps, so repeated calls
    after each edit are cheap no-ops.
    """
    cfg = LayoutConfig.resolve(config)

    if not has_overlap(positions, cfg.node_width, cfg.node_height, cfg.min_node_spacing):
        logger.debug("Smart layout: no overlap among %d nodes, skipping", len(positions))
        return positions

    return force_layout(positions, edges, cfg, fixed=fixed)


def grid_layout(
    node_ids: list[str],
    config: "LayoutConfig | dict | None" = None
) -> Positions:
    """
    Arrange nodes in a grid pattern.

    Cells are node size plus `min_node_spacing`; the column count is the
    most that fits the usable width, and the filled block is centered in
    the usable area. Rows that run past the bottom are clamped.

    Args:
        node_ids: Node IDs in placement order (row-major)
        config: LayoutConfig, partial override dict, or None for defaults

    Returns:
        Position map keyed by node ID
    """
    cfg = LayoutConfig.resolve(config)
    if not node_ids:
        return {}

    effective_width = cfg.width - 2 * cfg.padding
    effective_height = cfg.height - 2 * cfg.padding

    cell_width = cfg.node_width + cfg.min_node_spacing
    cell_height = cfg.node_height + cfg.min_node_spacing

    columns = max(1, math.floor(effective_width / cell_width)) if cell_width > 0 else len(node_ids)
    rows = math.ceil(len(node_ids) / columns)

    actual_width = min(columns, len(node_ids)) * cell_width
    actual_height = rows * cell_height
    if actual_height > effective_height:
        logger.warning("Grid of %d rows does not fit the canvas height; clamping positions", rows)

    offset_x = cfg.padding + (effective_width - actual_width) / 2 + cell_width / 2
    offset_y = cfg.padding + (effective_height - actual_height) / 2 + cell_height / 2

    result: Positions = {}
    for index, node_id in enumerate(node_ids):
        col = index % columns
        row = index // columns
        result[node_id] = clamp_position(
            offset_x + col * cell_width,
            offset_y + row * cell_height,
            cfg,
        )

    return result


def circular_layout(
    node_ids: list[str],
    config: "LayoutConfig | dict | None" = None
) -> Positions:
    """
    Arrange nodes evenly around a circle, clockwise from the top.

    A single node sits at the canvas center.
    """
    cfg = LayoutConfig.resolve(config)
    if not node_ids:
        return {}

    center_x = cfg.width / 2
    center_y = cfg.height / 2

    if len(node_ids) == 1:
        return {node_ids[0]: NodePosition(x=center_x, y=center_y)}

    radius = min(cfg.width, cfg.height) / 2 - cfg.padding - cfg.node_width / 2
    angle_step = 2 * math.pi / len(node_ids)

    result: Positions = {}
    for index, node_id in enumerate(node_ids):
        # Screen y grows downward, so increasing angles run clockwise
        angle = index * angle_step - math.pi / 2
        result[node_id] = clamp_position(
            center_x + radius * math.cos(angle),
            center_y + radius * math.sin(angle),
            cfg,
        )

    return result


# --- Strategy dispatch ---

class LayoutStrategy(str, Enum):
    """Available layout strategies."""
    FORCE = "force"
    GRID = "grid"
    CIRCULAR = "circular"
    SMART = "smart"


def resolve_strategy(strategy: "LayoutStrategy | str") -> LayoutStrategy:
    """Turn a strategy tag into a LayoutStrategy, raising ValueError if unknown."""
    try:
        return LayoutStrategy(strategy)
    except ValueError:
        valid = ", ".join(s.value for s in LayoutStrategy)
        raise ValueError(f"Unknown layout strategy '{strategy}'. Use one of: {valid}") from None


StrategyFn = Callable[[Positions, list[ForceEdge], LayoutConfig, set[str]], Positions]


def _run_force(positions, edges, cfg, fixed):
    return force_layout(positions, edges, cfg, fixed=fixed)


def _run_smart(positions, edges, cfg, fixed):
    return smart_layout(positions, edges, cfg, fixed=fixed)


def _run_grid(positions, edges, cfg, fixed):
    return grid_layout(list(positions), cfg)


def _run_circular(positions, edges, cfg, fixed):
    return circular_layout(list(positions), cfg)


STRATEGIES: dict[LayoutStrategy, StrategyFn] = {
    LayoutStrategy.FORCE: _run_force,
    LayoutStrategy.GRID: _run_grid,
    LayoutStrategy.CIRCULAR: _run_circular,
    LayoutStrategy.SMART: _run_smart,
}


def apply_layout(
    strategy: "LayoutStrategy | str",
    positions: Positions,
    edges: list[ForceEdge],
    config: "LayoutConfig | dict | None" = None,
    fixed: Optional[Iterable[str]] = None
) -> Positions:
    """
    Run one layout strategy by tag.

    Grid and circular layouts place nodes in the order of `positions`
    and ignore edges and pinned nodes.

    Raises:
        ValueError: If the strategy tag is unknown
    """
    chosen = resolve_strategy(strategy)
    cfg = LayoutConfig.resolve(config)
    return STRATEGIES[chosen](positions, edges, cfg, set(fixed or ()))
