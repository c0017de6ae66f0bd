"""
Layout pipeline - validate, build the graph, lay it out, merge positions.

Callers that only need one step can use the validation, transform and
layout modules directly; this module chains them in order and stops
after validation when the scene has errors.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .layout import LayoutStrategy, apply_layout, clamp_position, resolve_strategy
from .models import LayoutConfig, NodePosition, Scene
from .transform import (
    GraphData,
    apply_positions,
    extract_node_positions,
    graph_force_edges,
    scene_to_graph,
)
from .validation import ValidationResult, validate_scene

logger = logging.getLogger(__name__)


@dataclass
class LayoutOutcome:
    """Everything one layout request produces."""
    validation: ValidationResult
    positions: dict[str, NodePosition] = field(default_factory=dict)
    graph: Optional[GraphData] = None

    @property
    def valid(self) -> bool:
        return self.validation.valid

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "diagnostics": [d.to_dict() for d in self.validation.diagnostics],
            "positions": {k: p.model_dump() for k, p in self.positions.items()},
        }


def layout_scene(
    scene: Any,
    strategy: "LayoutStrategy | str" = LayoutStrategy.SMART,
    config: "LayoutConfig | dict | None" = None,
    positions: Optional[dict[str, NodePosition]] = None,
    fixed: Optional[Iterable[str]] = None
) -> LayoutOutcome:
    """
    Validate a scene and compute node positions with one strategy.

    Args:
        scene: Scene model or plain dict
        strategy: force, grid, circular or smart
        config: Layout tunables; the canvas for bbox seeding comes from here
        positions: Prior positions (e.g. user drags) to start from
        fixed: IDs of nodes the force strategies must not move

    Returns:
        LayoutOutcome; positions and graph are empty when validation fails

    Raises:
        ValueError: If the strategy tag is unknown
    """
    strategy = resolve_strategy(strategy)
    cfg = LayoutConfig.resolve(config)

    validation = validate_scene(scene)
    if not validation.valid:
        logger.info("Scene rejected with %d validation errors", len(validation.errors))
        return LayoutOutcome(validation=validation)

    if not isinstance(scene, Scene):
        scene = Scene.from_json_dict(scene)

    graph = scene_to_graph(scene, cfg.canvas(), positions=positions)
    pinned = set(fixed or ())
    # Bbox seeds ignore the node footprint, so free ones are clamped here
    seeded = {
        node_id: pos if node_id in pinned else clamp_position(pos.x, pos.y, cfg)
        for node_id, pos in extract_node_positions(graph).items()
    }

    laid_out = apply_layout(strategy, seeded, graph_force_edges(scene.relations), cfg, fixed=pinned)

    return LayoutOutcome(
        validation=validation,
        positions=laid_out,
        graph=apply_positions(graph, laid_out),
    )
