"""
Scene Layout - Validation, graph transform and layout for scene graph editors.

This package provides the pure functions an interactive node/edge canvas
needs: check a scene description for structural problems, turn it into a
graph, and compute non-overlapping node positions.
"""

from .models import (
    # Enums
    ElementType,
    RelationType,
    # Scene models
    ElementGeometry,
    Element,
    Relation,
    Scene,
    NodePosition,
    # Configuration
    CanvasConfig,
    LayoutConfig,
)

from .validation import (
    validate_scene,
    validate_graph_data,
    validate_elements,
    validate_relations,
    validate_element,
    validate_relation,
    validate_bbox,
    validation_summary,
    Diagnostic,
    IssueSeverity,
    ValidationResult,
)
from .layout import (
    ForceNode,
    ForceEdge,
    LayoutStrategy,
    simulate,
    force_layout,
    smart_layout,
    grid_layout,
    circular_layout,
    has_overlap,
    apply_layout,
)
from .transform import (
    GraphNode,
    GraphEdge,
    GraphData,
    calculate_initial_position,
    scene_to_graph,
    graph_to_scene,
    extract_node_positions,
)
from .pipeline import layout_scene, LayoutOutcome

__all__ = [
    # Enums
    "ElementType",
    "RelationType",
    # Models
    "ElementGeometry",
    "Element",
    "Relation",
    "Scene",
    "NodePosition",
    "CanvasConfig",
    "LayoutConfig",
    # Validation
    "validate_scene",
    "validate_graph_data",
    "validate_elements",
    "validate_relations",
    "validate_element",
    "validate_relation",
    "validate_bbox",
    "validation_summary",
    "Diagnostic",
    "IssueSeverity",
    "ValidationResult",
    # Layout
    "ForceNode",
    "ForceEdge",
    "LayoutStrategy",
    "simulate",
    "force_layout",
    "smart_layout",
    "grid_layout",
    "circular_layout",
    "has_overlap",
    "apply_layout",
    # Transform
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "calculate_initial_position",
    "scene_to_graph",
    "graph_to_scene",
    "extract_node_positions",
    # Pipeline
    "layout_scene",
    "LayoutOutcome",
]
