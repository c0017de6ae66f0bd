"""
Graph transform - Convert between scenes and node/edge graph data.

This is the boundary between business data (elements and relations) and
layout data (positioned nodes and edges):
- scene_to_graph seeds node positions from bbox centers or overrides
- graph_to_scene rebuilds a scene from the graph payloads
- Editing helpers return new GraphData and never mutate their input

Positions are not part of the canonical scene schema; graph_to_scene
drops them and callers keep them through extract_node_positions.
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .layout import ForceEdge, smart_layout
from .models import CanvasConfig, Element, LayoutConfig, NodePosition, Relation, Scene

logger = logging.getLogger(__name__)


class ElementNodeData(BaseModel):
    """Payload carried by a graph node."""
    element: Element
    is_selected: bool = False


class GraphNode(BaseModel):
    """A positioned node wrapping one element."""
    id: str
    type: Literal["element"] = "element"
    position: NodePosition
    data: ElementNodeData


class RelationEdgeData(BaseModel):
    """Payload carried by a graph edge."""
    relation: Relation


class GraphEdge(BaseModel):
    """An edge wrapping one relation."""
    id: str
    source: str
    target: str
    type: Literal["relation"] = "relation"
    data: RelationEdgeData
    label: str = ""
    animated: bool = False

    def to_json_dict(self) -> dict:
        data = self.model_dump()
        data["data"] = {"relation": self.data.relation.to_json_dict()}
        return data


class GraphData(BaseModel):
    """Nodes and edges ready for an interactive canvas."""
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with `from`/`to` relation keys."""
        return {
            "nodes": [
                {**n.model_dump(exclude={"data"}),
                 "data": {"element": n.data.element.to_json_dict(),
                          "is_selected": n.data.is_selected}}
                for n in self.nodes
            ],
            "edges": [e.to_json_dict() for e in self.edges],
        }


def edge_id(source: str, target: str, index: int) -> str:
    """Edge IDs include the relation index so parallel relations stay distinct."""
    return f"edge-{source}-{target}-{index}"


def _relation_edge(relation: Relation, index: int) -> GraphEdge:
    return GraphEdge(
        id=edge_id(relation.source, relation.target, index),
        source=relation.source,
        target=relation.target,
        data=RelationEdgeData(relation=relation),
        label=relation.type,
    )


# --- Position seeding ---

def calculate_initial_position(
    element: Element,
    config: Optional[CanvasConfig] = None
) -> NodePosition:
    """
    Map an element's bbox center into canvas space.

    Args:
        element: Scene element with a normalized bbox
        config: Canvas dimensions and padding

    Returns:
        padding + center * usable size, per axis
    """
    config = config or CanvasConfig()
    center_x, center_y = element.geometry.center()

    effective_width = config.width - 2 * config.padding
    effective_height = config.height - 2 * config.padding

    return NodePosition(
        x=config.padding + center_x * effective_width,
        y=config.padding + center_y * effective_height,
    )


# --- Scene -> Graph ---

def scene_to_graph(
    scene: Scene,
    config: Optional[CanvasConfig] = None,
    positions: Optional[dict[str, NodePosition]] = None,
    auto_layout: bool = False,
    layout_config: "LayoutConfig | dict | None" = None
) -> GraphData:
    """
    Convert a scene into graph data.

    Each element becomes one node and each relation one edge; parallel
    relations between the same pair stay as parallel edges.

    Args:
        scene: A validated scene
        config: Canvas used to seed positions from bboxes
        positions: Optional position overrides (e.g. user-dragged nodes).
            Only used when non-empty; elements it lacks are seeded from bbox.
        auto_layout: Run smart layout over the seeded positions when no
            overrides are given
        layout_config: Layout tunables for auto_layout; canvas size and
            padding are taken from `config`

    Returns:
        GraphData with one node per element and one edge per relation
    """
    config = config or CanvasConfig()
    has_overrides = bool(positions)

    seeded: dict[str, NodePosition] = {}
    for element in scene.elements:
        if has_overrides and element.id in positions:
            seeded[element.id] = positions[element.id]
        else:
            seeded[element.id] = calculate_initial_position(element, config)

    if auto_layout and not has_overrides:
        cfg = LayoutConfig.resolve(layout_config).model_copy(update={
            "width": config.width,
            "height": config.height,
            "padding": config.padding,
        })
        seeded = smart_layout(seeded, graph_force_edges(scene.relations), cfg)

    nodes = [
        GraphNode(
            id=element.id,
            position=seeded[element.id],
            data=ElementNodeData(element=element),
        )
        for element in scene.elements
    ]
    edges = [_relation_edge(relation, index) for index, relation in enumerate(scene.relations)]

    logger.debug("Built graph with %d nodes and %d edges", len(nodes), len(edges))
    return GraphData(nodes=nodes, edges=edges)


def graph_force_edges(relations: list[Relation]) -> list[ForceEdge]:
    """One force edge per relation (multiplicity preserved)."""
    return [ForceEdge(source=r.source, target=r.target) for r in relations]


# --- Graph -> Scene ---

def graph_to_scene(graph: GraphData, original: Scene) -> Scene:
    """
    Rebuild a scene from graph payloads.

    Element and relation payloads are taken from the graph as-is; every
    other field of the original scene is kept unchanged. Node positions
    are dropped.
    """
    return original.model_copy(update={
        "elements": [node.data.element for node in graph.nodes],
        "relations": [edge.data.relation for edge in graph.edges],
    })


def apply_positions(graph: GraphData, positions: dict[str, NodePosition]) -> GraphData:
    """Return graph data with node positions replaced from a position map."""
    return graph.model_copy(update={
        "nodes": [
            node.model_copy(update={"position": positions[node.id]})
            if node.id in positions else node
            for node in graph.nodes
        ],
    })


# --- Editing helpers ---

def extract_node_positions(graph: GraphData) -> dict[str, NodePosition]:
    """Copy out node positions, e.g. to persist user-dragged layouts."""
    return {node.id: node.position.model_copy() for node in graph.nodes}


def update_node_position(graph: GraphData, node_id: str, position: NodePosition) -> GraphData:
    return apply_positions(graph, {node_id: position.model_copy()})


def update_node_selection(graph: GraphData, node_id: Optional[str]) -> GraphData:
    """Select one node (or none when node_id is None)."""
    return graph.model_copy(update={
        "nodes": [
            node.model_copy(update={
                "data": node.data.model_copy(update={"is_selected": node.id == node_id}),
            })
            for node in graph.nodes
        ],
    })


def update_node_element(graph: GraphData, node_id: str, element: Element) -> GraphData:
    """Replace the element payload of one node."""
    return graph.model_copy(update={
        "nodes": [
            node.model_copy(update={
                "data": node.data.model_copy(update={"element": element}),
            }) if node.id == node_id else node
            for node in graph.nodes
        ],
    })


def add_edge(graph: GraphData, source: str, target: str, relation_type: str) -> GraphData:
    """Append a new relation edge between two nodes."""
    relation = Relation(source=source, target=target, type=relation_type)
    new_edge = _relation_edge(relation, len(graph.edges))
    return graph.model_copy(update={"edges": [*graph.edges, new_edge]})


def remove_edge(graph: GraphData, edge_id_to_remove: str) -> GraphData:
    return graph.model_copy(update={
        "edges": [edge for edge in graph.edges if edge.id != edge_id_to_remove],
    })
