"""
Core data models for scenes and layout configuration.

These models define the canonical schema consumed by the layout engine:
- Elements with type, name, geometry and opaque appearance/constraints payloads
- Relations connecting elements (using from/to naming on the wire)
- Canvas and layout tunables

Field Naming Convention:
- Relations serialize as `from` and `to` (the canonical scene JSON)
- In Python they are `source` and `target` (`from` is a keyword)
- Both spellings are accepted on input
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ElementType(str, Enum):
    """Semantic types for scene elements."""
    SUBJECT = "subject"
    OBJECT = "object"
    TEXT = "text"
    BACKGROUND = "background"
    EFFECT = "effect"


class RelationType(str, Enum):
    """Typed relations between two elements."""
    OCCLUDES = "occludes"
    ATTACHED_TO = "attached_to"
    IN_FRONT_OF = "in_front_of"
    PART_OF = "part_of"


VALID_ELEMENT_TYPES = [t.value for t in ElementType]
VALID_RELATION_TYPES = [t.value for t in RelationType]


class ElementGeometry(BaseModel):
    """Normalized geometry of an element; every coordinate lies in [0, 1]."""
    model_config = ConfigDict(extra="allow")

    bbox: list[float]  # [x1, y1, x2, y2]
    polygon: Optional[list[list[float]]] = None
    depth_hint: Optional[float] = None  # Larger = further back

    def center(self) -> tuple[float, float]:
        """Get the normalized center point of the bbox."""
        x1, y1, x2, y2 = self.bbox
        return ((x1 + x2) / 2, (y1 + y2) / 2)


class Element(BaseModel):
    """
    A visual entity in the scene.

    `appearance` and `constraints` are carried as-is; nothing in the
    engine reads them.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    type: str = ElementType.OBJECT.value
    name: str
    description: Optional[str] = None
    geometry: ElementGeometry
    appearance: Optional[Any] = None
    constraints: Optional[Any] = None

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with only the keys that were given."""
        return self.model_dump(exclude_unset=True)


class Relation(BaseModel):
    """
    A directed, typed edge between two elements.

    Uses `source` and `target` as attribute names.
    Serializes as `from`/`to`.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    type: str = RelationType.ATTACHED_TO.value

    @model_validator(mode='before')
    @classmethod
    def convert_edge_fields(cls, data: Any) -> Any:
        """Accept graph-style 'source'/'target' alongside 'from'/'to'."""
        if isinstance(data, dict):
            data = dict(data)
            if 'source' in data and 'from' not in data:
                data['from'] = data.pop('source')
            if 'target' in data and 'to' not in data:
                data['to'] = data.pop('target')
        return data

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with `from`/`to` keys."""
        return self.model_dump(by_alias=True)


class Scene(BaseModel):
    """
    The aggregate being edited: elements plus relations.

    Any other top-level keys (meta, scene, edit_intent, ...) are kept
    and written back unchanged.
    """
    model_config = ConfigDict(extra="allow")

    elements: list[Element] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with proper field names."""
        data = self.model_dump(by_alias=True, exclude={"elements", "relations"})
        data["elements"] = [e.to_json_dict() for e in self.elements]
        data["relations"] = [r.to_json_dict() for r in self.relations]
        return data

    @classmethod
    def from_json_dict(cls, data: dict) -> "Scene":
        """Create a Scene from a JSON dict."""
        return cls.model_validate(data)

    def element_ids(self) -> list[str]:
        return [e.id for e in self.elements]

    def get_element(self, element_id: str) -> Optional[Element]:
        """Get an element by ID (O(n))."""
        for element in self.elements:
            if element.id == element_id:
                return element
        return None


class NodePosition(BaseModel):
    """A node center in canvas pixel space."""
    x: float
    y: float


# --- Configuration Models ---

class CanvasConfig(BaseModel):
    """Canvas used to map normalized bbox centers into pixel space."""
    width: float = Field(default=800, gt=0)
    height: float = Field(default=600, gt=0)
    padding: float = Field(default=50, ge=0)


class LayoutConfig(BaseModel):
    """
    Tunables shared by every layout strategy.

    Grid and circular layouts only read the canvas and node dimensions;
    the remaining fields drive the force simulation.
    """
    # Canvas
    width: float = Field(default=800, gt=0)
    height: float = Field(default=600, gt=0)
    padding: float = Field(default=80, ge=0)
    # Node footprint
    node_width: float = Field(default=160, ge=0)
    node_height: float = Field(default=80, ge=0)
    # Forces
    repulsion_strength: float = Field(default=8000, ge=0)
    attraction_strength: float = Field(default=0.05, ge=0)
    ideal_edge_length: float = Field(default=200, ge=0)
    center_gravity: float = Field(default=0.01, ge=0)
    damping: float = Field(default=0.85, gt=0, lt=1)
    max_velocity: float = Field(default=50, gt=0)
    # Termination
    max_iterations: int = Field(default=300, ge=0)
    min_movement: float = Field(default=0.5, ge=0)
    # Extra clearance added to the overlap threshold
    min_node_spacing: float = Field(default=40, ge=0)

    @classmethod
    def resolve(cls, config: "LayoutConfig | dict | None" = None) -> "LayoutConfig":
        """Merge a partial override dict over the defaults."""
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        return cls.model_validate(config)

    def canvas(self) -> CanvasConfig:
        return CanvasConfig(width=self.width, height=self.height, padding=self.padding)
