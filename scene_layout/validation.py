"""
Scene validation - Check scene descriptions for structural issues.

Provides validation that can be used by the layout pipeline, the HTTP
adapter and the CLI before any layout runs. Every check is collected;
nothing here raises for bad scene data.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .models import Scene, VALID_ELEMENT_TYPES, VALID_RELATION_TYPES

logger = logging.getLogger(__name__)

COORD_NAMES = ("x1", "y1", "x2", "y2")


class IssueSeverity(str, Enum):
    """Severity levels for validation diagnostics."""
    ERROR = "error"      # Blocks layout in any caller that respects validation
    WARNING = "warning"  # Informational, never blocks processing


@dataclass
class Diagnostic:
    """A single validation finding, addressed by its field path."""
    field: str
    message: str
    severity: IssueSeverity = IssueSeverity.ERROR

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "field": self.field,
            "message": self.message,
            "severity": self.severity.value,
        }

    def prefixed(self, prefix: str) -> "Diagnostic":
        """Return a copy whose field path sits under `prefix`."""
        path = f"{prefix}.{self.field}" if self.field else prefix
        return Diagnostic(field=path, message=self.message, severity=self.severity)


@dataclass
class ValidationResult:
    """Outcome of a validation pass. `valid` iff no error-severity diagnostic."""
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not any(d.severity == IssueSeverity.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == IssueSeverity.WARNING]

    def error(self, field_path: str, message: str):
        self.diagnostics.append(Diagnostic(field_path, message, IssueSeverity.ERROR))

    def warning(self, field_path: str, message: str):
        self.diagnostics.append(Diagnostic(field_path, message, IssueSeverity.WARNING))

    def extend(self, diagnostics: Iterable[Diagnostic], prefix: str | None = None):
        for diagnostic in diagnostics:
            self.diagnostics.append(diagnostic.prefixed(prefix) if prefix else diagnostic)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


# --- Primitive checks ---

def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_coordinate(value: Any) -> bool:
    """Check that a value is a real number inside [0, 1]."""
    return _is_number(value) and not math.isnan(value) and 0 <= value <= 1


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _check_required_string(result: ValidationResult, data: dict, key: str):
    value = data.get(key)
    if not value or not isinstance(value, str):
        result.error(key, f"{key} is a required string field")
    elif value.strip() == "":
        result.error(key, f"{key} cannot be empty")


# --- Geometry ---

def validate_bbox(bbox: Any) -> ValidationResult:
    """
    Validate a normalized bounding box.

    The bbox must be [x1, y1, x2, y2] with every value in [0, 1].
    Inverted boxes (x2 < x1 or y2 < y1) are warnings, and are only
    reported once all four coordinates are valid numbers.

    Args:
        bbox: The candidate bbox value

    Returns:
        ValidationResult with fields relative to the element
    """
    result = ValidationResult()

    if not isinstance(bbox, (list, tuple)):
        result.error("geometry.bbox", "bbox must be an array")
        return result

    if len(bbox) != 4:
        result.error("geometry.bbox", f"bbox must contain 4 coordinates, got {len(bbox)}")
        return result

    for index, value in enumerate(bbox):
        if is_valid_coordinate(value):
            continue
        name = COORD_NAMES[index]
        if not _is_number(value):
            result.error(f"geometry.bbox[{index}]", f"{name} must be a number")
        elif math.isnan(value):
            result.error(f"geometry.bbox[{index}]", f"{name} cannot be NaN")
        else:
            result.error(f"geometry.bbox[{index}]", f"{name} must be within [0, 1], got {value}")

    if result.errors:
        return result

    x1, y1, x2, y2 = bbox
    if x2 < x1:
        result.warning("geometry.bbox", f"x2 ({x2}) should be greater than or equal to x1 ({x1})")
    if y2 < y1:
        result.warning("geometry.bbox", f"y2 ({y2}) should be greater than or equal to y1 ({y1})")

    return result


def validate_geometry(geometry: Any) -> ValidationResult:
    """Validate bbox, optional polygon and optional depth_hint."""
    result = ValidationResult()

    if not isinstance(geometry, dict):
        result.error("geometry", "geometry must be an object")
        return result

    result.extend(validate_bbox(geometry.get("bbox")).diagnostics)

    polygon = geometry.get("polygon")
    if polygon is not None:
        if not isinstance(polygon, (list, tuple)):
            result.error("geometry.polygon", "polygon must be an array")
        else:
            for index, point in enumerate(polygon):
                if not isinstance(point, (list, tuple)) or len(point) != 2:
                    result.error(f"geometry.polygon[{index}]", "polygon points must be [x, y] pairs")
                elif not all(is_valid_coordinate(v) for v in point):
                    result.error(f"geometry.polygon[{index}]",
                                 "polygon point coordinates must be within [0, 1]")

    depth_hint = geometry.get("depth_hint")
    if depth_hint is not None:
        if not _is_number(depth_hint) or not math.isfinite(depth_hint):
            result.error("geometry.depth_hint", "depth_hint must be a finite number")

    return result


# --- Elements ---

def validate_element(element: Any) -> ValidationResult:
    """
    Validate a single element's shape and values.

    Checks for:
    - Non-empty string id and name - ERROR
    - type in the element type enumeration - ERROR
    - description is a string when present - ERROR
    - geometry (bbox, polygon, depth_hint) - ERROR / WARNING

    appearance and constraints are opaque and never inspected.

    Args:
        element: The candidate element (normally a dict)

    Returns:
        ValidationResult with fields relative to the element
    """
    result = ValidationResult()

    if not isinstance(element, dict):
        result.error("", "element must be an object")
        return result

    _check_required_string(result, element, "id")
    _check_required_string(result, element, "name")

    element_type = element.get("type")
    if not element_type:
        result.error("type", "type is a required field")
    elif element_type not in VALID_ELEMENT_TYPES:
        result.error("type", f"type must be one of: {', '.join(VALID_ELEMENT_TYPES)}")

    description = element.get("description")
    if description is not None and not isinstance(description, str):
        result.error("description", "description must be a string")

    if not element.get("geometry"):
        result.error("geometry", "geometry is a required field")
    else:
        result.extend(validate_geometry(element["geometry"]).diagnostics)

    return result


def validate_elements(elements: Any) -> ValidationResult:
    """
    Validate every element and check IDs are unique across the list.

    A duplicated ID is reported at every index that carries it.
    """
    result = ValidationResult()

    if not isinstance(elements, list):
        result.error("elements", "elements must be an array")
        return result

    for index, element in enumerate(elements):
        result.extend(validate_element(element).diagnostics, prefix=f"elements[{index}]")

    id_counts = Counter(
        e["id"] for e in elements
        if isinstance(e, dict) and _is_non_empty_string(e.get("id"))
    )
    for index, element in enumerate(elements):
        if not isinstance(element, dict):
            continue
        element_id = element.get("id")
        if isinstance(element_id, str) and id_counts.get(element_id, 0) > 1:
            result.error(f"elements[{index}].id", f"Duplicate element ID: {element_id}")

    return result


# --- Relations ---

def validate_relation(relation: Any, element_ids: Iterable[str]) -> ValidationResult:
    """
    Validate a relation and its references.

    Checks for:
    - from/to present and resolving to a known element - ERROR
    - type in the relation type enumeration - ERROR
    - Self-referencing relation (from == to) - WARNING

    Args:
        relation: The candidate relation (normally a dict)
        element_ids: All known element IDs

    Returns:
        ValidationResult with fields relative to the relation
    """
    result = ValidationResult()
    known_ids = element_ids if isinstance(element_ids, (set, frozenset)) else set(element_ids)

    if not isinstance(relation, dict):
        result.error("", "relation must be an object")
        return result

    for key in ("from", "to"):
        value = relation.get(key)
        if not value or not isinstance(value, str):
            result.error(key, f"{key} is a required string field")
        elif value not in known_ids:
            result.error(key, f"{key} references a non-existent element: {value}")

    relation_type = relation.get("type")
    if not relation_type:
        result.error("type", "type is a required field")
    elif relation_type not in VALID_RELATION_TYPES:
        result.error("type", f"type must be one of: {', '.join(VALID_RELATION_TYPES)}")

    source, target = relation.get("from"), relation.get("to")
    if source and target and source == target:
        result.warning("", "Self-referencing relation (from and to are the same element)")

    return result


def validate_relations(relations: Any, element_ids: Iterable[str]) -> ValidationResult:
    """Validate every relation against the given element IDs."""
    result = ValidationResult()

    if not isinstance(relations, list):
        result.error("relations", "relations must be an array")
        return result

    known_ids = set(element_ids)
    for index, relation in enumerate(relations):
        result.extend(validate_relation(relation, known_ids).diagnostics,
                      prefix=f"relations[{index}]")

    return result


# --- Whole scene ---

def collect_element_ids(elements: Any) -> set[str]:
    """Collect the string IDs of all well-formed elements."""
    if not isinstance(elements, list):
        return set()
    return {
        e["id"] for e in elements
        if isinstance(e, dict) and _is_non_empty_string(e.get("id"))
    }


def validate_graph_data(elements: Any, relations: Any) -> ValidationResult:
    """
    Validate elements and relations together.

    Relations are checked against the IDs of the elements list even when
    some elements are themselves invalid.
    """
    result = ValidationResult()
    result.extend(validate_elements(elements).diagnostics)
    result.extend(validate_relations(relations, collect_element_ids(elements)).diagnostics)

    logger.debug(
        "Validated %s elements / %s relations: %d errors, %d warnings",
        len(elements) if isinstance(elements, list) else "?",
        len(relations) if isinstance(relations, list) else "?",
        len(result.errors), len(result.warnings),
    )
    return result


def validate_scene(scene: Any) -> ValidationResult:
    """
    Validate a scene and return every diagnostic found.

    Args:
        scene: A Scene model or a plain dict with `elements` and `relations`

    Returns:
        ValidationResult; `valid` is False iff any diagnostic is an error
    """
    if isinstance(scene, Scene):
        scene = scene.to_json_dict()

    if not isinstance(scene, dict):
        result = ValidationResult()
        result.error("scene", "scene must be an object")
        return result

    return validate_graph_data(scene.get("elements"), scene.get("relations"))


def validation_summary(result: ValidationResult) -> dict:
    """
    Create a summary of validation diagnostics.

    Args:
        result: A validation result

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(result.diagnostics),
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "valid": result.valid,
    }
