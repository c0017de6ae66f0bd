import math

from scene_layout import Scene, validate_scene, validation_summary
from scene_layout.validation import (
    IssueSeverity,
    validate_bbox,
    validate_element,
    validate_graph_data,
    validate_relation,
)


def fields(result, severity=None):
    return [d.field for d in result.diagnostics if severity is None or d.severity == severity]


def test_valid_scene_has_no_diagnostics(rich_scene):
    result = validate_scene(rich_scene)
    assert result.valid
    assert result.diagnostics == []


def test_scene_model_is_accepted(rich_scene):
    result = validate_scene(Scene.from_json_dict(rich_scene))
    assert result.valid


def test_opaque_payloads_are_never_inspected(make_element, make_relation):
    scene = {
        "elements": [
            make_element("a", appearance="not an object", constraints=[1, 2, 3]),
            make_element("b", appearance={"anything": {"goes": None}}),
        ],
        "relations": [make_relation("a", "b")],
    }
    assert validate_scene(scene).valid


def test_out_of_range_bbox_coordinate(make_element):
    scene = {"elements": [make_element("a", bbox=(0, 0, 1.5, 1))], "relations": []}
    result = validate_scene(scene)
    assert not result.valid
    assert fields(result, IssueSeverity.ERROR) == ["elements[0].geometry.bbox[2]"]
    assert "1.5" in result.errors[0].message


def test_bbox_wrong_arity():
    result = validate_bbox([0.1, 0.2, 0.3])
    assert not result.valid
    assert fields(result) == ["geometry.bbox"]
    assert "got 3" in result.diagnostics[0].message


def test_bbox_not_an_array():
    result = validate_bbox("0,0,1,1")
    assert fields(result) == ["geometry.bbox"]
    assert result.errors[0].message == "bbox must be an array"


def test_bbox_distinguishes_non_numeric_nan_and_range():
    result = validate_bbox(["a", math.nan, -0.1, True])
    messages = [d.message for d in result.errors]
    assert messages == [
        "x1 must be a number",
        "y1 cannot be NaN",
        "x2 must be within [0, 1], got -0.1",
        "y2 must be a number",
    ]


def test_inverted_bbox_is_only_a_warning():
    result = validate_bbox([0.8, 0.9, 0.2, 0.1])
    assert result.valid
    assert [d.severity for d in result.diagnostics] == [IssueSeverity.WARNING, IssueSeverity.WARNING]
    assert "x2 (0.2)" in result.diagnostics[0].message
    assert "y2 (0.1)" in result.diagnostics[1].message


def test_inverted_bbox_warning_skipped_when_coordinates_invalid():
    result = validate_bbox([0.8, 0.9, 0.2, 2])
    assert result.warnings == []
    assert len(result.errors) == 1


def test_degenerate_bbox_is_valid():
    assert validate_bbox([0.5, 0.5, 0.5, 0.5]).diagnostics == []


def test_polygon_points(make_element):
    el = make_element("a")
    el["geometry"]["polygon"] = [[0.1, 0.1], [0.2, 2], [0.3], "x"]
    result = validate_element(el)
    assert fields(result) == [
        "geometry.polygon[1]",
        "geometry.polygon[2]",
        "geometry.polygon[3]",
    ]


def test_polygon_must_be_array(make_element):
    el = make_element("a")
    el["geometry"]["polygon"] = {"x": 1}
    assert fields(validate_element(el)) == ["geometry.polygon"]


def test_depth_hint_accepts_any_finite_number(make_element):
    for hint in (-3.5, 0, 12, 1e6):
        el = make_element("a")
        el["geometry"]["depth_hint"] = hint
        assert validate_element(el).valid


def test_depth_hint_rejects_non_numbers(make_element):
    for hint in ("far", math.inf, math.nan, False):
        el = make_element("a")
        el["geometry"]["depth_hint"] = hint
        assert fields(validate_element(el)) == ["geometry.depth_hint"]


def test_element_required_fields():
    result = validate_element({"type": "alien", "name": "   ", "description": 3})
    assert fields(result) == ["id", "name", "type", "description", "geometry"]
    assert result.diagnostics[1].message == "name cannot be empty"
    assert "subject, object, text, background, effect" in result.diagnostics[2].message


def test_element_not_an_object_reports_at_index(make_element):
    scene = {"elements": [make_element("a"), "oops"], "relations": []}
    result = validate_scene(scene)
    assert fields(result) == ["elements[1]"]


def test_duplicate_ids_flag_every_index(make_element):
    scene = {
        "elements": [make_element("a"), make_element("b"), make_element("a")],
        "relations": [],
    }
    result = validate_scene(scene)
    assert not result.valid
    assert fields(result, IssueSeverity.ERROR) == ["elements[0].id", "elements[2].id"]
    assert all("Duplicate element ID: a" == d.message for d in result.errors)


def test_unknown_relation_endpoint(make_element, make_relation):
    scene = {
        "elements": [make_element("a")],
        "relations": [make_relation("ghost", "a")],
    }
    result = validate_scene(scene)
    assert fields(result) == ["relations[0].from"]
    assert "ghost" in result.errors[0].message


def test_relation_missing_fields_and_bad_type():
    result = validate_relation({"from": "a", "type": "near"}, {"a"})
    assert fields(result) == ["to", "type"]
    assert "occludes, attached_to, in_front_of, part_of" in result.diagnostics[1].message


def test_self_loop_is_a_warning(make_element, make_relation):
    scene = {"elements": [make_element("a")], "relations": [make_relation("a", "a")]}
    result = validate_scene(scene)
    assert result.valid
    assert fields(result, IssueSeverity.WARNING) == ["relations[0]"]


def test_elements_not_an_array_short_circuits():
    result = validate_scene({"elements": {"a": 1}, "relations": []})
    assert [d.to_dict() for d in result.diagnostics] == [
        {"field": "elements", "message": "elements must be an array", "severity": "error"},
    ]


def test_relations_checked_against_empty_ids_when_elements_malformed(make_relation):
    result = validate_graph_data(None, [make_relation("a", "b")])
    assert fields(result) == ["elements", "relations[0].from", "relations[0].to"]


def test_missing_relations_key(make_element):
    result = validate_scene({"elements": [make_element("a")]})
    assert fields(result) == ["relations"]


def test_scene_not_an_object():
    result = validate_scene(["elements"])
    assert not result.valid
    assert fields(result) == ["scene"]


def test_all_faults_are_collected(make_element, make_relation):
    scene = {
        "elements": [
            make_element("a", bbox=(0, 0, 2, 1), element_type="ghost"),
            make_element("a"),
        ],
        "relations": [make_relation("a", "zzz", "floats_over")],
    }
    result = validate_scene(scene)
    assert set(fields(result)) == {
        "elements[0].type",
        "elements[0].geometry.bbox[2]",
        "elements[0].id",
        "elements[1].id",
        "relations[0].to",
        "relations[0].type",
    }


def test_validation_summary(make_element, make_relation):
    scene = {
        "elements": [make_element("a", bbox=(0.5, 0.5, 0.1, 0.6))],
        "relations": [make_relation("a", "a"), make_relation("a", "b")],
    }
    summary = validation_summary(validate_scene(scene))
    assert summary == {"total": 3, "errors": 1, "warnings": 2, "valid": False}
