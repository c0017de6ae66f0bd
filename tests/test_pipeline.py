import pytest

from scene_layout import LayoutConfig, NodePosition, Scene, layout_scene


def test_invalid_scene_stops_after_validation(two_element_scene):
    two_element_scene["relations"][0]["to"] = "missing"
    outcome = layout_scene(two_element_scene)
    assert not outcome.valid
    assert outcome.positions == {}
    assert outcome.graph is None
    assert outcome.to_dict()["diagnostics"][0]["field"] == "relations[0].to"


def test_smart_layout_keeps_non_overlapping_seeds(two_element_scene):
    outcome = layout_scene(two_element_scene, strategy="smart")
    assert outcome.valid
    # Seeded from bbox centers with the layout canvas (padding 80)
    assert outcome.positions == {
        "A": NodePosition(x=240, y=190),
        "B": NodePosition(x=560, y=410),
    }


@pytest.mark.parametrize("strategy", ["force", "grid", "circular", "smart"])
def test_every_strategy_positions_every_element(rich_scene, strategy):
    cfg = LayoutConfig(width=1000, height=700)
    outcome = layout_scene(rich_scene, strategy=strategy, config=cfg)
    assert set(outcome.positions) == {"person", "table", "sign"}
    for pos in outcome.positions.values():
        assert cfg.padding + cfg.node_width / 2 <= pos.x <= cfg.width - cfg.padding - cfg.node_width / 2
        assert cfg.padding + cfg.node_height / 2 <= pos.y <= cfg.height - cfg.padding - cfg.node_height / 2
    assert outcome.graph.get_node("table").position == outcome.positions["table"]


def test_scene_model_input(rich_scene):
    outcome = layout_scene(Scene.from_json_dict(rich_scene), strategy="grid")
    assert outcome.valid
    assert len(outcome.positions) == 3


def test_prior_positions_are_the_starting_point(two_element_scene):
    prior = {"A": NodePosition(x=300, y=200), "B": NodePosition(x=600, y=420)}
    outcome = layout_scene(two_element_scene, strategy="smart", positions=prior)
    assert outcome.positions == prior


def test_warnings_do_not_block_layout(make_element, make_relation):
    scene = {
        "elements": [make_element("a", bbox=(0.6, 0.6, 0.2, 0.2))],
        "relations": [make_relation("a", "a")],
    }
    outcome = layout_scene(scene, strategy="force")
    assert outcome.valid
    assert len(outcome.validation.warnings) == 3
    assert outcome.positions == {"a": NodePosition(x=400, y=300)}


def test_unknown_strategy_raises(two_element_scene):
    with pytest.raises(ValueError):
        layout_scene(two_element_scene, strategy="spiral")


def test_smart_seeds_near_the_edges_are_clamped(make_element):
    scene = {
        "elements": [
            make_element("a", bbox=(0, 0, 0.1, 0.1)),
            make_element("b", bbox=(0.9, 0.9, 1, 1)),
        ],
        "relations": [],
    }
    outcome = layout_scene(scene)
    # Usable centers: x in [160, 640], y in [120, 480]
    assert outcome.positions == {
        "a": NodePosition(x=160, y=120),
        "b": NodePosition(x=640, y=480),
    }
    assert outcome.graph.get_node("b").position == NodePosition(x=640, y=480)


def test_pinned_seeds_are_not_clamped(make_element):
    scene = {
        "elements": [make_element("a", bbox=(0, 0, 0.1, 0.1)), make_element("b", bbox=(0.9, 0.9, 1, 1))],
        "relations": [],
    }
    outcome = layout_scene(scene, fixed=["a"])
    assert outcome.positions["a"] == NodePosition(x=112, y=102)
    assert outcome.positions["b"] == NodePosition(x=640, y=480)
