import json

import pytest

from scene_layout.cli import main


def run_cli(capsys, *argv):
    with pytest.raises(SystemExit) as exc:
        main(list(argv))
    return exc.value.code, json.loads(capsys.readouterr().out)


@pytest.fixture
def scene_file(tmp_path, two_element_scene):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(two_element_scene))
    return path


def test_validate_ok(capsys, scene_file):
    code, out = run_cli(capsys, "validate", str(scene_file))
    assert code == 0
    assert out["status"] == "ok"
    assert out["summary"]["valid"] is True


def test_validate_invalid_exits_nonzero(capsys, tmp_path, make_element):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"elements": [make_element("a", bbox=(0, 0, 1))], "relations": []}))
    code, out = run_cli(capsys, "validate", str(path))
    assert code == 2
    assert out["diagnostics"][0]["field"] == "elements[0].geometry.bbox"


def test_missing_file(capsys, tmp_path):
    code, out = run_cli(capsys, "validate", str(tmp_path / "nope.json"))
    assert code == 1
    assert out["status"] == "error"


def test_layout_grid(capsys, scene_file):
    code, out = run_cli(capsys, "layout", str(scene_file), "--strategy", "grid")
    assert code == 0
    assert out["positions"] == {"A": {"x": 300.0, "y": 300.0}, "B": {"x": 500.0, "y": 300.0}}


def test_layout_with_pinned_node(capsys, tmp_path, scene_file):
    prior = tmp_path / "positions.json"
    prior.write_text(json.dumps({"A": {"x": 400, "y": 300}, "B": {"x": 410, "y": 300}}))
    code, out = run_cli(
        capsys, "layout", str(scene_file), "--strategy", "force",
        "--positions", str(prior), "--fixed", '["A"]',
    )
    assert code == 0
    assert out["positions"]["A"] == {"x": 400.0, "y": 300.0}
    assert out["positions"]["B"] != {"x": 410.0, "y": 300.0}


def test_graph_command(capsys, scene_file):
    code, out = run_cli(capsys, "graph", str(scene_file))
    assert code == 0
    assert out["graph"]["nodes"][0]["position"] == {"x": 225.0, "y": 175.0}
