#!/usr/bin/env python3
"""Scene layout CLI - validate and lay out scene JSON files."""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from .layout import LayoutStrategy
from .models import CanvasConfig, LayoutConfig, NodePosition, Scene
from .pipeline import layout_scene
from .transform import scene_to_graph
from .validation import validate_scene, validation_summary


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _load_json(path):
    """Read a JSON file, reporting unreadable input as a CLI error."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        _json_out({"status": "error", "error": f"File not found: {path}"}, 1)
    except json.JSONDecodeError as e:
        _json_out({"status": "error", "error": f"Invalid JSON in {path}: {e}"}, 1)


def _load_positions(path):
    if path is None:
        return None
    data = _load_json(path)
    return {node_id: NodePosition(**pos) for node_id, pos in data.items()}


def _parse_list_arg(value):
    """Parse a JSON list argument or return an empty list."""
    if value is None:
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return []
    return parsed if isinstance(parsed, list) else []


def _layout_config(args):
    overrides = {
        "width": args.width,
        "height": args.height,
        "padding": args.padding,
        "node_width": args.node_width,
        "node_height": args.node_height,
        "max_iterations": args.max_iterations,
    }
    return LayoutConfig.resolve({k: v for k, v in overrides.items() if v is not None})


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_validate(args):
    scene = _load_json(args.file)
    result = validate_scene(scene)
    _json_out({
        "status": "ok" if result.valid else "invalid",
        **result.to_dict(),
        "summary": validation_summary(result),
    }, 0 if result.valid else 2)


def cmd_graph(args):
    scene = _load_json(args.file)
    result = validate_scene(scene)
    if not result.valid:
        _json_out({"status": "invalid", **result.to_dict()}, 2)

    canvas = CanvasConfig(
        width=args.width or 800,
        height=args.height or 600,
        padding=args.padding if args.padding is not None else 50,
    )
    graph = scene_to_graph(
        Scene.from_json_dict(scene),
        canvas,
        positions=_load_positions(args.positions),
        auto_layout=args.auto_layout,
    )
    _json_out({"status": "ok", "graph": graph.to_json_dict()})


def cmd_layout(args):
    scene = _load_json(args.file)
    try:
        outcome = layout_scene(
            scene,
            strategy=args.strategy,
            config=_layout_config(args),
            positions=_load_positions(args.positions),
            fixed=_parse_list_arg(args.fixed),
        )
    except ValidationError as e:
        _json_out({"status": "error", "error": f"Invalid layout config: {e}"}, 1)
    except ValueError as e:
        _json_out({"status": "error", "error": str(e)}, 1)

    if not outcome.valid:
        _json_out({"status": "invalid", **outcome.to_dict()}, 2)
    _json_out({"status": "ok", "strategy": args.strategy, **outcome.to_dict()})


def cmd_serve(args):
    from .api import run
    run(host=args.host, port=args.port)


# ── Main ─────────────────────────────────────────────────────────────────────

def _add_canvas_args(p):
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--padding", type=float, default=None)
    p.add_argument("--positions", default=None, help="JSON file of {id: {x, y}} overrides")


def build_parser():
    from .api import DEFAULT_HOST, DEFAULT_PORT

    parser = argparse.ArgumentParser(description="Scene layout CLI")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("validate")
    p.add_argument("file")

    p = sub.add_parser("graph")
    p.add_argument("file")
    _add_canvas_args(p)
    p.add_argument("--auto-layout", action="store_true")

    p = sub.add_parser("layout")
    p.add_argument("file")
    _add_canvas_args(p)
    p.add_argument("--strategy", default=LayoutStrategy.SMART.value,
                   choices=[s.value for s in LayoutStrategy])
    p.add_argument("--node-width", type=float, default=None)
    p.add_argument("--node-height", type=float, default=None)
    p.add_argument("--max-iterations", type=int, default=None)
    p.add_argument("--fixed", default=None, help="JSON list of pinned node IDs")

    p = sub.add_parser("serve")
    p.add_argument("--host", default=DEFAULT_HOST)
    p.add_argument("--port", type=int, default=DEFAULT_PORT)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmd_map = {
        "validate": cmd_validate,
        "graph": cmd_graph,
        "layout": cmd_layout,
        "serve": cmd_serve,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
