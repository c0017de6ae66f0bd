from __future__ import annotations

import copy

import pytest


def element(element_id: str, bbox=(0.1, 0.1, 0.3, 0.3), element_type: str = "object", **extra) -> dict:
    data = {
        "id": element_id,
        "type": element_type,
        "name": element_id.title(),
        "description": "",
        "geometry": {"bbox": list(bbox)},
    }
    data.update(extra)
    return data


def relation(source: str, target: str, relation_type: str = "attached_to") -> dict:
    return {"from": source, "to": target, "type": relation_type}


@pytest.fixture
def make_element():
    return element


@pytest.fixture
def make_relation():
    return relation


@pytest.fixture
def two_element_scene() -> dict:
    """A top-left and a bottom-right element joined by one relation."""
    return {
        "elements": [
            element("A", bbox=(0, 0, 0.5, 0.5), element_type="subject"),
            element("B", bbox=(0.5, 0.5, 1, 1)),
        ],
        "relations": [relation("A", "B")],
    }


@pytest.fixture
def rich_scene() -> dict:
    """A scene carrying opaque payloads and extra top-level keys."""
    return copy.deepcopy({
        "meta": {"version": "1.0", "source": "upload"},
        "scene": {"summary": "A person at a table"},
        "elements": [
            element(
                "person", bbox=(0.1, 0.2, 0.5, 0.8), element_type="subject",
                appearance={"material": "skin", "color": "natural", "texture": "smooth"},
                constraints={"keep_identity": True, "preserve_text_legibility": False},
            ),
            element(
                "table", bbox=(0.3, 0.5, 0.7, 0.9),
                appearance={"material": "wood", "color": "brown", "texture": "grain"},
            ),
            element("sign", bbox=(0.6, 0.1, 0.9, 0.3), element_type="text"),
        ],
        "relations": [
            relation("person", "table", "in_front_of"),
            relation("sign", "table", "attached_to"),
        ],
        "edit_intent": {"goal": "brighten", "negatives": [], "safety": {"avoid": []}},
    })
