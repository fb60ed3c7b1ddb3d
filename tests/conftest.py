import json
from pathlib import Path

import pytest
import yaml


def _param(param_id: str, **extra) -> dict:
    node = {
        "id": param_id,
        "optional": False,
        "advanced": False,
        "allow_multiple": False,
        "default_values": [""],
        "field_type": "text",
        "text_options": {"valid_ws_types": ["KBaseGenomes.Genome"]},
    }
    node.update(extra)
    return node


def _param_display(name: str) -> dict:
    return {"ui-name": name, "short-hint": "h", "long-hint": "H"}


@pytest.fixture
def method_spec() -> dict:
    return {
        "ver": "1.0",
        "authors": ["A"],
        "contact": "a@b",
        "categories": ["x"],
        "widgets": {"input": "in_widget", "output": "out_widget"},
        "behavior": {"python_class": "Assembler", "python_function": "run"},
        "parameters": [_param("p1"), _param("p2")],
    }


@pytest.fixture
def method_display() -> dict:
    return {
        "name": "Hello",
        "subtitle": "Says hello",
        "tooltip": "Greets",
        "description": "from yaml",
        "technical-description": "tech",
        "parameters": {"p1": _param_display("P1"), "p2": _param_display("P2")},
    }


@pytest.fixture
def app_spec() -> dict:
    return {
        "ver": "0.2",
        "authors": ["B"],
        "contact": "b@c",
        "categories": ["x"],
        "steps": [
            {"step_id": "s1", "method_id": "hello"},
            {
                "step_id": "s2",
                "method_id": "hello",
                "input_mapping": [
                    {"step_source": "s1", "is_from_input": True, "from": "out", "to": "p1"}
                ],
            },
        ],
    }


def write_entity(directory: Path, spec: dict, display: dict | None = None, files: dict | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "spec.json").write_text(json.dumps(spec), encoding="utf-8")
    if display is not None:
        (directory / "display.yaml").write_text(yaml.safe_dump(display), encoding="utf-8")
    for name, content in (files or {}).items():
        (directory / name).write_text(content, encoding="utf-8")
    return directory


@pytest.fixture
def content_root(tmp_path, method_spec, method_display, app_spec) -> Path:
    """A content tree with one good and one broken entity of each kind."""
    root = tmp_path / "content"
    write_entity(root / "categories" / "x", {"name": "X", "ver": "1", "tooltip": "x things"})
    write_entity(root / "categories" / "bad", {"ver": "1"})

    write_entity(root / "methods" / "hello", method_spec, method_display)
    broken = dict(method_spec, behavior={
        "service-mapping": {
            "url": "",
            "method": "run",
            "input_mapping": [{"input_parameter": "ghost"}],
            "output_mapping": [],
        }
    })
    write_entity(root / "methods" / "broken", broken, method_display)

    write_entity(root / "apps" / "pipeline", app_spec, {"name": "Pipeline"})
    write_entity(root / "apps" / "no_steps", {k: v for k, v in app_spec.items() if k != "steps"}, {"name": "Nope"})

    write_entity(
        root / "types" / "KBaseGenomes.Genome",
        {"view_method_ids": ["hello"], "import_method_ids": []},
        {"name": "Genome", "icon": "genome.png"},
    )
    write_entity(root / "types" / "Unnamed", {}, {})
    return root


@pytest.fixture
def entity_writer():
    return write_entity
