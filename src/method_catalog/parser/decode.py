"""Decoders for spec.json and display.yaml documents."""

import json
from pathlib import Path
from typing import Any

import yaml

from method_catalog.errors import SourceError


def _text(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


def decode_json(data: bytes | str, origin: str = "spec.json") -> Any:
    """Decode a UTF-8 JSON document into a plain tree (dicts keep source order)."""
    try:
        return json.loads(_text(data))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Cannot parse {origin}: {exc}"
        raise SourceError(msg) from exc


def decode_yaml_map(data: bytes | str, origin: str = "display.yaml") -> dict[str, Any]:
    """Decode a UTF-8 YAML document that must hold a string-keyed map.

    An empty document decodes to an empty map.
    """
    try:
        doc = yaml.safe_load(_text(data))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        msg = f"Cannot parse {origin}: {exc}"
        raise SourceError(msg) from exc
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        msg = f"Cannot parse {origin}: top level is {type(doc).__name__}, expected a map"
        raise SourceError(msg)
    return {str(key): value for key, value in doc.items()}


def read_json(file_path: Path) -> Any:
    return decode_json(_read(file_path), origin=str(file_path))


def read_yaml_map(file_path: Path) -> dict[str, Any]:
    return decode_yaml_map(_read(file_path), origin=str(file_path))


def _read(file_path: Path) -> bytes:
    try:
        return file_path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read {file_path}: {exc}"
        raise SourceError(msg) from exc
