"""Path-tracking accessors over decoded spec trees and display maps.

Every failure raises SchemaError naming the zero-based path of the node
that was being read, e.g. ``parameters/3/dropdown_options/1``.
"""

from typing import Any

from method_catalog.errors import SchemaError

ROOT = "/"

_MISSING = object()


def child_path(path: str | None, *parts: Any) -> str:
    """Join path segments, treating the root as an empty prefix."""
    segments = [] if path in (None, ROOT) else [path]
    segments.extend(str(p) for p in parts)
    return "/".join(segments) or ROOT


def required(node: Any, child: str, path: str | None = None) -> Any:
    """Return ``node[child]``; an explicit null counts as present."""
    value = node.get(child, _MISSING) if isinstance(node, dict) else _MISSING
    if value is _MISSING:
        where = path or ROOT
        msg = f"Can't find sub-node [{child}] within path [{where}] in spec.json"
        raise SchemaError(msg, path=where)
    return value


def display_prop(display: Any, prop: str, path: str | None = None) -> Any:
    """Return a required, non-null property of a display.yaml map."""
    value = display.get(prop) if isinstance(display, dict) else None
    if value is None:
        where = path or ROOT
        msg = f"Can't find property [{prop}] within path [{where}] in display.yaml"
        raise SchemaError(msg, path=where)
    return value


def as_text(value: Any, path: str | None = None) -> str:
    """String form of a scalar node (JSON spelling for booleans)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    msg = f"Expected a scalar value within path [{path or ROOT}]"
    raise SchemaError(msg, path=path or ROOT)


def as_long(value: Any, path: str | None = None) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    msg = f"Expected an integer within path [{path or ROOT}], got {value!r}"
    raise SchemaError(msg, path=path or ROOT)


def as_double(value: Any, path: str | None = None) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    msg = f"Expected a number within path [{path or ROOT}], got {value!r}"
    raise SchemaError(msg, path=path or ROOT)


def optional_text(value: Any, path: str | None = None) -> str | None:
    """None when the node is missing or null, else its string form."""
    if value is None:
        return None
    return as_text(value, path)


def optional_long(value: Any, path: str | None = None) -> int | None:
    if value is None:
        return None
    return as_long(value, path)


def as_string_list(value: Any, path: str | None = None) -> list[str] | None:
    """Element-wise string conversion in source order; None when missing."""
    if value is None:
        return None
    if not isinstance(value, list):
        msg = f"Expected a list within path [{path or ROOT}]"
        raise SchemaError(msg, path=path or ROOT)
    return [as_text(item, child_path(path, i)) for i, item in enumerate(value)]


def as_list(value: Any, path: str | None = None) -> list:
    if not isinstance(value, list):
        msg = f"Expected a list within path [{path or ROOT}]"
        raise SchemaError(msg, path=path or ROOT)
    return value


def as_map(value: Any, path: str | None = None) -> dict:
    if not isinstance(value, dict):
        msg = f"Expected an object within path [{path or ROOT}]"
        raise SchemaError(msg, path=path or ROOT)
    return value


def boolean_as_long(value: Any, path: str | None = None) -> int:
    """Map a boolean node onto the 1/0 encoding used on the wire."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return 1 if value != 0 else 0
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return 1 if value.strip().lower() == "true" else 0
    msg = f"Expected a boolean within path [{path or ROOT}], got {value!r}"
    raise SchemaError(msg, path=path or ROOT)


def required_text(node: Any, child: str, path: str | None = None) -> str:
    """A required child that must hold a non-null scalar."""
    value = required(node, child, path)
    return as_text(value, child_path(path, child))


def required_strings(node: Any, child: str, path: str | None = None) -> list[str]:
    """A required child that must hold a list of scalars."""
    value = required(node, child, path)
    return as_string_list(as_list(value, child_path(path, child)), child_path(path, child))
