"""Category translator. Categories are described by spec.json alone."""

from typing import Any

from method_catalog.errors import SchemaError
from method_catalog.parser.base import Category
from method_catalog.parser.tree import as_map, as_string_list, optional_text, required_text


def error_category(category_id: str, message: str) -> Category:
    return Category(id=category_id, name=category_id, loading_error=message)


def translate_category(category_id: str, spec: Any, display: dict[str, Any] | None = None) -> Category:
    # display is accepted for symmetry with the other translators and ignored
    try:
        spec = as_map(spec)
        return Category(
            id=category_id,
            name=required_text(spec, "name"),
            ver=required_text(spec, "ver"),
            tooltip=optional_text(spec.get("tooltip"), "tooltip"),
            description=optional_text(spec.get("description"), "description"),
            parent_ids=as_string_list(spec.get("parent_ids"), "parent_ids") or [],
        )
    except SchemaError as exc:
        exc.brief = error_category(category_id, str(exc))
        raise
