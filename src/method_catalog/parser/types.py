"""Type translator."""

from typing import Any

from method_catalog.errors import SchemaError
from method_catalog.parser.base import ScreenShot, TypeInfo
from method_catalog.parser.lookup import FileLookup, resolve_display_prop
from method_catalog.parser.tree import as_map, as_string_list, as_text, optional_text


def error_type_info(type_name: str, message: str) -> TypeInfo:
    return TypeInfo(type_name=type_name, name=type_name, loading_error=message)


def translate_type(type_name: str, spec: Any, display: dict[str, Any], lookup: FileLookup) -> TypeInfo:
    try:
        spec = as_map(spec)
        icon = None
        if display.get("icon") is not None:
            image = as_text(display["icon"], "icon")
            icon = ScreenShot(url=f"img?type_name={type_name}&image_name={image}")
        return TypeInfo(
            type_name=type_name,
            name=resolve_display_prop(display, "name", lookup),
            subtitle=resolve_display_prop(display, "subtitle", lookup, required=False),
            tooltip=resolve_display_prop(display, "tooltip", lookup, required=False),
            description=resolve_display_prop(display, "description", lookup, required=False),
            icon=icon,
            view_method_ids=as_string_list(spec.get("view_method_ids"), "view_method_ids") or [],
            import_method_ids=as_string_list(spec.get("import_method_ids"), "import_method_ids")
            or [],
            landing_page_url_prefix=optional_text(
                spec.get("landing_page_url_prefix"), "landing_page_url_prefix"
            ),
        )
    except SchemaError as exc:
        exc.brief = error_type_info(type_name, str(exc))
        raise
