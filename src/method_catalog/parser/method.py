"""Method translator.

Turns one method's spec.json tree, display.yaml map and sibling-file lookup
into its brief info, full info and full spec records.
"""

import logging
from typing import Any

from method_catalog.errors import CrossRefError, SchemaError
from method_catalog.parser.base import (
    CheckboxOptions,
    DropdownOptions,
    FloatSliderOptions,
    IntSliderOptions,
    MethodBehavior,
    MethodBriefInfo,
    MethodData,
    MethodFullInfo,
    MethodParameter,
    MethodSpec,
    RadioOptions,
    ScreenShot,
    ServiceInputMapping,
    ServiceMapping,
    ServiceOutputMapping,
    TextAreaOptions,
    TextOptions,
    WidgetSpec,
)
from method_catalog.parser.lookup import FileLookup, resolve_display_prop
from method_catalog.parser.tree import (
    as_double,
    as_list,
    as_long,
    as_map,
    as_string_list,
    as_text,
    boolean_as_long,
    child_path,
    display_prop,
    optional_long,
    optional_text,
    required,
    required_strings,
    required_text,
)

logger = logging.getLogger(__name__)

SERVICE_MAPPING_PATH = "behavior/service-mapping"

MAPPING_SOURCE_FIELDS = {"input_parameter", "narrative_system_variable", "constant_value"}
INPUT_MAPPING_FIELDS = MAPPING_SOURCE_FIELDS | {
    "target_argument_position",
    "target_property",
    "target_type_transform",
}
OUTPUT_MAPPING_FIELDS = MAPPING_SOURCE_FIELDS | {
    "target_property",
    "target_type_transform",
    "service_method_output_path",
}


def screenshot_url(method_id: str, image_name: str) -> str:
    return f"img?method_id={method_id}&image_name={image_name}"


def error_method_brief(method_id: str, message: str, name: str | None = None) -> MethodBriefInfo:
    """Stand-in brief for a method that failed to load."""
    return MethodBriefInfo(
        id=method_id,
        name=name or method_id,
        categories=["error"],
        loading_error=message,
    )


def translate_method(
    method_id: str, spec: Any, display: dict[str, Any], lookup: FileLookup
) -> MethodData:
    """Translate one method.

    Raises SchemaError (or its CrossRefError subclass) carrying the path of
    the offending node; the error's ``brief`` holds the error-tagged brief
    that should represent the method in the index.
    """
    partial: dict[str, Any] = {}
    try:
        return _translate(method_id, as_map(spec), display, lookup, partial)
    except SchemaError as exc:
        exc.brief = error_method_brief(method_id, str(exc), name=partial.get("name"))
        raise


def _translate(
    method_id: str,
    spec: dict[str, Any],
    display: dict[str, Any],
    lookup: FileLookup,
    partial: dict[str, Any],
) -> MethodData:
    categories = required_strings(spec, "categories")

    name = resolve_display_prop(display, "name", lookup)
    partial["name"] = name
    subtitle = resolve_display_prop(display, "subtitle", lookup, required=False)
    tooltip = resolve_display_prop(display, "tooltip", lookup, required=False)
    description = resolve_display_prop(display, "description", lookup, required=False)
    technical_description = resolve_display_prop(
        display, "technical-description", lookup, required=False
    )

    ver = required_text(spec, "ver")
    required_strings(spec, "authors")
    contact = required_text(spec, "contact")

    screenshots = _parse_screenshots(method_id, display)
    widgets = _parse_widgets(required(spec, "widgets"))
    behavior = _parse_behavior(required(spec, "behavior"))
    parameters = _parse_parameters(required(spec, "parameters"), display)
    _check_references(behavior.service_mapping, {p.id for p in parameters})

    brief = MethodBriefInfo(
        id=method_id,
        name=name,
        ver=ver,
        subtitle=subtitle,
        tooltip=tooltip,
        categories=categories,
    )
    full = MethodFullInfo(
        id=method_id,
        name=name,
        ver=ver,
        authors=None,
        contact=contact,
        subtitle=subtitle,
        tooltip=tooltip,
        description=description,
        technical_description=technical_description,
        categories=categories,
        screenshots=screenshots,
    )
    method_spec = MethodSpec(info=brief, widgets=widgets, behavior=behavior, parameters=parameters)
    return MethodData(brief=brief, full=full, spec=method_spec)


def _parse_screenshots(method_id: str, display: dict[str, Any]) -> list[ScreenShot]:
    names = as_string_list(display.get("screenshots"), "screenshots") or []
    return [ScreenShot(url=screenshot_url(method_id, name)) for name in names]


def _parse_widgets(node: Any) -> WidgetSpec:
    node = as_map(node, "widgets")
    return WidgetSpec(
        input=optional_text(node.get("input"), "widgets/input"),
        output=optional_text(node.get("output"), "widgets/output"),
    )


def _parse_behavior(node: Any) -> MethodBehavior:
    node = as_map(node, "behavior")
    service_mapping = None
    if node.get("service-mapping") is not None:
        service_mapping = _parse_service_mapping(
            as_map(node["service-mapping"], SERVICE_MAPPING_PATH)
        )
    return MethodBehavior(
        python_class=optional_text(node.get("python_class"), "behavior/python_class"),
        python_function=optional_text(node.get("python_function"), "behavior/python_function"),
        service_mapping=service_mapping,
    )


def _parse_service_mapping(node: dict[str, Any]) -> ServiceMapping:
    input_path = f"{SERVICE_MAPPING_PATH}/input_mapping"
    input_nodes = as_list(required(node, "input_mapping", SERVICE_MAPPING_PATH), input_path)
    input_mapping = [
        ServiceInputMapping(
            **_parse_mapping_entry(entry, f"{input_path}/{i}", INPUT_MAPPING_FIELDS, "parameter")
        )
        for i, entry in enumerate(input_nodes)
    ]

    output_path = f"{SERVICE_MAPPING_PATH}/output_mapping"
    output_nodes = as_list(required(node, "output_mapping", SERVICE_MAPPING_PATH), output_path)
    output_mapping = [
        ServiceOutputMapping(
            **_parse_mapping_entry(entry, f"{output_path}/{i}", OUTPUT_MAPPING_FIELDS, "output")
        )
        for i, entry in enumerate(output_nodes)
    ]

    return ServiceMapping(
        url=required_text(node, "url", SERVICE_MAPPING_PATH),
        name=optional_text(node.get("name"), f"{SERVICE_MAPPING_PATH}/name"),
        method=required_text(node, "method", SERVICE_MAPPING_PATH),
        input_mapping=input_mapping,
        output_mapping=output_mapping,
    )


def _parse_mapping_entry(entry: Any, path: str, allowed: set[str], kind: str) -> dict[str, Any]:
    entry = as_map(entry, path)
    values: dict[str, Any] = {}
    for field, value in entry.items():
        if field not in allowed:
            msg = f"Unknown field [{field}] in method {kind} mapping structure within path {path}"
            raise SchemaError(msg, path=path)
        field_path = f"{path}/{field}"
        if field == "constant_value":
            values[field] = value
        elif field == "target_argument_position":
            values[field] = optional_long(value, field_path)
        elif field == "service_method_output_path":
            values[field] = as_string_list(value, field_path)
        else:
            values[field] = optional_text(value, field_path)
    return values


def _parse_parameters(node: Any, display: dict[str, Any]) -> list[MethodParameter]:
    param_nodes = as_list(node, "parameters")
    if not param_nodes:
        return []
    params_display = as_map(display_prop(display, "parameters"), "parameters")

    parameters: list[MethodParameter] = []
    seen: set[str] = set()
    for i, param_node in enumerate(param_nodes):
        path = f"parameters/{i}"
        param = _parse_parameter(as_map(param_node, path), path, params_display)
        if param.id in seen:
            msg = f"Duplicate parameter id [{param.id}] within path [{path}]"
            raise SchemaError(msg, path=path)
        seen.add(param.id)
        parameters.append(param)
    return parameters


def _parse_parameter(
    node: dict[str, Any], path: str, params_display: dict[str, Any]
) -> MethodParameter:
    param_id = required_text(node, "id", path)
    display_path = f"parameters/{param_id}"
    param_display = as_map(display_prop(params_display, param_id, "parameters"), display_path)

    options = {
        attr: parse(node[attr], child_path(path, attr))
        for attr, parse in _OPTION_PARSERS.items()
        if node.get(attr) is not None
    }
    if len(options) > 1:
        logger.warning(
            "Parameter %s declares several option groups: %s",
            param_id,
            ", ".join(options),
            extra={"path": path},
        )

    return MethodParameter(
        id=param_id,
        ui_name=as_text(display_prop(param_display, "ui-name", display_path)),
        short_hint=as_text(display_prop(param_display, "short-hint", display_path)),
        long_hint=as_text(display_prop(param_display, "long-hint", display_path)),
        optional=boolean_as_long(required(node, "optional", path), f"{path}/optional"),
        advanced=boolean_as_long(required(node, "advanced", path), f"{path}/advanced"),
        allow_multiple=boolean_as_long(
            required(node, "allow_multiple", path), f"{path}/allow_multiple"
        ),
        default_values=required_strings(node, "default_values", path),
        field_type=required_text(node, "field_type", path),
        **options,
    )


def _parse_text_options(node: Any, path: str) -> TextOptions:
    node = as_map(node, path)
    return TextOptions(
        valid_ws_types=as_string_list(node.get("valid_ws_types"), f"{path}/valid_ws_types"),
        validate_as=optional_text(node.get("validate_as"), f"{path}/validate_as"),
    )


def _parse_checkbox_options(node: Any, path: str) -> CheckboxOptions:
    return CheckboxOptions(
        checked_value=as_long(required(node, "checked_value", path), f"{path}/checked_value"),
        unchecked_value=as_long(required(node, "unchecked_value", path), f"{path}/unchecked_value"),
    )


def _parse_dropdown_options(node: Any, path: str) -> DropdownOptions:
    items = as_list(required(node, "options", path), f"{path}/options")
    ids_to_options: dict[str, str] = {}
    for j, item in enumerate(items):
        item_path = f"{path}/{j}"
        ids_to_options[required_text(item, "id", item_path)] = required_text(
            item, "ui_name", item_path
        )
    return DropdownOptions(ids_to_options=ids_to_options)


def _parse_floatslider_options(node: Any, path: str) -> FloatSliderOptions:
    return FloatSliderOptions(
        min=as_double(required(node, "min", path), f"{path}/min"),
        max=as_double(required(node, "max", path), f"{path}/max"),
    )


def _parse_intslider_options(node: Any, path: str) -> IntSliderOptions:
    return IntSliderOptions(
        min=as_long(required(node, "min", path), f"{path}/min"),
        max=as_long(required(node, "max", path), f"{path}/max"),
        step=as_long(required(node, "step", path), f"{path}/step"),
    )


def _parse_radio_options(node: Any, path: str) -> RadioOptions:
    items = as_list(required(node, "options", path), f"{path}/options")
    ids_to_options: dict[str, str] = {}
    ids_to_tooltip: dict[str, str] = {}
    for j, item in enumerate(items):
        item_path = f"{path}/{j}"
        option_id = required_text(item, "id", item_path)
        ids_to_options[option_id] = required_text(item, "ui_name", item_path)
        ids_to_tooltip[option_id] = required_text(item, "ui_tooltip", item_path)
    return RadioOptions(ids_to_options=ids_to_options, ids_to_tooltip=ids_to_tooltip)


def _parse_textarea_options(node: Any, path: str) -> TextAreaOptions:
    return TextAreaOptions(n_rows=as_long(required(node, "n_rows", path), f"{path}/n_rows"))


_OPTION_PARSERS = {
    "text_options": _parse_text_options,
    "checkbox_options": _parse_checkbox_options,
    "dropdown_options": _parse_dropdown_options,
    "floatslider_options": _parse_floatslider_options,
    "intslider_options": _parse_intslider_options,
    "radio_options": _parse_radio_options,
    "textarea_options": _parse_textarea_options,
}


def _check_references(mapping: ServiceMapping | None, param_ids: set[str]) -> None:
    if mapping is None:
        return
    groups = (("input_mapping", mapping.input_mapping), ("output_mapping", mapping.output_mapping))
    for kind, entries in groups:
        for i, entry in enumerate(entries):
            if entry.input_parameter is not None and entry.input_parameter not in param_ids:
                path = f"{SERVICE_MAPPING_PATH}/{kind}/{i}"
                msg = f"Undeclared parameter [{entry.input_parameter}] found within path [{path}]"
                raise CrossRefError(msg, path=path)
