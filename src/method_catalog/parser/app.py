"""App translator: a method-like document whose body is a list of steps."""

from typing import Any

from method_catalog.errors import SchemaError
from method_catalog.parser.base import (
    AppBriefInfo,
    AppData,
    AppFullInfo,
    AppSpec,
    AppStep,
    AppStepInputMapping,
    ScreenShot,
    WidgetSpec,
)
from method_catalog.parser.lookup import FileLookup, resolve_display_prop
from method_catalog.parser.tree import (
    as_list,
    as_map,
    as_string_list,
    boolean_as_long,
    optional_text,
    required,
    required_strings,
    required_text,
)


def error_app_brief(app_id: str, message: str, name: str | None = None) -> AppBriefInfo:
    return AppBriefInfo(id=app_id, name=name or app_id, categories=["error"], loading_error=message)


def translate_app(app_id: str, spec: Any, display: dict[str, Any], lookup: FileLookup) -> AppData:
    """Translate one app; failures carry an error brief like methods do."""
    partial: dict[str, Any] = {}
    try:
        return _translate(app_id, as_map(spec), display, lookup, partial)
    except SchemaError as exc:
        exc.brief = error_app_brief(app_id, str(exc), name=partial.get("name"))
        raise


def _translate(
    app_id: str,
    spec: dict[str, Any],
    display: dict[str, Any],
    lookup: FileLookup,
    partial: dict[str, Any],
) -> AppData:
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

    images = as_string_list(display.get("screenshots"), "screenshots") or []
    screenshots = [ScreenShot(url=f"img?app_id={app_id}&image_name={image}") for image in images]

    widgets_node = as_map(spec.get("widgets") or {}, "widgets")
    widgets = WidgetSpec(
        input=optional_text(widgets_node.get("input"), "widgets/input"),
        output=optional_text(widgets_node.get("output"), "widgets/output"),
    )
    steps = _parse_steps(required(spec, "steps"))

    brief = AppBriefInfo(
        id=app_id, name=name, ver=ver, subtitle=subtitle, tooltip=tooltip, categories=categories
    )
    full = AppFullInfo(
        id=app_id,
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
    return AppData(brief=brief, full=full, spec=AppSpec(info=brief, widgets=widgets, steps=steps))


def _parse_steps(node: Any) -> list[AppStep]:
    steps: list[AppStep] = []
    seen: set[str] = set()
    for i, step_node in enumerate(as_list(node, "steps")):
        path = f"steps/{i}"
        step_id = required_text(step_node, "step_id", path)
        if step_id in seen:
            msg = f"Duplicate step id [{step_id}] within path [{path}]"
            raise SchemaError(msg, path=path)
        seen.add(step_id)
        mapping_nodes = as_list(step_node.get("input_mapping") or [], f"{path}/input_mapping")
        steps.append(
            AppStep(
                step_id=step_id,
                method_id=required_text(step_node, "method_id", path),
                input_mapping=[
                    _parse_step_mapping(entry, f"{path}/input_mapping/{j}")
                    for j, entry in enumerate(mapping_nodes)
                ],
            )
        )
    return steps


def _parse_step_mapping(node: Any, path: str) -> AppStepInputMapping:
    return AppStepInputMapping(
        step_source=required_text(node, "step_source", path),
        is_from_input=boolean_as_long(required(node, "is_from_input", path), f"{path}/is_from_input"),
        from_=required_text(node, "from", path),
        to=required_text(node, "to", path),
    )
