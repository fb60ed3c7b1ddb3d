"""Catalog records produced by the translators.

Every translator (method, app, type, category) converts its source documents
into these models. Records are frozen: a refresh replaces them wholesale.
Boolean flags stay encoded as 0/1 integers to match the RPC vocabulary
clients already speak.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Flag = Literal[0, 1]


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ScreenShot(Record):
    url: str


class MethodBriefInfo(Record):
    """Lightweight summary for listing UIs."""

    id: str
    name: str | None = None
    ver: str | None = None
    subtitle: str | None = None
    tooltip: str | None = None
    categories: list[str] | None = None
    loading_error: str | None = None


class MethodFullInfo(Record):
    id: str
    name: str | None
    ver: str | None
    authors: list[str] | None = None  # parsed but never published
    contact: str | None
    subtitle: str | None
    tooltip: str | None
    description: str | None
    technical_description: str | None
    categories: list[str] | None
    screenshots: list[ScreenShot] = []


class WidgetSpec(Record):
    input: str | None = None
    output: str | None = None


class ServiceInputMapping(Record):
    """Where one argument of the backing service call comes from."""

    input_parameter: str | None = None
    narrative_system_variable: str | None = None
    constant_value: Any = None  # opaque, passed through untouched
    target_argument_position: int | None = None
    target_property: str | None = None
    target_type_transform: str | None = None


class ServiceOutputMapping(Record):
    input_parameter: str | None = None
    narrative_system_variable: str | None = None
    constant_value: Any = None
    service_method_output_path: list[str] | None = None
    target_property: str | None = None
    target_type_transform: str | None = None


class ServiceMapping(Record):
    url: str
    name: str | None = None
    method: str
    input_mapping: list[ServiceInputMapping] = []
    output_mapping: list[ServiceOutputMapping] = []


class MethodBehavior(Record):
    python_class: str | None = None
    python_function: str | None = None
    service_mapping: ServiceMapping | None = None


class TextOptions(Record):
    valid_ws_types: list[str] | None = None
    validate_as: str | None = None


class CheckboxOptions(Record):
    checked_value: int
    unchecked_value: int


class DropdownOptions(Record):
    ids_to_options: dict[str, str]


class FloatSliderOptions(Record):
    min: float
    max: float


class IntSliderOptions(Record):
    min: int
    max: int
    step: int


class RadioOptions(Record):
    ids_to_options: dict[str, str]
    ids_to_tooltip: dict[str, str]


class TextAreaOptions(Record):
    n_rows: int


ParameterOptions = (
    TextOptions
    | CheckboxOptions
    | DropdownOptions
    | FloatSliderOptions
    | IntSliderOptions
    | RadioOptions
    | TextAreaOptions
)

# field_type -> attribute holding its option record
OPTION_FIELDS = {
    "text": "text_options",
    "checkbox": "checkbox_options",
    "dropdown": "dropdown_options",
    "floatslider": "floatslider_options",
    "intslider": "intslider_options",
    "radio": "radio_options",
    "textarea": "textarea_options",
}


class MethodParameter(Record):
    """One input of a method, with at most one option group attached."""

    id: str
    ui_name: str
    short_hint: str
    long_hint: str
    optional: Flag
    advanced: Flag
    allow_multiple: Flag
    default_values: list[str]
    field_type: str
    text_options: TextOptions | None = None
    checkbox_options: CheckboxOptions | None = None
    dropdown_options: DropdownOptions | None = None
    floatslider_options: FloatSliderOptions | None = None
    intslider_options: IntSliderOptions | None = None
    radio_options: RadioOptions | None = None
    textarea_options: TextAreaOptions | None = None

    def present_option_fields(self) -> list[str]:
        return [attr for attr in OPTION_FIELDS.values() if getattr(self, attr) is not None]

    @property
    def options(self) -> ParameterOptions | None:
        """The option record selected by ``field_type``.

        Falls back to the only option group present when ``field_type`` names
        a widget without options of its own.
        """
        attr = OPTION_FIELDS.get(self.field_type)
        if attr is not None and getattr(self, attr) is not None:
            return getattr(self, attr)
        present = self.present_option_fields()
        if len(present) == 1:
            return getattr(self, present[0])
        return None


class MethodSpec(Record):
    info: MethodBriefInfo
    widgets: WidgetSpec
    behavior: MethodBehavior
    parameters: list[MethodParameter]


class MethodData(Record):
    brief: MethodBriefInfo
    full: MethodFullInfo
    spec: MethodSpec


class AppBriefInfo(Record):
    id: str
    name: str | None = None
    ver: str | None = None
    subtitle: str | None = None
    tooltip: str | None = None
    categories: list[str] | None = None
    loading_error: str | None = None


class AppFullInfo(Record):
    id: str
    name: str | None
    ver: str | None
    authors: list[str] | None = None
    contact: str | None
    subtitle: str | None
    tooltip: str | None
    description: str | None
    technical_description: str | None
    categories: list[str] | None
    screenshots: list[ScreenShot] = []


class AppStepInputMapping(Record):
    step_source: str
    is_from_input: Flag
    from_: str = Field(alias="from")
    to: str


class AppStep(Record):
    step_id: str
    method_id: str
    input_mapping: list[AppStepInputMapping] = []


class AppSpec(Record):
    info: AppBriefInfo
    widgets: WidgetSpec
    steps: list[AppStep]


class AppData(Record):
    brief: AppBriefInfo
    full: AppFullInfo
    spec: AppSpec


class TypeInfo(Record):
    type_name: str
    name: str | None = None
    subtitle: str | None = None
    tooltip: str | None = None
    description: str | None = None
    icon: ScreenShot | None = None
    view_method_ids: list[str] = []
    import_method_ids: list[str] = []
    landing_page_url_prefix: str | None = None
    loading_error: str | None = None


class Category(Record):
    id: str
    name: str | None = None
    ver: str | None = None
    tooltip: str | None = None
    description: str | None = None
    parent_ids: list[str] = []
    loading_error: str | None = None
