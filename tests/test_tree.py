import pytest

from method_catalog.errors import SchemaError
from method_catalog.parser.tree import (
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


class TestRequired:
    def test_returns_child(self):
        assert required({"a": {"b": 1}}, "a") == {"b": 1}

    def test_explicit_null_is_present(self):
        assert required({"a": None}, "a") is None

    def test_missing_child_names_path(self):
        with pytest.raises(SchemaError) as excinfo:
            required({}, "options", "parameters/3/dropdown_options")
        assert excinfo.value.path == "parameters/3/dropdown_options"
        assert "[options]" in str(excinfo.value)
        assert "parameters/3/dropdown_options" in str(excinfo.value)

    def test_missing_at_root(self):
        with pytest.raises(SchemaError) as excinfo:
            required({}, "ver")
        assert excinfo.value.path == "/"

    def test_non_map_node_has_no_children(self):
        with pytest.raises(SchemaError):
            required(["a"], "a", "x")


class TestScalars:
    def test_optional_text_missing_and_null(self):
        assert optional_text(None) is None

    def test_optional_text_converts_scalars(self):
        assert optional_text(5) == "5"
        assert optional_text(True) == "true"
        assert optional_text("abc") == "abc"

    def test_as_text_rejects_containers(self):
        with pytest.raises(SchemaError) as excinfo:
            as_text({"a": 1}, "widgets/input")
        assert excinfo.value.path == "widgets/input"

    def test_optional_long(self):
        assert optional_long(None) is None
        assert optional_long(3) == 3
        assert optional_long("7") == 7

    def test_optional_long_rejects_garbage(self):
        with pytest.raises(SchemaError):
            optional_long("seven", "x")

    def test_required_text_rejects_null(self):
        with pytest.raises(SchemaError):
            required_text({"ver": None}, "ver")


class TestLists:
    def test_missing_list_is_none(self):
        assert as_string_list(None) is None

    def test_converts_in_order(self):
        assert as_string_list(["b", 1, "a"]) == ["b", "1", "a"]

    def test_non_list_fails(self):
        with pytest.raises(SchemaError):
            as_string_list("abc", "authors")

    def test_required_strings_rejects_null(self):
        with pytest.raises(SchemaError) as excinfo:
            required_strings({"authors": None}, "authors")
        assert excinfo.value.path == "authors"


class TestBooleanAsLong:
    @pytest.mark.parametrize("value,expected", [(True, 1), (False, 0), (1, 1), (0, 0), ("true", 1), ("false", 0)])
    def test_encodes_as_zero_or_one(self, value, expected):
        assert boolean_as_long(value) == expected

    def test_rejects_non_boolean(self):
        with pytest.raises(SchemaError):
            boolean_as_long("maybe", "parameters/0/optional")


class TestDisplayProp:
    def test_missing_prop(self):
        with pytest.raises(SchemaError) as excinfo:
            display_prop({}, "ui-name", "parameters/p1")
        assert "display.yaml" in str(excinfo.value)
        assert excinfo.value.path == "parameters/p1"


class TestChildPath:
    def test_root_prefix_dropped(self):
        assert child_path("/", "categories") == "categories"
        assert child_path(None, "parameters", 0) == "parameters/0"
        assert child_path("parameters/0", "id") == "parameters/0/id"
