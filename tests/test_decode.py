import pytest

from method_catalog.errors import SourceError
from method_catalog.parser.decode import decode_json, decode_yaml_map, read_json, read_yaml_map


class TestDecodeJson:
    def test_keeps_key_order(self):
        tree = decode_json(b'{"b": 1, "a": 2}')
        assert list(tree) == ["b", "a"]

    def test_invalid_json(self):
        with pytest.raises(SourceError) as excinfo:
            decode_json(b"{not json", origin="methods/x/spec.json")
        assert "methods/x/spec.json" in str(excinfo.value)

    def test_invalid_utf8(self):
        with pytest.raises(SourceError):
            decode_json(b"\xff\xfe")


class TestDecodeYamlMap:
    def test_nested_map(self):
        display = decode_yaml_map("name: Hello\nparameters:\n  p1:\n    ui-name: P1\n")
        assert display["name"] == "Hello"
        assert display["parameters"]["p1"]["ui-name"] == "P1"

    def test_empty_document_is_empty_map(self):
        assert decode_yaml_map(b"") == {}

    def test_keys_are_strings(self):
        assert decode_yaml_map("1: one\n") == {"1": "one"}

    def test_top_level_list_rejected(self):
        with pytest.raises(SourceError):
            decode_yaml_map("- a\n- b\n")

    def test_invalid_yaml(self):
        with pytest.raises(SourceError):
            decode_yaml_map("name: [unclosed\n")


class TestReadFiles:
    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError):
            read_json(tmp_path / "spec.json")

    def test_reads_files(self, tmp_path):
        (tmp_path / "spec.json").write_text('{"ver": "1"}', encoding="utf-8")
        (tmp_path / "display.yaml").write_text("name: N\n", encoding="utf-8")
        assert read_json(tmp_path / "spec.json") == {"ver": "1"}
        assert read_yaml_map(tmp_path / "display.yaml") == {"name": "N"}
