"""Tests for experiment script loading and structural validation."""

import pytest
import tempfile
import yaml
from pathlib import Path

from zexp.loader import ScriptLoader, read_document
from zexp.exceptions import ScriptValidationError


class TestScriptLoader:
    """Test strict validation in the script loader."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.workspace = Path(self.temp_dir)
        self.loader = ScriptLoader()

    def write_yaml(self, content: dict) -> Path:
        """Helper to write a YAML script."""
        path = self.workspace / "script.yaml"
        with open(path, 'w') as f:
            yaml.dump(content, f)
        return path

    def messages(self, exc_info) -> str:
        return "\n".join(err.message for err in exc_info.value.errors)

    def test_load_toml(self):
        path = self.workspace / "script.toml"
        path.write_text(
            'CMD = "$app"\n'
            '[OTAWA]\n'
            'PROVIDED_VARS = ["$app"]\n'
            'app = "otawa"\n'
        )

        script = self.loader.load(path)

        assert script["CMD"] == "$app"
        assert script["OTAWA"]["PROVIDED_VARS"] == ["$app"]

    def test_load_yaml_keeps_on_off_strings(self):
        path = self.workspace / "script.yml"
        path.write_text(
            'CMD: "run $mode"\n'
            'S:\n'
            '  PROVIDED_VARS: ["$mode"]\n'
            '  mode: on\n'
        )

        script = self.loader.load(path)

        assert script["S"]["mode"] == "on"

    def test_missing_file_propagates(self):
        with pytest.raises(FileNotFoundError):
            self.loader.load(self.workspace / "missing.toml")

    def test_syntax_error_is_validation_error(self):
        path = self.workspace / "broken.toml"
        path.write_text('CMD = "unterminated\n')

        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.load(path)

        assert exc_info.value.exit_code == 2
        assert "Failed to load script" in self.messages(exc_info)

    def test_cmd_required(self):
        path = self.write_yaml({"S": {"PROVIDED_VARS": ["$a"], "a": 1}})

        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.load(path)

        assert "'CMD' field is required" in self.messages(exc_info)

    def test_cmd_must_be_string(self):
        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate({"CMD": ["echo", "$a"]})

        assert "'CMD' must be a string" in self.messages(exc_info)

    def test_provided_vars_required(self):
        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate({"CMD": "echo", "S": {"a": 1}})

        assert "missing required 'PROVIDED_VARS'" in self.messages(exc_info)
        assert exc_info.value.errors[0].path == "S"

    def test_provided_vars_must_be_strings(self):
        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate({"CMD": "echo", "S": {"PROVIDED_VARS": ["$a", 3, "$", "$a"], "a": 1}})

        messages = self.messages(exc_info)
        assert "variable names must be strings" in messages
        assert "empty variable name" in messages
        assert "declared twice" in messages
        assert len(exc_info.value.errors) == 3

    def test_reserved_keys_out_of_place(self):
        document = {
            "CMD": "echo",
            "PROVIDED_VARS": ["$a"],
            "S": {"PROVIDED_VARS": [], "CMD": "nested"},
        }

        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate(document)

        messages = self.messages(exc_info)
        assert "Reserved key 'PROVIDED_VARS' is only allowed inside a section" in messages
        assert "'CMD' is only allowed at the top level" in messages

    def test_unknown_top_level_scalar(self):
        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate({"CMD": "echo", "APP_PATH": "/bin/app"})

        assert "Unknown top-level field 'APP_PATH'" in self.messages(exc_info)

    def test_all_errors_are_collected(self):
        with pytest.raises(ScriptValidationError) as exc_info:
            self.loader.validate({"A": {}, "B": {"PROVIDED_VARS": "x"}})

        assert len(exc_info.value.errors) == 3
        assert str(exc_info.value).count("Validation error") == 3

    def test_non_table_document(self):
        with pytest.raises(ScriptValidationError):
            self.loader.validate(["CMD"])

    def test_valid_document_returned_unchanged(self):
        document = {"CMD": "echo $a", "S": {"PROVIDED_VARS": ["TASK_NAME", "$a"], "a": [1], "TASK_NAME": "t"}}

        assert self.loader.validate(document) is document


def test_read_document_toml_and_yaml(tmp_path):
    (tmp_path / "a.toml").write_text('x = [1, 2]\n')
    (tmp_path / "b.yaml").write_text('x: [1, 2]\n')

    assert read_document(tmp_path / "a.toml") == {"x": [1, 2]}
    assert read_document(tmp_path / "b.yaml") == {"x": [1, 2]}
