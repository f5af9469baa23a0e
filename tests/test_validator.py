"""Tests for the validators."""

from __future__ import annotations

import json

import pytest

from envsync.core.context import Context
from envsync.core.errors import ValidationError
from envsync.validator import (
    CompositeValidator,
    NonEmptyValueRule,
    RegexRule,
    RequiredKeysValidator,
    RuleValidator,
    SchemaValidator,
)

SCHEMA = {
    "type": "object",
    "required": ["DATABASE_URL"],
    "properties": {
        "PORT": {"type": "string", "pattern": "^[0-9]+$"},
        "DATABASE_URL": {"type": "string"},
    },
}


@pytest.fixture
def ctx():
    return Context.background()


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(SCHEMA))
    return path


class TestSchemaValidator:
    def test_valid_config(self, ctx, schema_file):
        SchemaValidator(schema_file).validate(ctx, {"DATABASE_URL": "postgres://", "PORT": "5432"})

    def test_reports_every_error(self, ctx, schema_file):
        with pytest.raises(ValidationError) as exc_info:
            SchemaValidator(schema_file).validate(ctx, {"PORT": "abc"})
        errors = exc_info.value.errors
        assert len(errors) == 2
        assert errors[0].startswith("(root): ")
        assert "DATABASE_URL" in errors[0]
        assert errors[1].startswith("PORT: ")
        assert "; " in str(exc_info.value)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="schema file not found"):
            SchemaValidator(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{")
        with pytest.raises(ValidationError, match="failed to load schema"):
            SchemaValidator(path)

    def test_invalid_schema(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"type": 12}))
        with pytest.raises(ValidationError, match="invalid schema"):
            SchemaValidator(path)

    def test_schema_reread_on_validate(self, ctx, schema_file):
        validator = SchemaValidator(schema_file)
        schema_file.write_text(json.dumps({"type": "object", "required": ["OTHER"]}))
        with pytest.raises(ValidationError, match="OTHER"):
            validator.validate(ctx, {"DATABASE_URL": "x"})

    def test_schema_removed_after_construction(self, ctx, schema_file):
        validator = SchemaValidator(schema_file)
        schema_file.unlink()
        with pytest.raises(ValidationError, match="not found"):
            validator.validate(ctx, {})

    def test_default_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".envschema.json").write_text("{}")
        assert SchemaValidator().schema_path == (tmp_path / ".envschema.json").resolve()


class TestRuleValidator:
    def test_structural_checks(self, ctx):
        with pytest.raises(ValidationError) as exc_info:
            RuleValidator().validate(ctx, {"": "x", "BAD KEY": "x", "OK": "y" * 5000})
        assert len(exc_info.value.errors) == 3

    def test_rules_aggregated(self, ctx):
        validator = RuleValidator(
            RegexRule("port", r"\d+", keys=["PORT"]),
            NonEmptyValueRule(),
        )
        validator.validate(ctx, {"PORT": "80", "NAME": "app"})
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(ctx, {"PORT": "80a", "NAME": " "})
        errors = exc_info.value.errors
        assert "rule port failed for key PORT: value does not match \\d+" in errors
        assert "rule non-empty failed for key NAME: value cannot be empty" in errors

    def test_regex_requires_full_match(self):
        rule = RegexRule("word", r"[a-z]+")
        rule.validate("K", "abc")
        with pytest.raises(ValueError):
            rule.validate("K", "abc1")

    def test_max_keys(self, ctx):
        with pytest.raises(ValidationError, match="too many configuration keys"):
            RuleValidator(max_keys=1).validate(ctx, {"A": "1", "B": "2"})

    def test_does_not_modify_mapping(self, ctx):
        config = {"A": "1"}
        RuleValidator(NonEmptyValueRule()).validate(ctx, config)
        assert config == {"A": "1"}


class TestRequiredKeysValidator:
    def test_lists_missing_keys(self, ctx):
        with pytest.raises(ValidationError) as exc_info:
            RequiredKeysValidator("A", "B", "C").validate(ctx, {"B": "1"})
        assert exc_info.value.errors == ["required key missing: A", "required key missing: C"]


class TestCompositeValidator:
    def test_short_circuits_in_order(self, ctx):
        calls = []

        class Recording:
            def __init__(self, name, fail=False):
                self.name = name
                self.fail = fail

            def validate(self, ctx, config):
                calls.append(self.name)
                if self.fail:
                    raise ValidationError([self.name])

        composite = CompositeValidator(Recording("first"), Recording("second", fail=True))
        composite.add(Recording("third"))
        with pytest.raises(ValidationError, match="second"):
            composite.validate(ctx, {})
        assert calls == ["first", "second"]

    def test_empty_passes(self, ctx):
        CompositeValidator().validate(ctx, {"A": "1"})
