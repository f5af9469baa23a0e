"""Validation of merged configuration.

Validators receive the complete merged mapping once per load and raise
``ValidationError`` listing every problem they found. They never modify the
mapping.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Protocol, Union

import jsonschema

from .core.context import Context
from .core.errors import ValidationError
from .core.provider import Validator

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_FILE = ".envschema.json"

MAX_CONFIG_KEYS = 1000
MAX_KEY_LENGTH = 256
MAX_VALUE_LENGTH = 4096

_INVALID_KEY_CHARS = frozenset(" \t\n\r=")


class SchemaValidator:
    """Validate configuration against a JSON Schema (draft-07) file.

    The schema is checked when the validator is built and read again on each
    validation, so edits to the file between loads are picked up.
    """

    def __init__(self, schema_path: Optional[Union[str, Path]] = None):
        """Initialize SchemaValidator.

        Args:
            schema_path: Path to the schema file; defaults to ``.envschema.json``.

        Raises:
            ValidationError: If the file is missing or is not a valid schema.
        """
        self.schema_path = Path(schema_path or DEFAULT_SCHEMA_FILE).resolve()
        self._read_schema()

    def _read_schema(self) -> Dict[str, Any]:
        if not self.schema_path.exists():
            raise ValidationError([f"schema file not found: {self.schema_path}"], prefix="schema error")
        try:
            with open(self.schema_path, "r", encoding="utf-8") as f:
                schema = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(
                [f"failed to load schema {self.schema_path}: {exc}"], prefix="schema error"
            ) from exc
        try:
            jsonschema.Draft7Validator.check_schema(schema)
        except jsonschema.SchemaError as exc:
            raise ValidationError([f"invalid schema {self.schema_path}: {exc.message}"], prefix="schema error") from exc
        return schema

    def validate(self, ctx: Context, config: Mapping[str, str]) -> None:
        schema = self._read_schema()
        validator = jsonschema.Draft7Validator(schema)
        errors = sorted(validator.iter_errors(dict(config)), key=lambda e: list(e.absolute_path))
        if errors:
            raise ValidationError(
                f"{'.'.join(str(p) for p in e.absolute_path) or '(root)'}: {e.message}"
                for e in errors
            )
        logger.debug("configuration matches schema %s", self.schema_path)


class ValidationRule(Protocol):
    """A check applied to every key/value pair."""

    name: str

    def validate(self, key: str, value: str) -> None:
        """Raise ValueError if the pair breaks the rule."""
        ...


class RegexRule:
    """Values (optionally only for ``keys``) must fully match ``pattern``."""

    def __init__(self, name: str, pattern: Union[str, Pattern[str]], keys: Optional[Iterable[str]] = None):
        self.name = name
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.keys = set(keys) if keys is not None else None

    def validate(self, key: str, value: str) -> None:
        if self.keys is not None and key not in self.keys:
            return
        if not self.pattern.fullmatch(value):
            raise ValueError(f"value does not match {self.pattern.pattern}")


class NonEmptyValueRule:
    name = "non-empty"

    def __init__(self, keys: Optional[Iterable[str]] = None):
        self.keys = set(keys) if keys is not None else None

    def validate(self, key: str, value: str) -> None:
        if self.keys is not None and key not in self.keys:
            return
        if not value.strip():
            raise ValueError("value cannot be empty")


class RuleValidator:
    """Structural key/value checks followed by custom rules."""

    def __init__(self, *rules: ValidationRule, max_keys: int = MAX_CONFIG_KEYS):
        self.rules: List[ValidationRule] = list(rules)
        self.max_keys = max_keys

    def validate(self, ctx: Context, config: Mapping[str, str]) -> None:
        if len(config) > self.max_keys:
            raise ValidationError([f"too many configuration keys: {len(config)} > {self.max_keys}"])

        errors: List[str] = []
        for key, value in config.items():
            problem = _check_key(key)
            if problem:
                errors.append(f"invalid key {key!r}: {problem}")
                continue
            if len(value) > MAX_VALUE_LENGTH:
                errors.append(f"invalid value for key {key}: value too long: {len(value)} > {MAX_VALUE_LENGTH}")
                continue
            for rule in self.rules:
                try:
                    rule.validate(key, value)
                except ValueError as exc:
                    errors.append(f"rule {rule.name} failed for key {key}: {exc}")
        if errors:
            raise ValidationError(errors)


def _check_key(key: str) -> Optional[str]:
    if not key.strip():
        return "key cannot be empty"
    if len(key) > MAX_KEY_LENGTH:
        return f"key too long: {len(key)} > {MAX_KEY_LENGTH}"
    if _INVALID_KEY_CHARS.intersection(key):
        return "key contains invalid characters"
    return None


class RequiredKeysValidator:
    def __init__(self, *keys: str):
        self.keys = list(keys)

    def validate(self, ctx: Context, config: Mapping[str, str]) -> None:
        missing = [k for k in self.keys if k not in config]
        if missing:
            raise ValidationError(f"required key missing: {k}" for k in missing)


class CompositeValidator:
    """Run validators in order, stopping at the first failure."""

    def __init__(self, *validators: Validator):
        self.validators: List[Validator] = list(validators)

    def add(self, validator: Validator) -> None:
        self.validators.append(validator)

    def validate(self, ctx: Context, config: Mapping[str, str]) -> None:
        for validator in self.validators:
            validator.validate(ctx, config)
