"""
Rule evaluation over a submitted field map.

Usage:
    validator = Validator(
        {"email": "a@b.com"},
        {"email": [StaticRule("required"), StaticRule("email"), UniqueRule("customers", "email")]},
        presence=repository.presence,
    )
    if validator.fails():
        raise ValidationFailedError(validator.errors())

Absent or empty values only run ``required``; every other rule is skipped
for them. All failures of all fields are collected, the validator never
stops at the first one.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from typing import Any, Protocol
from urllib.parse import urlparse

from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError

from .rules import ExistsRule, IMPLICIT_RULES, Rule, StaticRule, UniqueRule


class PresenceVerifier(Protocol):
    """Counts rows of a table; backs ``unique`` and ``exists`` rules."""

    def count(
        self,
        table: str,
        column: str,
        value: Any,
        *,
        exclude_id: int | None = None,
        id_column: str = "id",
        null_columns: Sequence[str] = (),
    ) -> int:
        ...


_MISSING = object()


class _Placeholders(dict):
    """Leaves unknown placeholders of custom messages untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


EMAIL_ADAPTER = TypeAdapter(EmailStr)
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "svg", "webp"}
BOOLEAN_VALUES = (True, False, 0, 1, "0", "1")
SCALAR_TYPES = (str, int, float, bool)

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "The {attribute} field is required.",
    "string": "The {attribute} must be a string.",
    "integer": "The {attribute} must be an integer.",
    "numeric": "The {attribute} must be a number.",
    "boolean": "The {attribute} field must be true or false.",
    "email": "The {attribute} must be a valid email address.",
    "url": "The {attribute} format is invalid.",
    "array": "The {attribute} must be an array.",
    "file": "The {attribute} must be a file.",
    "image": "The {attribute} must be an image.",
    "mimes": "The {attribute} must be a file of type: {values}.",
    "min.numeric": "The {attribute} must be at least {min}.",
    "min.string": "The {attribute} must be at least {min} characters.",
    "min.array": "The {attribute} must have at least {min} items.",
    "min.file": "The {attribute} must be at least {min} kilobytes.",
    "max.numeric": "The {attribute} may not be greater than {max}.",
    "max.string": "The {attribute} may not be greater than {max} characters.",
    "max.array": "The {attribute} may not have more than {max} items.",
    "max.file": "The {attribute} may not be greater than {max} kilobytes.",
    "between.numeric": "The {attribute} must be between {min} and {max}.",
    "between.string": "The {attribute} must be between {min} and {max} characters.",
    "between.array": "The {attribute} must have between {min} and {max} items.",
    "between.file": "The {attribute} must be between {min} and {max} kilobytes.",
    "in": "The selected {attribute} is invalid.",
    "not_in": "The selected {attribute} is invalid.",
    "regex": "The {attribute} format is invalid.",
    "unique": "The {attribute} has already been taken.",
    "exists": "The selected {attribute} is invalid.",
}


def is_upload(value: Any) -> bool:
    """Uploaded files expose a filename and a readable file object."""
    return hasattr(value, "filename") and hasattr(value, "file")


def _extension(value: Any) -> str:
    return os.path.splitext(value.filename or "")[1].lstrip(".").lower()


def _is_empty(value: Any) -> bool:
    if value is _MISSING or value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    if is_upload(value):
        return not value.filename
    return False


def _is_email(value: str) -> bool:
    try:
        EMAIL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(INTEGER_PATTERN.match(value.strip()))


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


class Validator:
    """Evaluates a rule set against submitted data."""

    def __init__(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Sequence[Rule]],
        messages: Mapping[str, str] | None = None,
        presence: PresenceVerifier | None = None,
    ):
        self._data = data
        self._rules = rules
        self._messages = dict(messages or {})
        self._presence = presence
        self._errors: dict[str, list[str]] | None = None

    def fails(self) -> bool:
        return bool(self.errors())

    def passes(self) -> bool:
        return not self.fails()

    def errors(self) -> dict[str, list[str]]:
        if self._errors is None:
            self._errors = self._run()
        return self._errors

    # =========================================================================
    # Evaluation
    # =========================================================================

    def _run(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}

        for field, rules in self._rules.items():
            names = {rule.name for rule in rules}
            value = self._data.get(field, _MISSING)

            if "sometimes" in names and value is _MISSING:
                continue
            if "nullable" in names and value is None:
                continue

            empty = _is_empty(value)
            for rule in rules:
                if rule.name in ("nullable", "sometimes"):
                    continue
                if empty and rule.name not in IMPLICIT_RULES:
                    continue
                if not self._check(field, value, rule, names):
                    errors.setdefault(field, []).append(self._message(field, value, rule, names))

        return errors

    def _check(self, field: str, value: Any, rule: Rule, names: set[str]) -> bool:
        if isinstance(rule, (UniqueRule, ExistsRule)) and not isinstance(value, SCALAR_TYPES):
            # Only scalars can be compared against a column
            return False
        if isinstance(rule, UniqueRule):
            return self._check_unique(field, value, rule)
        if isinstance(rule, ExistsRule):
            return self._verifier(rule).count(rule.table, rule.column or field, value) > 0
        return self._check_static(value, rule, names)

    def _check_unique(self, field: str, value: Any, rule: UniqueRule) -> bool:
        if not rule.is_bound:
            raise ValueError(f"Uniqueness rule for '{field}' is not bound to a table")
        null_columns = (rule.deleted_column,) if rule.without_deleted else ()
        count = self._verifier(rule).count(
            rule.table,
            rule.column or field,
            value,
            exclude_id=rule.exclude_id,
            id_column=rule.id_column,
            null_columns=null_columns,
        )
        return count == 0

    def _verifier(self, rule: Rule) -> PresenceVerifier:
        if self._presence is None:
            raise RuntimeError(f"Rule '{rule.name}' requires a presence verifier")
        return self._presence

    def _check_static(self, value: Any, rule: StaticRule, names: set[str]) -> bool:
        name, params = rule.name, rule.params

        if name == "required":
            return not _is_empty(value)
        if name == "string":
            return isinstance(value, str)
        if name == "integer":
            return _is_integer(value)
        if name == "numeric":
            return _is_numeric(value)
        if name == "boolean":
            return any(value == candidate and type(value) is type(candidate) for candidate in BOOLEAN_VALUES)
        if name == "email":
            return isinstance(value, str) and _is_email(value)
        if name == "url":
            if not isinstance(value, str):
                return False
            parsed = urlparse(value)
            return parsed.scheme in ("http", "https") and bool(parsed.netloc)
        if name == "array":
            return isinstance(value, (list, tuple, dict))
        if name == "file":
            return is_upload(value)
        if name == "image":
            return is_upload(value) and _extension(value) in IMAGE_EXTENSIONS
        if name == "mimes":
            return is_upload(value) and _extension(value) in {p.lower() for p in params}
        if name in ("min", "max", "between"):
            size = self._size(value, names)
            if size is None:
                return False
            bounds = [float(p) for p in params]
            if name == "min":
                return size >= bounds[0]
            if name == "max":
                return size <= bounds[0]
            return bounds[0] <= size <= bounds[1]
        if name == "in":
            return str(value) in params
        if name == "not_in":
            return str(value) not in params
        if name == "regex":
            return isinstance(value, str) and re.search(self._pattern(params[0]), value) is not None

        raise ValueError(f"Unknown validation rule '{name}'")

    @staticmethod
    def _pattern(raw: str) -> str:
        # Accept "/pattern/" as well as a bare pattern
        if len(raw) > 1 and raw.startswith("/") and raw.endswith("/"):
            return raw[1:-1]
        return raw

    @staticmethod
    def _size_kind(value: Any, names: set[str]) -> str:
        if is_upload(value):
            return "file"
        if names & {"numeric", "integer"} and _is_numeric(value):
            return "numeric"
        if isinstance(value, (list, tuple, dict)):
            return "array"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return "numeric"
        return "string"

    def _size(self, value: Any, names: set[str]) -> float | None:
        kind = self._size_kind(value, names)
        if kind == "file":
            size = getattr(value, "size", None)
            return size / 1024 if size is not None else None
        if kind == "numeric":
            return float(value)
        if kind == "array":
            return float(len(value))
        if isinstance(value, str):
            return float(len(value))
        return None

    # =========================================================================
    # Messages
    # =========================================================================

    def _message(self, field: str, value: Any, rule: Rule, names: set[str]) -> str:
        custom = self._messages.get(f"{field}.{rule.name}") or self._messages.get(rule.name)

        replacements: dict[str, Any] = {"attribute": field.replace("_", " ")}
        key = rule.name
        if isinstance(rule, StaticRule):
            if rule.name in ("min", "max", "between"):
                key = f"{rule.name}.{self._size_kind(value, names)}"
                if rule.name == "between":
                    replacements["min"], replacements["max"] = rule.params
                else:
                    replacements[rule.name] = rule.params[0]
            elif rule.params:
                replacements["values"] = ", ".join(rule.params)

        template = custom or DEFAULT_MESSAGES.get(key, "The {attribute} is invalid.")
        return template.format_map(_Placeholders(replacements))
