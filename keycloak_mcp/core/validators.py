"""Input validation for command arguments.

Each command declares its fields as ``FieldSpec`` entries in a
``CommandDescriptor``. ``validate`` checks untyped caller input against a
descriptor, applies defaults, and reports every violation at once.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

_MISSING = object()


class FieldKind(str, Enum):
    STRING = "string"
    # realm / user / client ids; these end up as Admin API path segments
    IDENTIFIER = "identifier"
    EMAIL = "email"
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    CREDENTIALS = "credentials"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    description: str
    required: bool = False
    default: Any = None


@dataclass(frozen=True)
class CommandDescriptor:
    """Immutable declaration of one command's input.

    ``require_any`` names optional list fields of which at least one must be
    non-empty.
    """
    name: str
    description: str
    fields: tuple[FieldSpec, ...] = ()
    require_any: tuple[str, ...] = ()

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required]

    @property
    def optional_fields(self) -> list[str]:
        return [f.name for f in self.fields if not f.required]


@dataclass(frozen=True)
class FieldViolation:
    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ValidationError(Exception):
    """One or more fields failed validation."""

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        super().__init__(", ".join(str(v) for v in self.violations))


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Normalized email address

    Raises:
        ValueError: If email is invalid
    """
    email = email.strip().lower()
    if not email or "@" not in email:
        raise ValueError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email format")
    if domain.startswith(".") or domain.endswith(".") or any(c.isspace() for c in email):
        raise ValueError("Invalid email format")
    if len(email) > 254:
        raise ValueError("Email exceeds maximum length")

    return email


def validate_string(value: Any, *, allow_empty: bool = False) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected string")
    if not allow_empty and not value.strip():
        raise ValueError("Must not be empty")
    return value


def validate_identifier(value: Any) -> str:
    value = validate_string(value)
    if value in (".", ".."):
        raise ValueError("Must not be '.' or '..'")
    return value


def validate_boolean(value: Any) -> bool:
    # bool is checked explicitly: 0/1 and "true" are not accepted
    if not isinstance(value, bool):
        raise ValueError("Expected boolean")
    return value


def validate_string_list(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("Expected array of strings")
    return list(value)


def _validate_credentials(name: str, value: Any, violations: list[FieldViolation]) -> Optional[list[dict]]:
    if not isinstance(value, list):
        violations.append(FieldViolation(name, "Expected array"))
        return None

    parsed: list[dict] = []
    ok = True
    for index, item in enumerate(value):
        path = f"{name}.{index}"
        if not isinstance(item, Mapping):
            violations.append(FieldViolation(path, "Expected object"))
            ok = False
            continue
        entry: dict[str, Any] = {}
        for key in ("type", "value"):
            if item.get(key) is None:
                violations.append(FieldViolation(f"{path}.{key}", "Required"))
                ok = False
            elif not isinstance(item[key], str):
                violations.append(FieldViolation(f"{path}.{key}", "Expected string"))
                ok = False
            else:
                entry[key] = item[key]
        if item.get("temporary") is not None:
            if isinstance(item["temporary"], bool):
                entry["temporary"] = item["temporary"]
            else:
                violations.append(FieldViolation(f"{path}.temporary", "Expected boolean"))
                ok = False
        parsed.append(entry)
    return parsed if ok else None


def _check_field(spec: FieldSpec, value: Any, violations: list[FieldViolation]) -> Any:
    if spec.kind is FieldKind.CREDENTIALS:
        return _validate_credentials(spec.name, value, violations)
    try:
        if spec.kind is FieldKind.EMAIL:
            return validate_email(validate_string(value))
        if spec.kind is FieldKind.STRING:
            # passwords and similar secrets are passed through untouched
            return validate_string(value)
        if spec.kind is FieldKind.IDENTIFIER:
            return validate_identifier(value)
        if spec.kind is FieldKind.BOOLEAN:
            return validate_boolean(value)
        if spec.kind is FieldKind.STRING_LIST:
            return validate_string_list(value)
    except ValueError as e:
        violations.append(FieldViolation(spec.name, str(e)))
        return None
    raise TypeError(f"Unsupported field kind: {spec.kind}")


def validate(descriptor: CommandDescriptor, raw_args: Any) -> dict[str, Any]:
    """Validate raw arguments for a command.

    Args:
        descriptor: Command declaration
        raw_args: Untyped caller input (mapping or None)

    Returns:
        Parsed arguments: declared fields only, defaults applied

    Raises:
        ValidationError: With every violation found
    """
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, Mapping):
        raise ValidationError([FieldViolation("arguments", "Expected object")])

    violations: list[FieldViolation] = []
    parsed: dict[str, Any] = {}

    for spec in descriptor.fields:
        value = raw_args.get(spec.name, _MISSING)
        if value is _MISSING or value is None:
            if spec.required:
                violations.append(FieldViolation(spec.name, "Required"))
            elif spec.default is not None:
                parsed[spec.name] = spec.default
            continue
        checked = _check_field(spec, value, violations)
        if checked is not None:
            parsed[spec.name] = checked

    already_reported = any(v.field in descriptor.require_any for v in violations)
    if descriptor.require_any and not already_reported and not any(parsed.get(name) for name in descriptor.require_any):
        violations.append(
            FieldViolation(
                "/".join(descriptor.require_any),
                f"At least one of {' or '.join(descriptor.require_any)} must be a non-empty list",
            )
        )

    if violations:
        raise ValidationError(violations)
    return parsed
