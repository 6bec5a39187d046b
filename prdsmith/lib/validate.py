"""
Schema validation for prdsmith.

Checks untrusted JSON (uploaded PRDs, oracle replies) against the bundled
JSON Schemas. Every violation is collected so callers can report all of
them at once; nothing here raises for bad data except the explicit
validate()/validate_before_write() guards.
"""

import json
import re
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.protocols import Validator


class SchemaError(Exception):
    """A bundled schema is missing or unreadable."""


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# Cache loaded validators
_validator_cache: dict[str, Validator] = {}

_REQUIRED_RE = re.compile(r"^'(?P<name>.+)' is a required property$")

# Patterns with a human name; anything else is reported verbatim
PATTERN_NAMES = {
    "^US-[0-9]{3}$": "US-NNN",
}


def _get_schemas_dir() -> Path:
    """Get path to bundled schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_validator(schema_name: str) -> Validator:
    """Load schema by name and build a validator, with caching."""
    if schema_name not in _validator_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise SchemaError(f"Schema file not found: {schema_path}")
        try:
            schema = json.loads(schema_path.read_text())
        except json.JSONDecodeError as e:
            raise SchemaError(f"Invalid JSON in {schema_path}: {e}") from None
        validator_cls = jsonschema.validators.validator_for(schema)
        _validator_cache[schema_name] = validator_cls(schema)
    return _validator_cache[schema_name]


def format_path(parts) -> str:
    """Render a jsonschema path as `userStories[2].id`."""
    rendered = ""
    for part in parts:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = str(part)
    return rendered


def describe_error(error: jsonschema.ValidationError) -> str:
    """Turn one jsonschema error into `<path>: <rule>`."""
    path = format_path(error.absolute_path)
    keyword = error.validator
    expected = error.validator_value

    if keyword == "required":
        match = _REQUIRED_RE.match(error.message)
        field_name = match.group("name") if match else "(field)"
        path = format_path([*error.absolute_path, field_name])
        return f"{path}: is required"

    if keyword == "pattern":
        rule = f"must match {PATTERN_NAMES.get(expected, expected)}"
    elif keyword == "minLength":
        rule = "must not be empty"
    elif keyword == "minItems":
        rule = "must contain at least one item" if expected == 1 else f"must contain at least {expected} items"
    elif keyword == "type":
        rule = "must be an integer" if expected == "integer" else f"must be of type {expected}"
    elif keyword == "const":
        rule = f"must be {expected!r}"
    elif keyword == "enum":
        rule = "must be one of: " + ", ".join(str(v) for v in expected)
    elif keyword == "minimum":
        rule = f"must be >= {expected}"
    else:
        rule = error.message

    return f"{path or '(root)'}: {rule}"


def collect_errors(data: Any, schema_name: str) -> list[str]:
    """
    Validate data against named schema and return every violation.

    Args:
        data: Any decoded JSON value
        schema_name: Schema name (e.g., "prd", "assessment")

    Returns:
        List of `<path>: <rule>` messages, empty when data is valid.
        Ordered by path so output is stable.
    """
    validator = _load_validator(schema_name)
    messages = [describe_error(e) for e in validator.iter_errors(data)]
    return sorted(set(messages))


def is_valid(data: Any, schema_name: str) -> bool:
    """Check data against named schema without building messages."""
    return _load_validator(schema_name).is_valid(data)


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against named schema.

    Raises:
        ValidationError: If validation fails (first violation reported)
    """
    errors = collect_errors(data, schema_name)
    if errors:
        path, _, message = errors[0].partition(": ")
        raise ValidationError(schema_name, message, path)


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """
    Validate data before writing to file. Ensures we never write invalid data.

    Raises:
        ValidationError: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {e}"
        ) from None
