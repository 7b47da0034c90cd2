"""
Declarative input schemas for the Petfinder MCP tools.

Each tool declares a tuple of ``FieldSpec`` entries. The same declaration drives
argument validation and the JSON Schema published through ``tools/list``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

STRING = "string"
INTEGER = "integer"
ARRAY = "array"


class ValidationError(Exception):
    """Raised when tool arguments do not match the declared schema."""

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        self.errors = errors
        summary = "; ".join(f"{error['field']}: {error['message']}" for error in errors)
        super().__init__(summary or "Invalid arguments.")


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One named argument: its type, whether it is required, and its constraints.

    For ``array`` fields the items are strings and ``enum`` constrains each item.
    """

    name: str
    type: str
    required: bool = False
    description: Optional[str] = None
    enum: Optional[Tuple[str, ...]] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    default: Any = None

    def json_schema(self) -> Dict[str, Any]:
        if self.type == ARRAY:
            items: Dict[str, Any] = {"type": STRING}
            if self.enum:
                items["enum"] = list(self.enum)
            schema: Dict[str, Any] = {"type": ARRAY, "items": items}
        else:
            schema = {"type": self.type}
            if self.enum:
                schema["enum"] = list(self.enum)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.default is not None:
            schema["default"] = self.default
        if self.description:
            schema["description"] = self.description
        return schema

    def validate_value(self, value: Any) -> Any:
        """Return the validated value or raise ValueError with a diagnostic."""
        if self.type == STRING:
            if not isinstance(value, str):
                raise ValueError("Expected string.")
            self._check_enum(value)
            return value

        if self.type == INTEGER:
            # bool is an int subclass but never a valid integer argument.
            if isinstance(value, bool):
                raise ValueError("Expected integer.")
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            if not isinstance(value, int):
                raise ValueError("Expected integer.")
            if self.minimum is not None and value < self.minimum:
                raise ValueError(f"Must be >= {self.minimum}.")
            if self.maximum is not None and value > self.maximum:
                raise ValueError(f"Must be <= {self.maximum}.")
            return value

        if self.type == ARRAY:
            if not isinstance(value, (list, tuple)):
                raise ValueError("Expected array of strings.")
            items = list(value)
            for item in items:
                if not isinstance(item, str):
                    raise ValueError("Expected array of strings.")
                self._check_enum(item)
            return items

        raise ValueError(f"Unsupported field type {self.type!r}.")

    def _check_enum(self, value: str) -> None:
        if self.enum and value not in self.enum:
            raise ValueError(f"Expected one of: {', '.join(self.enum)}.")


def schema_defaults(fields: Sequence[FieldSpec]) -> Dict[str, Any]:
    return {field.name: field.default for field in fields if field.default is not None}


def apply_defaults(fields: Sequence[FieldSpec], raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay caller arguments on the schema defaults; non-null caller values win."""
    provided = {key: value for key, value in raw.items() if value is not None}
    return {**schema_defaults(fields), **provided}


def validate_arguments(fields: Sequence[FieldSpec], raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate ``raw`` against ``fields``.

    Unknown keys are rejected and ``None`` counts as absent. All problems are
    collected before raising so callers see every failing field at once.
    """
    known = {field.name for field in fields}
    errors: List[Dict[str, str]] = [
        {"field": key, "message": "Unknown field."} for key in raw if key not in known
    ]
    validated: Dict[str, Any] = {}
    for field in fields:
        value = raw.get(field.name)
        if value is None:
            if field.required:
                errors.append({"field": field.name, "message": "Required."})
            continue
        try:
            validated[field.name] = field.validate_value(value)
        except ValueError as exc:
            errors.append({"field": field.name, "message": str(exc)})
    if errors:
        raise ValidationError(errors)
    return validated


def input_schema(fields: Sequence[FieldSpec]) -> Dict[str, Any]:
    """Render the protocol-facing JSON Schema for a tool."""
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {field.name: field.json_schema() for field in fields},
        "additionalProperties": False,
    }
    required = [field.name for field in fields if field.required]
    if required:
        schema["required"] = required
    return schema
