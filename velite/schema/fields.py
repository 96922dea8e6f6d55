"""Typed field descriptors used by collection schemas."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, Iterable, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    model_validator,
)

ElementKind = Literal["string", "number", "boolean", "date", "file"]

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Dates are serialized to ISO strings in data files.
_PRIMITIVE_TS_TYPES = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "date": "string",
    "file": "string",
}


class FieldBase(BaseModel):
    """Attributes shared by every field variant."""

    model_config = ConfigDict(extra="forbid")

    required: bool | None = Field(default=None, description="Whether the field must be present.")
    description: str | None = Field(default=None, description="Human-readable explanation.")

    @property
    def optional(self) -> bool:
        """Fields without a default that are not required may be missing from records."""
        return not self.required and getattr(self, "default", None) is None

    def ts_type(self) -> str:
        raise NotImplementedError


class StringField(FieldBase):
    type: Literal["string"] = "string"
    default: StrictStr | None = None

    def ts_type(self) -> str:
        return _PRIMITIVE_TS_TYPES[self.type]


class NumberField(FieldBase):
    type: Literal["number"] = "number"
    default: StrictInt | StrictFloat | None = None

    def ts_type(self) -> str:
        return _PRIMITIVE_TS_TYPES[self.type]


class BooleanField(FieldBase):
    type: Literal["boolean"] = "boolean"
    default: StrictBool | None = None

    def ts_type(self) -> str:
        return _PRIMITIVE_TS_TYPES[self.type]


class DateField(FieldBase):
    type: Literal["date"] = "date"
    default: datetime | None = None

    def ts_type(self) -> str:
        return _PRIMITIVE_TS_TYPES[self.type]


class FileField(FieldBase):
    """Reference to a file relative to the content source."""

    type: Literal["file"] = "file"
    default: StrictStr | None = None

    def ts_type(self) -> str:
        return _PRIMITIVE_TS_TYPES[self.type]


class NestedField(FieldBase):
    """Object-valued field whose shape is described by child fields."""

    type: Literal["nested"] = "nested"
    of: dict[str, SchemaField] = Field(default_factory=dict)
    default: dict[str, Any] | None = None

    def ts_type(self) -> str:
        return object_type(self.of)


class ListField(FieldBase):
    """Sequence-valued field tagged by its element kind.

    ``of`` is either a primitive kind name or a mapping of child fields, the
    latter describing a list of nested objects.
    """

    type: Literal["list"] = "list"
    of: ElementKind | dict[str, SchemaField]
    default: list[Any] | None = None

    @property
    def element_kind(self) -> str:
        return "nested" if isinstance(self.of, dict) else self.of

    @model_validator(mode="after")
    def _check_default(self) -> "ListField":
        if self.default is None:
            return self
        kind = self.element_kind
        try:
            self.default = _LIST_DEFAULT_ADAPTERS[kind].validate_python(self.default)
        except ValidationError as exc:
            raise ValueError(
                f"default for a list of {kind} has {exc.error_count()} invalid element(s)"
            ) from None
        return self

    def ts_type(self) -> str:
        if isinstance(self.of, dict):
            return f"{object_type(self.of)}[]"
        return f"{_PRIMITIVE_TS_TYPES[self.of]}[]"


SchemaField = Annotated[
    Union[StringField, NumberField, BooleanField, DateField, FileField, NestedField, ListField],
    Field(discriminator="type"),
]
Fields = dict[str, SchemaField]

# Defaults are taken as written; only dates may arrive as ISO strings.
_STRICT = ConfigDict(strict=True)

_LIST_DEFAULT_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    "string": TypeAdapter(list[str], config=_STRICT),
    "number": TypeAdapter(list[int | float], config=_STRICT),
    "boolean": TypeAdapter(list[bool], config=_STRICT),
    "date": TypeAdapter(list[datetime]),
    "file": TypeAdapter(list[str], config=_STRICT),
    "nested": TypeAdapter(list[dict[str, Any]], config=_STRICT),
}


def property_name(name: str) -> str:
    """Quote property names that are not valid identifiers."""
    if _IDENTIFIER.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def member_signature(name: str, field: FieldBase) -> str:
    marker = "?" if field.optional else ""
    return f"{property_name(name)}{marker}: {field.ts_type()}"


def object_type(fields: Mapping[str, FieldBase]) -> str:
    """Render child fields as an inline object literal type."""
    if not fields:
        return "{}"
    members = "; ".join(member_signature(name, field) for name, field in fields.items())
    return f"{{ {members} }}"


def interface_members(fields: Mapping[str, FieldBase], computed: Iterable[str] = ()) -> list[str]:
    """Render one declaration line per field, preceded by its description when set."""
    lines: list[str] = []
    for name, field in fields.items():
        if field.description:
            lines.append(f"/** {field.description} */")
        lines.append(member_signature(name, field))
    for name in computed:
        if name in fields:
            continue
        lines.append(f"{property_name(name)}: unknown")
    return lines


def parse_field(data: Any) -> FieldBase:
    """Validate a raw mapping (e.g. loaded from YAML) into a field variant."""
    return _FIELD_ADAPTER.validate_python(data)


NestedField.model_rebuild()
ListField.model_rebuild()
_FIELD_ADAPTER: TypeAdapter[Any] = TypeAdapter(SchemaField)
