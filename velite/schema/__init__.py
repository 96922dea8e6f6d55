"""Schema and field data model driving code generation."""

from .fields import (
    BooleanField,
    DateField,
    FieldBase,
    Fields,
    FileField,
    ListField,
    NestedField,
    NumberField,
    SchemaField,
    StringField,
    interface_members,
    object_type,
    parse_field,
)
from .models import Collection, Schema, SourceFormat, type_name_for, validate_collection_key

__all__ = [
    "BooleanField",
    "Collection",
    "DateField",
    "FieldBase",
    "Fields",
    "FileField",
    "ListField",
    "NestedField",
    "NumberField",
    "Schema",
    "SchemaField",
    "SourceFormat",
    "StringField",
    "interface_members",
    "object_type",
    "parse_field",
    "type_name_for",
    "validate_collection_key",
]
