"""Schemas and the collections bound to them."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fields import Fields

Computed = Callable[[dict[str, Any]], Any]

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class SourceFormat(str, Enum):
    """Format of the source files matched by a schema."""

    MARKDOWN = "markdown"
    YAML = "yaml"
    JSON = "json"


class Schema(BaseModel):
    """Shape and origin of the records in one collection."""

    name: str = Field(description="Type name used in generated declarations.")
    pattern: str = Field(description="Glob matching source files, relative to the content root.")
    type: SourceFormat = Field(default=SourceFormat.MARKDOWN)
    fields: Fields = Field(default_factory=dict)
    computeds: dict[str, Computed] = Field(
        default_factory=dict,
        description="Derived fields computed from each validated record.",
    )

    @field_validator("name")
    def _normalize_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("schema name cannot be empty")
        return cleaned


class Collection(BaseModel):
    """Binding of a collection key to its schema and cardinality."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, description="Generated type name; derived when omitted.")
    single: bool = Field(default=False, description="Whether the collection holds one record.")
    schema_: Schema | None = Field(default=None, alias="schema")

    def type_name(self, key: str) -> str:
        if self.name:
            return self.name
        if self.schema_ is not None:
            return self.schema_.name
        return type_name_for(key, single=self.single)


def type_name_for(key: str, *, single: bool = False) -> str:
    """Derive a PascalCase type name from a collection key.

    Keys of multi-record collections are singularized (``posts`` -> ``Post``).
    """
    words = [word for word in _WORD_SPLIT.split(key) if word]
    if not words:
        raise ValueError(f"cannot derive a type name from '{key}'")
    if not single:
        words[-1] = _singularize(words[-1])
    return "".join(word[:1].upper() + word[1:] for word in words)


def validate_collection_key(key: str) -> str:
    """Collection keys become export names, so they must be identifiers."""
    if not _IDENTIFIER.match(key):
        raise ValueError(f"collection key '{key}' is not a valid identifier")
    return key


def _singularize(word: str) -> str:
    lower = word.lower()
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith(("ses", "xes", "ches", "shes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word
