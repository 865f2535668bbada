"""Declarative description of the attributes accepted by a data source.

A `SchemaDescriptor` is literal data: a tree of `FieldSchema` objects built
once at import time and never modified. The schema is used in two ways:

  - To validate the shape of a raw configuration (a mapping using the
    attribute names) before it is parsed into typed records. Every problem is
    reported as a `Diagnostic` with the attribute path it refers to.
  - To render documentation of the accepted attributes.
"""

from collections.abc import Generator, Mapping
from dataclasses import dataclass
from enum import StrEnum
import logging
import re
from typing import Any

from .diagnostics import Diagnostic, error
from .exceptions import SchemaDefinitionError
from .validators import Validator

__all__ = [
    "Kind",
    "Cardinality",
    "FieldSchema",
    "SchemaDescriptor",
]

_LOGGER = logging.getLogger(__name__)

ATTRIBUTE_NAME_RE = re.compile("^[a-z_][a-z0-9_]*$")


class Kind(StrEnum):
    """The type of value held by an attribute."""

    STRING = "string"
    MAP = "map"
    """A mapping of string keys to string values."""
    LIST = "list"
    """An ordered list of strings."""
    OBJECT = "object"
    """A nested object with its own attributes."""


class Cardinality(StrEnum):
    """Who supplies the value of an attribute."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


@dataclass(frozen=True)
class FieldSchema:
    """A named attribute within a schema."""

    name: str
    """The attribute name as used in a configuration."""

    kind: Kind
    """The type of the attribute value."""

    cardinality: Cardinality
    """Whether the attribute is required, optional or computed."""

    description: str = ""
    """Plain text documentation."""

    markdown_description: str = ""
    """Markdown documentation, defaults to the plain description."""

    validators: tuple[Validator, ...] = ()
    """Checks run against the value when it is present."""

    attributes: tuple["FieldSchema", ...] = ()
    """Child attributes of an object."""

    @property
    def required(self) -> bool:
        return self.cardinality == Cardinality.REQUIRED

    @property
    def optional(self) -> bool:
        return self.cardinality == Cardinality.OPTIONAL

    @property
    def computed(self) -> bool:
        return self.cardinality == Cardinality.COMPUTED

    def to_dict(self) -> dict[str, Any]:
        """Return a plain representation used for rendering documentation."""
        data: dict[str, Any] = {
            "name": self.name,
            "kind": str(self.kind),
            "description": self.description,
            "markdown_description": self.markdown_description or self.description,
            "required": self.required,
            "optional": self.optional,
            "computed": self.computed,
        }
        if self.validators:
            data["validators"] = [validator.description for validator in self.validators]
        if self.attributes:
            data["attributes"] = [attr.to_dict() for attr in self.attributes]
        return data


def _element_error(values: Any) -> str | None:
    """Return a description of the first map or list element that is not a string."""
    if isinstance(values, Mapping):
        for key, val in values.items():
            if not isinstance(key, str):
                return f"key {key!r} must be a string, got {type(key).__name__}"
            if not isinstance(val, str):
                return f"value of {key!r} must be a string, got {type(val).__name__}"
        return None
    for index, val in enumerate(values):
        if not isinstance(val, str):
            return f"element {index} must be a string, got {type(val).__name__}"
    return None


def _check_value_kind(attr: FieldSchema, value: Any, path: str) -> list[Diagnostic]:
    """Return a diagnostic if the value does not have the attribute's type."""
    if attr.kind == Kind.STRING:
        valid = isinstance(value, str)
    elif attr.kind == Kind.MAP:
        valid = isinstance(value, Mapping)
    elif attr.kind == Kind.LIST:
        valid = isinstance(value, list)
    else:
        valid = isinstance(value, Mapping)
    if not valid:
        detail = f"{attr.kind} required, got {type(value).__name__}"
    elif attr.kind in (Kind.MAP, Kind.LIST) and (
        element_error := _element_error(value)
    ):
        detail = f"{attr.kind} of string required, {element_error}"
    else:
        return []
    return [
        error(
            "Incorrect attribute value type",
            f"Inappropriate value for attribute {attr.name!r}: {detail}",
            path,
        )
    ]


def _validate_attributes(
    attributes: tuple[FieldSchema, ...], values: Mapping[str, Any], prefix: str
) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    known = {attr.name for attr in attributes}
    for key in values:
        if key not in known:
            diagnostics.append(
                error(
                    "Unsupported argument",
                    f'An argument named "{key}" is not expected here.',
                    _join(prefix, str(key)),
                )
            )
    for attr in attributes:
        path = _join(prefix, attr.name)
        if (value := values.get(attr.name)) is None:
            if attr.required:
                diagnostics.append(
                    error(
                        "Missing required argument",
                        f'The argument "{attr.name}" is required, but no definition '
                        "was found.",
                        path,
                    )
                )
            continue
        if attr.computed:
            diagnostics.append(
                error(
                    "Invalid Configuration for Read-Only Attribute",
                    "Cannot set value for this attribute as it is computed. Remove "
                    "the configuration line setting the value.",
                    path,
                )
            )
            continue
        if kind_errors := _check_value_kind(attr, value, path):
            diagnostics.extend(kind_errors)
            continue
        for validator in attr.validators:
            diagnostics.extend(validator.validate(path, value))
        if attr.kind == Kind.OBJECT:
            diagnostics.extend(_validate_attributes(attr.attributes, value, path))
    return diagnostics


def _check_attributes(attributes: tuple[FieldSchema, ...], prefix: str) -> None:
    seen: set[str] = set()
    for attr in attributes:
        path = _join(prefix, attr.name)
        if not ATTRIBUTE_NAME_RE.match(attr.name):
            raise SchemaDefinitionError(f"Invalid attribute name: {path!r}")
        if attr.name in seen:
            raise SchemaDefinitionError(f"Duplicate attribute: {path}")
        seen.add(attr.name)
        if attr.kind == Kind.OBJECT and not attr.attributes:
            raise SchemaDefinitionError(f"Object attribute {path} has no attributes")
        if attr.kind != Kind.OBJECT and attr.attributes:
            raise SchemaDefinitionError(
                f"Attribute {path} of kind {attr.kind} may not have attributes"
            )
        if attr.computed and attr.validators:
            raise SchemaDefinitionError(
                f"Computed attribute {path} may not have validators"
            )
        _check_attributes(attr.attributes, path)


@dataclass(frozen=True)
class SchemaDescriptor:
    """The top level attributes accepted by a data source."""

    attributes: tuple[FieldSchema, ...]
    """The top level attributes."""

    description: str = ""
    """Plain text documentation of the data source."""

    markdown_description: str = ""
    """Markdown documentation of the data source."""

    def walk(self) -> Generator[tuple[str, FieldSchema], None, None]:
        """Yield every attribute with its dotted path, depth first."""
        stack = [("", attr) for attr in reversed(self.attributes)]
        while stack:
            prefix, attr = stack.pop()
            path = _join(prefix, attr.name)
            yield path, attr
            stack.extend((path, child) for child in reversed(attr.attributes))

    def attribute(self, path: str) -> FieldSchema:
        """Return the attribute at the dotted path."""
        attributes = self.attributes
        found: FieldSchema | None = None
        for name in path.split("."):
            found = next((attr for attr in attributes if attr.name == name), None)
            if found is None:
                raise KeyError(path)
            attributes = found.attributes
        if found is None:
            raise KeyError(path)
        return found

    def check(self) -> None:
        """Verify the schema is self-consistent.

        Attribute names must be unique at each level, only objects may have
        child attributes, every object must have at least one, and computed
        attributes may not have validators.
        """
        _check_attributes(self.attributes, "")

    def validate(self, config: Any) -> list[Diagnostic]:
        """Return every violation of the schema found in the configuration."""
        if not isinstance(config, Mapping):
            return [
                error(
                    "Invalid configuration",
                    f"Expected a mapping of attributes, got {type(config).__name__}",
                )
            ]
        diagnostics = _validate_attributes(self.attributes, config, "")
        if diagnostics:
            _LOGGER.debug("Configuration has %d schema violations", len(diagnostics))
        return diagnostics

    def to_dict(self) -> dict[str, Any]:
        """Return a plain representation used for rendering documentation."""
        return {
            "description": self.description,
            "markdown_description": self.markdown_description or self.description,
            "attributes": [attr.to_dict() for attr in self.attributes],
        }
