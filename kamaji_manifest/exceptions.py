"""Exceptions related to kamaji-manifest."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .diagnostics import Diagnostic

__all__ = [
    "ManifestException",
    "InputException",
    "SchemaViolation",
    "SerializationFailed",
    "SchemaDefinitionError",
    "ObjectNotFoundError",
]


class ManifestException(Exception):
    """Generic base exception used for this library."""


class InputException(ManifestException):
    """Raised when the input documents or values are not formatted as expected."""


class SchemaViolation(InputException):
    """Raised when a configuration fails the schema validation rules."""

    def __init__(self, diagnostics: list["Diagnostic"]) -> None:
        self.diagnostics = diagnostics
        details = "; ".join(str(diag) for diag in diagnostics)
        super().__init__(f"Invalid configuration: {details}")


class SerializationFailed(ManifestException):
    """Raised when a manifest value cannot be encoded as YAML."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Unable to marshal YAML: {cause}")
        self.cause = cause


class SchemaDefinitionError(ManifestException):
    """Raised when a schema descriptor is not self-consistent."""


class ObjectNotFoundError(ManifestException):
    """Raised when a data source is not registered with the provider."""
