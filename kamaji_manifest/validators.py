"""Validators attached to schema attributes.

Each validator is invoked with the attribute path and a value that is present
in the configuration. Values that are absent are never passed to a validator;
cardinality (required/optional/computed) is checked by the schema itself.

The Kubernetes naming rules implemented here follow the object name, label
and annotation conventions documented at
https://kubernetes.io/docs/concepts/overview/working-with-objects/names/
"""

from abc import ABC, abstractmethod
import base64
import binascii
import re
from typing import Any

from .diagnostics import Diagnostic, error

__all__ = [
    "Validator",
    "NameValidator",
    "LabelValidator",
    "AnnotationValidator",
    "Base64Validator",
    "LengthAtLeast",
    "OneOf",
    "SizeAtLeast",
    "ExactlyOneOf",
]

DNS1123_SUBDOMAIN_MAX_LENGTH = 253
QUALIFIED_NAME_MAX_LENGTH = 63
LABEL_VALUE_MAX_LENGTH = 63
TOTAL_ANNOTATION_SIZE_LIMIT = 256 * 1024

_DNS1123_LABEL = "[a-z0-9]([-a-z0-9]*[a-z0-9])?"
DNS1123_SUBDOMAIN_RE = re.compile(f"^{_DNS1123_LABEL}(\\.{_DNS1123_LABEL})*$")
QUALIFIED_NAME_RE = re.compile("^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
LABEL_VALUE_RE = re.compile("^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$")


def _dns1123_subdomain_errors(value: str) -> list[str]:
    errors = []
    if len(value) > DNS1123_SUBDOMAIN_MAX_LENGTH:
        errors.append(
            f"must be no more than {DNS1123_SUBDOMAIN_MAX_LENGTH} characters"
        )
    if not DNS1123_SUBDOMAIN_RE.match(value):
        errors.append(
            "must consist of lower case alphanumeric characters, '-' or '.', and "
            "must start and end with an alphanumeric character"
        )
    return errors


def _qualified_name_errors(value: str) -> list[str]:
    """Return the problems with a label or annotation key."""
    parts = value.split("/")
    if len(parts) == 1:
        name = parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            return ["prefix part must be non-empty"]
        if prefix_errors := _dns1123_subdomain_errors(prefix):
            return [f"prefix part {err}" for err in prefix_errors]
    else:
        return [
            "a qualified name must consist of an optional DNS subdomain prefix "
            "and a name separated by a single '/'"
        ]
    if not name:
        return ["name part must be non-empty"]
    errors = []
    if len(name) > QUALIFIED_NAME_MAX_LENGTH:
        errors.append(
            f"name part must be no more than {QUALIFIED_NAME_MAX_LENGTH} characters"
        )
    if not QUALIFIED_NAME_RE.match(name):
        errors.append(
            "name part must consist of alphanumeric characters, '-', '_' or '.', "
            "and must start and end with an alphanumeric character"
        )
    return errors


def _label_value_errors(value: str) -> list[str]:
    errors = []
    if len(value) > LABEL_VALUE_MAX_LENGTH:
        errors.append(f"must be no more than {LABEL_VALUE_MAX_LENGTH} characters")
    if not LABEL_VALUE_RE.match(value):
        errors.append(
            "a valid label must be an empty string or consist of alphanumeric "
            "characters, '-', '_' or '.', and must start and end with an "
            "alphanumeric character"
        )
    return errors


class Validator(ABC):
    """A check applied to a single attribute value."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable description of the rule."""

    @abstractmethod
    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        """Return the violations of the rule for the value at path."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.description!r})"


class NameValidator(Validator):
    """Validates a Kubernetes object name (DNS-1123 subdomain)."""

    @property
    def description(self) -> str:
        return "value must be a valid DNS-1123 subdomain"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        return [
            error("Invalid Attribute Value", f"{value!r} {err}", path)
            for err in _dns1123_subdomain_errors(value)
        ]


class LabelValidator(Validator):
    """Validates the keys and values of a Kubernetes label map."""

    @property
    def description(self) -> str:
        return "keys must be qualified names and values must be valid label values"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        diagnostics = []
        for key, val in value.items():
            for err in _qualified_name_errors(key):
                diagnostics.append(
                    error("Invalid Label Key", f"{key!r} {err}", path)
                )
            for err in _label_value_errors(val):
                diagnostics.append(
                    error("Invalid Label Value", f"{key}={val!r} {err}", path)
                )
        return diagnostics


class AnnotationValidator(Validator):
    """Validates the keys and total size of a Kubernetes annotation map."""

    @property
    def description(self) -> str:
        return (
            "keys must be qualified names and the total size must be at most "
            f"{TOTAL_ANNOTATION_SIZE_LIMIT} bytes"
        )

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        diagnostics = []
        total_size = 0
        for key, val in value.items():
            total_size += len(key.encode()) + len(val.encode())
            for err in _qualified_name_errors(key):
                diagnostics.append(
                    error("Invalid Annotation Key", f"{key!r} {err}", path)
                )
        if total_size > TOTAL_ANNOTATION_SIZE_LIMIT:
            diagnostics.append(
                error(
                    "Annotations Too Long",
                    f"may not have more than {TOTAL_ANNOTATION_SIZE_LIMIT} bytes, "
                    f"got {total_size}",
                    path,
                )
            )
        return diagnostics


class Base64Validator(Validator):
    """Validates that a string is base64 encoded."""

    @property
    def description(self) -> str:
        return "value must be base64 encoded"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        # Line breaks are ignored, as in wrapped PEM style content.
        unwrapped = value.replace("\r", "").replace("\n", "")
        try:
            base64.b64decode(unwrapped, validate=True)
        except (binascii.Error, ValueError) as err:
            return [error("Invalid Base64 Value", f"{value!r}: {err}", path)]
        return []


class LengthAtLeast(Validator):
    """Validates the minimum length of a string."""

    def __init__(self, min_length: int) -> None:
        self._min_length = min_length

    @property
    def description(self) -> str:
        return f"string length must be at least {self._min_length}"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        if len(value) < self._min_length:
            return [
                error(
                    "Invalid Attribute Value Length",
                    f"{self.description}, got: {len(value)}",
                    path,
                )
            ]
        return []


class OneOf(Validator):
    """Validates that a string is exactly one of a fixed set of values."""

    def __init__(self, *values: str) -> None:
        self._values = values

    @property
    def values(self) -> tuple[str, ...]:
        """The accepted values."""
        return self._values

    @property
    def description(self) -> str:
        choices = " ".join(f'"{value}"' for value in self._values)
        return f"value must be one of: [{choices}]"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        if value not in self._values:
            return [
                error(
                    "Invalid Attribute Value Match",
                    f'{self.description}, got: "{value}"',
                    path,
                )
            ]
        return []


class SizeAtLeast(Validator):
    """Validates the minimum number of elements of a list."""

    def __init__(self, min_size: int) -> None:
        self._min_size = min_size

    @property
    def description(self) -> str:
        return f"list must contain at least {self._min_size} elements"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        if len(value) < self._min_size:
            return [
                error(
                    "Invalid Attribute Value",
                    f"{self.description}, got: {len(value)}",
                    path,
                )
            ]
        return []


class ExactlyOneOf(Validator):
    """Validates that an object sets exactly one of the named attributes."""

    def __init__(self, *names: str) -> None:
        self._names = names

    @property
    def description(self) -> str:
        return f"exactly one of [{', '.join(self._names)}] must be set"

    def validate(self, path: str, value: Any) -> list[Diagnostic]:
        present = [name for name in self._names if value.get(name) is not None]
        if len(present) != 1:
            got = ", ".join(present) if present else "none"
            return [
                error(
                    "Invalid Attribute Combination",
                    f"{self.description}, got: {got}",
                    path,
                )
            ]
        return []
