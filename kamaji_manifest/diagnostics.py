"""Diagnostics reported back to the caller of a data source.

A diagnostic is the unit of feedback for a failed (or questionable)
invocation: the caller is responsible for presenting them to a user. No
partial output is returned alongside an error diagnostic.
"""

from dataclasses import dataclass
from enum import StrEnum
from collections.abc import Iterable

__all__ = [
    "Severity",
    "Diagnostic",
    "error",
    "has_error",
]


class Severity(StrEnum):
    """Severity of a diagnostic."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found while processing a request."""

    severity: Severity
    """How serious the problem is."""

    summary: str
    """A short description of the problem."""

    detail: str = ""
    """A longer description of the problem."""

    path: str | None = None
    """The attribute path the problem refers to e.g. `spec.driver`."""

    def __str__(self) -> str:
        """Return the path, summary and detail as a single line."""
        prefix = f"{self.path}: " if self.path else ""
        if self.detail:
            return f"{prefix}{self.summary}: {self.detail}"
        return f"{prefix}{self.summary}"


def error(summary: str, detail: str = "", path: str | None = None) -> Diagnostic:
    """Return an error diagnostic."""
    return Diagnostic(Severity.ERROR, summary, detail, path)


def has_error(diagnostics: Iterable[Diagnostic]) -> bool:
    """Return True if any of the diagnostics is an error."""
    return any(diag.severity == Severity.ERROR for diag in diagnostics)
