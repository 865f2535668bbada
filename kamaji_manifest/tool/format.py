"""Output formats of the kamaji-manifest commands.

Output is written to `sys.stdout` as looked up at the time of the call, so
redirected or captured streams receive it.
"""

import json
import sys
from typing import Any, Generator, TextIO

import yaml

PADDING = 4


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows aligned on the widest value of each column."""
    data = [headers] + rows
    widths = [max(len(row[i]) for row in data) + PADDING for i in range(len(headers))]
    for row in data:
        yield "".join(value.ljust(width) for value, width in zip(row, widths))


class TableFormatter:
    """Prints attribute rows as a table with upper case column headers."""

    def __init__(self, columns: list[str]) -> None:
        """Initialize TableFormatter with the keys to print, in order."""
        self._columns = columns

    def lines(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        rows = [[str(row[key]) for key in self._columns] for row in data]
        headers = [column.upper() for column in self._columns]
        for line in format_columns(headers, rows):
            yield line.rstrip()

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        for line in self.lines(data):
            print(line, file=file or sys.stdout)


def print_yaml(docs: list[Any], file: TextIO | None = None) -> None:
    """Print each document as yaml, keeping the key order of the document."""
    content = yaml.dump_all(docs, sort_keys=False, explicit_start=True)
    print(content, end="", file=file or sys.stdout)


def print_json(doc: Any, file: TextIO | None = None) -> None:
    """Print a document as indented json."""
    print(json.dumps(doc, indent=4), file=file or sys.stdout)
