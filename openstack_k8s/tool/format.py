"""Library for formatting command output as a table, yaml or json."""

from abc import ABC, abstractmethod
import json
import sys
from typing import Any, Generator, TextIO

import yaml


PADDING = 4
NONE_VALUE = "<none>"


def column_format_string(rows: list[list[str]]) -> str:
    """Produce a format string based on max width of columns."""
    if not rows or not rows[0]:
        return ""
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    return "".join(f"{{:{width + PADDING}}}" for width in widths)


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows aligned in columns."""
    data = [headers] + rows
    if not (format_string := column_format_string(data)):
        return
    for row in data:
        yield format_string.format(*row).rstrip()


def _cell(value: Any) -> str:
    """Render a table cell, joining lists and showing missing values."""
    if value is None:
        return NONE_VALUE
    if isinstance(value, list):
        return ",".join(str(item) for item in value) or NONE_VALUE
    return str(value)


class PrintFormatter:
    """A formatter that prints report fields as table columns."""

    def __init__(self, keys: list[str] | None = None):
        """Initialize the PrintFormatter with the report fields to print.

        When no keys are given the fields of the first report are used.
        """
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the reports."""
        if not data:
            return
        keys = self._keys if self._keys is not None else list(data[0])
        yield from format_columns(
            [key.upper() for key in keys],
            [[_cell(report.get(key)) for key in keys] for report in data],
        )

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Output the reports."""
        for line in self.format(data):
            print(line, file=file)


class StructFormatter(ABC):
    """A formatter that serializes a report as a document."""

    @abstractmethod
    def dumps(self, data: Any) -> str:
        """Serialize the report."""

    def format(self, data: Any) -> Generator[str, None, None]:
        """Format the report as lines."""
        yield from self.dumps(data).split("\n")

    def print(self, data: Any, file: TextIO = sys.stdout) -> None:
        """Output the report."""
        print(self.dumps(data), end="", file=file)


class YamlFormatter(StructFormatter):
    """A formatter that prints a yaml document."""

    def dumps(self, data: Any) -> str:
        return yaml.dump(data, sort_keys=False, explicit_start=True)


class JsonFormatter(StructFormatter):
    """A formatter that prints json output."""

    def dumps(self, data: Any) -> str:
        return json.dumps(data, indent=2, sort_keys=False) + "\n"


def struct_formatter(output: str) -> StructFormatter:
    """Return the formatter for a structured output choice."""
    if output == "json":
        return JsonFormatter()
    return YamlFormatter()
