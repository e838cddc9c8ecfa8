"""CLI output formatting.

Commands hand a machine-readable payload plus a human rendering to the
writer; the configured format decides which one is printed. Supports text,
JSON and YAML.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, TextIO

import yaml


class OutputFormat(str, Enum):
    """Output format options."""
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: OutputFormat = OutputFormat.TEXT
    file: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        """Get the output stream."""
        return self.file or sys.stdout

    @property
    def machine(self) -> bool:
        return self.format != OutputFormat.TEXT


class OutputWriter:
    """Handles formatted output for CLI commands."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    def print(self, *args, **kwargs) -> None:
        """Print to the configured output stream."""
        kwargs.setdefault("file", self.config.stream)
        print(*args, **kwargs)

    def print_result(self, payload: Any, human: Optional[str] = None) -> None:
        """Print ``payload`` in machine formats, ``human`` in text mode.

        When no human rendering is given, text mode falls back to pretty JSON.
        """
        fmt = self.config.format
        if fmt == OutputFormat.JSON:
            self._print_json(payload)
        elif fmt == OutputFormat.YAML:
            self._print_yaml(payload)
        elif human is not None:
            self.print(human)
        else:
            self._print_json(payload)

    def print_payload(self, payload: Any) -> None:
        """Print a payload as JSON, or YAML when that format was requested.

        Dry-run previews always go through here so they stay machine-readable
        even in text mode.
        """
        if self.config.format == OutputFormat.YAML:
            self._print_yaml(payload)
        else:
            self._print_json(payload)

    def print_rows(self, rows: Iterable[Sequence[Any]], empty_message: str) -> None:
        """Print tab-separated rows, or ``empty_message`` when there are none."""
        printed = False
        for row in rows:
            self.print("\t".join("" if v is None else str(v) for v in row))
            printed = True
        if not printed:
            self.print(empty_message)

    def _print_json(self, data: Any) -> None:
        normalized = normalize_for_json(data)
        self.print(json.dumps(normalized, indent=2, default=str))

    def _print_yaml(self, data: Any) -> None:
        normalized = normalize_for_json(data)
        self.print(yaml.safe_dump(normalized, default_flow_style=False, sort_keys=False), end="")


def normalize_for_json(data: Any) -> Any:
    """Normalize dataclasses, enums and tuples for serialization."""
    if is_dataclass(data) and not isinstance(data, type):
        return normalize_for_json(asdict(data))
    if isinstance(data, dict):
        return {k: normalize_for_json(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [normalize_for_json(v) for v in data]
    if isinstance(data, Enum):
        return data.value
    return data


def print_error_payload(error: dict, stream: Optional[TextIO] = None) -> None:
    """Print ``{"error": {...}}`` as JSON."""
    print(json.dumps({"error": normalize_for_json(error)}, indent=2, default=str), file=stream or sys.stdout)
