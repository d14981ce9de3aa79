"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() yields one dict per data row, keyed ``field_0``,
    ``field_1``, ... in column order.  The header row is never yielded.
    SourceAdapter.probe() returns a quick snapshot: row count, header
    columns, sample rows and the detected delimiter.

Architecture: fieldops_ingestion/adapters. Text/file I/O only, no store or
kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


def field_key(index: int) -> str:
    """Positional key used for cells in adapter output rows."""
    return f"field_{index}"


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading delimited sources into positional record dicts."""

    def read(self, source: Path | str, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per data row."""
        ...

    def probe(self, source: Path | str, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, header columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source (row count, header columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]
    encoding: str | None = None
    detected_delimiter: str | None = None
