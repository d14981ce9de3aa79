"""
Delimited-text source adapter.

Parses the spreadsheet exports field staff upload: comma or semicolon
separated, first non-blank line is the header.  The delimiter is sniffed
from the header (semicolon only when it strictly outnumbers commas).

Rows are split purely on the delimiter.  A quoted field that contains the
delimiter is split as well; quote characters are only trimmed from the
ends of each cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from fieldops_ingestion.adapters.base import SourceProbe, field_key

COMMA = ","
SEMICOLON = ";"
_QUOTES = ("\"", "'")
_BOM = "\ufeff"


def detect_delimiter(header_line: str) -> str:
    """Semicolon if it occurs strictly more often than comma, else comma."""
    if header_line.count(SEMICOLON) > header_line.count(COMMA):
        return SEMICOLON
    return COMMA


def clean_field(value: str | None) -> str:
    """Trim and strip one matching pair of surrounding quotes."""
    if not value:
        return ""
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        text = text[1:-1]
    return text


@dataclass(frozen=True)
class ParsedTable:
    """Header and data rows of one delimited text, cells already cleaned."""

    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    delimiter: str

    def records(self) -> Iterator[dict[str, Any]]:
        """Rows as positional dicts (``field_0`` ...)."""
        for row in self.rows:
            yield {field_key(i): cell for i, cell in enumerate(row)}


def parse_delimited_text(text: str) -> ParsedTable:
    """
    Split text into a header and data rows.

    Strips a leading UTF-8 BOM, trims every line and drops blank lines.
    Empty input yields an empty header and no rows.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        return ParsedTable(header=(), rows=(), delimiter=COMMA)

    delimiter = detect_delimiter(lines[0])
    header = tuple(clean_field(cell) for cell in lines[0].split(delimiter))
    rows = tuple(
        tuple(clean_field(cell) for cell in line.split(delimiter))
        for line in lines[1:]
    )
    return ParsedTable(header=header, rows=rows, delimiter=delimiter)


def _load_text(source: Path | str, options: dict[str, Any]) -> str:
    if isinstance(source, Path):
        encoding = options.get("encoding", "utf-8")
        if encoding.lower() == "utf-8":
            encoding = "utf-8-sig"
        return source.read_text(encoding=encoding)
    return source


class CsvTextAdapter:
    """
    Read delimited text into positional row dicts.

    ``source`` is either a ``Path`` to a file or the text itself.
    """

    def parse(self, source: Path | str, options: dict[str, Any] | None = None) -> ParsedTable:
        return parse_delimited_text(_load_text(source, options or {}))

    def read(self, source: Path | str, options: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        yield from self.parse(source, options).records()

    def probe(self, source: Path | str, options: dict[str, Any] | None = None) -> SourceProbe:
        options = options or {}
        table = self.parse(source, options)
        sample = tuple(table.records())[:5]
        return SourceProbe(
            row_count=len(table.rows),
            columns=table.header,
            sample_rows=sample,
            encoding=options.get("encoding", "utf-8"),
            detected_delimiter=table.delimiter,
        )
