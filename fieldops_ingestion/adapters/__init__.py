"""Source adapters for bulk ingestion."""

from fieldops_ingestion.adapters.base import SourceAdapter, SourceProbe, field_key
from fieldops_ingestion.adapters.csv_adapter import (
    CsvTextAdapter,
    ParsedTable,
    clean_field,
    detect_delimiter,
    parse_delimited_text,
)

__all__ = [
    "CsvTextAdapter",
    "ParsedTable",
    "SourceAdapter",
    "SourceProbe",
    "clean_field",
    "detect_delimiter",
    "field_key",
    "parse_delimited_text",
]
