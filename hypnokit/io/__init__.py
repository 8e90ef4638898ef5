"""
Ingestion layer for hypnokit.

Responsibilities:
- Read raw scoring exports (delimited text, numeric two-column files, .mat) into raw tables
- Accept caller-supplied tables without touching the filesystem
- Filter raw rows by their first column
- Check that requested columns exist
"""

from .raw_readers import (
    read_delimited_table,
    read_numeric_table,
    read_mat_table,
    coerce_table,
    ingest_table,
)

from .filters import (
    cell_to_str,
    column_to_strings,
    filter_lines,
)

from .validation import has_column, validate_column_count

__all__ = [
    "read_delimited_table",
    "read_numeric_table",
    "read_mat_table",
    "coerce_table",
    "ingest_table",
    "cell_to_str",
    "column_to_strings",
    "filter_lines",
    "has_column",
    "validate_column_count",
]
