from __future__ import annotations

import pandas as pd

from ..exceptions import ScoringStructureError


def has_column(table: pd.DataFrame, column: int) -> bool:
    """True if the 1-based ``column`` exists in ``table``."""
    return table.shape[1] >= column


def validate_column_count(
    table: pd.DataFrame,
    column: int,
    table_name: str = "",
) -> None:
    """
    Ensure the 1-based ``column`` exists in the table.

    A table without any rows is accepted; it simply yields zero epochs.
    Raise ScoringStructureError otherwise.
    """
    if len(table) == 0:
        return
    if not has_column(table, column):
        prefix = f"{table_name}: " if table_name else ""
        raise ScoringStructureError(
            f"{prefix}the scoring did contain only {table.shape[1]} columns. "
            f"The requested column number {column} was not present. No epochs read in."
        )
