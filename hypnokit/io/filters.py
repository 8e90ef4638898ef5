from __future__ import annotations

import math
from numbers import Number
from typing import Any, Iterable, List

import numpy as np
import pandas as pd


def cell_to_str(value: Any) -> str:
    """
    Coerce one table cell to the string used for label/marker comparison.

    - strings pass through unchanged
    - booleans become "1" / "0"
    - integral numbers use their integer decimal form (3.0 -> "3")
    - other floats use the shortest positional decimal form (2.5 -> "2.5")
    - missing values (None, NaN) become ""
    """
    if value is None or value is pd.NA:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, np.bool_)):
        return "1" if value else "0"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, Number):
        f = float(value)
        if math.isnan(f):
            return ""
        if f.is_integer():
            return str(int(f))
        return np.format_float_positional(f, trim="-")
    return str(value)


def column_to_strings(table: pd.DataFrame, column_index: int) -> List[str]:
    """Extract a 0-based positional column as a list of comparison strings."""
    return [cell_to_str(v) for v in table.iloc[:, column_index].tolist()]


def filter_lines(
    table: pd.DataFrame,
    ignore: Iterable[str] = (),
    select: Iterable[str] = (),
) -> pd.DataFrame:
    """
    Keep rows by the string form of their first column.

    A row is retained iff ``(not select or first in select) and first not in ignore``.
    Relative row order is preserved and the index is reset.
    """
    ignore = set(ignore)
    select = set(select)
    if table.empty or (not ignore and not select):
        return table.reset_index(drop=True)

    first = column_to_strings(table, 0)
    keep = [
        (not select or value in select) and value not in ignore
        for value in first
    ]
    return table.loc[keep].reset_index(drop=True)
