from __future__ import annotations

import csv
import re
import warnings
from pathlib import Path
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..exceptions import ScoringConfigError, ScoringStructureError
from ..presets import DELIMITED, MAT, NUMERIC, TABLE

WHITESPACE_SEP = r"\s+"


def ensure_file(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(
            f"The scoring file does not exist: {path}. No scoring created."
        )


def _resolve_separator(delimiter: str) -> str:
    # "\\t" arrives unescaped from YAML/CLI input
    if delimiter == "\\t":
        return "\t"
    if delimiter == "" or (delimiter.isspace() and delimiter != "\t"):
        return WHITESPACE_SEP
    return delimiter


def _count_skipped_lines(
    path: Path,
    header_skip_count: int,
    skip_until: str,
    encoding: Optional[str],
) -> int:
    """Number of leading lines to drop, honoring both the count and the marker."""
    if not skip_until:
        return header_skip_count

    with path.open("r", encoding=encoding or "utf-8") as f:
        for idx, line in enumerate(f):
            if idx < header_skip_count:
                continue
            if skip_until in line:
                # the marker line itself is skipped too
                return idx + 1

    raise ScoringStructureError(
        f"Marker line '{skip_until}' was not found in {path.name} "
        f"after skipping {header_skip_count} lines."
    )


def _max_field_count(path: Path, skip: int, sep: str, encoding: Optional[str]) -> int:
    """Field count of the widest data line after the skipped ones."""
    width = 0
    with path.open("r", encoding=encoding or "utf-8", newline="") as f:
        lines = (line for idx, line in enumerate(f) if idx >= skip and line.strip())
        if sep == WHITESPACE_SEP:
            rows = (line.split() for line in lines)
        elif len(sep) == 1:
            rows = csv.reader(lines, delimiter=sep)
        else:
            rows = (re.split(sep, line.rstrip("\r\n")) for line in lines)
        for row in rows:
            width = max(width, len(row))
    return width


def read_delimited_table(
    path: Path | str,
    *,
    delimiter: str = "\t",
    header_skip_count: int = 0,
    skip_until: str = "",
    encoding: Optional[str] = None,
) -> pd.DataFrame:
    """
    Read a delimited text scoring export into a raw table.

    Parameters
    ----------
    path : Path | str
        Path to the text file
    delimiter : str
        Column delimiter. An empty string (or a space) splits on any whitespace.
    header_skip_count : int
        Number of leading lines to skip
    skip_until : str
        If set, additionally skip every line up to and including the first
        line (after the counted ones) that contains this string. The marker
        line itself is dropped as well, so a column header such as "Epoch"
        can serve as the marker without ending up as a data row.
    encoding : str, optional
        File encoding passed to pandas; utf-8 when unset.

    Returns
    -------
    pd.DataFrame
        Raw table with positional integer column labels. Cells are kept as
        strings exactly as read; the first retained line is data, never a
        header. Rows shorter than the widest row are padded with "" so
        short marker rows (e.g. "LON") do not fix the column count. A file
        without data lines gives an empty table.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    ScoringStructureError
        If the marker is never found or the rows cannot be split into columns
    """
    path = Path(path)
    ensure_file(path)

    skip = _count_skipped_lines(path, header_skip_count, skip_until, encoding)
    sep = _resolve_separator(delimiter)

    width = _max_field_count(path, skip, sep, encoding)
    if width == 0:
        return pd.DataFrame()

    try:
        df = pd.read_csv(
            path,
            sep=sep,
            header=None,
            names=list(range(width)),
            skiprows=skip,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            encoding=encoding,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise ScoringStructureError(f"Could not split {path.name} into columns: {e}") from e

    # padded cells of short rows
    return df.fillna("")


def read_numeric_table(path: Path | str, encoding: Optional[str] = None) -> pd.DataFrame:
    """
    Load a whitespace separated numeric file and keep its first two columns.

    Column 0 holds the stage code, column 1 the exclusion code.
    """
    path = Path(path)
    ensure_file(path)

    with warnings.catch_warnings():
        # numpy warns on empty input; an empty file is a valid zero-epoch scoring
        warnings.simplefilter("ignore", UserWarning)
        arr = np.loadtxt(path, ndmin=2, encoding=encoding)

    if arr.size == 0:
        return pd.DataFrame(columns=[0, 1])
    if arr.shape[1] < 2:
        raise ScoringStructureError(
            f"{path.name} has {arr.shape[1]} numeric columns, expected two (stage, exclusion)."
        )
    return pd.DataFrame(arr[:, :2])


def read_mat_table(
    path: Path | str,
    variable: str = "sleepscore",
    column: int = 0,
) -> pd.DataFrame:
    """
    Load one column of a numeric variable from a MATLAB .mat file.

    A 1xN row vector is read as N epochs.
    """
    from scipy.io import loadmat

    path = Path(path)
    ensure_file(path)

    data = loadmat(str(path))
    if variable not in data:
        available = sorted(k for k in data if not k.startswith("__"))
        raise ScoringStructureError(
            f"Variable '{variable}' not found in {path.name}. Available: {available}"
        )

    arr = np.asarray(data[variable])
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    elif arr.ndim == 2 and arr.shape[0] == 1 and arr.shape[1] > 1:
        arr = arr.T

    if arr.shape[0] == 0:
        return pd.DataFrame(columns=[0])
    if arr.shape[1] <= column:
        raise ScoringStructureError(
            f"Variable '{variable}' in {path.name} has only {arr.shape[1]} columns."
        )
    return pd.DataFrame({0: arr[:, column]})


def coerce_table(table: Any) -> pd.DataFrame:
    """
    Accept a caller-supplied table (DataFrame or sequence of rows) as a raw table.

    Column labels are replaced by positions; the caller's object is not modified.
    """
    if isinstance(table, pd.DataFrame):
        df = table.copy()
    elif isinstance(table, (list, tuple)):
        df = pd.DataFrame(list(table))
    else:
        raise ScoringConfigError(
            f"A supplied scoring table must be a DataFrame or a list of rows, got {type(table).__name__}"
        )
    df.columns = range(df.shape[1])
    return df.reset_index(drop=True)


def ingest_table(
    strategy: str,
    source: Optional[Path | str] = None,
    *,
    table: Any = None,
    delimiter: str = "\t",
    header_skip_count: int = 0,
    skip_until: str = "",
    encoding: Optional[str] = None,
) -> pd.DataFrame:
    """Run one ingestion strategy and return the raw table."""
    if strategy == TABLE:
        return coerce_table(table)

    if source is None:
        raise ScoringConfigError("A scoring_file is required unless a table is supplied.")

    if strategy == DELIMITED:
        return read_delimited_table(
            source,
            delimiter=delimiter,
            header_skip_count=header_skip_count,
            skip_until=skip_until,
            encoding=encoding,
        )
    if strategy == NUMERIC:
        return read_numeric_table(source, encoding=encoding)
    if strategy == MAT:
        return read_mat_table(source)

    raise ScoringConfigError(
        f"The ingestion strategy '{strategy}' is not handled. Please choose a valid option."
    )
