"""
Tests for hypnokit.io.validation column checks.
"""
import pandas as pd
import pytest

from hypnokit.exceptions import ScoringStructureError
from hypnokit.io.validation import has_column, validate_column_count


def test_has_column_is_one_based():
    table = pd.DataFrame([["a", "b"]])

    assert has_column(table, 2)
    assert not has_column(table, 3)


def test_validate_column_count_passes():
    validate_column_count(pd.DataFrame([["a", "b"]]), 2)


def test_validate_column_count_reports_width():
    with pytest.raises(ScoringStructureError) as exc_info:
        validate_column_count(pd.DataFrame([["a", "b"]]), 4, table_name="zmax")

    msg = str(exc_info.value)
    assert "only 2 columns" in msg
    assert "column number 4" in msg


def test_validate_column_count_skips_empty_tables():
    validate_column_count(pd.DataFrame(), 4)
