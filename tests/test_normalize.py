"""
Tests for hypnokit.normalize module.

Verifies that:
- map_labels only produces labels from label_new or the unknown fallback
- Unmapped labels are kept with the fallback and reported once
- A too-narrow table is fatal for labels but only an advisory for exclusions
"""
from __future__ import annotations

import pandas as pd
import pytest

from hypnokit.diagnostics import Diagnostics
from hypnokit.exceptions import ScoringStructureError
from hypnokit.normalize import map_labels, resolve_exclusions
from hypnokit.scoremaps import ScoreMap


SCORE_MAP = ScoreMap(label_old=("0", "1"), label_new=("W", "N1"), unknown="?")


# ---------- map_labels ----------


def test_map_labels_unmapped_fallback():
    """Unmapped raw labels get the fallback and one advisory naming them."""
    table = pd.DataFrame({0: ["0", "1", "9"]})
    diagnostics = Diagnostics()

    mapping = map_labels(table, 1, SCORE_MAP, diagnostics)

    assert mapping.canonical == ("W", "N1", "?")
    assert mapping.original == ("0", "1", "9")
    assert mapping.unmapped == ("9",)
    assert mapping.any_unmapped

    advisories = diagnostics.by_code("unmapped_labels")
    assert len(advisories) == 1
    assert "9" in advisories[0].message
    assert "'?'" in advisories[0].message
    assert advisories[0].details == {"labels": ["9"], "fallback": "?"}


def test_map_labels_reports_distinct_values_once():
    table = pd.DataFrame({0: ["x", "0", "x", "y"]})
    diagnostics = Diagnostics()

    mapping = map_labels(table, 1, SCORE_MAP, diagnostics)

    assert mapping.unmapped == ("x", "y")
    assert len(diagnostics) == 1


def test_map_labels_all_mapped_is_silent():
    diagnostics = Diagnostics()
    mapping = map_labels(pd.DataFrame({0: ["0", "1"]}), 1, SCORE_MAP, diagnostics)

    assert not mapping.any_unmapped
    assert len(diagnostics) == 0


def test_map_labels_numeric_column():
    """Numeric label columns compare by their integer string form."""
    table = pd.DataFrame({0: [0.0, 1.0, 1.0]})

    mapping = map_labels(table, 1, SCORE_MAP)

    assert mapping.canonical == ("W", "N1", "N1")
    assert mapping.original == ("0", "1", "1")


def test_map_labels_uses_requested_column():
    table = pd.DataFrame({0: ["a", "b"], 1: ["1", "0"]})

    mapping = map_labels(table, 2, SCORE_MAP)

    assert mapping.canonical == ("N1", "W")


def test_map_labels_column_out_of_range():
    table = pd.DataFrame({0: ["0"], 1: ["1"]})

    with pytest.raises(ScoringStructureError) as exc_info:
        map_labels(table, 3, SCORE_MAP)
    assert "only 2 columns" in str(exc_info.value)


def test_map_labels_empty_table_is_degenerate():
    mapping = map_labels(pd.DataFrame(), 4, SCORE_MAP)

    assert mapping.canonical == ()
    assert mapping.original == ()


@pytest.mark.parametrize("raw", [["0", "1", "2"], ["W", "", "1"], ["-1", "0"]])
def test_map_labels_only_produces_known_labels(raw):
    mapping = map_labels(pd.DataFrame({0: raw}), 1, SCORE_MAP)

    allowed = set(SCORE_MAP.label_new) | {SCORE_MAP.unknown}
    assert set(mapping.canonical) <= allowed
    assert len(mapping.canonical) == len(raw)


# ---------- resolve_exclusions ----------


def test_resolve_exclusions_disabled_is_all_false():
    table = pd.DataFrame({0: ["0", "1"], 1: ["1", "1"]})

    result = resolve_exclusions(table, False, 2, {"1"})

    assert result.excluded == (False, False)
    assert result.raw is None


def test_resolve_exclusions_marks_markers():
    table = pd.DataFrame({0: [0.0, 2.0, 5.0, 1.0], 1: [0.0, 1.0, 3.0, 11.0]})

    result = resolve_exclusions(table, True, 2, {"1", "2", "3"})

    assert result.excluded == (False, True, True, False)
    assert result.raw == ("0", "1", "3", "11")


def test_resolve_exclusions_missing_column_degrades():
    """A missing exclusion column gives all-False flags and an advisory."""
    table = pd.DataFrame({0: ["0", "1"]})
    diagnostics = Diagnostics()

    result = resolve_exclusions(table, True, 2, {"1"}, diagnostics)

    assert result.excluded == (False, False)
    assert diagnostics.codes == ["exclusion_column_missing"]


def test_resolve_exclusions_empty_table():
    result = resolve_exclusions(pd.DataFrame(), True, 2, {"1"})
    assert result.excluded == ()
