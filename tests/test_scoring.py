"""
Tests for hypnokit.scoring module.

Verifies that:
- assemble_scoring builds the label set from the score map, not the data
- The length invariant is enforced
- to_dict / from_dict and save / load round-trip every field
"""
from __future__ import annotations

import json

import pandas as pd
import pytest

from hypnokit.exceptions import ScoringStructureError
from hypnokit.scoremaps import ScoreMap
from hypnokit.scoring import (
    Scoring,
    assemble_scoring,
    load_scoring_record,
    save_scoring,
)


SCORE_MAP = ScoreMap(
    label_old=("0", "1", "2", "3", "4", "5"),
    label_new=("W", "N1", "N2", "N3", "N3", "R"),
    unknown="?",
)


def _scoring(**kwargs) -> Scoring:
    params = dict(
        epoch_length=30,
        data_offset=-15,
        standard="aasm",
        source_format="fasst",
        source_file="night.txt",
        table=pd.DataFrame({0: ["0", "2", "9"], 1: [0.0, 1.0, 0.0]}),
        original_excluded=("0", "1", "0"),
        options={"label_column": 1},
    )
    params.update(kwargs)
    return assemble_scoring(
        ("W", "N2", "?"),
        ("0", "2", "9"),
        (False, True, False),
        SCORE_MAP,
        **params,
    )


def test_assemble_scoring_label_set_from_score_map():
    """The label set covers every map target, even labels not observed."""
    scoring = _scoring()

    assert scoring.label == ("N1", "N2", "N3", "R", "W")
    assert scoring.epochs == ("W", "N2", "?")
    assert scoring.excluded == (False, True, False)
    assert scoring.epoch_length == 30.0
    assert scoring.data_offset == -15.0
    assert scoring.provenance.original_labels == ("0", "2", "9")
    assert scoring.provenance.score_map == SCORE_MAP


def test_assemble_scoring_length_mismatch():
    with pytest.raises(ScoringStructureError):
        assemble_scoring(
            ("W", "N1"),
            ("0", "1"),
            (False,),
            SCORE_MAP,
            epoch_length=30,
            data_offset=0,
            standard="aasm",
            source_format="fasst",
        )


def test_scoring_to_frame():
    frame = _scoring().to_frame()

    assert frame["onset_s"].tolist() == [-15.0, 15.0, 45.0]
    assert frame["stage"].tolist() == ["W", "N2", "?"]
    assert frame["excluded"].tolist() == [False, True, False]


def test_scoring_dict_round_trip():
    scoring = _scoring()

    restored = Scoring.from_dict(json.loads(json.dumps(scoring.to_dict())))

    assert restored == scoring
    assert restored.to_dict() == scoring.to_dict()
    assert restored.provenance.table.shape == (3, 2)
    assert restored.options == {"label_column": 1}


def test_missing_table_cells_survive_round_trip(tmp_path):
    """Missing cells compare equal before and after saving."""
    table = pd.DataFrame({0: ["0", "2", None], 1: [0.0, float("nan"), 0.0]})
    scoring = _scoring(table=table)

    loaded = load_scoring_record(save_scoring(scoring, tmp_path / "nan.json"))

    assert scoring == _scoring(table=table.copy())
    assert loaded == scoring
    assert loaded.provenance.to_dict()["table"]["data"][1] == ["2", None]


def test_save_and_load_scoring(tmp_path):
    scoring = _scoring()
    path = save_scoring(scoring, tmp_path / "out" / "night.json")

    loaded = load_scoring_record(path)

    assert loaded == scoring


def test_save_scoring_is_deterministic(tmp_path):
    a = save_scoring(_scoring(), tmp_path / "a.json")
    b = save_scoring(_scoring(), tmp_path / "b.json")

    assert a.read_bytes() == b.read_bytes()


def test_load_scoring_record_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scoring_record(tmp_path / "missing.json")


def test_with_epochs_returns_new_record():
    scoring = _scoring()

    converted = scoring.with_epochs(("W", "S2", "?"), "rk", ("S2", "W", "?"))

    assert converted.standard == "rk"
    assert scoring.standard == "aasm"
    assert converted.provenance is scoring.provenance
