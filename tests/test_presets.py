"""
Tests for hypnokit.presets module.

Verifies that:
- Built-in formats resolve to their fixed options and score maps
- Aliases resolve to the same preset
- Custom / unknown formats require a caller score map
- R&K on AASM-native formats records a representation-mismatch advisory
"""
from __future__ import annotations

import pytest

from hypnokit.diagnostics import Diagnostics
from hypnokit.exceptions import ScoringConfigError
from hypnokit.presets import (
    DELIMITED,
    FORMAT_PRESETS,
    MAT,
    NUMERIC,
    RECORD,
    canonical_format_id,
    resolve_preset,
)
from hypnokit.scoremaps import ScoreMap


CUSTOM_MAP = ScoreMap(label_old=("a", "b"), label_new=("W", "R"), unknown="?")


# ---------- Built-in formats ----------


def test_resolve_zmax_aasm():
    """zmax resolves to comma-delimited, LON/LOUT ignored, label column 4."""
    diagnostics = Diagnostics()
    preset = resolve_preset("zmax", "aasm", diagnostics=diagnostics)

    assert preset.strategy == DELIMITED
    assert preset.options["delimiter"] == ","
    assert set(preset.options["ignore_lines"]) == {"LOUT", "LON"}
    assert preset.options["label_column"] == 4
    assert preset.score_map.label_new == ("W", "N1", "N2", "N3", "R", "?")
    assert len(diagnostics) == 0


def test_resolve_aasm_and_rk_differ_on_same_labels():
    aasm = resolve_preset("fasst", "aasm")
    rk = resolve_preset("fasst", "rk")

    assert aasm.score_map.label_old == rk.score_map.label_old
    assert aasm.score_map.label_new != rk.score_map.label_new


def test_resolve_rk_on_aasm_native_format_warns():
    """R&K on an AASM-native format still maps, with an advisory."""
    diagnostics = Diagnostics()
    preset = resolve_preset("somnomedics", "rk", diagnostics=diagnostics)

    assert preset.score_map.label_new == ("W", "S1", "S2", "S3", "R", "?")
    assert diagnostics.codes == ["representation_mismatch"]


def test_resolve_rk_on_rk_native_format_is_silent():
    diagnostics = Diagnostics()
    resolve_preset("spisop", "rk", diagnostics=diagnostics)
    assert len(diagnostics) == 0


def test_spisop_preset_uses_numeric_strategy_with_exclusions():
    preset = resolve_preset("spisop", "aasm")

    assert preset.strategy == NUMERIC
    assert preset.options["exclusion_enabled"] is True
    assert preset.options["exclusion_column"] == 2
    assert preset.options["exclusion_markers"] == tuple(str(i) for i in range(1, 11))


def test_nin_and_sleeptrip_strategies():
    assert resolve_preset("nin", "aasm").strategy == MAT

    sleeptrip = resolve_preset("sleeptrip", "aasm")
    assert sleeptrip.strategy == RECORD
    assert sleeptrip.score_map is None


@pytest.mark.parametrize(
    "alias, target",
    [("somnomedics_english", "somnomedics"), ("schlafaus", "spisop"), ("sleepin", "spisop")],
)
def test_aliases_resolve_to_same_preset(alias, target):
    assert canonical_format_id(alias) == target
    assert resolve_preset(alias, "aasm").format_id == target


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        FORMAT_PRESETS["new"] = FORMAT_PRESETS["zmax"]


# ---------- Custom and unknown formats ----------


def test_custom_requires_score_map():
    with pytest.raises(ScoringConfigError) as exc_info:
        resolve_preset("custom", "custom")
    assert "score_map" in str(exc_info.value)


@pytest.mark.parametrize("standard", ["aasm", "rk"])
def test_custom_format_with_named_standard_raises(standard):
    """The custom format has no built-in map, whatever the standard."""
    with pytest.raises(ScoringConfigError) as exc_info:
        resolve_preset("custom", standard)
    assert "score_map" in str(exc_info.value)


def test_custom_with_score_map():
    preset = resolve_preset("custom", "custom", score_map=CUSTOM_MAP)

    assert preset.format_id == "custom"
    assert preset.strategy == DELIMITED
    assert preset.score_map is CUSTOM_MAP
    assert dict(preset.options) == {}


def test_score_map_with_non_custom_standard_raises():
    with pytest.raises(ScoringConfigError) as exc_info:
        resolve_preset("zmax", "aasm", score_map=CUSTOM_MAP)
    assert "standard = 'custom'" in str(exc_info.value)


def test_caller_map_replaces_preset_map_but_keeps_options():
    preset = resolve_preset("zmax", "custom", score_map=CUSTOM_MAP)

    assert preset.score_map is CUSTOM_MAP
    assert preset.options["label_column"] == 4


def test_unknown_standard_raises():
    with pytest.raises(ScoringConfigError):
        resolve_preset("zmax", "nrem")


def test_unknown_format_behaves_like_custom():
    diagnostics = Diagnostics()
    preset = resolve_preset("my-device", "custom", score_map=CUSTOM_MAP, diagnostics=diagnostics)

    assert preset.strategy == DELIMITED
    assert preset.score_map is CUSTOM_MAP
    assert diagnostics.codes == ["unknown_format"]


def test_unknown_format_without_score_map_raises():
    with pytest.raises(ScoringConfigError):
        resolve_preset("my-device", "aasm")
