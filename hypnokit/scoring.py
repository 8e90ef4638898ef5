"""
The canonical Scoring record.

A Scoring holds one canonical label and one exclusion flag per epoch, in
chronological order, together with the label set of the active score map and
the provenance of the read (raw labels, score map, source format/file and the
filtered raw table).

Outputs:
- ``Scoring.to_dict`` / ``Scoring.from_dict`` round-trip every field
- ``save_scoring`` / ``load_scoring_record`` persist a record as JSON
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd

from .exceptions import ScoringStructureError
from .io.raw_readers import ensure_file
from .scoremaps import ScoreMap


@dataclass(frozen=True, eq=False)
class Provenance:
    """Where a Scoring came from."""
    original_labels: Tuple[str, ...]
    score_map: Optional[ScoreMap]
    source_format: str
    source_file: Optional[str] = None
    original_excluded: Optional[Tuple[str, ...]] = None
    table: pd.DataFrame = field(default_factory=pd.DataFrame)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Provenance):
            return NotImplemented
        return (
            self.original_labels == other.original_labels
            and self.score_map == other.score_map
            and self.source_format == other.source_format
            and self.source_file == other.source_file
            and self.original_excluded == other.original_excluded
            and _table_to_dict(self.table) == _table_to_dict(other.table)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_labels": list(self.original_labels),
            "original_excluded": (
                list(self.original_excluded) if self.original_excluded is not None else None
            ),
            "score_map": self.score_map.to_dict() if self.score_map is not None else None,
            "source_format": self.source_format,
            "source_file": self.source_file,
            "table": _table_to_dict(self.table),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Provenance":
        excluded = data.get("original_excluded")
        score_map = data.get("score_map")
        return Provenance(
            original_labels=tuple(data["original_labels"]),
            original_excluded=tuple(excluded) if excluded is not None else None,
            score_map=ScoreMap.from_dict(score_map) if score_map is not None else None,
            source_format=data["source_format"],
            source_file=data.get("source_file"),
            table=_table_from_dict(data.get("table")),
        )


def _cell_value(value: Any) -> Any:
    # NaN != NaN, so missing cells are stored as None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _table_to_dict(table: pd.DataFrame) -> Dict[str, Any]:
    return {
        "columns": table.columns.tolist(),
        "data": [
            [_cell_value(v) for v in row]
            for row in table.to_numpy(dtype=object).tolist()
        ],
    }


def _table_from_dict(data: Optional[Dict[str, Any]]) -> pd.DataFrame:
    if not data:
        return pd.DataFrame()
    return pd.DataFrame(data["data"], columns=data["columns"])


@dataclass(frozen=True)
class Scoring:
    """Canonical, epoch-indexed sleep scoring."""
    epochs: Tuple[str, ...]
    excluded: Tuple[bool, ...]
    label: Tuple[str, ...]
    epoch_length: float
    data_offset: float
    standard: str
    provenance: Provenance
    options: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        _validate_lengths(self.epochs, self.excluded, self.provenance.original_labels)

    @property
    def n_epochs(self) -> int:
        return len(self.epochs)

    def to_frame(self) -> pd.DataFrame:
        """One row per epoch: onset, stage, excluded, original label."""
        onsets = [self.data_offset + i * self.epoch_length for i in range(self.n_epochs)]
        return pd.DataFrame(
            {
                "epoch": range(1, self.n_epochs + 1),
                "onset_s": onsets,
                "stage": list(self.epochs),
                "excluded": list(self.excluded),
                "original_label": list(self.provenance.original_labels),
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epochs": list(self.epochs),
            "excluded": list(self.excluded),
            "label": list(self.label),
            "epoch_length": self.epoch_length,
            "data_offset": self.data_offset,
            "standard": self.standard,
            "provenance": self.provenance.to_dict(),
            "options": self.options,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Scoring":
        return Scoring(
            epochs=tuple(data["epochs"]),
            excluded=tuple(bool(x) for x in data["excluded"]),
            label=tuple(data["label"]),
            epoch_length=float(data["epoch_length"]),
            data_offset=float(data["data_offset"]),
            standard=data["standard"],
            provenance=Provenance.from_dict(data["provenance"]),
            options=dict(data.get("options") or {}),
        )

    def with_epochs(self, epochs: Sequence[str], standard: str, label: Sequence[str]) -> "Scoring":
        """Return a copy relabeled to another standard (used by converters)."""
        return replace(self, epochs=tuple(epochs), standard=standard, label=tuple(label))


def _validate_lengths(
    epochs: Sequence[str],
    excluded: Sequence[bool],
    original: Sequence[str],
) -> None:
    if not (len(epochs) == len(excluded) == len(original)):
        raise ScoringStructureError(
            f"Scoring length mismatch: epochs={len(epochs)}, excluded={len(excluded)}, "
            f"original labels={len(original)}"
        )


def assemble_scoring(
    canonical: Sequence[str],
    original: Sequence[str],
    excluded: Sequence[bool],
    score_map: ScoreMap,
    *,
    epoch_length: float,
    data_offset: float,
    standard: str,
    source_format: str,
    source_file: Optional[str] = None,
    table: Optional[pd.DataFrame] = None,
    original_excluded: Optional[Sequence[str]] = None,
    options: Optional[Dict[str, Any]] = None,
) -> Scoring:
    """
    Build the Scoring record.

    The label set is the sorted unique ``score_map.label_new``, not the labels
    observed in this file, so it is stable for every input read with the same
    map.
    """
    _validate_lengths(canonical, excluded, original)

    provenance = Provenance(
        original_labels=tuple(original),
        original_excluded=tuple(original_excluded) if original_excluded is not None else None,
        score_map=score_map,
        source_format=source_format,
        source_file=source_file,
        table=table if table is not None else pd.DataFrame(),
    )
    return Scoring(
        epochs=tuple(canonical),
        excluded=tuple(bool(x) for x in excluded),
        label=score_map.labels,
        epoch_length=float(epoch_length),
        data_offset=float(data_offset),
        standard=standard,
        provenance=provenance,
        options=dict(options or {}),
    )


def save_scoring(scoring: Scoring, path: Path | str) -> Path:
    """Write a Scoring as JSON. Keys are sorted so equal records give equal files."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(scoring.to_dict(), f, indent=2, sort_keys=True)
    return path


def load_scoring_record(path: Path | str) -> Scoring:
    """Load a Scoring previously written with ``save_scoring``, unchanged."""
    path = Path(path)
    ensure_file(path)
    with open(path, "r", encoding="utf-8") as f:
        return Scoring.from_dict(json.load(f))
