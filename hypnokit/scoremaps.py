"""
Score maps for hypnokit.

A score map translates the raw stage labels found in a scoring export into the
labels of a sleep-stage standard. Every built-in source format keeps its raw
vocabulary here next to the AASM and Rechtschaffen & Kales translations, so
this module is the single source of truth for label vocabularies.

Canonical AASM labels:  W, N1, N2, N3, R, ?
Canonical R&K labels:   W, S1, S2, S3, S4, R, MT, ?
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple

from .exceptions import ScoringConfigError

STANDARDS: Tuple[str, ...] = ("aasm", "rk", "custom")

UNKNOWN_LABEL = "?"

AASM_LABELS: Tuple[str, ...] = ("W", "N1", "N2", "N3", "R", "?")
RK_LABELS: Tuple[str, ...] = ("W", "S1", "S2", "S3", "S4", "R", "MT", "?")


@dataclass(frozen=True)
class ScoreMap:
    """
    Positional old-label -> new-label translation table.

    ``label_old[i]`` is translated to ``label_new[i]``; anything not listed in
    ``label_old`` becomes ``unknown``.
    """
    label_old: Tuple[str, ...]
    label_new: Tuple[str, ...]
    unknown: str = UNKNOWN_LABEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_old", tuple(str(x) for x in self.label_old))
        object.__setattr__(self, "label_new", tuple(str(x) for x in self.label_new))
        if len(self.label_old) != len(self.label_new):
            raise ScoringConfigError(
                f"Size of score map label_old ({len(self.label_old)}) and "
                f"label_new ({len(self.label_new)}) does not match. Cannot translate scoring."
            )

    def translate(self, label: str) -> Tuple[str, bool]:
        """Return ``(new_label, matched)`` for one raw label."""
        try:
            idx = self.label_old.index(label)
        except ValueError:
            return self.unknown, False
        return self.label_new[idx], True

    @property
    def labels(self) -> Tuple[str, ...]:
        """Sorted unique target labels of this map."""
        return tuple(sorted(set(self.label_new)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label_old": list(self.label_old),
            "label_new": list(self.label_new),
            "unknown": self.unknown,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScoreMap":
        """
        Build a ScoreMap from a plain mapping.

        Accepts both ``label_old``/``label_new`` and the compact
        ``labelold``/``labelnew`` spelling used by older scoremap files.
        """
        label_old = data.get("label_old", data.get("labelold"))
        label_new = data.get("label_new", data.get("labelnew"))
        if label_old is None or label_new is None:
            raise ScoringConfigError(
                f"A score map needs both label_old and label_new, got keys: {sorted(data)}"
            )
        return ScoreMap(
            label_old=tuple(label_old),
            label_new=tuple(label_new),
            unknown=str(data.get("unknown", UNKNOWN_LABEL)),
        )


def coerce_score_map(value: ScoreMap | Mapping[str, Any] | None) -> ScoreMap | None:
    if value is None or isinstance(value, ScoreMap):
        return value
    if isinstance(value, Mapping):
        return ScoreMap.from_dict(value)
    raise ScoringConfigError(f"score_map must be a ScoreMap or a mapping, got {type(value).__name__}")


# Raw vocabularies per source format
# Each entry: (label_old, {standard: label_new})
ZMAX_LABELS: Sequence[str] = ("W", "N1", "N2", "N3", "R", "U")
SOMNOMEDICS_LABELS: Sequence[str] = ("Wake", "N1", "N2", "N3", "REM", "A")
SPISOP_LABELS: Sequence[str] = ("0", "1", "2", "3", "4", "5", "8", "-1")
FASST_LABELS: Sequence[str] = ("0", "1", "2", "3", "4", "5", "7")
USLEEP_LABELS: Sequence[str] = ("Wake", "N1", "N2", "N3", "N4", "REM", "?")
NIN_LABELS: Sequence[str] = ("0", "1", "2", "3", "4", "5", "?")

PRESET_LABEL_TABLES: Dict[str, Tuple[Sequence[str], Dict[str, Sequence[str]]]] = {
    "zmax": (
        ZMAX_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "R", "?"),
            "rk": ("W", "S1", "S2", "S3", "R", "?"),
        },
    ),
    "somnomedics": (
        SOMNOMEDICS_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "R", "?"),
            "rk": ("W", "S1", "S2", "S3", "R", "?"),
        },
    ),
    "spisop": (
        SPISOP_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "N3", "R", "W", "?"),
            "rk": ("W", "S1", "S2", "S3", "S4", "R", "MT", "?"),
        },
    ),
    "fasst": (
        FASST_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "N3", "R", "?"),
            "rk": ("W", "S1", "S2", "S3", "S4", "R", "?"),
        },
    ),
    "u-sleep-30s": (
        USLEEP_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "N3", "R", "?"),
            "rk": ("W", "S1", "S2", "S3", "S4", "R", "?"),
        },
    ),
    "nin": (
        NIN_LABELS,
        {
            "aasm": ("W", "N1", "N2", "N3", "N3", "R", "?"),
            "rk": ("W", "S1", "S2", "S3", "S4", "R", "?"),
        },
    ),
}


def build_score_maps(format_id: str) -> Dict[str, ScoreMap]:
    """Return ``{standard: ScoreMap}`` for a built-in format."""
    label_old, targets = PRESET_LABEL_TABLES[format_id]
    return {
        standard: ScoreMap(label_old=tuple(label_old), label_new=tuple(label_new))
        for standard, label_new in targets.items()
    }
