"""
Per-epoch normalization of a filtered raw table.

- map_labels: translate the label column through a ScoreMap
- resolve_exclusions: turn an optional exclusion column into a boolean vector

Both use the same cell coercion (``cell_to_str``), so numeric and string
sources are compared the same way.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import pandas as pd

from .diagnostics import Diagnostics
from .io.filters import column_to_strings
from .io.validation import has_column, validate_column_count
from .scoremaps import ScoreMap


@dataclass(frozen=True)
class LabelMapping:
    """Result of translating one label column."""
    canonical: Tuple[str, ...]
    original: Tuple[str, ...]
    unmapped: Tuple[str, ...]

    @property
    def any_unmapped(self) -> bool:
        return bool(self.unmapped)


@dataclass(frozen=True)
class ExclusionResult:
    """Excluded-epoch flags plus the raw exclusion strings they came from."""
    excluded: Tuple[bool, ...]
    raw: Optional[Tuple[str, ...]] = None


def map_labels(
    table: pd.DataFrame,
    label_column: int,
    score_map: ScoreMap,
    diagnostics: Optional[Diagnostics] = None,
) -> LabelMapping:
    """
    Translate the 1-based ``label_column`` of ``table`` with ``score_map``.

    Labels missing from ``score_map.label_old`` become ``score_map.unknown``;
    those epochs are kept, and one ``unmapped_labels`` advisory lists the
    distinct raw values.

    Raises
    ------
    ScoringStructureError
        If the table has rows but fewer than ``label_column`` columns.
    """
    validate_column_count(table, label_column, table_name="label column")

    if len(table) == 0:
        return LabelMapping(canonical=(), original=(), unmapped=())

    original = column_to_strings(table, label_column - 1)

    canonical = []
    unmapped = set()
    for value in original:
        new, matched = score_map.translate(value)
        canonical.append(new)
        if not matched:
            unmapped.add(value)

    unmapped_sorted = tuple(sorted(unmapped))
    if unmapped_sorted and diagnostics is not None:
        diagnostics.add(
            "unmapped_labels",
            "The sleep stages '{}' in the original/raw scoring were not covered in the "
            "score map and have thus been set to '{}'".format(
                " ".join(unmapped_sorted), score_map.unknown
            ),
            labels=list(unmapped_sorted),
            fallback=score_map.unknown,
        )

    return LabelMapping(
        canonical=tuple(canonical),
        original=tuple(original),
        unmapped=unmapped_sorted,
    )


def resolve_exclusions(
    table: pd.DataFrame,
    enabled: bool,
    exclusion_column: int,
    markers: Iterable[str],
    diagnostics: Optional[Diagnostics] = None,
) -> ExclusionResult:
    """
    Flag epochs whose exclusion cell is one of ``markers``.

    Disabled, or enabled on a table too narrow for ``exclusion_column``, gives
    all-False flags. The narrow-table case records an
    ``exclusion_column_missing`` advisory instead of failing.
    """
    n_epochs = len(table)
    no_exclusions = tuple(False for _ in range(n_epochs))

    if not enabled:
        return ExclusionResult(excluded=no_exclusions)

    if n_epochs == 0:
        return ExclusionResult(excluded=(), raw=())

    if not has_column(table, exclusion_column):
        if diagnostics is not None:
            diagnostics.add(
                "exclusion_column_missing",
                f"The scoring did contain only {table.shape[1]} columns. The requested "
                f"column number {exclusion_column} was not present. No epochs read for exclusion.",
                columns=table.shape[1],
                exclusion_column=exclusion_column,
            )
        return ExclusionResult(excluded=no_exclusions)

    markers = set(markers)
    raw = column_to_strings(table, exclusion_column - 1)
    return ExclusionResult(
        excluded=tuple(value in markers for value in raw),
        raw=tuple(raw),
    )
