"""
Format presets for supported scoring exports.

Each supported export format maps to one immutable FormatPreset holding the
ingestion strategy, the parse-option overrides that format needs, and its
score maps per standard. New formats are added by adding a registry entry.

Supported formats:
- zmax:         Hypnodyne ZMax exported CSV
- somnomedics:  Somnomedics (english) exported profile txt
- spisop:       SpiSOP / Schlafaus / Sleepin two-column numeric files
- fasst:        FASST toolbox scoring export
- u-sleep-30s:  U-Sleep .txt export in 30 s epochs
- nin:          NIN .mat files with a ``sleepscore`` variable
- sleeptrip:    hypnokit scoring records saved with ``save_scoring``
- custom:       any column file described by the caller's options and score map
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .diagnostics import Diagnostics
from .exceptions import ScoringConfigError
from .scoremaps import STANDARDS, ScoreMap, build_score_maps

# Ingestion strategies
DELIMITED = "delimited"
NUMERIC = "numeric"
MAT = "mat"
RECORD = "record"
TABLE = "table"

STRATEGIES = (DELIMITED, NUMERIC, MAT, RECORD, TABLE)


@dataclass(frozen=True)
class FormatPreset:
    """Ingestion strategy, option overrides and score maps of one source format."""
    format_id: str
    strategy: str = DELIMITED
    options: Mapping[str, Any] = field(default_factory=dict)
    score_maps: Mapping[str, ScoreMap] = field(default_factory=dict)
    native_standard: Optional[str] = None
    score_map: Optional[ScoreMap] = None

    @property
    def is_builtin(self) -> bool:
        return self.format_id in FORMAT_PRESETS


def _preset(format_id: str, strategy: str, native_standard: str, **options: Any) -> FormatPreset:
    return FormatPreset(
        format_id=format_id,
        strategy=strategy,
        options=MappingProxyType(dict(options)),
        score_maps=MappingProxyType(build_score_maps(format_id)),
        native_standard=native_standard,
    )


FORMAT_PRESETS: Mapping[str, FormatPreset] = MappingProxyType({
    "zmax": _preset(
        "zmax", DELIMITED, "aasm",
        delimiter=",",
        ignore_lines=("LOUT", "LON"),
        label_column=4,
    ),
    "somnomedics": _preset(
        "somnomedics", DELIMITED, "aasm",
        delimiter=";",
        header_skip_count=7,
        label_column=2,
    ),
    "spisop": _preset(
        "spisop", NUMERIC, "rk",
        label_column=1,
        exclusion_enabled=True,
        exclusion_column=2,
        exclusion_markers=tuple(str(i) for i in range(1, 11)),
    ),
    "fasst": _preset(
        "fasst", DELIMITED, "rk",
        label_column=1,
    ),
    "u-sleep-30s": _preset(
        "u-sleep-30s", DELIMITED, "aasm",
        label_column=1,
        header_skip_count=2,
    ),
    "nin": _preset(
        "nin", MAT, "aasm",
        label_column=1,
    ),
    "sleeptrip": FormatPreset(format_id="sleeptrip", strategy=RECORD),
})

FORMAT_ALIASES: Mapping[str, str] = MappingProxyType({
    "somnomedics_english": "somnomedics",
    "schlafaus": "spisop",
    "sleepin": "spisop",
})

SUPPORTED_FORMATS = ("custom",) + tuple(FORMAT_PRESETS) + tuple(FORMAT_ALIASES)


def canonical_format_id(format_id: str) -> str:
    key = format_id.strip().lower()
    return FORMAT_ALIASES.get(key, key)


def resolve_preset(
    format_id: str,
    standard: str,
    score_map: Optional[ScoreMap] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> FormatPreset:
    """
    Resolve a format identifier and standard into a FormatPreset.

    Parameters
    ----------
    format_id : str
        One of SUPPORTED_FORMATS; anything else selects a no-op preset that
        behaves like "custom".
    standard : str
        "aasm", "rk" or "custom"
    score_map : ScoreMap, optional
        Caller-supplied map. Only accepted with standard "custom"; it then
        replaces the preset's own map.
    diagnostics : Diagnostics, optional
        Receives the representation-mismatch and unknown-format advisories.

    Returns
    -------
    FormatPreset
        The registry preset with ``score_map`` set to the active map
        (``None`` for the whole-record "sleeptrip" format).

    Raises
    ------
    ScoringConfigError
        If the standard is unsupported, "custom" is requested without a score
        map, a score map is given with a non-custom standard, or the "custom"
        format is requested without one.
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    if standard not in STANDARDS:
        raise ScoringConfigError(
            f"Unsupported standard '{standard}'. Must be one of: {', '.join(STANDARDS)}"
        )
    if score_map is not None and standard != "custom":
        raise ScoringConfigError(
            "Using a score_map you need to set standard = 'custom'. "
            "To convert to a non-custom standard use the 'to' option, e.g. to = 'aasm'."
        )
    if standard == "custom" and score_map is None:
        raise ScoringConfigError(
            "If the standard is set to 'custom' it requires also a score_map in the configuration."
        )

    key = canonical_format_id(format_id)

    if key == "custom":
        if score_map is None:
            raise ScoringConfigError(
                f"The 'custom' scoring format needs standard = 'custom' and a score_map, "
                f"got standard = '{standard}' without a score_map."
            )
        return FormatPreset(format_id="custom", score_map=score_map)

    if key not in FORMAT_PRESETS:
        diagnostics.add(
            "unknown_format",
            f"Unknown scoring format '{format_id}', reading it as columns with the given options.",
            format_id=format_id,
        )
        # unknown formats need a caller map just like "custom"
        if score_map is None:
            raise ScoringConfigError(
                f"Unknown scoring format '{format_id}' requires standard = 'custom' and a score_map. "
                f"Supported formats: {', '.join(SUPPORTED_FORMATS)}"
            )
        return FormatPreset(format_id=key, score_map=score_map)

    preset = FORMAT_PRESETS[key]
    if preset.strategy == RECORD:
        return preset

    if score_map is None:
        score_map = preset.score_maps[standard]
        if standard == "rk" and preset.native_standard == "aasm":
            diagnostics.add(
                "representation_mismatch",
                f"The {key} data format is typically in AASM scoring, converting it to "
                "Rechtschaffen&Kales might distort results.",
                format_id=key,
                standard=standard,
            )

    return replace(preset, score_map=score_map)
