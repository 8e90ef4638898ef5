# hypnokit/config.py

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Tuple
import json
import pathlib

import yaml

from .exceptions import ScoringConfigError
from .presets import FormatPreset, STRATEGIES, DELIMITED
from .scoremaps import ScoreMap, coerce_score_map


@dataclass
class ReadConfig:
    """
    Caller-facing configuration for one read.

    Parse options left as ``None`` fall back to the defaults in
    ``OPTION_DEFAULTS``; presets of built-in formats override them.
    """
    scoring_file: Optional[str] = None
    scoring_format: str = "custom"
    standard: Optional[str] = None  # "aasm" unless a score_map is given
    score_map: Optional[ScoreMap] = None
    datatype: str = "columns"

    delimiter: Optional[str] = None
    header_skip_count: Optional[int] = None
    skip_until: Optional[str] = None
    ignore_lines: Optional[Tuple[str, ...]] = None
    select_lines: Optional[Tuple[str, ...]] = None
    label_column: Optional[int] = None
    exclusion_enabled: Optional[bool] = None
    exclusion_column: Optional[int] = None
    exclusion_markers: Optional[Tuple[str, ...]] = None
    file_encoding: Optional[str] = None

    epoch_length: float = 30.0
    data_offset: float = 0.0

    # standard conversion after reading
    to: Optional[str] = None
    force_unmapped_to: Optional[str] = None

    def __post_init__(self) -> None:
        self.score_map = coerce_score_map(self.score_map)
        for name in ("ignore_lines", "select_lines", "exclusion_markers"):
            value = getattr(self, name)
            if value is not None:
                if isinstance(value, str):
                    value = (value,)
                setattr(self, name, tuple(str(v) for v in value))

    @property
    def resolved_standard(self) -> str:
        if self.standard is not None:
            return self.standard
        return "custom" if self.score_map is not None else "aasm"

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ReadConfig":
        known = {f.name for f in fields(ReadConfig)}
        unknown = set(data) - known
        if unknown:
            raise ScoringConfigError(
                f"Unknown read configuration keys: {sorted(unknown)}. Valid keys: {sorted(known)}"
            )
        return ReadConfig(**data)


# Every parse-option default lives here.
OPTION_DEFAULTS: Dict[str, Any] = {
    "delimiter": "\t",
    "header_skip_count": 0,
    "skip_until": "",
    "ignore_lines": (),
    "select_lines": (),
    "label_column": 1,
    "exclusion_enabled": False,
    "exclusion_column": 2,
    "exclusion_markers": ("1", "2", "3"),
    "file_encoding": None,
}


@dataclass(frozen=True)
class ReadOptions:
    """Fully populated, read-only options for one invocation."""
    scoring_format: str
    standard: str
    strategy: str
    score_map: Optional[ScoreMap]
    delimiter: str
    header_skip_count: int
    skip_until: str
    ignore_lines: Tuple[str, ...]
    select_lines: Tuple[str, ...]
    label_column: int
    exclusion_enabled: bool
    exclusion_column: int
    exclusion_markers: Tuple[str, ...]
    file_encoding: Optional[str]
    epoch_length: float
    data_offset: float
    scoring_file: Optional[str] = None
    to: Optional[str] = None
    force_unmapped_to: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["score_map"] = self.score_map.to_dict() if self.score_map is not None else None
        for name in ("ignore_lines", "select_lines", "exclusion_markers"):
            data[name] = list(data[name])
        return data


def build_read_options(
    config: ReadConfig,
    preset: FormatPreset,
    strategy: Optional[str] = None,
) -> ReadOptions:
    """
    Merge defaults <- config <- preset overrides into one ReadOptions.

    ``strategy`` replaces the preset strategy, which is how a caller-supplied
    table switches to passthrough ingestion.
    """
    merged: Dict[str, Any] = dict(OPTION_DEFAULTS)
    for name in OPTION_DEFAULTS:
        value = getattr(config, name)
        if value is not None:
            merged[name] = value
    merged.update(preset.options)

    strategy = strategy or preset.strategy or DELIMITED
    if strategy not in STRATEGIES:
        raise ScoringConfigError(f"Unknown ingestion strategy '{strategy}'")

    for name in ("label_column", "exclusion_column"):
        if int(merged[name]) < 1:
            raise ScoringConfigError(f"{name} is 1-based and must be >= 1, got {merged[name]}")
    if int(merged["header_skip_count"]) < 0:
        raise ScoringConfigError(
            f"header_skip_count must be >= 0, got {merged['header_skip_count']}"
        )

    return ReadOptions(
        scoring_format=preset.format_id,
        standard=config.resolved_standard,
        strategy=strategy,
        score_map=preset.score_map,
        delimiter=str(merged["delimiter"]),
        header_skip_count=int(merged["header_skip_count"]),
        skip_until=str(merged["skip_until"] or ""),
        ignore_lines=tuple(merged["ignore_lines"]),
        select_lines=tuple(merged["select_lines"]),
        label_column=int(merged["label_column"]),
        exclusion_enabled=bool(merged["exclusion_enabled"]),
        exclusion_column=int(merged["exclusion_column"]),
        exclusion_markers=tuple(merged["exclusion_markers"]),
        file_encoding=merged["file_encoding"],
        epoch_length=float(config.epoch_length),
        data_offset=float(config.data_offset),
        scoring_file=config.scoring_file,
        to=config.to,
        force_unmapped_to=config.force_unmapped_to,
    )


def _load_json(path: pathlib.Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_yaml(path: pathlib.Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_read_config(path: str | pathlib.Path) -> ReadConfig:
    """
    Load a ReadConfig from a JSON or YAML file.

    Keys are the ReadConfig field names, e.g.::

        scoring_file: night1.csv
        scoring_format: zmax
        standard: aasm
        epoch_length: 30
    """
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    if p.suffix.lower() in {".json"}:
        raw = _load_json(p)
    elif p.suffix.lower() in {".yaml", ".yml"}:
        raw = _load_yaml(p)
    else:
        raise ValueError(f"Unsupported config extension: {p.suffix}")

    return ReadConfig.from_dict(raw)
