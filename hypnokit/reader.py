"""
Read a sleep scoring export into a canonical Scoring record.

Pipeline:
    resolve preset -> ingest raw table -> filter lines ->
    map labels + resolve exclusions -> assemble -> (optional) convert standard

Usage:
    >>> from hypnokit import ReadConfig, read_scoring
    >>> result = read_scoring(ReadConfig(scoring_file="night1.csv", scoring_format="zmax"))
    >>> result.scoring.epochs[:3]
    ('W', 'W', 'N1')
    >>> result.diagnostics.codes
    []
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .config import ReadConfig, ReadOptions, build_read_options
from .diagnostics import Diagnostics
from .exceptions import ScoringConfigError
from .io.filters import filter_lines
from .io.raw_readers import ingest_table
from .io.validation import validate_column_count
from .normalize import map_labels, resolve_exclusions
from .presets import RECORD, TABLE, resolve_preset
from .scoremaps import ScoreMap
from .scoring import Scoring, assemble_scoring, load_scoring_record

# converter(scoring, to, score_map_override, force_unmapped_to) -> Scoring
StandardConverter = Callable[[Scoring, str, Optional[ScoreMap], Optional[str]], Scoring]


@dataclass(frozen=True)
class ReadResult:
    """A Scoring plus the advisories collected while reading it."""
    scoring: Scoring
    diagnostics: Diagnostics
    options: ReadOptions


def _as_config(config: Union[ReadConfig, Mapping[str, Any], None], overrides: Dict[str, Any]) -> ReadConfig:
    if config is None:
        return ReadConfig(**overrides)
    if isinstance(config, ReadConfig):
        return replace(config, **overrides) if overrides else config
    if isinstance(config, Mapping):
        return ReadConfig.from_dict({**config, **overrides})
    raise ScoringConfigError(f"config must be a ReadConfig or a mapping, got {type(config).__name__}")


def _check_config(config: ReadConfig, converter: Optional[StandardConverter], diagnostics: Diagnostics) -> None:
    """Configuration checks that must pass before any file is touched."""
    if config.datatype != "columns":
        raise ScoringConfigError(
            f"The datatype parameter only supports the option 'columns' for now, got '{config.datatype}'."
        )
    if config.score_map is not None and config.standard is None:
        diagnostics.add(
            "standard_from_score_map",
            "Setting standard = 'custom' because a score_map is defined in the configuration.",
        )
    if config.to is not None and converter is None:
        raise ScoringConfigError(
            f"Conversion to '{config.to}' was requested but no standard converter was given."
        )


def read_scoring(
    config: Union[ReadConfig, Mapping[str, Any], None] = None,
    table: Any = None,
    *,
    converter: Optional[StandardConverter] = None,
    **overrides: Any,
) -> ReadResult:
    """
    Read one scoring source into a Scoring record.

    Parameters
    ----------
    config : ReadConfig | Mapping | None
        Read configuration; keyword ``overrides`` are applied on top.
    table : pd.DataFrame | list of rows, optional
        Pre-loaded table. When given, no file is read and the table passes
        straight to line filtering.
    converter : callable, optional
        Standard converter invoked when ``config.to`` is set, as
        ``converter(scoring, to, score_map_override, force_unmapped_to)``.
        The active score map is passed only for the "custom" standard.

    Returns
    -------
    ReadResult
        ``scoring``, the ``diagnostics`` collected on the way, and the
        resolved ``options``.

    Raises
    ------
    ScoringConfigError
        Invalid configuration; always raised before file I/O
    FileNotFoundError
        If the scoring file doesn't exist
    ScoringStructureError
        If the label column is beyond the table width
    """
    config = _as_config(config, overrides)
    diagnostics = Diagnostics()
    _check_config(config, converter, diagnostics)

    standard = config.resolved_standard
    preset = resolve_preset(config.scoring_format, standard, config.score_map, diagnostics)

    strategy = None
    if table is not None:
        if preset.strategy == RECORD:
            raise ScoringConfigError(
                f"The '{preset.format_id}' format reads whole records from file; a table cannot be supplied."
            )
        strategy = TABLE
    options = build_read_options(config, preset, strategy=strategy)

    if options.strategy == RECORD:
        if options.scoring_file is None:
            raise ScoringConfigError("A scoring_file is required for the sleeptrip record format.")
        scoring = load_scoring_record(options.scoring_file)
    else:
        scoring = _read_table_scoring(options, table, diagnostics)

    if options.to is not None:
        override = options.score_map if options.standard == "custom" else None
        scoring = converter(scoring, options.to, override, options.force_unmapped_to)
        if not isinstance(scoring, Scoring):
            raise TypeError(
                f"The standard converter must return a Scoring, got {type(scoring).__name__}"
            )

    return ReadResult(scoring=scoring, diagnostics=diagnostics, options=options)


def _read_table_scoring(options: ReadOptions, table: Any, diagnostics: Diagnostics) -> Scoring:
    source_file = None if options.strategy == TABLE else options.scoring_file

    raw = ingest_table(
        options.strategy,
        source_file,
        table=table,
        delimiter=options.delimiter,
        header_skip_count=options.header_skip_count,
        skip_until=options.skip_until,
        encoding=options.file_encoding,
    )
    validate_column_count(raw, options.label_column, table_name=options.scoring_format)

    filtered = filter_lines(raw, ignore=options.ignore_lines, select=options.select_lines)

    labels = map_labels(filtered, options.label_column, options.score_map, diagnostics)
    exclusions = resolve_exclusions(
        filtered,
        options.exclusion_enabled,
        options.exclusion_column,
        options.exclusion_markers,
        diagnostics,
    )

    return assemble_scoring(
        labels.canonical,
        labels.original,
        exclusions.excluded,
        options.score_map,
        epoch_length=options.epoch_length,
        data_offset=options.data_offset,
        standard=options.standard,
        source_format=options.scoring_format,
        source_file=str(source_file) if source_file is not None else None,
        table=filtered,
        original_excluded=exclusions.raw,
        options=options.to_dict(),
    )


def read_scoring_table(table: Any, **overrides: Any) -> Scoring:
    """Shortcut for ``read_scoring(table=...)`` returning only the Scoring."""
    return read_scoring(None, table, **overrides).scoring
