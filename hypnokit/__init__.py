"""
hypnokit

Reads sleep scoring exports of different tools and devices into one
canonical, epoch-indexed Scoring record:
- Format presets and score maps under hypnokit.presets / hypnokit.scoremaps
- Raw table ingestion and line filtering under hypnokit.io
- Label mapping and exclusion flags under hypnokit.normalize
- The Scoring record and its JSON form under hypnokit.scoring
"""
from .config import ReadConfig, ReadOptions, build_read_options, load_read_config
from .diagnostics import Advisory, Diagnostics, ScoringAdvisoryWarning
from .exceptions import ScoringConfigError, ScoringStructureError
from .presets import FORMAT_PRESETS, SUPPORTED_FORMATS, FormatPreset, resolve_preset
from .reader import ReadResult, read_scoring, read_scoring_table
from .scoremaps import ScoreMap
from .scoring import Scoring, assemble_scoring, load_scoring_record, save_scoring

__all__ = [
    "ReadConfig",
    "ReadOptions",
    "build_read_options",
    "load_read_config",
    "Advisory",
    "Diagnostics",
    "ScoringAdvisoryWarning",
    "ScoringConfigError",
    "ScoringStructureError",
    "FORMAT_PRESETS",
    "SUPPORTED_FORMATS",
    "FormatPreset",
    "resolve_preset",
    "ReadResult",
    "read_scoring",
    "read_scoring_table",
    "ScoreMap",
    "Scoring",
    "assemble_scoring",
    "load_scoring_record",
    "save_scoring",
]
