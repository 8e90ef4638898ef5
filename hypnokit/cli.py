"""
Command-line interface for reading sleep scoring exports.

Usage:
    python -m hypnokit.cli --file night1.csv --format zmax
    python -m hypnokit.cli --file night1.txt --format somnomedics --standard rk --out night1.json
    python -m hypnokit.cli --config read.yaml --out night1.json

Options:
    --file: Scoring file to read
    --format: Source format (custom, zmax, somnomedics, spisop, fasst, u-sleep-30s, nin, sleeptrip)
    --standard: aasm, rk or custom (custom needs a score map in --config)
    --config: JSON or YAML file with ReadConfig fields; CLI flags override it
    --out: Write the Scoring record as JSON to this path
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

from .config import ReadConfig, load_read_config
from .exceptions import ScoringConfigError, ScoringStructureError
from .presets import SUPPORTED_FORMATS
from .reader import read_scoring
from .scoring import save_scoring


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Read a sleep scoring export into a canonical scoring record."
    )
    parser.add_argument("--file", dest="scoring_file", help="Scoring file to read")
    parser.add_argument("--format", dest="scoring_format", help=f"One of: {', '.join(SUPPORTED_FORMATS)}")
    parser.add_argument("--standard", choices=["aasm", "rk", "custom"])
    parser.add_argument("--config", help="JSON/YAML read configuration")
    parser.add_argument("--out", help="Write the scoring record as JSON")
    parser.add_argument("--delimiter")
    parser.add_argument("--skip", dest="header_skip_count", type=int)
    parser.add_argument("--skip-until", dest="skip_until")
    parser.add_argument("--ignore", dest="ignore_lines", nargs="+")
    parser.add_argument("--select", dest="select_lines", nargs="+")
    parser.add_argument("--label-column", dest="label_column", type=int)
    parser.add_argument("--exclusion-column", dest="exclusion_column", type=int,
                        help="Enables exclusion tracking from this column")
    parser.add_argument("--exclusion-markers", dest="exclusion_markers", nargs="+")
    parser.add_argument("--epoch-length", dest="epoch_length", type=float)
    parser.add_argument("--data-offset", dest="data_offset", type=float)
    parser.add_argument("--encoding", dest="file_encoding")
    return parser


def _config_from_args(args: argparse.Namespace) -> ReadConfig:
    base: Dict[str, Any] = {}
    if args.config:
        base = dict(load_read_config(args.config).__dict__)

    for name in (
        "scoring_file",
        "scoring_format",
        "standard",
        "delimiter",
        "header_skip_count",
        "skip_until",
        "ignore_lines",
        "select_lines",
        "label_column",
        "exclusion_column",
        "exclusion_markers",
        "epoch_length",
        "data_offset",
        "file_encoding",
    ):
        value = getattr(args, name)
        if value is not None:
            base[name] = value

    if args.exclusion_column is not None:
        base["exclusion_enabled"] = True

    return ReadConfig(**base)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = _config_from_args(args)
        result = read_scoring(config)
    except (ScoringConfigError, ScoringStructureError, FileNotFoundError) as e:
        print(f"  ✗ FAILED - {e}")
        return 1

    scoring = result.scoring
    print(f"\n{'='*60}")
    print(f"Read {scoring.provenance.source_file or '<table>'} ({scoring.provenance.source_format})")
    print(f"{'='*60}\n")
    print(f"  ✓ {scoring.n_epochs} epochs of {scoring.epoch_length:g} s, standard {scoring.standard}")
    print(f"  ✓ {sum(scoring.excluded)} epochs excluded")
    print(f"  ✓ labels: {', '.join(scoring.label)}")
    if result.diagnostics:
        print()
        print(result.diagnostics.summary())

    if args.out:
        path = save_scoring(scoring, args.out)
        print(f"\nScoring written to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
