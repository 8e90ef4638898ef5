"""
Error types raised by hypnokit.

Both subclass ValueError so callers that already guard ingestion with
``except ValueError`` keep working.
"""
from __future__ import annotations


class ScoringConfigError(ValueError):
    """Invalid or inconsistent read configuration, detected before any file I/O."""


class ScoringStructureError(ValueError):
    """The ingested table does not have the shape the configuration requires."""
