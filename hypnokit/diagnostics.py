"""
Advisory collection for a single read invocation.

Non-fatal findings (unmapped labels, representation mismatches, a missing
exclusion column) are recorded here instead of being printed or raised, and
returned to the caller next to the Scoring record.
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterator, List, Optional


class ScoringAdvisoryWarning(UserWarning):
    """Warning category used when advisories are re-emitted via ``warnings``."""


@dataclass(frozen=True)
class Advisory:
    """A single non-fatal diagnostic."""
    code: str
    message: str
    details: Optional[dict] = None


@dataclass
class Diagnostics:
    """Ordered collection of advisories for one invocation."""
    advisories: List[Advisory] = field(default_factory=list)

    def add(self, code: str, message: str, **details) -> Advisory:
        advisory = Advisory(code=code, message=message, details=details or None)
        self.advisories.append(advisory)
        return advisory

    @property
    def codes(self) -> List[str]:
        return [a.code for a in self.advisories]

    def by_code(self, code: str) -> List[Advisory]:
        return [a for a in self.advisories if a.code == code]

    def __iter__(self) -> Iterator[Advisory]:
        return iter(self.advisories)

    def __len__(self) -> int:
        return len(self.advisories)

    def __bool__(self) -> bool:
        return bool(self.advisories)

    def emit(self, stacklevel: int = 2) -> None:
        """Re-issue every advisory through ``warnings.warn``."""
        for advisory in self.advisories:
            warnings.warn(advisory.message, ScoringAdvisoryWarning, stacklevel=stacklevel)

    def summary(self) -> str:
        """Return a summary string of the collected advisories."""
        if not self.advisories:
            return "No advisories"
        lines = [f"{len(self.advisories)} advisories:"]
        for a in self.advisories:
            lines.append(f"  ! {a.code}: {a.message}")
        return "\n".join(lines)
