"""
Pipeline configuration
======================

All knobs of a run live in one dataclass so the CLI, the interactive
session and the tests build the same object.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .models import ANALYSIS_COLUMNS, IMPUTE_COLUMNS

# EM-DAT natural hazard types used by the walkthrough
DEFAULT_DISASTER_TYPES: Tuple[str, ...] = (
    "Drought",
    "Earthquake",
    "Extreme temperature",
    "Flood",
    "Landslide",
    "Storm",
    "Volcanic activity",
    "Wildfire",
)

STRATEGIES = ("per-continent", "composite")
ALL_NULL_POLICIES = ("propagate", "raise")
DEFAULT_MAX_ROWS = 1_000_000


@dataclass
class PipelineConfig:
    """Knobs for one pipeline run.

    - disaster_types: allowed values of Disaster_Type (None = keep every row)
    - continents: partitions for the per-continent strategy (None = all found)
    - strategy: "per-continent" runs the pipeline once per continent and
      combines the fragments; "composite" runs it once with the
      (continent, type) group key
    - on_all_null: what the imputer does with a group that has no value
    """
    disaster_types: Optional[Tuple[str, ...]] = DEFAULT_DISASTER_TYPES
    columns: Tuple[str, ...] = ANALYSIS_COLUMNS
    impute_columns: Tuple[str, ...] = IMPUTE_COLUMNS
    continents: Optional[Tuple[str, ...]] = None
    strategy: str = "per-continent"
    on_all_null: str = "propagate"
    max_rows: Optional[int] = DEFAULT_MAX_ROWS

    def validate(self) -> "PipelineConfig":
        if self.strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of: {', '.join(STRATEGIES)}")
        if self.on_all_null not in ALL_NULL_POLICIES:
            raise ValueError(f"on_all_null must be one of: {', '.join(ALL_NULL_POLICIES)}")
        if self.max_rows is not None and self.max_rows <= 0:
            raise ValueError("max_rows must be a positive integer (or None)")
        missing = [c for c in self.impute_columns if c not in self.columns]
        if missing:
            raise ValueError(f"impute_columns not in projected columns: {missing}")
        return self

    def with_types(self, types: Optional[Tuple[str, ...]]) -> "PipelineConfig":
        """Copy of this config with another disaster-type filter."""
        return replace(self, disaster_types=None if types is None else tuple(types))


def parse_types(text: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Parse a comma list of disaster types. `all` (or empty) disables the filter."""
    if text is None:
        return DEFAULT_DISASTER_TYPES
    text = text.strip()
    if not text or text.lower() == "all":
        return None
    return tuple(t.strip() for t in text.split(",") if t.strip())
