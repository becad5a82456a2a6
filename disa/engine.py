"""
Analysis session (DISA)
=======================

The pipeline functions are stateless. The interactive CLI needs a little
state on top of them, which lives here:

1) The loaded dataset (never modified)
2) The current configuration (which disaster types are in scope)
3) A cached prepared frame (filtered, imputed, with Total_Casualty)
4) Undo/redo stacks for the disaster-type filter
5) A command log copied into reports
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import json

import pandas as pd

from .config import PipelineConfig
from .models import CONTINENT, DISASTER_TYPE, ANALYSIS_COLUMNS, grouping
from .pipeline import (
    PipelineResult, aggregate, filter_types, missing_profile, prepare, prepare_per_continent,
)

VALUE_FIELDS = {
    "continent": CONTINENT,
    "type": DISASTER_TYPE,
}


@dataclass
class Analysis:
    """One loaded dataset plus the current pipeline settings.

    Changing the type filter only swaps the config; the prepared frame is
    rebuilt lazily the next time a summary is asked for.
    """
    data: pd.DataFrame
    config: PipelineConfig = field(default_factory=PipelineConfig)
    dataset_path: Optional[str] = None
    command_log: List[str] = field(default_factory=list)

    _prepared: Optional[pd.DataFrame] = field(default=None, init=False, repr=False)
    _undo: List[Optional[Tuple[str, ...]]] = field(default_factory=list, init=False, repr=False)
    _redo: List[Optional[Tuple[str, ...]]] = field(default_factory=list, init=False, repr=False)
    _initial_types: Optional[Tuple[str, ...]] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.config.validate()
        self._initial_types = self.config.disaster_types

    # ---------------- Exploration ----------------
    def show(self, n: int = 10) -> pd.DataFrame:
        """First `n` rows of the analysis columns."""
        cols = [c for c in ANALYSIS_COLUMNS if c in self.data.columns]
        return self.data.loc[:, cols].head(n)

    def values(self, field_name: str) -> List[str]:
        key = field_name.lower().strip()
        if key not in VALUE_FIELDS:
            raise ValueError("values field must be: continent | type")
        col = VALUE_FIELDS[key]
        return sorted(str(v) for v in self.data[col].dropna().unique())

    def scoped(self) -> pd.DataFrame:
        """Raw rows inside the current disaster-type filter (before imputation)."""
        if self.config.disaster_types is None:
            return self.data
        return filter_types(self.data, self.config.disaster_types)

    def missing(self) -> pd.DataFrame:
        """Missing values per impact column within the current type filter."""
        return missing_profile(self.scoped(), self.config.impute_columns)

    # ---------------- Type filter (with history) ----------------
    def _set(self, types: Optional[Tuple[str, ...]]) -> None:
        self.config = self.config.with_types(types)
        self._prepared = None

    def set_types(self, types: Optional[Tuple[str, ...]]) -> None:
        """Replace the disaster-type filter (None keeps every type)."""
        self._undo.append(self.config.disaster_types)
        self._redo.clear()
        self._set(types)

    def reset_types(self) -> None:
        """Go back to the types the session started with (undoable)."""
        self.set_types(self._initial_types)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.config.disaster_types)
        self._set(self._undo.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.config.disaster_types)
        self._set(self._redo.pop())
        return True

    # ---------------- Pipeline ----------------
    def prepared(self) -> pd.DataFrame:
        if self._prepared is None:
            if self.config.strategy == "per-continent":
                self._prepared = prepare_per_continent(self.data, self.config)
            else:
                self._prepared = prepare(self.data, self.config)
        return self._prepared

    def summary(self, by: str = "continent-type") -> pd.DataFrame:
        return aggregate(self.prepared(), grouping(by))

    def result(self, by: str = "continent-type") -> PipelineResult:
        return PipelineResult(
            prepared=self.prepared(),
            summary=self.summary(by),
            missing=self.missing(),
        )

    # ---------------- Output operations ----------------
    def export_csv(self, path: str, by: str = "continent-type") -> None:
        self.summary(by).to_csv(path, index=False, encoding="utf-8")

    def export_json(self, path: str, by: str = "continent-type") -> None:
        """Export the summary table as a list of JSON objects (NaN -> null)."""
        summary = self.summary(by)
        payload = json.loads(summary.to_json(orient="records"))
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
