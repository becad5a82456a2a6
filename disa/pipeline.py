"""
Cleaning / aggregation pipeline
===============================

This is the heart of the project. One in-memory DataFrame goes through:

1) Filter            -> keep the configured disaster types
2) Column projection -> keep the analysis columns
3) Group-wise median fill of the numeric impact columns
4) Derived field     -> Total_Casualty = Total_Affected + Total_Deaths
5) Aggregation       -> mean damage / mean casualty / count per group
6) Combine           -> stack per-continent fragments back into one table

Every step returns a new DataFrame; the input frame is never modified.

Missing values are filled with the median of the record's own
(continent, disaster type) group, never the dataset-wide median. A group
with no observed value has no median: its nulls stay null and flow into
Total_Casualty and the means as NaN.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import logging

import numpy as np
import pandas as pd

from .config import ALL_NULL_POLICIES, PipelineConfig
from .errors import AllNullGroupError, SchemaError, SchemaMismatchError
from .models import (
    CONTINENT, DISASTER_TYPE, TOTAL_AFFECTED, TOTAL_CASUALTY, TOTAL_DAMAGES,
    TOTAL_DEATHS, GROUP_KEY, IMPUTE_COLUMNS, MEAN_CASUALTY, MEAN_DAMAGE, COUNT,
    SUMMARY_VALUE_COLUMNS, GroupKey,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything one run produces."""
    prepared: pd.DataFrame
    summary: pd.DataFrame
    missing: pd.DataFrame


# ---------------- Helpers ----------------
def _require(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(missing, df.columns)


def _as_float(s: pd.Series) -> pd.Series:
    """Numeric copy of `s` as float64 with NaN for missing cells."""
    try:
        num = pd.to_numeric(s)
    except (ValueError, TypeError) as e:
        raise SchemaError([str(s.name)], reason=f"not numeric ({e})") from e
    return pd.Series(num.to_numpy(dtype="float64", na_value=np.nan), index=s.index, name=s.name)


def _group_label(key: object, by: Sequence[str]) -> str:
    if tuple(by) == GROUP_KEY and isinstance(key, tuple):
        return GroupKey(*(str(k) for k in key)).label()
    if isinstance(key, tuple):
        return " / ".join(str(k) for k in key)
    return str(key)


def _mean_keep_nan(s: pd.Series) -> float:
    # a null anywhere in the group makes the mean null
    return s.mean(skipna=False)


# ---------------- Pipeline steps ----------------
def filter_types(df: pd.DataFrame, allowed: Iterable[str]) -> pd.DataFrame:
    """Keep rows whose Disaster_Type is one of `allowed` (row order kept)."""
    _require(df, [DISASTER_TYPE])
    allowed = list(allowed)
    out = df[df[DISASTER_TYPE].isin(allowed)].copy()
    logger.info("Filter: %d -> %d rows (%d allowed types)", len(df), len(out), len(set(allowed)))
    return out


def project_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Keep only `columns`, in that order."""
    _require(df, columns)
    return df.loc[:, list(columns)].copy()


def impute_group_median(
    df: pd.DataFrame,
    columns: Sequence[str] = IMPUTE_COLUMNS,
    by: Sequence[str] = GROUP_KEY,
    on_all_null: str = "propagate",
) -> pd.DataFrame:
    """Fill nulls in each of `columns` with the median of the row's group.

    Only null cells change. Running it twice gives the same frame as
    running it once. Groups whose values are all null have no median:
    with on_all_null="propagate" their nulls are kept (and logged), with
    on_all_null="raise" an AllNullGroupError is raised.
    """
    if on_all_null not in ALL_NULL_POLICIES:
        raise ValueError(f"on_all_null must be one of: {', '.join(ALL_NULL_POLICIES)}")
    by = list(by)
    columns = list(columns)
    _require(df, by + columns)

    out = df.copy()
    keys = [out[k] for k in by]
    for col in columns:
        values = _as_float(out[col])
        grouped = values.groupby(keys, dropna=False, sort=False, observed=True)

        observed = grouped.count()
        empty = [_group_label(k, by) for k in observed.index[(observed == 0).to_numpy()]]
        if empty:
            if on_all_null == "raise":
                raise AllNullGroupError(col, empty)
            logger.warning(
                "No observed %s in %d group(s), values stay null: %s",
                col, len(empty), ", ".join(empty),
            )

        medians = grouped.transform("median")
        filled = values.fillna(medians)
        logger.info("Imputed %s: %d null(s) filled", col, int(values.isna().sum() - filled.isna().sum()))
        out[col] = filled
    return out


def add_total_casualty(df: pd.DataFrame) -> pd.DataFrame:
    """Add Total_Casualty = Total_Affected + Total_Deaths (null if either is null)."""
    _require(df, [TOTAL_AFFECTED, TOTAL_DEATHS])
    out = df.copy()
    out[TOTAL_CASUALTY] = _as_float(out[TOTAL_AFFECTED]) + _as_float(out[TOTAL_DEATHS])
    return out


def aggregate(df: pd.DataFrame, by: Sequence[str] = GROUP_KEY) -> pd.DataFrame:
    """One summary row per group: mean_Damage, mean_Casualty, count.

    Means are taken over every row of the group; a null left in a group
    makes its mean null instead of being skipped.
    """
    by = list(by)
    _require(df, by + [TOTAL_DAMAGES, TOTAL_CASUALTY])
    if df.empty:
        return pd.DataFrame(columns=by + list(SUMMARY_VALUE_COLUMNS))

    summary = (
        df.groupby(by, dropna=False, sort=True, observed=True)
          .agg(**{
              MEAN_DAMAGE: (TOTAL_DAMAGES, _mean_keep_nan),
              MEAN_CASUALTY: (TOTAL_CASUALTY, _mean_keep_nan),
              COUNT: (TOTAL_DAMAGES, "size"),
          })
          .reset_index()
    )
    return summary[by + list(SUMMARY_VALUE_COLUMNS)]


def combine(fragments: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Stack fragments row-wise. All fragments must share columns and dtypes."""
    fragments = list(fragments)
    if not fragments:
        raise ValueError("combine() needs at least one fragment")

    ref = fragments[0]
    ref_cols = list(ref.columns)
    for i, frag in enumerate(fragments[1:], start=1):
        cols = list(frag.columns)
        if cols != ref_cols:
            raise SchemaMismatchError(f"Fragment {i} has columns {cols}, expected {ref_cols}")
        bad = [f"{c} ({frag[c].dtype} != {ref[c].dtype})" for c in ref_cols if frag[c].dtype != ref[c].dtype]
        if bad:
            raise SchemaMismatchError(f"Fragment {i} has different dtypes: {', '.join(bad)}")

    non_empty = [f for f in fragments if len(f)]
    if not non_empty:
        return ref.iloc[0:0].reset_index(drop=True)
    out = pd.concat(non_empty, ignore_index=True)
    logger.info("Combined %d fragment(s) into %d rows", len(fragments), len(out))
    return out


def missing_profile(df: pd.DataFrame, columns: Sequence[str] = IMPUTE_COLUMNS) -> pd.DataFrame:
    """Available / missing counts per column (what the imputer will have to fill)."""
    _require(df, columns)
    n = len(df)
    rows = []
    for col in columns:
        n_missing = int(df[col].isna().sum())
        rows.append({
            "column": col,
            "available": n - n_missing,
            "missing": n_missing,
            "missing_share": (n_missing / n) if n else 0.0,
        })
    return pd.DataFrame(rows, columns=["column", "available", "missing", "missing_share"])


# ---------------- Whole runs ----------------
def prepare(df: pd.DataFrame, config: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """Filter, project, impute (composite key) and derive in one pass."""
    config = (config or PipelineConfig()).validate()
    out = df if config.disaster_types is None else filter_types(df, config.disaster_types)
    out = project_columns(out, config.columns)
    out = impute_group_median(out, config.impute_columns, by=GROUP_KEY, on_all_null=config.on_all_null)
    return add_total_casualty(out)


def continents_of(df: pd.DataFrame) -> List[str]:
    _require(df, [CONTINENT])
    return sorted(str(c) for c in df[CONTINENT].dropna().unique())


def prepare_per_continent(df: pd.DataFrame, config: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """Run prepare() once per continent and combine the fragments.

    Rows without a continent belong to no partition and are left out.
    """
    config = (config or PipelineConfig()).validate()
    _require(df, [CONTINENT])
    continents = list(config.continents) if config.continents is not None else continents_of(df)

    dropped = int(df[CONTINENT].isna().sum())
    if dropped:
        logger.warning("%d row(s) without %s left out of the per-continent run", dropped, CONTINENT)

    fragments = []
    for continent in continents:
        part = df[df[CONTINENT].isin([continent])]
        fragment = prepare(part, config)
        logger.info("Continent %s: %d rows", continent, len(fragment))
        fragments.append(fragment)
    if not fragments:
        # no continent to iterate over: still return the prepared schema
        return prepare(df.iloc[0:0], config)
    return combine(fragments)


def run(
    df: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
    by: Sequence[str] = GROUP_KEY,
) -> PipelineResult:
    """Prepare with the configured strategy and aggregate by `by`."""
    config = (config or PipelineConfig()).validate()
    scoped = df if config.disaster_types is None else filter_types(df, config.disaster_types)
    missing = missing_profile(scoped, config.impute_columns)

    if config.strategy == "per-continent":
        prepared = prepare_per_continent(df, config)
    else:
        prepared = prepare(df, config)
    summary = aggregate(prepared, by)
    logger.info("Summary: %d group(s) by %s", len(summary), ", ".join(by))
    return PipelineResult(prepared=prepared, summary=summary, missing=missing)
