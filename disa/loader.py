"""
Dataset loader (CSV / Excel -> DataFrame)
=========================================

This module reads a disaster-events export and returns a pandas DataFrame
with the canonical column names from `disa.models`.

Key ideas:
- We try multiple possible column names because exports vary
  ("Disaster Type" vs "Disaster_Type", "Total Damages ('000 US$)", ...).
- Numeric impact columns are coerced to float; blanks and junk become NaN
  so the imputer can see them as missing.
- Columns outside the analysis scope are kept untouched.
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple
import logging
import os
import re
import zipfile

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .errors import LoadError, RowLimitError
from .models import (
    CONTINENT, YEAR, DISASTER_TYPE, TOTAL_DAMAGES, TOTAL_DEATHS, TOTAL_AFFECTED,
    NUMERIC_COLUMNS,
)

logger = logging.getLogger(__name__)

# canonical name -> accepted source names (first match wins)
ALIASES: Dict[str, Tuple[str, ...]] = {
    CONTINENT: ("Continent",),
    YEAR: ("Year", "Start Year", "Start year"),
    DISASTER_TYPE: ("Disaster Type", "Disaster type", "Type"),
    TOTAL_DAMAGES: (
        "Total Damages ('000 US$)",
        "Total Damage ('000 US$)",
        "Total Damages",
        "Total Damage",
    ),
    TOTAL_DEATHS: ("Total Deaths", "Deaths"),
    TOTAL_AFFECTED: ("Total Affected", "Affected"),
}

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, canonical: str, *names: str) -> Optional[str]:
    """Find the source column for `canonical`, or None if nothing matches."""
    cols = list(df.columns)
    for n in (canonical,) + names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in (canonical,) + names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    return None


def resolve_columns(df: pd.DataFrame) -> Dict[str, str]:
    """Map each canonical column to its source column.

    Raises LoadError naming every column that could not be found.
    """
    mapping: Dict[str, str] = {}
    missing = []
    for canonical, names in ALIASES.items():
        src = _col(df, canonical, *names)
        if src is None:
            missing.append(canonical)
        else:
            mapping[canonical] = src
    if missing:
        raise LoadError(
            f"Missing required column(s): {', '.join(missing)}. Available={list(df.columns)}"
        )
    return mapping


def _read_table(path: str) -> pd.DataFrame:
    suffix = os.path.splitext(path)[1].lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, engine="openpyxl" if suffix != ".xls" else None)
    if suffix in (".csv", ".txt"):
        return pd.read_csv(path)
    raise LoadError(f"Unsupported file type {suffix!r} (expected .csv or .xlsx): {path}")


def normalize(df: pd.DataFrame) -> pd.DataFrame:
    """Rename source columns to canonical names and fix their dtypes."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    mapping = resolve_columns(df)
    logger.info("Resolved columns: %s", mapping)
    df = df.rename(columns={src: canonical for canonical, src in mapping.items()})

    for col in (CONTINENT, DISASTER_TYPE):
        df[col] = df[col].astype("string").str.strip().replace("", pd.NA)
    df[YEAR] = pd.to_numeric(df[YEAR], errors="coerce").astype("Int64")
    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
    return df


def load_dataset(path: str, max_rows: Optional[int] = None) -> pd.DataFrame:
    """Load a disaster-events table from `path` (.csv or .xlsx).

    Fails with LoadError if the file cannot be read or a required column is
    missing, and with RowLimitError if it has more than `max_rows` rows.
    """
    if not os.path.exists(path):
        raise LoadError(f"Dataset not found: {path}")
    try:
        raw = _read_table(path)
    except LoadError:
        raise
    except (OSError, ValueError, ImportError, zipfile.BadZipFile, InvalidFileException) as e:
        raise LoadError(f"Could not read dataset {path}: {e}") from e

    if max_rows is not None and len(raw) > max_rows:
        raise RowLimitError(f"Dataset has {len(raw)} rows; the limit is {max_rows}")

    df = normalize(raw)
    logger.info("Loaded %d rows from %s", len(df), path)
    return df
