"""
Data model (column names and group keys)
========================================

DISA works on a pandas DataFrame rather than one object per row: every step
of the pipeline is a DataFrame -> DataFrame call. This module only fixes the
*names* the rest of the package agrees on:

- canonical input columns (what the loader renames the raw columns to),
- the derived column added after imputation,
- the summary columns the renderer depends on.
"""

from dataclasses import dataclass
from typing import Tuple

CONTINENT = "Continent"
YEAR = "Year"
DISASTER_TYPE = "Disaster_Type"
TOTAL_DAMAGES = "Total_Damages"
TOTAL_DEATHS = "Total_Deaths"
TOTAL_AFFECTED = "Total_Affected"

# derived: Total_Affected + Total_Deaths
TOTAL_CASUALTY = "Total_Casualty"

ANALYSIS_COLUMNS: Tuple[str, ...] = (
    CONTINENT, YEAR, DISASTER_TYPE, TOTAL_DAMAGES, TOTAL_DEATHS, TOTAL_AFFECTED,
)
NUMERIC_COLUMNS: Tuple[str, ...] = (TOTAL_DAMAGES, TOTAL_DEATHS, TOTAL_AFFECTED)
IMPUTE_COLUMNS: Tuple[str, ...] = NUMERIC_COLUMNS

GROUP_KEY: Tuple[str, ...] = (CONTINENT, DISASTER_TYPE)
TYPE_KEY: Tuple[str, ...] = (DISASTER_TYPE,)

# Summary table contract (renderer depends on these names)
MEAN_DAMAGE = "mean_Damage"
MEAN_CASUALTY = "mean_Casualty"
COUNT = "count"
SUMMARY_VALUE_COLUMNS: Tuple[str, ...] = (MEAN_DAMAGE, MEAN_CASUALTY, COUNT)

# Names accepted on the command line for the two supported groupings
GROUPINGS = {
    "continent-type": GROUP_KEY,
    "type": TYPE_KEY,
}


def grouping(name: str) -> Tuple[str, ...]:
    """Return the group key columns for a grouping name (`continent-type` or `type`)."""
    try:
        return GROUPINGS[name.lower().strip()]
    except KeyError:
        raise ValueError(f"grouping must be one of: {', '.join(GROUPINGS)}") from None


@dataclass(frozen=True)
class GroupKey:
    """One (continent, disaster type) partition.

    Used in log lines and error messages so a failing group can be found
    in the data again.
    """
    continent: str
    disaster_type: str

    def label(self) -> str:
        return f"{self.continent} / {self.disaster_type}"
