import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def events():
    """Small disaster table with gaps in every impact column."""
    return pd.DataFrame({
        "Continent": ["Asia", "Asia", "Asia", "Asia", "Europe", "Europe", "Europe", "Africa"],
        "Year": [2000, 2001, 2002, 2003, 2000, 2004, 2005, 2010],
        "Disaster_Type": ["Flood", "Flood", "Flood", "Flood", "Storm", "Storm", "Drought", "Flood"],
        "Total_Damages": [5.0, 6.0, 7.0, np.nan, np.nan, np.nan, 40.0, 12.0],
        "Total_Deaths": [1.0, np.nan, 3.0, 5.0, 10.0, 20.0, np.nan, 2.0],
        "Total_Affected": [100.0, 200.0, np.nan, 400.0, 1000.0, np.nan, 50.0, np.nan],
        "Country": ["India", "China", "Nepal", "India", "France", "Spain", "Italy", "Kenya"],
    })
