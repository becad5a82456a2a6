import os

import numpy as np
import pandas as pd
import pytest

from disa.errors import SchemaError
from disa.report import ReportConfig, generate_docx_report, render_summary_charts


def _summary():
    return pd.DataFrame({
        "Continent": ["Asia", "Asia", "Europe"],
        "Disaster_Type": ["Flood", "Storm", "Storm"],
        "mean_Damage": [6.0, 3.0, np.nan],
        "mean_Casualty": [228.0, 10.0, 1015.0],
        "count": [4, 1, 2],
    })


def test_charts_for_continent_and_type(tmp_path):
    paths = render_summary_charts(_summary(), str(tmp_path / "charts"))
    assert len(paths) == 3
    assert all(os.path.exists(p) for p in paths)
    assert any(p.endswith("mean_damage_by_continent_disaster_type.png") for p in paths)


def test_charts_for_type_only(tmp_path):
    summary = _summary().groupby("Disaster_Type", as_index=False).agg(
        mean_Damage=("mean_Damage", "mean"),
        mean_Casualty=("mean_Casualty", "mean"),
        count=("count", "sum"),
    )
    paths = render_summary_charts(summary, str(tmp_path))
    assert [os.path.basename(p) for p in paths] == [
        "mean_damage_by_disaster_type.png",
        "mean_casualty_by_disaster_type.png",
        "count_by_disaster_type.png",
    ]


def test_charts_need_summary_columns(tmp_path):
    with pytest.raises(SchemaError, match="mean_Casualty"):
        render_summary_charts(_summary().drop(columns=["mean_Casualty"]), str(tmp_path))


def test_charts_reject_empty_summary(tmp_path):
    with pytest.raises(ValueError):
        render_summary_charts(_summary().iloc[0:0], str(tmp_path))


def test_docx_report(tmp_path):
    pytest.importorskip("docx")
    charts = render_summary_charts(_summary(), str(tmp_path / "charts"))
    missing = pd.DataFrame({
        "column": ["Total_Damages"], "available": [5], "missing": [3], "missing_share": [0.375],
    })
    out = generate_docx_report(
        _summary(), str(tmp_path / "out" / "report.docx"),
        config=ReportConfig(command_log=["types Flood,Storm"]),
        missing=missing, chart_paths=charts,
    )
    assert os.path.exists(out)
    assert os.path.getsize(out) > 0


def test_charts_close_their_figures(tmp_path):
    import matplotlib.pyplot as plt

    paths = render_summary_charts(_summary(), str(tmp_path))
    assert len(paths) == 3
    # every figure is closed after saving
    assert plt.get_fignums() == []
