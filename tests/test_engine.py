import json

import pandas as pd

from disa.config import PipelineConfig
from disa.engine import Analysis


def test_values_and_show(events):
    a = Analysis(data=events)
    assert a.values("continent") == ["Africa", "Asia", "Europe"]
    assert a.values("type") == ["Drought", "Flood", "Storm"]
    assert len(a.show(3)) == 3
    assert "Country" not in a.show(3).columns


def test_set_types_undo_redo(events):
    a = Analysis(data=events, config=PipelineConfig(disaster_types=None))
    assert set(a.summary("type")["Disaster_Type"]) == {"Drought", "Flood", "Storm"}

    a.set_types(("Flood",))
    assert set(a.summary("type")["Disaster_Type"]) == {"Flood"}

    assert a.undo()
    assert a.config.disaster_types is None
    assert set(a.summary("type")["Disaster_Type"]) == {"Drought", "Flood", "Storm"}

    assert a.redo()
    assert a.config.disaster_types == ("Flood",)
    assert not a.redo()


def test_composite_strategy(events):
    a = Analysis(data=events, config=PipelineConfig(disaster_types=None, strategy="composite"))
    b = Analysis(data=events, config=PipelineConfig(disaster_types=None))
    pd.testing.assert_frame_equal(a.summary(), b.summary())


def test_export_json_writes_null_for_nan(events, tmp_path):
    a = Analysis(data=events, config=PipelineConfig(disaster_types=("Storm",)))
    path = tmp_path / "summary.json"
    a.export_json(str(path))
    rows = json.loads(path.read_text(encoding="utf-8"))
    assert rows == [{
        "Continent": "Europe",
        "Disaster_Type": "Storm",
        "mean_Damage": None,
        "mean_Casualty": 1015.0,
        "count": 2,
    }]


def test_export_csv(events, tmp_path):
    a = Analysis(data=events)
    path = tmp_path / "summary.csv"
    a.export_csv(str(path), by="type")
    out = pd.read_csv(path)
    assert list(out.columns) == ["Disaster_Type", "mean_Damage", "mean_Casualty", "count"]
    assert out["count"].sum() == len(events)


def test_reset_types_is_undoable(events):
    a = Analysis(data=events, config=PipelineConfig(disaster_types=("Flood", "Storm")))
    a.set_types(None)
    a.reset_types()
    assert a.config.disaster_types == ("Flood", "Storm")
    assert set(a.summary("type")["Disaster_Type"]) == {"Flood", "Storm"}

    assert a.undo()
    assert a.config.disaster_types is None
    assert a.undo()
    assert a.config.disaster_types == ("Flood", "Storm")
    assert not a.undo()


def test_missing_matches_report_scope(events):
    a = Analysis(data=events, config=PipelineConfig(disaster_types=("Storm",)))
    missing = a.missing()
    pd.testing.assert_frame_equal(missing, a.result().missing)
    damages = missing[missing["column"] == "Total_Damages"].iloc[0]
    # only the two Europe / Storm rows are in scope
    assert damages["available"] == 0
    assert damages["missing"] == 2
