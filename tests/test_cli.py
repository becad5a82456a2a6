import pandas as pd

from disa.cli import handle, main
from disa.engine import Analysis


def _write(events, tmp_path):
    raw = events.rename(columns={
        "Disaster_Type": "Disaster Type",
        "Total_Damages": "Total Damages ('000 US$)",
        "Total_Deaths": "Total Deaths",
        "Total_Affected": "Total Affected",
    })
    path = tmp_path / "disasters.csv"
    raw.to_csv(path, index=False)
    return str(path)


def test_batch_run_writes_summary(events, tmp_path, capsys):
    data = _write(events, tmp_path)
    out = tmp_path / "summary.csv"
    code = main(["--data", data, "--types", "Flood,Storm", "--out", str(out)])
    assert code == 0
    summary = pd.read_csv(out)
    assert list(summary.columns) == ["Continent", "Disaster_Type", "mean_Damage", "mean_Casualty", "count"]
    assert set(summary["Disaster_Type"]) == {"Flood", "Storm"}
    assert "Summary written to" in capsys.readouterr().out


def test_batch_run_strict_mode_fails(events, tmp_path, capsys):
    data = _write(events, tmp_path)
    code = main(["--data", data, "--on-all-null", "raise"])
    assert code == 1
    assert "is all null" in capsys.readouterr().err


def test_batch_run_missing_file(tmp_path, capsys):
    code = main(["--data", str(tmp_path / "nope.csv")])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_handle_commands(events, tmp_path, capsys):
    a = Analysis(data=events)
    handle(a, "types Flood")
    assert a.config.disaster_types == ("Flood",)
    handle(a, "summary type")
    assert "Flood" in capsys.readouterr().out

    handle(a, "undo")
    assert "Undone." in capsys.readouterr().out

    handle(a, "types all")
    assert a.config.disaster_types is None

    out = tmp_path / "s.json"
    handle(a, f'export json "{out}" type')
    assert out.exists()

    handle(a, "bogus")
    assert "Unknown command" in capsys.readouterr().out


def test_batch_run_corrupt_xlsx(tmp_path, capsys):
    path = tmp_path / "bad.xlsx"
    path.write_bytes(b"this is not a zip file")
    code = main(["--data", str(path)])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_batch_run_unwritable_output(events, tmp_path, capsys):
    data = _write(events, tmp_path)
    code = main(["--data", data, "--out", str(tmp_path / "no_such_dir" / "summary.csv")])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_handle_types_reset(events, capsys):
    a = Analysis(data=events)
    start = a.config.disaster_types
    handle(a, "types Flood")
    handle(a, "types reset")
    assert a.config.disaster_types == start
    handle(a, "undo")
    assert a.config.disaster_types == ("Flood",)
