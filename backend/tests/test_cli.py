"""
Tests for the heatflow command-line driver
"""

import json

from heatflow.cli import main


def test_compare_hierarchical(tmp_path, capsys, hierarchical_export):
    buildings = tmp_path / "buildings.csv"
    buildings.write_text(hierarchical_export, encoding="utf-8")
    export = tmp_path / "results.csv"
    state = tmp_path / "state.json"

    code = main(["compare", str(buildings), "--export", str(export), "--save-state", str(state)])

    assert code == 0
    out = capsys.readouterr().out
    assert "Building A" in out
    assert "Building B" in out
    assert export.exists()
    assert json.loads(state.read_text(encoding="utf-8"))["schemaVersion"] == 2


def test_compare_flat_appends_to_saved_state(tmp_path, capsys, hierarchical_export):
    buildings = tmp_path / "buildings.csv"
    buildings.write_text(hierarchical_export, encoding="utf-8")
    state = tmp_path / "state.json"
    assert main(["compare", str(buildings), "--save-state", str(state)]) == 0

    flat = tmp_path / "Retrofit.csv"
    flat.write_text('"Element 3","Area (A)","400"\n"Element 3","R-Value (R)","30"\n', encoding="utf-8")
    code = main(["compare", str(flat), "--format", "flat", "--state", str(state), "--current-load", "1000"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Retrofit" in out
    assert "Building A" in out


def test_compare_fails_on_bad_import(tmp_path):
    buildings = tmp_path / "empty.csv"
    buildings.write_text("\n", encoding="utf-8")

    assert main(["compare", str(buildings)]) == 1


def test_sweep_export(tmp_path, hierarchical_export):
    buildings = tmp_path / "buildings.csv"
    buildings.write_text(hierarchical_export, encoding="utf-8")
    export = tmp_path / "sweep.csv"

    code = main([
        "sweep", str(buildings),
        "--building", "building-a", "--element", "building-a-1",
        "--value-type", "rValue", "--start", "10", "--step", "5", "--stop", "20",
        "--export", str(export),
    ])

    assert code == 0
    lines = export.read_text(encoding="utf-8").splitlines()
    assert lines[0] == '"Value","Heat Loss (Btu/year)","Energy Saved (%)"'
    assert len(lines) == 4


def test_sweep_unknown_element(tmp_path, hierarchical_export):
    buildings = tmp_path / "buildings.csv"
    buildings.write_text(hierarchical_export, encoding="utf-8")

    assert main(["sweep", str(buildings), "--building", "building-a", "--element", "nope"]) == 2


def test_climate_command(tmp_path, capsys, make_weather_text):
    rows = [f"2020,1,1,{hour},8.0,100" for hour in range(1, 25)]
    weather = tmp_path / "site.epw"
    weather.write_text(make_weather_text(rows), encoding="latin-1")

    code = main(["climate", str(weather), "--heating-base", "18", "--cooling-base", "24"])

    assert code == 0
    climate = json.loads(capsys.readouterr().out)
    assert climate["heatingDegreeDays"] == 10.0
    assert climate["epwFileName"] == "site.epw"
    assert climate["isManualInput"] is False
