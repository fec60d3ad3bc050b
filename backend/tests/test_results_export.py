"""
Tests for result and sweep exports
"""

import csv
import io

from heatflow.config import EngineSettings
from heatflow.models.schemas import (
    BasementWallElement,
    BuildingColumn,
    CalculatorInputs,
    ClimateData,
    SlabElement,
    SweepConfig,
)
from heatflow.services.heat_transfer import compute
from heatflow.services.results_export import (
    INPUTS_HEADER,
    RESULTS_HEADER,
    SWEEP_HEADER,
    build_results_rows,
    build_sweep_rows,
    sweep_export_filename,
    write_csv,
)
from heatflow.services.sensitivity import run_sweep


def block(rows, title):
    """Rows of the blank-separated block whose first row starts with title"""
    start = next(i for i, row in enumerate(rows) if row and row[0] == title)
    end = next((i for i in range(start, len(rows)) if rows[i] == []), len(rows))
    return rows[start:end]


class TestResultsRows:

    def test_layout(self, sample_inputs, engine_settings):
        results = compute(sample_inputs, engine_settings)
        rows = build_results_rows(sample_inputs, results, engine_settings)

        assert rows[0] == RESULTS_HEADER
        assert [row[0] for row in rows[1:3]] == ["Baseline", "Opaque Only"]
        assert rows[2][1] == 3_840_000
        assert rows[3] == []
        assert rows[4] == ["Climate Data", "Parameter", "Value"]

        climate_rows = {row[1]: row[2] for row in block(rows, "Climate Data")[1:]}
        assert climate_rows["Heating Degree Days (Th)"] == 5000
        assert climate_rows["Air Flow Rate (CFM)"] == 0.01
        assert climate_rows["Data Source"] == "Manual input"

    def test_difference_and_percent_change_vs_current(self, sample_inputs, engine_settings):
        rows = build_results_rows(sample_inputs, compute(sample_inputs, engine_settings), engine_settings)

        opaque_only = rows[2]
        assert opaque_only[-2] == -160_000
        assert opaque_only[-1] == -4.0

    def test_no_current_load_leaves_comparison_blank(self, sample_inputs, engine_settings):
        inputs = sample_inputs.model_copy(update={"current_energy_load": 0})
        rows = build_results_rows(inputs, compute(inputs, engine_settings), engine_settings)

        assert rows[1][-2:] == ["", ""]

    def test_building_inputs_are_echoed(self, sample_inputs, engine_settings):
        rows = build_results_rows(sample_inputs, compute(sample_inputs, engine_settings), engine_settings)
        inputs_block = block(rows, "Building Inputs")

        assert inputs_block[0] == INPUTS_HEADER
        assert ["Baseline", "", "", "", ""] in inputs_block
        echoed = {(row[0], row[1]): row[2] for row in inputs_block[1:]}
        assert echoed[("Baseline Glazing 1", "Name")] == "Windows"
        assert echoed[("Baseline Glazing 1", "Total Area")] == 30
        assert echoed[("Baseline Glazing 1", "U-Value (Ug)")] == 0.5
        assert echoed[("Baseline Glazing 1", "R-Value Equivalent")] == 2.0
        assert echoed[("Baseline Element 1", "Area (A)")] == 400
        assert echoed[("Opaque Only Element 1", "R-Value (R)")] == 15
        assert ("Opaque Only Glazing 1", "Name") not in echoed

    def test_slab_and_basement_parameters_are_echoed(self, climate, engine_settings):
        inputs = CalculatorInputs(
            climate_data=climate,
            building_columns=[BuildingColumn(id="b", name="House", elements=[
                SlabElement(id="s", name="Slab", f_factor=0.5, perimeter=100),
                BasementWallElement(id="bw", name="Basement", area=200, c_factor=0.1),
            ])],
        )
        rows = build_results_rows(inputs, compute(inputs, engine_settings), engine_settings)
        echoed = {(row[0], row[1]): row[2] for row in block(rows, "Building Inputs")[1:]}

        assert echoed[("House Element 1", "F-Factor (F)")] == 0.5
        assert echoed[("House Element 1", "Perimeter (Ls)")] == 100
        assert echoed[("House Element 2", "C-Factor (C)")] == 0.1
        assert echoed[("House Element 2", "Category")] == "Basement Walls"

    def test_formulas_reflect_settings(self, sample_inputs):
        settings = EngineSettings(infiltration_scale=0.024)
        rows = build_results_rows(sample_inputs, compute(sample_inputs, settings), settings)
        formulas = {row[1]: row[2] for row in block(rows, "Formulas")[1:]}

        assert formulas["Above Grade Element"] == "Q = A / R × DD × 24"
        assert formulas["Infiltration"] == "Qi = Σ(Lg) × 1.08 × CFM × DD × 0.024"
        assert formulas["Total Building Energy"] == "Q = Qel + Qeg + Qil + Qig + Qshg"

    def test_weather_file_source(self, sample_inputs, engine_settings):
        climate = ClimateData(heating_degree_days=10, is_manual_input=False, source_file_name="Denver.epw")
        inputs = sample_inputs.model_copy(update={"climate_data": climate})
        rows = build_results_rows(inputs, compute(inputs, engine_settings), engine_settings)

        assert block(rows, "Climate Data")[-1] == ["Climate Data", "Data Source", "Weather file: Denver.epw"]


class TestSweepRows:

    def test_layout(self, sample_inputs, engine_settings):
        result = run_sweep(
            sample_inputs,
            SweepConfig(building_id="baseline", element_id="window", start=0.5, step=0.5, stop=1.0),
            engine_settings,
        )
        rows = build_sweep_rows(result)

        assert rows[0] == SWEEP_HEADER
        assert [row[0] for row in rows[1:]] == [0.5, 1.0]
        assert rows[-1][2] == "0.00"

    def test_filename_from_title(self):
        assert sweep_export_filename("Roof R  Sweep") == "Roof_R_Sweep_analysis.csv"


class TestWriteCsv:

    def test_write_to_path(self, tmp_path, sample_inputs, engine_settings):
        rows = build_results_rows(sample_inputs, compute(sample_inputs, engine_settings))
        path = tmp_path / "results.csv"
        write_csv(rows, path)

        text = path.read_text(encoding="utf-8")
        assert text.startswith('"Building","Total Energy (Btu/year)"')
        with path.open(newline="", encoding="utf-8") as handle:
            read_back = list(csv.reader(handle))
        assert read_back[1][0] == "Baseline"
        assert read_back[3] == []

    def test_write_to_stream(self):
        buffer = io.StringIO()
        write_csv([["a", 1], ["b", 2.5]], buffer)

        assert buffer.getvalue().splitlines() == ['"a","1"', '"b","2.5"']
