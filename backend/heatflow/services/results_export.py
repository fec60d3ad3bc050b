"""
Tabular exports of comparison results and sweep series

The results export is one sheet of blocks separated by blank rows: the
per-building result table, the climate summary, the inputs of every building
element and the formulas the totals come from.
"""

import csv
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, TextIO, Union

from heatflow.config import EngineSettings, get_engine_settings
from heatflow.models.enums import CategoryLabel, ClimateParameter, ElementParameter, GlazingParameter
from heatflow.models.schemas import (
    AboveGradeElement,
    BasementWallElement,
    BuildingColumn,
    CalculatorInputs,
    CalculatorResults,
    Element,
    GlazingElement,
    SlabElement,
    SweepResult,
)

logger = logging.getLogger(__name__)

Row = List[Any]

RESULTS_HEADER: Row = [
    "Building",
    "Total Energy (Btu/year)",
    "Envelope Heat Loss",
    "Envelope Heat Gain",
    "Solar Heat Gain",
    "Infiltration Heat Loss",
    "Infiltration Heat Gain",
    "Energy Difference vs Current (Btu/year)",
    "Percent Change vs Current (%)",
]
CLIMATE_HEADER: Row = ["Climate Data", "Parameter", "Value"]
INPUTS_HEADER: Row = ["Building Inputs", "Parameter", "Value", "Unit", "Description"]
FORMULAS_HEADER: Row = ["Formulas", "Parameter", "Formula", "Unit", "Description"]
SWEEP_HEADER: Row = ["Value", "Heat Loss (Btu/year)", "Energy Saved (%)"]

AREA_UNIT = "ft²"
RESISTANCE_UNIT = "ft²·°F·h/Btu"
CONDUCTANCE_UNIT = "Btu/ft²·°F·h"
ENERGY_UNIT = "Btu/year"


def climate_summary_rows(inputs: CalculatorInputs) -> List[Row]:
    climate = inputs.climate_data
    source = f"Weather file: {climate.source_file_name}" if not climate.is_manual_input else "Manual input"
    section = CLIMATE_HEADER[0]
    return [
        CLIMATE_HEADER,
        [section, ClimateParameter.heating_degree_days.value, climate.heating_degree_days],
        [section, ClimateParameter.cooling_degree_days.value, climate.cooling_degree_days],
        [section, "Heating Base Temperature", climate.heating_base_temp],
        [section, "Cooling Base Temperature", climate.cooling_base_temp],
        [section, ClimateParameter.north_solar_radiation.value, climate.north_solar_radiation],
        [section, ClimateParameter.south_solar_radiation.value, climate.south_solar_radiation],
        [section, ClimateParameter.east_solar_radiation.value, climate.east_solar_radiation],
        [section, ClimateParameter.west_solar_radiation.value, climate.west_solar_radiation],
        [section, ClimateParameter.airflow_rate.value, inputs.airflow_rate],
        [section, "Data Source", source],
    ]


def _glazing_rows(section: str, glazing: GlazingElement) -> List[Row]:
    r_equivalent = 1 / glazing.u_value if glazing.u_value > 0 else 0
    return [
        [section, GlazingParameter.name.value, glazing.name, "", "Glazing element name"],
        [section, GlazingParameter.north_area.value, glazing.north_area, AREA_UNIT, "North-facing glazing area"],
        [section, GlazingParameter.south_area.value, glazing.south_area, AREA_UNIT, "South-facing glazing area"],
        [section, GlazingParameter.east_area.value, glazing.east_area, AREA_UNIT, "East-facing glazing area"],
        [section, GlazingParameter.west_area.value, glazing.west_area, AREA_UNIT, "West-facing glazing area"],
        [section, "Total Area", glazing.effective_area, AREA_UNIT, "Total glazing area"],
        [section, GlazingParameter.perimeter.value, glazing.perimeter, "ft", "Glazing perimeter"],
        [section, GlazingParameter.u_value.value, glazing.u_value, CONDUCTANCE_UNIT, "Thermal transmittance"],
        [section, "R-Value Equivalent", round(r_equivalent, 4), RESISTANCE_UNIT, "Thermal resistance equivalent"],
        [section, GlazingParameter.shgc.value, glazing.shgc, "dimensionless", "Solar heat gain coefficient"],
    ]


def _opaque_rows(section: str, element: Element) -> List[Row]:
    rows: List[Row] = [[section, ElementParameter.name.value, element.name, "", "Building element name"]]
    if isinstance(element, AboveGradeElement):
        rows += [
            [section, "Category", CategoryLabel.above_grade_element.value, "", "Element category"],
            [section, ElementParameter.area.value, element.area, AREA_UNIT, "Surface area"],
            [section, ElementParameter.r_value.value, element.r_value, RESISTANCE_UNIT, "Thermal resistance"],
        ]
    elif isinstance(element, SlabElement):
        rows += [
            [section, "Category", CategoryLabel.slab.value, "", "Element category"],
            [section, ElementParameter.f_factor.value, element.f_factor, "Btu/ft·°F·h", "Slab edge heat loss factor"],
            [section, ElementParameter.slab_perimeter.value, element.perimeter, "ft", "Exposed slab perimeter"],
        ]
    elif isinstance(element, BasementWallElement):
        rows += [
            [section, "Category", CategoryLabel.basement_walls.value, "", "Element category"],
            [section, ElementParameter.area.value, element.area, AREA_UNIT, "Wall area"],
            [section, ElementParameter.c_factor.value, element.c_factor, CONDUCTANCE_UNIT, "Wall conductance"],
        ]
    return rows


def building_input_rows(building: BuildingColumn) -> List[Row]:
    """Input echo for one building: glazing elements first, then the opaque elements"""
    rows: List[Row] = [[building.name, "", "", "", ""]]
    for index, glazing in enumerate(building.glazing_elements, start=1):
        rows.extend(_glazing_rows(f"{building.name} Glazing {index}", glazing))
    opaque = [e for e in building.elements if not isinstance(e, GlazingElement)]
    for index, element in enumerate(opaque, start=1):
        rows.extend(_opaque_rows(f"{building.name} Element {index}", element))
    return rows


def formula_rows(settings: EngineSettings) -> List[Row]:
    section = FORMULAS_HEADER[0]
    hours = f"{settings.hours_per_day:g}"
    infiltration = f"Σ(Lg) × {settings.air_heat_factor:g} × CFM × DD × {settings.infiltration_scale:g}"
    return [
        FORMULAS_HEADER,
        [section, "Above Grade Element", f"Q = A / R × DD × {hours}", ENERGY_UNIT,
         "Area over R-value, times heating (loss) or cooling (gain) degree days"],
        [section, "On/Sub-grade Slab", f"Q = F × Ls × (Th + Tc) × {hours}", ENERGY_UNIT,
         "Split into loss and gain by the heating and cooling degree-day fractions"],
        [section, "Basement Walls", f"Q = A × C × DD × {hours}", ENERGY_UNIT,
         "Same conductance for loss and gain"],
        [section, "Glazing Conduction", f"Q = Ag × Ug × DD × {hours}", ENERGY_UNIT,
         "Total glazing area times U-value"],
        [section, "Solar Heat Gain", "Qshg = Σ(Agn×Edn + Ags×Eds + Age×Ede + Agw×Edw) × SHGC", ENERGY_UNIT,
         "Glazing area times solar radiation by orientation, multiplied by SHGC"],
        [section, "Infiltration", f"Qi = {infiltration}", ENERGY_UNIT,
         "Glazing perimeter times air heat factor and air flow rate"],
        [section, "Total Building Energy", "Q = Qel + Qeg + Qil + Qig + Qshg", ENERGY_UNIT,
         "Sum of all heat transfer components"],
    ]


def build_results_rows(inputs: CalculatorInputs, results: CalculatorResults,
                       settings: Optional[EngineSettings] = None) -> List[Row]:
    """
    Result table: one row per building in input order, then (each after a
    blank row) the climate summary, the building inputs and the formulas.

    The energy difference and percent change columns are blank when no
    current energy load is set.
    """
    settings = settings or get_engine_settings()
    current_load = inputs.current_energy_load
    has_load = current_load > 0

    rows: List[Row] = [list(RESULTS_HEADER)]
    for building in results.buildings:
        rows.append([
            building.building_name,
            building.total_energy,
            round(building.envelope_heat_loss, 2),
            round(building.envelope_heat_gain, 2),
            round(building.solar_heat_gain, 2),
            round(building.infiltration_heat_loss, 2),
            round(building.infiltration_heat_gain, 2),
            round(building.total_energy - current_load, 2) if has_load else "",
            round(building.percent_change_vs_current, 1) if has_load else "",
        ])
    rows.append([])
    rows.extend(climate_summary_rows(inputs))

    rows.append([])
    rows.append(list(INPUTS_HEADER))
    for building in inputs.building_columns:
        rows.extend(building_input_rows(building))

    rows.append([])
    rows.extend(formula_rows(settings))
    return rows


def build_sweep_rows(result: SweepResult) -> List[Row]:
    rows: List[Row] = [list(SWEEP_HEADER)]
    for point in result.points:
        rows.append([point.value, round(point.heat_loss, 2), f"{point.energy_saved:.2f}"])
    return rows


def sweep_export_filename(title: str) -> str:
    stem = re.sub(r"\s+", "_", title.strip())
    return f"{stem}_analysis.csv"


def write_csv(rows: Sequence[Row], destination: Union[str, Path, TextIO]) -> None:
    """Write rows to a path or an open text stream, quoting every cell"""
    if isinstance(destination, (str, Path)):
        path = Path(destination)
        with path.open("w", newline="", encoding="utf-8") as handle:
            csv.writer(handle, quoting=csv.QUOTE_ALL).writerows(rows)
        logger.info(f"Wrote {len(rows)} rows to {path}")
        return
    csv.writer(destination, quoting=csv.QUOTE_ALL).writerows(rows)
