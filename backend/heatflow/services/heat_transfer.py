"""
Heat-Transfer Engine

Annual envelope heat loss/gain per building from degree-days:

    aboveGrade    Q = A / R * DD * 24
    slab          Q = F * P * (HDD + CDD) * 24, split by the HDD/CDD fractions
    basementWall  Q = A * C * DD * 24
    glazing       Q = A * U * DD * 24, plus solar = sum(A_facade * SHGC * E_facade)
    infiltration  Q = P_glazing * air_heat_factor * airflow * DD * scale

Elements with a missing required value or a zero divisor contribute nothing;
the reason is recorded on their ElementContribution instead of raising.
"""

import logging
from typing import List, Optional

from heatflow.config import EngineSettings, get_engine_settings
from heatflow.models.enums import ContributionStatus, Facade
from heatflow.models.schemas import (
    AboveGradeElement,
    BasementWallElement,
    BuildingColumn,
    BuildingResult,
    CalculatorInputs,
    CalculatorResults,
    ClimateData,
    Element,
    ElementContribution,
    GlazingElement,
    SlabElement,
)
from heatflow.utils.logging_utils import log_with_context, timed_operation

logger = logging.getLogger(__name__)


def _guarded(element: Element, status: ContributionStatus, reason: str) -> ElementContribution:
    logger.debug(f"Element {element.id} ({element.name}) skipped: {reason}")
    return ElementContribution(
        element_id=element.id,
        element_name=element.name,
        category=element.category,
        status=status,
    )


def above_grade_contribution(element: AboveGradeElement, climate: ClimateData,
                             settings: EngineSettings) -> ElementContribution:
    if element.r_value == 0:
        return _guarded(element, ContributionStatus.division_guard, "R-value is zero")
    if element.area == 0:
        return _guarded(element, ContributionStatus.validation_gap, "area is zero")

    conductance = element.area / element.r_value
    return ElementContribution(
        element_id=element.id,
        element_name=element.name,
        category=element.category,
        heat_loss=conductance * climate.heating_degree_days * settings.hours_per_day,
        heat_gain=element.area * (1 / element.r_value) * climate.cooling_degree_days * settings.hours_per_day,
    )


def slab_contribution(element: SlabElement, climate: ClimateData,
                      settings: EngineSettings) -> ElementContribution:
    if element.f_factor == 0 or element.perimeter == 0:
        return _guarded(element, ContributionStatus.validation_gap, "F-factor or perimeter is zero")
    degree_days = climate.degree_day_sum
    if degree_days == 0:
        return _guarded(element, ContributionStatus.division_guard, "degree-day sum is zero")

    annual = element.f_factor * element.perimeter * degree_days * settings.hours_per_day
    return ElementContribution(
        element_id=element.id,
        element_name=element.name,
        category=element.category,
        heat_loss=annual * climate.heating_degree_days / degree_days,
        heat_gain=annual * climate.cooling_degree_days / degree_days,
    )


def basement_wall_contribution(element: BasementWallElement, climate: ClimateData,
                               settings: EngineSettings) -> ElementContribution:
    # Loss and gain use the same conductance; below-grade gain is not damped
    if element.area == 0 or element.c_factor == 0:
        return _guarded(element, ContributionStatus.validation_gap, "area or C-factor is zero")

    conductance = element.area * element.c_factor
    return ElementContribution(
        element_id=element.id,
        element_name=element.name,
        category=element.category,
        heat_loss=conductance * climate.heating_degree_days * settings.hours_per_day,
        heat_gain=conductance * climate.cooling_degree_days * settings.hours_per_day,
    )


def glazing_contribution(element: GlazingElement, climate: ClimateData,
                         settings: EngineSettings) -> ElementContribution:
    area = element.effective_area
    if area == 0:
        return _guarded(element, ContributionStatus.validation_gap, "glazing area is zero")

    conductance = area * element.u_value
    solar = sum(
        element.facade_area(facade) * element.shgc * climate.solar_radiation(facade)
        for facade in Facade
    )
    return ElementContribution(
        element_id=element.id,
        element_name=element.name,
        category=element.category,
        heat_loss=conductance * climate.heating_degree_days * settings.hours_per_day,
        heat_gain=conductance * climate.cooling_degree_days * settings.hours_per_day,
        solar_heat_gain=solar,
    )


CONTRIBUTORS = {
    "glazing": glazing_contribution,
    "aboveGrade": above_grade_contribution,
    "slab": slab_contribution,
    "basementWall": basement_wall_contribution,
}


def element_contribution(element: Element, climate: ClimateData,
                         settings: Optional[EngineSettings] = None) -> ElementContribution:
    """Heat loss, gain and solar gain attributed to one element"""
    settings = settings or get_engine_settings()
    return CONTRIBUTORS[element.category](element, climate, settings)


def envelope_heat_loss(building: BuildingColumn, climate: ClimateData,
                       settings: Optional[EngineSettings] = None) -> float:
    """Sum of element heat losses for one building (infiltration excluded)"""
    settings = settings or get_engine_settings()
    return sum(element_contribution(e, climate, settings).heat_loss for e in building.elements)


def compute_building(building: BuildingColumn, inputs: CalculatorInputs,
                     settings: Optional[EngineSettings] = None) -> BuildingResult:
    """Aggregate element contributions and infiltration for one building"""
    settings = settings or get_engine_settings()
    climate = inputs.climate_data

    contributions = [element_contribution(e, climate, settings) for e in building.elements]
    envelope_loss = sum(c.heat_loss for c in contributions)
    envelope_gain = sum(c.heat_gain for c in contributions)
    solar_gain = sum(c.solar_heat_gain for c in contributions)

    glazing = building.glazing_elements
    glazing_area = sum(g.effective_area for g in glazing)
    glazing_perimeter = sum(g.perimeter for g in glazing)

    infiltration_rate = glazing_perimeter * settings.air_heat_factor * inputs.airflow_rate * settings.infiltration_scale
    infiltration_loss = infiltration_rate * climate.heating_degree_days
    infiltration_gain = infiltration_rate * climate.cooling_degree_days

    total = envelope_loss + envelope_gain + solar_gain + infiltration_loss + infiltration_gain
    total_energy = int(round(total))

    percent_change = 0.0
    if inputs.current_energy_load > 0:
        percent_change = (total_energy - inputs.current_energy_load) / inputs.current_energy_load * 100

    return BuildingResult(
        building_id=building.id,
        building_name=building.name,
        envelope_heat_loss=envelope_loss,
        envelope_heat_gain=envelope_gain,
        solar_heat_gain=solar_gain,
        infiltration_heat_loss=infiltration_loss,
        infiltration_heat_gain=infiltration_gain,
        total_glazing_area=glazing_area,
        total_glazing_perimeter=glazing_perimeter,
        total_energy=total_energy,
        percent_change_vs_current=percent_change,
        contributions=contributions,
    )


@timed_operation("heat_transfer_compute")
def compute(inputs: CalculatorInputs, settings: Optional[EngineSettings] = None) -> CalculatorResults:
    """
    Compute annual heat transfer for every building in inputs.

    Args:
        inputs: Climate, airflow and building columns
        settings: Engine constants (defaults from environment)

    Returns:
        CalculatorResults with run-level sums and per-building results in
        input order
    """
    settings = settings or get_engine_settings()
    buildings: List[BuildingResult] = [
        compute_building(building, inputs, settings) for building in inputs.building_columns
    ]

    skipped = sum(
        1 for b in buildings for c in b.contributions if c.status != ContributionStatus.ok
    )
    if skipped:
        log_with_context(
            "info",
            f"{skipped} elements contributed nothing (missing values or zero divisors)",
            {'buildings': len(buildings), 'skipped_elements': skipped},
            logger,
        )

    return CalculatorResults(
        envelope_heat_loss=sum(b.envelope_heat_loss for b in buildings),
        envelope_heat_gain=sum(b.envelope_heat_gain for b in buildings),
        infiltration_heat_loss=sum(b.infiltration_heat_loss for b in buildings),
        infiltration_heat_gain=sum(b.infiltration_heat_gain for b in buildings),
        solar_heat_gain=sum(b.solar_heat_gain for b in buildings),
        total_glazing_area=sum(b.total_glazing_area for b in buildings),
        buildings=buildings,
    )
