"""
Pydantic schemas for heatflow climate, envelope and result data structures

Every model is an immutable value snapshot. Attributes are snake_case in
Python; the camelCase aliases match the persisted-state and import formats.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from heatflow.models.enums import ContributionStatus, ElementCategory, Facade, SweepValueType

NonNegative = Annotated[float, Field(ge=0)]


class HeatFlowModel(BaseModel):
    """Base model: frozen, camelCase aliases, unknown fields rejected"""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ClimateData(HeatFlowModel):
    """Degree-day and solar radiation summary for one site"""
    heating_degree_days: NonNegative = Field(0.0, description="Annual heating degree-days")
    cooling_degree_days: NonNegative = Field(0.0, description="Annual cooling degree-days")
    heating_base_temp: float = Field(65.0, description="Heating base temperature")
    cooling_base_temp: float = Field(65.0, description="Cooling base temperature")
    north_solar_radiation: NonNegative = 0.0
    south_solar_radiation: NonNegative = 0.0
    east_solar_radiation: NonNegative = 0.0
    west_solar_radiation: NonNegative = 0.0
    is_manual_input: bool = Field(True, description="False when derived from a weather file")
    source_file_name: Optional[str] = Field(None, alias="epwFileName", description="Weather file the data came from")

    @property
    def degree_day_sum(self) -> float:
        return self.heating_degree_days + self.cooling_degree_days

    def solar_radiation(self, facade: Facade) -> float:
        return getattr(self, f"{Facade(facade).value}_solar_radiation")

    def with_manual_overrides(self, **changes) -> "ClimateData":
        """
        Return a copy with the given fields replaced.

        Degree-days of a weather-file record are derived values; changing them
        requires switching the record to manual input in the same call.
        """
        touches_degree_days = {"heating_degree_days", "cooling_degree_days"} & changes.keys()
        if touches_degree_days and not self.is_manual_input and not changes.get("is_manual_input", False):
            raise ValueError(
                f"Cannot override {sorted(touches_degree_days)} on weather-file climate data "
                "without setting is_manual_input=True"
            )
        return ClimateData.model_validate({**self.model_dump(), **changes})


class _ElementBase(HeatFlowModel):
    id: str
    name: str = ""


class GlazingElement(_ElementBase):
    """Window/glazing element with per-facade area split"""
    category: Literal["glazing"] = "glazing"
    area: NonNegative = 0.0
    u_value: NonNegative = 0.0
    north_area: NonNegative = 0.0
    south_area: NonNegative = 0.0
    east_area: NonNegative = 0.0
    west_area: NonNegative = 0.0
    perimeter: NonNegative = 0.0
    shgc: NonNegative = 0.0

    def facade_area(self, facade: Facade) -> float:
        return getattr(self, f"{Facade(facade).value}_area")

    @property
    def facade_total_area(self) -> float:
        return sum(self.facade_area(facade) for facade in Facade)

    @property
    def effective_area(self) -> float:
        """Facade split when one is given, otherwise the flat area field"""
        facade_total = self.facade_total_area
        return facade_total if facade_total > 0 else self.area


class AboveGradeElement(_ElementBase):
    """Opaque above-grade assembly described by its R-value"""
    category: Literal["aboveGrade"] = "aboveGrade"
    area: NonNegative = 0.0
    r_value: NonNegative = 0.0


class SlabElement(_ElementBase):
    """On/sub-grade slab described by F-factor and exposed perimeter"""
    category: Literal["slab"] = "slab"
    f_factor: NonNegative = 0.0
    perimeter: NonNegative = 0.0


class BasementWallElement(_ElementBase):
    """Below-grade wall described by its C-factor"""
    category: Literal["basementWall"] = "basementWall"
    area: NonNegative = 0.0
    c_factor: NonNegative = 0.0


Element = Annotated[
    Union[GlazingElement, AboveGradeElement, SlabElement, BasementWallElement],
    Field(discriminator="category"),
]


class BuildingColumn(HeatFlowModel):
    """One building being compared; element order is display order only"""
    id: str
    name: str
    elements: List[Element] = Field(default_factory=list)

    @property
    def glazing_elements(self) -> List[GlazingElement]:
        return [e for e in self.elements if e.category == ElementCategory.glazing]

    def find_element(self, element_id: str) -> Optional[Element]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def replace_element(self, element: Element) -> "BuildingColumn":
        """Return a copy with the element of the same id swapped in"""
        elements = [element if e.id == element.id else e for e in self.elements]
        return self.model_copy(update={"elements": elements})


class CalculatorInputs(HeatFlowModel):
    """Everything the engine needs for one comparison run"""
    climate_data: ClimateData = Field(default_factory=ClimateData)
    airflow_rate: NonNegative = Field(0.0, description="Infiltration airflow (CFM-equivalent)")
    current_energy_load: NonNegative = Field(0.0, description="Baseline annual load for comparison")
    building_columns: List[BuildingColumn] = Field(default_factory=list)

    @field_validator("building_columns", mode="before")
    @classmethod
    def default_missing_columns(cls, v):
        """Persisted inputs may carry null instead of a building list"""
        if v is None:
            return []
        return v

    def find_building(self, building_id: str) -> Optional[BuildingColumn]:
        for building in self.building_columns:
            if building.id == building_id:
                return building
        return None


class ElementContribution(HeatFlowModel):
    """Heat flow attributed to a single element"""
    element_id: str
    element_name: str
    category: ElementCategory
    heat_loss: float = 0.0
    heat_gain: float = 0.0
    solar_heat_gain: float = 0.0
    status: ContributionStatus = ContributionStatus.ok


class BuildingResult(HeatFlowModel):
    """Per-building totals with a breakdown by component"""
    building_id: str
    building_name: str
    envelope_heat_loss: float = 0.0
    envelope_heat_gain: float = 0.0
    solar_heat_gain: float = 0.0
    infiltration_heat_loss: float = 0.0
    infiltration_heat_gain: float = 0.0
    total_glazing_area: float = 0.0
    total_glazing_perimeter: float = 0.0
    total_energy: int = 0
    percent_change_vs_current: float = 0.0
    contributions: List[ElementContribution] = Field(default_factory=list)

    @property
    def component_breakdown(self) -> Dict[str, float]:
        return {
            "envelope_heat_loss": self.envelope_heat_loss,
            "envelope_heat_gain": self.envelope_heat_gain,
            "solar_heat_gain": self.solar_heat_gain,
            "infiltration_heat_loss": self.infiltration_heat_loss,
            "infiltration_heat_gain": self.infiltration_heat_gain,
        }


class CalculatorResults(HeatFlowModel):
    """Run-level sums plus ordered per-building results"""
    envelope_heat_loss: float = 0.0
    envelope_heat_gain: float = 0.0
    infiltration_heat_loss: float = 0.0
    infiltration_heat_gain: float = 0.0
    solar_heat_gain: float = 0.0
    total_glazing_area: float = 0.0
    buildings: List[BuildingResult] = Field(default_factory=list)

    def for_building(self, building_id: str) -> Optional[BuildingResult]:
        for result in self.buildings:
            if result.building_id == building_id:
                return result
        return None


class SweepConfig(HeatFlowModel):
    """Sensitivity sweep request over one element's thermal value"""
    building_id: str
    element_id: str
    value_type: SweepValueType = SweepValueType.u_value
    start: float = 0.1
    step: float = 0.05
    stop: float = 0.8
    title: str = "Analysis Chart"


class SweepPoint(HeatFlowModel):
    value: float
    heat_loss: float
    energy_saved: float


class SweepResult(HeatFlowModel):
    config: SweepConfig
    max_heat_loss: float
    points: List[SweepPoint] = Field(default_factory=list)
