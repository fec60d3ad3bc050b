"""
Pytest configuration and fixtures
"""
import pytest
from typing import Callable, List, Optional

from heatflow.config import EngineSettings, get_engine_settings, get_reducer_settings
from heatflow.models.schemas import (
    AboveGradeElement,
    BuildingColumn,
    CalculatorInputs,
    ClimateData,
    GlazingElement,
)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; tests that touch the environment need a fresh read"""
    get_engine_settings.cache_clear()
    get_reducer_settings.cache_clear()
    yield
    get_engine_settings.cache_clear()
    get_reducer_settings.cache_clear()


@pytest.fixture
def engine_settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def climate() -> ClimateData:
    """Heating-dominated site with uneven solar exposure"""
    return ClimateData(
        heating_degree_days=5000,
        cooling_degree_days=1000,
        north_solar_radiation=100,
        south_solar_radiation=200,
        east_solar_radiation=150,
        west_solar_radiation=150,
    )


@pytest.fixture
def wall() -> AboveGradeElement:
    return AboveGradeElement(id="wall", name="Opaque Walls", area=400, r_value=15)


@pytest.fixture
def window() -> GlazingElement:
    return GlazingElement(
        id="window",
        name="Windows",
        north_area=10,
        south_area=20,
        perimeter=50,
        u_value=0.5,
        shgc=0.4,
    )


@pytest.fixture
def sample_inputs(climate, wall, window) -> CalculatorInputs:
    """Two buildings: a glazed baseline and an opaque-only alternative"""
    return CalculatorInputs(
        climate_data=climate,
        airflow_rate=0.01,
        current_energy_load=4_000_000,
        building_columns=[
            BuildingColumn(id="baseline", name="Baseline", elements=[window, wall]),
            BuildingColumn(id="opaque", name="Opaque Only", elements=[wall]),
        ],
    )


@pytest.fixture
def make_weather_text() -> Callable[..., str]:
    """Build an EPW-style weather record from hourly rows"""
    def _make(rows: List[str], labels: str = "Year,Month,Day,Hour,Dry Bulb Temperature,Global Horizontal Radiation",
              data_periods: bool = True, header_lines: Optional[List[str]] = None) -> str:
        header = header_lines or [
            "LOCATION,Testville,ST,USA,TMY3,000000,40.0,-105.0,-7.0,1600.0",
            "DESIGN CONDITIONS,0",
            "TYPICAL/EXTREME PERIODS,0",
            "GROUND TEMPERATURES,0",
            "HOLIDAYS/DAYLIGHT SAVINGS,No,0,0,0",
            "COMMENTS 1,synthetic",
            "COMMENTS 2,synthetic",
        ]
        header = list(header)
        header.append("DATA PERIODS,1,1,Data,Sunday, 1/ 1,12/31" if data_periods else "COMMENTS 3,none")
        return "\n".join(header + [labels] + rows) + "\n"
    return _make


HIERARCHICAL_EXPORT = """\
Climate Data,,
Climate Data,Heating Degree Days (Th),5000
Climate Data,Cooling Degree Days (Tc),1000
Climate Data,Air Flow Rate (CFM),0.01
Building A,,
Wall,Above Grade Element,
,Area (A),400
,R-Value (R),15
Building B,,
Wall,Above Grade Element,
,Area (A),300
,R-Value (R),10
"""


@pytest.fixture
def hierarchical_export() -> str:
    return HIERARCHICAL_EXPORT
