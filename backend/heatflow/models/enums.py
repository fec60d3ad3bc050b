"""
Enums for heatflow models to ensure type safety and consistency
"""

from enum import Enum


class ElementCategory(str, Enum):
    """Envelope element categories understood by the heat-transfer engine"""
    glazing = 'glazing'
    above_grade = 'aboveGrade'
    slab = 'slab'
    basement_wall = 'basementWall'


class Facade(str, Enum):
    """Compass-oriented building faces used to bucket solar radiation"""
    north = 'north'
    east = 'east'
    south = 'south'
    west = 'west'


class SweepValueType(str, Enum):
    """Thermal quantity supplied by a sensitivity sweep sample"""
    r_value = 'rValue'
    u_value = 'uValue'


class ContributionStatus(str, Enum):
    """Outcome of an element's contribution to the building totals"""
    ok = 'ok'
    validation_gap = 'validation_gap'
    division_guard = 'division_guard'


class ClimateParameter(str, Enum):
    """Climate parameter labels recognized in tabular imports"""
    heating_degree_days = 'Heating Degree Days (Th)'
    cooling_degree_days = 'Cooling Degree Days (Tc)'
    north_solar_radiation = 'North Solar Radiation (Edn)'
    south_solar_radiation = 'South Solar Radiation (Eds)'
    east_solar_radiation = 'East Solar Radiation (Ede)'
    west_solar_radiation = 'West Solar Radiation (Edw)'
    airflow_rate = 'Air Flow Rate (CFM)'


class GlazingParameter(str, Enum):
    """Glazing parameter labels recognized in tabular imports"""
    north_area = 'North Area (Agn)'
    south_area = 'South Area (Ags)'
    east_area = 'East Area (Age)'
    west_area = 'West Area (Agw)'
    perimeter = 'Perimeter (Lg)'
    u_value = 'U-Value (Ug)'
    shgc = 'SHGC'
    name = 'Name'


class ElementParameter(str, Enum):
    """Opaque element parameter labels recognized in tabular imports"""
    area = 'Area (A)'
    r_value = 'R-Value (R)'
    f_factor = 'F-Factor (F)'
    slab_perimeter = 'Perimeter (Ls)'
    c_factor = 'C-Factor (C)'
    name = 'Name'


class CategoryLabel(str, Enum):
    """Category row labels of the hierarchical tabular format"""
    glazing = 'Glazing'
    element = 'Element'
    above_grade_element = 'Above Grade Element'
    slab = 'On/Sub-grade Slab'
    basement_walls = 'Basement Walls'
