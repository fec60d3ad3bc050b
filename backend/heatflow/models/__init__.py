"""
Data models for climate summaries, building envelopes and calculation results.
"""

from .enums import (
    CategoryLabel,
    ClimateParameter,
    ContributionStatus,
    ElementCategory,
    ElementParameter,
    Facade,
    GlazingParameter,
    SweepValueType,
)
from .schemas import (
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
    SweepConfig,
    SweepPoint,
    SweepResult,
)

__all__ = [
    'CategoryLabel',
    'ClimateParameter',
    'ContributionStatus',
    'ElementCategory',
    'ElementParameter',
    'Facade',
    'GlazingParameter',
    'SweepValueType',
    'AboveGradeElement',
    'BasementWallElement',
    'BuildingColumn',
    'BuildingResult',
    'CalculatorInputs',
    'CalculatorResults',
    'ClimateData',
    'Element',
    'ElementContribution',
    'GlazingElement',
    'SlabElement',
    'SweepConfig',
    'SweepPoint',
    'SweepResult',
]
