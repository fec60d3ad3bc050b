"""
Sensitivity sweep over one element's thermal value

A sweep substitutes a range of R- or U-values into a single element and
recomputes the building's envelope heat loss for each sample, reporting the
energy saved relative to the worst sample.
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from heatflow.config import EngineSettings, get_engine_settings
from heatflow.models.enums import SweepValueType
from heatflow.models.schemas import CalculatorInputs, Element, SweepConfig, SweepPoint, SweepResult
from heatflow.services.error_types import SweepConfigurationError
from heatflow.services.heat_transfer import envelope_heat_loss
from heatflow.utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

SAMPLE_TOLERANCE = 1e-9
VALUE_DECIMALS = 2

# category -> (model field, whether the field is a resistance)
THERMAL_FIELDS: Dict[str, Tuple[str, bool]] = {
    "aboveGrade": ("r_value", True),
    "glazing": ("u_value", False),
    "slab": ("f_factor", False),
    "basementWall": ("c_factor", False),
}


def sweep_samples(start: float, step: float, stop: float) -> np.ndarray:
    """Samples start + i*step up to and including stop"""
    if step <= 0:
        raise SweepConfigurationError("Sweep step must be positive", {'step': step})
    if stop < start:
        raise SweepConfigurationError("Sweep stop must not be below start", {'start': start, 'stop': stop})
    if start < 0:
        raise SweepConfigurationError("Sweep values must be non-negative", {'start': start})

    count = int(np.floor((stop - start) / step + SAMPLE_TOLERANCE)) + 1
    return start + np.arange(count) * step


def _reciprocal(value: float) -> float:
    return 0.0 if value == 0 else 1.0 / value


def thermal_value(element: Element, value: float, value_type: SweepValueType) -> Tuple[str, float]:
    """
    Translate a sweep sample into the element's own thermal parameter.

    Returns:
        (field name, value to store in that field)
    """
    field_name, is_resistance = THERMAL_FIELDS[element.category]
    sample_is_resistance = SweepValueType(value_type) == SweepValueType.r_value
    if sample_is_resistance == is_resistance:
        return field_name, value
    return field_name, _reciprocal(value)


def run_sweep(inputs: CalculatorInputs, config: SweepConfig,
              settings: Optional[EngineSettings] = None) -> SweepResult:
    """
    Sweep one element's thermal value and report heat loss per sample.

    Raises:
        SweepConfigurationError: invalid range or unknown building/element
    """
    settings = settings or get_engine_settings()

    building = inputs.find_building(config.building_id)
    if building is None:
        raise SweepConfigurationError("Unknown building", {'building_id': config.building_id})
    element = building.find_element(config.element_id)
    if element is None:
        raise SweepConfigurationError(
            "Unknown element", {'building_id': config.building_id, 'element_id': config.element_id}
        )

    samples = sweep_samples(config.start, config.step, config.stop)

    with log_operation("sensitivity_sweep", {'building_id': building.id, 'element_id': element.id,
                                             'samples': len(samples)}, logger):
        losses: List[float] = []
        for sample in samples:
            field_name, value = thermal_value(element, float(sample), config.value_type)
            variant = building.replace_element(element.model_copy(update={field_name: value}))
            losses.append(envelope_heat_loss(variant, inputs.climate_data, settings))

        max_loss = max(losses)
        points = [
            SweepPoint(
                value=round(float(sample), VALUE_DECIMALS),
                heat_loss=loss,
                energy_saved=(max_loss - loss) / max_loss * 100 if max_loss > 0 else 0.0,
            )
            for sample, loss in zip(samples, losses)
        ]

    return SweepResult(config=config, max_heat_loss=max_loss, points=points)
