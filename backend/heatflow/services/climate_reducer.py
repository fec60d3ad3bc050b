"""
Climate Reducer for annual hourly weather records

Reduces an hourly weather record (EPW-style header block, a column-label row,
then one row per hour) to heating/cooling degree-days and per-facade solar
radiation totals.
"""

import csv
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

from heatflow.config import get_reducer_settings
from heatflow.models.enums import Facade
from heatflow.models.schemas import CalculatorInputs, ClimateData
from heatflow.services.error_types import WeatherFileError, log_error_with_context
from heatflow.utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

DATA_PERIODS_MARKER = "DATA PERIODS"
# Label row position when the marker line is missing: after the eight EPW header lines
FALLBACK_HEADER_ROW = 8

DRY_BULB_LABEL = "dry bulb"
GLOBAL_HORIZONTAL_LABEL = "global horiz"
AZIMUTH_LABEL = "azimuth"
HOUR_LABEL = "hour"

HOURS_PER_DAY = 24


def facade_for_azimuth(azimuth: float) -> Facade:
    """
    Map a solar azimuth (degrees clockwise from north) to a facade.

    Sectors are 90° wide and include their clockwise boundary: 135° is East,
    225° is South and 315° is West. 45° is East; 0° and 360° are North.
    """
    az = azimuth % 360.0
    if az < 45.0 or az > 315.0:
        return Facade.north
    if az <= 135.0:
        return Facade.east
    if az <= 225.0:
        return Facade.south
    return Facade.west


def facade_for_hour(hour: int) -> Facade:
    """Time-of-day fallback when no azimuth column is available"""
    if 6 <= hour <= 11:
        return Facade.east
    if hour == 12:
        return Facade.south
    if 13 <= hour <= 17:
        return Facade.west
    return Facade.north


def _to_float(value: str) -> Optional[float]:
    try:
        number = float(value.strip())
    except (ValueError, AttributeError):
        return None
    return number if math.isfinite(number) else None


def _find_header_row(lines: List[str]) -> int:
    for index, line in enumerate(lines):
        if line.strip().upper().startswith(DATA_PERIODS_MARKER):
            return index + 1
    logger.debug(f"No {DATA_PERIODS_MARKER} marker, using row {FALLBACK_HEADER_ROW} as header")
    return FALLBACK_HEADER_ROW


def _find_column(labels: List[str], needle: str) -> Optional[int]:
    for index, label in enumerate(labels):
        if needle in label.strip().lower():
            return index
    return None


def parse_weather_text(
    text: str,
    heating_base_temp: Optional[float] = None,
    cooling_base_temp: Optional[float] = None,
    source_file_name: Optional[str] = None,
) -> ClimateData:
    """
    Reduce a weather record to ClimateData.

    Args:
        text: Full text of the weather file
        heating_base_temp: Heating base temperature (defaults from settings)
        cooling_base_temp: Cooling base temperature (defaults from settings)
        source_file_name: Name recorded on the resulting climate data

    Returns:
        ClimateData with is_manual_input=False

    Raises:
        WeatherFileError: when required columns or numeric rows are missing
    """
    settings = get_reducer_settings()
    heating_base = settings.heating_base_temp if heating_base_temp is None else heating_base_temp
    cooling_base = settings.cooling_base_temp if cooling_base_temp is None else cooling_base_temp

    lines = text.splitlines()
    header_row = _find_header_row(lines)
    if header_row >= len(lines):
        raise WeatherFileError(
            "Weather file has no column label row",
            {'line_count': len(lines), 'header_row': header_row},
        )

    labels = next(csv.reader([lines[header_row]]), [])
    dry_bulb_col = _find_column(labels, DRY_BULB_LABEL)
    radiation_col = _find_column(labels, GLOBAL_HORIZONTAL_LABEL)
    azimuth_col = _find_column(labels, AZIMUTH_LABEL)
    hour_col = _find_column(labels, HOUR_LABEL)

    missing = [
        label for label, col in ((DRY_BULB_LABEL, dry_bulb_col), (GLOBAL_HORIZONTAL_LABEL, radiation_col))
        if col is None
    ]
    if missing:
        raise WeatherFileError(f"Weather file is missing required columns: {missing}", {'labels': labels})

    heating_degree_hours = 0.0
    cooling_degree_hours = 0.0
    solar: Dict[Facade, float] = {facade: 0.0 for facade in Facade}
    numeric_rows = 0

    for row_index, fields in enumerate(csv.reader(lines[header_row + 1:])):
        if not any(field.strip() for field in fields):
            continue
        temperature = _to_float(fields[dry_bulb_col]) if dry_bulb_col < len(fields) else None
        if temperature is None:
            continue
        numeric_rows += 1

        if temperature < heating_base:
            heating_degree_hours += heating_base - temperature
        if temperature > cooling_base:
            cooling_degree_hours += temperature - cooling_base

        azimuth = None
        if azimuth_col is not None and azimuth_col < len(fields):
            azimuth = _to_float(fields[azimuth_col])

        if azimuth is not None:
            facade = facade_for_azimuth(azimuth)
        else:
            hour = None
            if hour_col is not None and hour_col < len(fields):
                hour = _to_float(fields[hour_col])
            facade = facade_for_hour(int(hour) if hour is not None else row_index % HOURS_PER_DAY)

        radiation = _to_float(fields[radiation_col]) if radiation_col < len(fields) else None
        solar[facade] += radiation or 0.0

    if numeric_rows == 0:
        raise WeatherFileError("Weather file contains no numeric data rows", {'header_row': header_row})

    logger.debug(f"Reduced {numeric_rows} hourly rows (header at row {header_row})")

    return ClimateData(
        heating_degree_days=round(heating_degree_hours / HOURS_PER_DAY, 1),
        cooling_degree_days=round(cooling_degree_hours / HOURS_PER_DAY, 1),
        heating_base_temp=heating_base,
        cooling_base_temp=cooling_base,
        north_solar_radiation=round(solar[Facade.north], 1),
        south_solar_radiation=round(solar[Facade.south], 1),
        east_solar_radiation=round(solar[Facade.east], 1),
        west_solar_radiation=round(solar[Facade.west], 1),
        is_manual_input=False,
        source_file_name=source_file_name,
    )


def reduce_weather_file(
    text: str,
    source_file_name: Optional[str] = None,
    heating_base_temp: Optional[float] = None,
    cooling_base_temp: Optional[float] = None,
) -> Optional[ClimateData]:
    """Reduce weather text, returning None instead of raising on parse failure"""
    try:
        with log_operation("weather_reduction", {'file': source_file_name}, logger):
            return parse_weather_text(
                text,
                heating_base_temp=heating_base_temp,
                cooling_base_temp=cooling_base_temp,
                source_file_name=source_file_name,
            )
    except WeatherFileError as e:
        log_error_with_context(e, {'file': source_file_name, 'stage': 'weather_reduction'})
        return None


def read_weather_file(path: Union[str, Path], **kwargs) -> Optional[ClimateData]:
    """Read a weather file from disk and reduce it"""
    path = Path(path)
    try:
        # Weather files in the wild are frequently latin-1 encoded
        text = path.read_text(encoding="latin-1")
    except OSError as e:
        logger.warning(f"Cannot read weather file {path}: {e}")
        return None
    return reduce_weather_file(text, source_file_name=path.name, **kwargs)


def apply_weather_file(inputs: CalculatorInputs, text: str, source_file_name: Optional[str] = None,
                       **kwargs) -> CalculatorInputs:
    """
    Replace the climate data of inputs with the reduced weather file.

    On parse failure the inputs are returned unchanged so the previous
    climate data is retained.
    """
    climate = reduce_weather_file(text, source_file_name=source_file_name, **kwargs)
    if climate is None:
        return inputs
    return inputs.model_copy(update={"climate_data": climate})
