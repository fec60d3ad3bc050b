"""
Versioned persisted state for calculator inputs and results

Current layout (version 2):

    {"schemaVersion": 2, "inputs": {...CalculatorInputs...}, "results": {...} | null}

Older documents are migrated on load:

- no ``schemaVersion``: the document is a bare inputs dict (version 1)
- ``buildingColumns`` missing or null: becomes an empty list
- climate fields at the top level (``heatingDegreeDays``, ...): folded into
  ``climateData``
- the two-building layout (``currentBuilding`` and ``proposedBuilding``, each
  with ``glazingElements`` and ``buildingElements``): rebuilt as the
  ``current`` and ``proposed`` building columns
- the single-building layout (``northGlazingArea``, ``soffitArea``, ...):
  rebuilt as one building column
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import Field, ValidationError

from heatflow.models.schemas import (
    AboveGradeElement,
    BuildingColumn,
    CalculatorInputs,
    CalculatorResults,
    GlazingElement,
    HeatFlowModel,
)
from heatflow.services.error_types import StateSchemaError, log_error_with_context

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

LEGACY_CLIMATE_FIELDS = (
    "heatingDegreeDays",
    "coolingDegreeDays",
    "heatingBaseTemp",
    "coolingBaseTemp",
    "northSolarRadiation",
    "southSolarRadiation",
    "eastSolarRadiation",
    "westSolarRadiation",
    "isManualInput",
    "epwFileName",
)

LEGACY_GLAZING_FIELDS = {
    "northGlazingArea": "northArea",
    "southGlazingArea": "southArea",
    "eastGlazingArea": "eastArea",
    "westGlazingArea": "westArea",
    "glazingPerimeter": "perimeter",
    "solarHeatGainCoeff": "shgc",
}

# (area key, R-value key, element name) of the single-building layout
LEGACY_ENVELOPE_SLOTS = (
    ("soffitArea", "soffitRValue", "Soffit"),
    ("basementArea", "basementRValue", "Basement Walls"),
    ("roofArea", "roofRValue", "Roof"),
    ("floorArea", "floorRValue", "Floor"),
    ("opaqueWallArea", "opaqueWallRValue", "Opaque Walls"),
)

LEGACY_BUILDING_ID = "current"

# document key -> (building id, building name) of the two-building layout
LEGACY_BUILDING_PAIR = {
    "currentBuilding": (LEGACY_BUILDING_ID, "Current Building"),
    "proposedBuilding": ("proposed", "Proposed Building"),
}

LEGACY_PAIR_GLAZING_FIELDS = ("name", "northArea", "southArea", "eastArea", "westArea", "perimeter", "shgc")


class PersistedState(HeatFlowModel):
    """Inputs and (optionally) the last results, tagged with a schema version"""
    schema_version: int = SCHEMA_VERSION
    inputs: CalculatorInputs = Field(default_factory=CalculatorInputs)
    results: Optional[CalculatorResults] = None


def _fold_legacy_climate(document: Dict[str, Any]) -> None:
    legacy = {key: document.pop(key) for key in LEGACY_CLIMATE_FIELDS if key in document}
    if not legacy:
        return
    logger.debug(f"Folding legacy climate fields into climateData: {sorted(legacy)}")
    climate = dict(document.get("climateData") or {})
    for key, value in legacy.items():
        climate.setdefault(key, value)
    document["climateData"] = climate


def _legacy_glazing(raw: Dict[str, Any], building_id: str, index: int) -> GlazingElement:
    values = {key: raw[key] for key in LEGACY_PAIR_GLAZING_FIELDS if raw.get(key) is not None}
    if raw.get("uValue") is not None:
        values["uValue"] = raw["uValue"]
    else:
        # some exports carried the glazing resistance instead of its transmittance
        r_value = raw.get("rValue") or 0
        values["uValue"] = 1 / r_value if r_value else 0
    element_id = str(raw.get("id") or index)
    return GlazingElement(id=f"{building_id}-glazing-{element_id}", **values)


def _legacy_opaque(raw: Dict[str, Any], building_id: str, index: int) -> AboveGradeElement:
    element_id = str(raw.get("id") or index)
    return AboveGradeElement(
        id=f"{building_id}-{element_id}",
        name=raw.get("name") or "",
        area=raw.get("area") or 0,
        r_value=raw.get("rValue") or 0,
    )


def _rebuild_legacy_pair(document: Dict[str, Any]) -> bool:
    legacy = {key: document.pop(key) for key in LEGACY_BUILDING_PAIR if key in document}
    if not legacy:
        return False
    if document.get("buildingColumns"):
        logger.warning("Document has both building columns and current/proposed buildings; dropping the latter")
        return False

    columns = []
    for key, (building_id, name) in LEGACY_BUILDING_PAIR.items():
        building = legacy.get(key)
        if not building:
            continue
        elements = [
            _legacy_glazing(raw, building_id, index)
            for index, raw in enumerate(building.get("glazingElements") or [], start=1)
        ]
        elements.extend(
            _legacy_opaque(raw, building_id, index)
            for index, raw in enumerate(building.get("buildingElements") or [], start=1)
        )
        columns.append(BuildingColumn(id=building_id, name=name, elements=elements).model_dump(by_alias=True))

    logger.debug(f"Rebuilt {len(columns)} building columns from the current/proposed layout")
    document["buildingColumns"] = columns
    return True


def _rebuild_legacy_building(document: Dict[str, Any], paired: bool = False) -> None:
    glazing_keys = set(LEGACY_GLAZING_FIELDS) | {"glazingRValue"}
    slot_keys = {key for area, r_value, _ in LEGACY_ENVELOPE_SLOTS for key in (area, r_value)}
    legacy = {key: document.pop(key) for key in glazing_keys | slot_keys if key in document}
    if not legacy:
        return
    if paired:
        logger.debug("Single-building fields repeat the current/proposed layout; dropped")
        return
    if document.get("buildingColumns"):
        logger.warning("Document has both building columns and single-building fields; dropping the latter")
        return

    glazing_values = {target: legacy.get(source) or 0 for source, target in LEGACY_GLAZING_FIELDS.items()}
    r_value = legacy.get("glazingRValue") or 0
    glazing_values["uValue"] = 1 / r_value if r_value else 0
    elements = [GlazingElement(id=f"{LEGACY_BUILDING_ID}-glazing", name="Current Glazing", **glazing_values)]

    for ordinal, (area_key, r_key, name) in enumerate(LEGACY_ENVELOPE_SLOTS, start=1):
        area = legacy.get(area_key) or 0
        r_value = legacy.get(r_key) or 0
        if area or r_value:
            elements.append(AboveGradeElement(id=str(ordinal), name=name, area=area, r_value=r_value))

    building = BuildingColumn(id=LEGACY_BUILDING_ID, name="Current Building", elements=elements)
    document["buildingColumns"] = [building.model_dump(by_alias=True)]


def migrate_inputs(document: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a version 1 inputs dict up to the current CalculatorInputs layout"""
    migrated = dict(document)
    _fold_legacy_climate(migrated)
    paired = _rebuild_legacy_pair(migrated)
    _rebuild_legacy_building(migrated, paired)
    if migrated.get("buildingColumns") is None:
        migrated["buildingColumns"] = []
    return migrated


def load_state(document: Dict[str, Any]) -> PersistedState:
    """
    Validate a persisted document, migrating older versions.

    Raises:
        StateSchemaError: unknown version or contents that fail validation
    """
    if not isinstance(document, dict):
        raise StateSchemaError("State document must be a JSON object", {'type': type(document).__name__})

    version = document.get("schemaVersion", 1)
    try:
        if version == 1:
            logger.info("Migrating version 1 state document")
            return PersistedState(inputs=CalculatorInputs.model_validate(migrate_inputs(document)))
        if version == SCHEMA_VERSION:
            body = dict(document)
            body["inputs"] = migrate_inputs(body.get("inputs") or {})
            return PersistedState.model_validate(body)
    except ValidationError as e:
        raise StateSchemaError("State document failed validation", {'errors': e.errors()}) from e

    raise StateSchemaError(
        f"Unsupported state schema version: {version}",
        {'schema_version': version, 'supported': [1, SCHEMA_VERSION]},
    )


def loads_state(text: str) -> PersistedState:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateSchemaError("State document is not valid JSON", {'error': str(e)}) from e
    return load_state(document)


def dump_state(inputs: CalculatorInputs, results: Optional[CalculatorResults] = None) -> Dict[str, Any]:
    """Serialize inputs (and results) to the current persisted layout"""
    state = PersistedState(inputs=inputs, results=results)
    return state.model_dump(mode="json", by_alias=True)


def dumps_state(inputs: CalculatorInputs, results: Optional[CalculatorResults] = None) -> str:
    return json.dumps(dump_state(inputs, results), indent=2)


def read_state(path: Union[str, Path]) -> Optional[PersistedState]:
    """
    Load a persisted state file.

    Returns:
        PersistedState, or None when the file is missing or cannot be migrated
    """
    path = Path(path)
    try:
        return loads_state(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.warning(f"Cannot read state file {path}: {e}")
    except StateSchemaError as e:
        log_error_with_context(e, {'file': str(path), 'stage': 'state_load'})
    return None


def write_state(path: Union[str, Path], inputs: CalculatorInputs,
                results: Optional[CalculatorResults] = None) -> Path:
    path = Path(path)
    path.write_text(dumps_state(inputs, results), encoding="utf-8")
    logger.info(f"Saved state to {path}")
    return path
