"""
Hierarchical importer for multi-building tabular exports

Row kinds are detected positionally:

    Building A,,                       -> new current building
    Roof,Above Grade Element,          -> current category (element "Roof")
    ,Area (A),400                      -> value for the current element
    Climate Data,Heating Degree Days (Th),5000   -> climate value

Values are recorded under ``"{building} {category}_{parameter}"`` and rebuilt
into one glazing element plus any number of opaque elements per building.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from heatflow.models.enums import CategoryLabel, ClimateParameter, ElementParameter, GlazingParameter
from heatflow.models.schemas import (
    AboveGradeElement,
    BasementWallElement,
    BuildingColumn,
    CalculatorInputs,
    ClimateData,
    Element,
    GlazingElement,
    SlabElement,
)
from heatflow.services.error_types import TabularImportError, log_error_with_context
from heatflow.services.tabular_records import (
    ElementGroup,
    TabularRecord,
    Value,
    as_number,
    as_text,
    parse_value,
    read_rows,
)
from heatflow.utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

CLIMATE_SECTION = "Climate Data"
CATEGORY_LABELS: Dict[str, CategoryLabel] = {label.value: label for label in CategoryLabel}

CLIMATE_FIELDS: Dict[ClimateParameter, str] = {
    ClimateParameter.heating_degree_days: "heating_degree_days",
    ClimateParameter.cooling_degree_days: "cooling_degree_days",
    ClimateParameter.north_solar_radiation: "north_solar_radiation",
    ClimateParameter.south_solar_radiation: "south_solar_radiation",
    ClimateParameter.east_solar_radiation: "east_solar_radiation",
    ClimateParameter.west_solar_radiation: "west_solar_radiation",
}


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "building"


@dataclass
class HierarchicalImport:
    """Buildings and climate values recovered from a hierarchical export"""
    buildings: List[BuildingColumn] = field(default_factory=list)
    climate_overrides: Dict[str, float] = field(default_factory=dict)
    airflow_rate: Optional[float] = None
    unrecognized: List[Tuple[str, Value]] = field(default_factory=list)

    def apply_to(self, inputs: CalculatorInputs) -> CalculatorInputs:
        """Return new inputs carrying the imported buildings and climate values"""
        update = {"building_columns": self.buildings}
        if self.climate_overrides:
            climate = inputs.climate_data.model_dump()
            climate.update(self.climate_overrides)
            climate.update(is_manual_input=True, source_file_name=None)
            update["climate_data"] = ClimateData.model_validate(climate)
        if self.airflow_rate is not None:
            update["airflow_rate"] = self.airflow_rate
        return inputs.model_copy(update=update)


def collect_hierarchical_record(text: str) -> Tuple[TabularRecord, List[str]]:
    """
    Run the row state machine over the export.

    Returns:
        The filled record and building names in first-seen order
    """
    record = TabularRecord()
    building_names: List[str] = []
    current_building: Optional[str] = None
    current_group: Optional[ElementGroup] = None

    for line_number, fields in read_rows(text, limit=3):
        first, second, third = (fields + ["", "", ""])[:3]

        if first == CLIMATE_SECTION:
            if second and third:
                record.record_climate(second, parse_value(third))
            continue

        if first and not second:
            current_building = first
            if first not in building_names:
                building_names.append(first)
            current_group = None
            continue

        if first and second in CATEGORY_LABELS:
            if current_building is None:
                logger.debug(f"Line {line_number}: category row before any building, ignored")
                continue
            label = CATEGORY_LABELS[second]
            category = label.value if first == label.value else f"{label.value} {first}"
            current_group = ElementGroup(building=current_building, category=category, label=label, name=first)
            continue

        if current_building and current_group and second and third:
            record.record_parameter(current_group, second, parse_value(third))
        else:
            logger.debug(f"Line {line_number}: no building/category context, ignored")

    return record, building_names


def _build_glazing(record: TabularRecord, building: str, building_id: str) -> Optional[GlazingElement]:
    groups = record.groups_for_building(building, CategoryLabel.glazing)
    if not groups:
        return None
    values: Dict = {}
    for group in groups:
        values.update(record.parameters(group))
    return GlazingElement(
        id=f"{building_id}-glazing",
        name=as_text(values.get(GlazingParameter.name), groups[0].name),
        north_area=as_number(values.get(GlazingParameter.north_area)),
        south_area=as_number(values.get(GlazingParameter.south_area)),
        east_area=as_number(values.get(GlazingParameter.east_area)),
        west_area=as_number(values.get(GlazingParameter.west_area)),
        perimeter=as_number(values.get(GlazingParameter.perimeter)),
        u_value=as_number(values.get(GlazingParameter.u_value)),
        shgc=as_number(values.get(GlazingParameter.shgc)),
    )


def _build_opaque(group: ElementGroup, values: Dict, element_id: str) -> Element:
    name = as_text(values.get(ElementParameter.name), group.name)
    if group.label == CategoryLabel.slab:
        return SlabElement(
            id=element_id,
            name=name,
            f_factor=as_number(values.get(ElementParameter.f_factor)),
            perimeter=as_number(values.get(ElementParameter.slab_perimeter)),
        )
    if group.label == CategoryLabel.basement_walls:
        return BasementWallElement(
            id=element_id,
            name=name,
            area=as_number(values.get(ElementParameter.area)),
            c_factor=as_number(values.get(ElementParameter.c_factor)),
        )
    return AboveGradeElement(
        id=element_id,
        name=name,
        area=as_number(values.get(ElementParameter.area)),
        r_value=as_number(values.get(ElementParameter.r_value)),
    )


def rebuild_buildings(record: TabularRecord, building_names: List[str]) -> List[BuildingColumn]:
    buildings = []
    used_ids = set()
    for name in building_names:
        building_id = slugify(name)
        suffix = 2
        while building_id in used_ids:
            building_id = f"{slugify(name)}-{suffix}"
            suffix += 1
        used_ids.add(building_id)

        elements: List[Element] = []
        glazing = _build_glazing(record, name, building_id)
        if glazing is not None:
            elements.append(glazing)
        opaque_groups = [
            group for group in record.groups_with_prefix(f"{name} ")
            if group.building == name and group.label != CategoryLabel.glazing
        ]
        for index, group in enumerate(opaque_groups, start=1):
            elements.append(_build_opaque(group, record.parameters(group), f"{building_id}-{index}"))

        buildings.append(BuildingColumn(id=building_id, name=name, elements=elements))
    return buildings


def parse_hierarchical_text(text: str) -> HierarchicalImport:
    """
    Parse a hierarchical export.

    Raises:
        TabularImportError: when neither a building nor a climate value is found
    """
    record, building_names = collect_hierarchical_record(text)
    if not building_names and not record.climate:
        raise TabularImportError("No buildings or climate data found in export")

    climate_overrides = {
        CLIMATE_FIELDS[parameter]: as_number(value)
        for parameter, value in record.climate.items()
        if parameter in CLIMATE_FIELDS
    }
    # Reject negative or malformed climate values before they reach the inputs
    ClimateData(**climate_overrides)
    airflow = record.climate.get(ClimateParameter.airflow_rate)
    if airflow is not None and as_number(airflow) < 0:
        raise TabularImportError("Air flow rate must be non-negative", {'airflow_rate': airflow})

    return HierarchicalImport(
        buildings=rebuild_buildings(record, building_names),
        climate_overrides=climate_overrides,
        airflow_rate=as_number(airflow) if airflow is not None else None,
        unrecognized=list(record.unrecognized),
    )


def import_hierarchical(text: str, source_file_name: Optional[str] = None) -> Optional[HierarchicalImport]:
    """
    Import buildings (and climate values) from a hierarchical export.

    Returns:
        HierarchicalImport, or None when the text cannot be parsed. Existing
        inputs are untouched in that case.
    """
    try:
        with log_operation("hierarchical_import", {'file': source_file_name}, logger):
            result = parse_hierarchical_text(text)
    except TabularImportError as e:
        log_error_with_context(e, {'file': source_file_name, 'stage': 'hierarchical_import'})
        return None
    except ValidationError as e:
        error = TabularImportError("Imported values failed validation", {'errors': e.errors()})
        log_error_with_context(error, {'file': source_file_name, 'stage': 'hierarchical_import'})
        return None

    if result.unrecognized:
        logger.info(
            f"{source_file_name or 'hierarchical import'}: {len(result.unrecognized)} unrecognized entries ignored",
            extra={'unrecognized_keys': [key for key, _ in result.unrecognized]},
        )
    logger.info(f"Imported {len(result.buildings)} buildings")
    return result
