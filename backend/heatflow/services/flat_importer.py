"""
Flat key/value importer for a single building

Each line is ``category,parameter,value[,...]``. The collected values are
projected onto one glazing element and five fixed opaque-element slots.
"""

import logging
import re
from typing import Optional, Tuple

from pydantic import ValidationError

from heatflow.models.enums import CategoryLabel, ElementParameter, GlazingParameter
from heatflow.models.schemas import AboveGradeElement, BuildingColumn, GlazingElement
from heatflow.services.error_types import TabularImportError, log_error_with_context
from heatflow.services.tabular_records import (
    ElementGroup,
    TabularRecord,
    as_number,
    as_text,
    parse_value,
    read_rows,
)
from heatflow.utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

GLAZING_CATEGORY = "Glazing 1"
DEFAULT_GLAZING_U_VALUE = 0.3

# Fixed opaque slots: (ordinal, display name)
OPAQUE_SLOTS: Tuple[Tuple[int, str], ...] = (
    (1, "Soffit"),
    (2, "Basement Walls"),
    (3, "Roof"),
    (4, "Floor"),
    (5, "Opaque Walls"),
)

_GLAZING_RE = re.compile(r"^Glazing \d+$")
_ELEMENT_RE = re.compile(r"^Element \d+$")


def _group_for(category: str) -> Optional[ElementGroup]:
    if _GLAZING_RE.match(category):
        return ElementGroup(building="", category=category, label=CategoryLabel.glazing, name=category)
    if _ELEMENT_RE.match(category):
        return ElementGroup(building="", category=category, label=CategoryLabel.element, name=category)
    return None


def collect_flat_record(text: str) -> TabularRecord:
    """
    Collect ``category_parameter`` values from a flat export.

    Raises:
        TabularImportError: when no line carries a category, parameter and value
    """
    record = TabularRecord()
    usable_lines = 0

    for _, fields in read_rows(text):
        if len(fields) < 3:
            continue
        category, parameter, raw_value = fields[0], fields[1], fields[2]
        if not parameter or raw_value == "":
            continue
        usable_lines += 1

        value = parse_value(raw_value)
        group = _group_for(category)
        if group is None:
            record.unrecognized.append((f"{category}_{parameter}", value))
        else:
            record.record_parameter(group, parameter, value)

    if usable_lines == 0:
        raise TabularImportError("No category,parameter,value rows found")
    return record


def project_building(record: TabularRecord, column_id: str, name: str) -> BuildingColumn:
    """Project a flat record onto one glazing element and the fixed opaque slots"""
    glazing_values = record.parameters(_group_for(GLAZING_CATEGORY))
    glazing = GlazingElement(
        id=f"{column_id}-glazing",
        name=as_text(glazing_values.get(GlazingParameter.name), "Imported Glazing"),
        north_area=as_number(glazing_values.get(GlazingParameter.north_area)),
        south_area=as_number(glazing_values.get(GlazingParameter.south_area)),
        east_area=as_number(glazing_values.get(GlazingParameter.east_area)),
        west_area=as_number(glazing_values.get(GlazingParameter.west_area)),
        perimeter=as_number(glazing_values.get(GlazingParameter.perimeter)),
        u_value=as_number(glazing_values.get(GlazingParameter.u_value)) or DEFAULT_GLAZING_U_VALUE,
        shgc=as_number(glazing_values.get(GlazingParameter.shgc)),
    )

    elements = [glazing]
    for ordinal, slot_name in OPAQUE_SLOTS:
        values = record.parameters(_group_for(f"Element {ordinal}"))
        area = as_number(values.get(ElementParameter.area))
        r_value = as_number(values.get(ElementParameter.r_value))
        if area == 0 and r_value == 0:
            logger.debug(f"Opaque slot {ordinal} ({slot_name}) has no data, skipped")
            continue
        elements.append(AboveGradeElement(
            id=str(ordinal),
            name=as_text(values.get(ElementParameter.name), slot_name),
            area=area,
            r_value=r_value,
        ))

    return BuildingColumn(id=column_id, name=name, elements=elements)


def import_flat_building(text: str, column_id: str = "imported", name: str = "Imported Building",
                         source_file_name: Optional[str] = None) -> Optional[BuildingColumn]:
    """
    Import a single building from a flat key/value export.

    Returns:
        The imported BuildingColumn, or None when the text cannot be parsed.
        Callers keep their existing inputs when None is returned.
    """
    try:
        with log_operation("flat_import", {'file': source_file_name, 'column_id': column_id}, logger):
            record = collect_flat_record(text)
            record.log_unrecognized(source_file_name or "flat import")
            return project_building(record, column_id, name)
    except TabularImportError as e:
        log_error_with_context(e, {'file': source_file_name, 'stage': 'flat_import'})
    except ValidationError as e:
        error = TabularImportError("Imported values failed validation", {'errors': e.errors()})
        log_error_with_context(error, {'file': source_file_name, 'stage': 'flat_import'})
    return None
