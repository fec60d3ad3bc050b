"""
Intermediate record shared by the tabular importers

Rows of a delimited export are collected into parameter maps keyed by closed
enumerations. Anything outside the known vocabulary lands in the
``unrecognized`` bucket so it can be reported instead of silently dropped.
"""

import csv
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Type, Union

from heatflow.models.enums import CategoryLabel, ClimateParameter, ElementParameter, GlazingParameter

logger = logging.getLogger(__name__)

Value = Union[float, str]
Parameter = Union[GlazingParameter, ElementParameter]


def read_rows(text: str, limit: Optional[int] = None) -> Iterator[Tuple[int, List[str]]]:
    """
    Yield (line number, trimmed fields) for each non-blank row of delimited text.

    Quoted fields may contain commas; quotes are removed by the csv reader.
    """
    reader = csv.reader(text.splitlines(), skipinitialspace=True)
    for fields in reader:
        fields = [part.strip() for part in fields]
        if not any(fields):
            continue
        if limit is not None:
            fields = fields[:limit]
        yield reader.line_num, fields


def parse_value(raw: str) -> Value:
    """Numeric when the text parses as a number, otherwise the raw string"""
    try:
        return float(raw)
    except ValueError:
        return raw


def as_number(value: Optional[Value], default: float = 0.0) -> float:
    """Numeric view of a recorded value; text and missing values give default"""
    if isinstance(value, float):
        return value
    return default


def as_text(value: Optional[Value], default: str = "") -> str:
    """Text view of a recorded value, for names that happen to look numeric"""
    if isinstance(value, float):
        return f"{value:g}"
    return value or default


def vocabulary_for(label: CategoryLabel) -> Type[Parameter]:
    return GlazingParameter if label == CategoryLabel.glazing else ElementParameter


@dataclass(frozen=True)
class ElementGroup:
    """Rows that belong to one element: building, category and element name"""
    building: str
    category: str
    label: CategoryLabel
    name: str = ""

    @property
    def prefix(self) -> str:
        return f"{self.building} {self.category}" if self.building else self.category

    def key(self, parameter: str) -> str:
        return f"{self.prefix}_{parameter}"


@dataclass
class TabularRecord:
    """Values recognized in a tabular export"""
    climate: Dict[ClimateParameter, Value] = field(default_factory=dict)
    groups: Dict[ElementGroup, Dict[Parameter, Value]] = field(default_factory=dict)
    unrecognized: List[Tuple[str, Value]] = field(default_factory=list)

    def record_climate(self, label: str, value: Value) -> bool:
        try:
            parameter = ClimateParameter(label)
        except ValueError:
            self.unrecognized.append((f"Climate Data_{label}", value))
            return False
        self.climate[parameter] = value
        return True

    def record_parameter(self, group: ElementGroup, label: str, value: Value) -> bool:
        """Record a value for the element group if the label is in its vocabulary"""
        vocabulary = vocabulary_for(group.label)
        try:
            parameter = vocabulary(label)
        except ValueError:
            self.unrecognized.append((group.key(label), value))
            return False
        self.groups.setdefault(group, {})[parameter] = value
        return True

    def parameters(self, group: ElementGroup) -> Dict[Parameter, Value]:
        return self.groups.get(group, {})

    def groups_with_prefix(self, prefix: str) -> List[ElementGroup]:
        """Element groups whose key prefix starts with prefix, in first-seen order"""
        return [group for group in self.groups if group.prefix.startswith(prefix)]

    def groups_for_building(self, building: str, label: CategoryLabel) -> List[ElementGroup]:
        return [
            group for group in self.groups_with_prefix(f"{building} {label.value}")
            if group.building == building and group.label == label
        ]

    def log_unrecognized(self, source: str) -> None:
        if self.unrecognized:
            logger.info(
                f"{source}: {len(self.unrecognized)} unrecognized entries ignored",
                extra={'unrecognized_keys': [key for key, _ in self.unrecognized]},
            )
