"""
Tests for the flat key/value building importer
"""

import pytest

from heatflow.models.enums import ElementParameter
from heatflow.models.schemas import AboveGradeElement, GlazingElement
from heatflow.services.error_types import TabularImportError
from heatflow.services.flat_importer import collect_flat_record, import_flat_building


FLAT_EXPORT = '''\
"Category","Parameter","Value"
"Glazing 1","North Area (Agn)","10"
"Glazing 1","South Area (Ags)","20"
"Glazing 1","Perimeter (Lg)","50"
"Glazing 1","U-Value (Ug)","0.5"
"Glazing 1","SHGC","0.4"
"Element 3","Area (A)","500"
"Element 3","R-Value (R)","20"
"Element 4","Area (A)","0"
"Element 4","R-Value (R)","0"
'''


class TestFlatImporter:

    def test_projects_glazing_and_nonzero_slots(self):
        building = import_flat_building(FLAT_EXPORT, column_id="b1", name="Imported")

        assert building.id == "b1"
        glazing, *opaque = building.elements
        assert isinstance(glazing, GlazingElement)
        assert glazing.north_area == 10
        assert glazing.south_area == 20
        assert glazing.perimeter == 50
        assert glazing.u_value == 0.5
        assert glazing.shgc == 0.4

        assert len(opaque) == 1
        roof = opaque[0]
        assert isinstance(roof, AboveGradeElement)
        assert (roof.id, roof.name, roof.area, roof.r_value) == ("3", "Roof", 500, 20)

    def test_missing_glazing_u_value_defaults(self):
        building = import_flat_building('"Element 1","Area (A)","100"\n"Element 1","R-Value (R)","30"\n')

        assert building.glazing_elements[0].u_value == 0.3
        assert building.find_element("1").name == "Soffit"

    def test_quotes_optional_and_extra_columns_ignored(self):
        text = "Element 5,Area (A),250,ft2,Opaque wall area\nElement 5,R-Value (R),13,,\n"
        building = import_flat_building(text)

        walls = building.find_element("5")
        assert walls.name == "Opaque Walls"
        assert walls.area == 250
        assert walls.r_value == 13

    def test_quoted_values_may_contain_commas(self):
        text = '"Element 5","Area (A)","1,250"\n"Element 5","R-Value (R)","13"\n"Element 5","Note","north, east"\n'
        record = collect_flat_record(text)

        group = record.groups_with_prefix("Element 5")[0]
        assert record.parameters(group)[ElementParameter.area] == "1,250"
        assert ("Element 5_Note", "north, east") in record.unrecognized

    def test_name_rows_override_default_names(self):
        text = (
            '"Glazing 1","Name","South Windows"\n"Glazing 1","North Area (Agn)","10"\n'
            '"Element 3","Name","Cathedral Roof"\n"Element 3","Area (A)","500"\n"Element 3","R-Value (R)","20"\n'
        )
        building = import_flat_building(text, column_id="b1")

        assert building.glazing_elements[0].name == "South Windows"
        assert building.find_element("3").name == "Cathedral Roof"

    def test_unrecognized_entries_are_collected(self):
        record = collect_flat_record(FLAT_EXPORT + '"Element 2","Colour","red"\n"Notes","Author","someone"\n')

        keys = [key for key, _ in record.unrecognized]
        assert "Element 2_Colour" in keys
        assert "Notes_Author" in keys
        assert "Category_Parameter" in keys

    def test_text_values_count_as_zero(self):
        text = '"Element 3","Area (A)","unknown"\n"Element 3","R-Value (R)","20"\n'
        record = collect_flat_record(text)
        building = import_flat_building(text)

        groups = record.groups_with_prefix("Element 3")
        assert record.parameters(groups[0])[ElementParameter.area] == "unknown"
        assert building.find_element("3").area == 0

    @pytest.mark.parametrize("text", [
        "",
        "just,two\n",
        '"Glazing 1","North Area (Agn)",""\n',
    ])
    def test_unusable_text_returns_none(self, text):
        assert import_flat_building(text) is None

    def test_unusable_text_raises_internally(self):
        with pytest.raises(TabularImportError):
            collect_flat_record("one field only\n")

    def test_negative_values_fail_softly(self):
        assert import_flat_building('"Element 3","Area (A)","-5"\n') is None
