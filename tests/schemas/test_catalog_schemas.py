"""
Unit tests for catalog schemas.

Tests cover decoding of printers, materials and troubleshooting guides,
the derived display properties, and query filter serialization.
"""

import pytest

from printer_buddy.schemas.catalog import (
    DifficultyLevel,
    Material,
    MaterialFilters,
    MaterialType,
    MotionSystem,
    Printer,
    PrinterFilters,
    PrinterSummary,
    PrinterType,
    PrintIssue,
    PrintIssueSummary,
    TroubleshootingFilters,
)


# =============================================================================
# Test Data
# =============================================================================

MINIMAL_PRINTER = {"id": 4, "name": "Mars 4", "manufacturer": "Elegoo", "price": 199}


# =============================================================================
# Printers
# =============================================================================

class TestPrinterSummary:
    """Tests for PrinterSummary.from_dict."""

    def test_minimal_fields_use_defaults(self):
        printer = PrinterSummary.from_dict(MINIMAL_PRINTER)

        assert printer.price == 199.0
        assert printer.printer_type == "fdm"
        assert printer.skill_levels == ()
        assert printer.enclosure is False
        assert printer.motion_system is None

    @pytest.mark.parametrize("missing", ["id", "name", "manufacturer", "price"])
    def test_required_fields(self, missing):
        data = dict(MINIMAL_PRINTER)
        del data[missing]
        with pytest.raises(KeyError):
            PrinterSummary.from_dict(data)

    def test_bool_is_not_an_id(self):
        with pytest.raises(TypeError):
            PrinterSummary.from_dict(dict(MINIMAL_PRINTER, id=True))

    def test_integral_float_id_accepted(self):
        assert PrinterSummary.from_dict(dict(MINIMAL_PRINTER, id=4.0)).id == 4

    def test_fractional_id_rejected(self):
        with pytest.raises(ValueError):
            PrinterSummary.from_dict(dict(MINIMAL_PRINTER, id=4.5))

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            PrinterSummary.from_dict(["not", "a", "printer"])

    def test_build_volume_description(self):
        printer = PrinterSummary.from_dict(
            dict(MINIMAL_PRINTER, build_volume_x=153, build_volume_y=77, build_volume_z=175)
        )
        assert printer.build_volume_description == "153 × 77 × 175 mm"

    @pytest.mark.parametrize("motion,expected", [
        (None, "N/A"),
        ("corexy", "CoreXY"),
        ("bedslinger", "Bed Slinger"),
    ])
    def test_motion_system_display(self, motion, expected):
        printer = PrinterSummary.from_dict(dict(MINIMAL_PRINTER, motion_system=motion))
        assert printer.motion_system_display == expected

    def test_lists_are_tuples(self):
        printer = PrinterSummary.from_dict(dict(MINIMAL_PRINTER, use_cases=["art", "hobby"]))
        assert printer.use_cases == ("art", "hobby")

    def test_detail_fields(self):
        printer = Printer.from_dict(dict(
            MINIMAL_PRINTER,
            printer_type="resin",
            layer_resolution=0.05,
            connectivity=["USB"],
            product_url="https://example.com/mars4",
        ))
        assert printer.printer_type == PrinterType.RESIN.value
        assert printer.layer_resolution == 0.05
        assert printer.connectivity == ("USB",)
        assert printer.materials == ()


# =============================================================================
# Materials
# =============================================================================

class TestMaterial:
    """Tests for Material decoding."""

    @pytest.fixture
    def material_data(self):
        return {
            "id": 1,
            "name": "PLA",
            "full_name": "Polylactic Acid",
            "material_type": "fdm",
            "difficulty_level": "beginner",
            "print_temp_min": 190,
            "print_temp_max": 220,
            "bed_temp_min": 50,
            "bed_temp_max": 60,
            "pros": ["Easy to print"],
            "properties": {"strength": "Medium", "flexibility": 2},
            "compatible_printers": [{"id": 1, "name": "A1", "manufacturer": "Bambu Lab"}],
        }

    def test_temperatures(self, material_data):
        material = Material.from_dict(material_data)
        assert material.print_temperature_range == "190–220°C"
        assert material.bed_temperature_range == "50–60°C"

    def test_missing_temperature_gives_none(self, material_data):
        del material_data["bed_temp_max"]
        assert Material.from_dict(material_data).bed_temperature_range is None

    def test_properties_stringified(self, material_data):
        material = Material.from_dict(material_data)
        assert material.properties == {"strength": "Medium", "flexibility": "2"}

    def test_compatible_printers(self, material_data):
        material = Material.from_dict(material_data)
        assert material.compatible_printers[0].manufacturer == "Bambu Lab"

    def test_bad_properties_rejected(self, material_data):
        material_data["properties"] = ["strong"]
        with pytest.raises(TypeError):
            Material.from_dict(material_data)


# =============================================================================
# Troubleshooting
# =============================================================================

class TestPrintIssue:
    """Tests for troubleshooting guides."""

    @pytest.fixture
    def issue_data(self):
        return {
            "id": 2,
            "name": "Warping",
            "description": "Corners lift off the bed",
            "printer_type": "fdm",
            "difficulty_level": "intermediate",
            "symptoms": ["Lifted corners"],
        }

    def test_symptoms_preview_single(self, issue_data):
        assert PrintIssueSummary.from_dict(issue_data).symptoms_preview == "Lifted corners"

    def test_symptoms_preview_empty(self, issue_data):
        issue_data["symptoms"] = []
        assert PrintIssueSummary.from_dict(issue_data).symptoms_preview == ""

    def test_solutions_in_order(self, issue_data):
        issue_data["solutions"] = [
            {"step": 1, "title": "Clean bed", "description": "IPA wipe"},
            {"step": 2, "title": "Use brim", "description": "5mm brim", "tip": "Or a raft"},
        ]
        issue = PrintIssue.from_dict(issue_data)
        assert [s.step for s in issue.solutions] == [1, 2]
        assert issue.solutions[1].tip == "Or a raft"

    def test_solution_missing_title_rejected(self, issue_data):
        issue_data["solutions"] = [{"step": 1, "description": "IPA wipe"}]
        with pytest.raises(KeyError):
            PrintIssue.from_dict(issue_data)


# =============================================================================
# Filters
# =============================================================================

class TestFilters:
    """Tests for query parameter serialization."""

    def test_empty_printer_filters(self):
        assert PrinterFilters().to_params() == []

    def test_printer_filters_order_and_bools(self):
        filters = PrinterFilters(
            price_min=100,
            skill_level="beginner",
            motion_system=MotionSystem.COREXY.value,
            has_enclosure=False,
            has_multi_color=True,
        )
        assert filters.to_params() == [
            ("price_min", "100"),
            ("skill_level", "beginner"),
            ("motion_system", "corexy"),
            ("has_enclosure", "false"),
            ("has_multi_color", "true"),
        ]

    def test_material_filters(self):
        assert MaterialFilters().is_empty
        filters = MaterialFilters(difficulty_level=DifficultyLevel.ADVANCED)
        assert not filters.is_empty
        assert filters.to_params() == [("difficulty_level", "advanced")]

    def test_blank_search_not_sent(self):
        filters = TroubleshootingFilters(printer_type=MaterialType.RESIN, search="   ")
        assert not filters.has_search
        assert filters.to_params() == [("printer_type", "resin")]

    def test_display_names(self):
        assert MaterialType.FDM.display_name
        assert DifficultyLevel.BEGINNER.display_name == "Beginner"
