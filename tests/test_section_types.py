"""Tests for section profile type resolution."""

import pytest

from stb_diff.models import SectionData
from stb_diff.semantics.section_types import (
    SectionType,
    infer_section_type_from_dimensions,
    is_composite_type,
    is_steel_type,
    normalize_profile_type_token,
    resolve_geometry_profile_type,
    resolve_profile_type_with_source,
    to_canonical_type,
)


class TestTokens:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("h", "H"),
            ("I-BEAM", "H"),
            ("channel", "C"),
            (" square-tube ", "BOX"),
            ("Round", "CIRCLE"),
            ("StbSecColumn_SRC", "SRC"),
            (SectionType.PIPE, "PIPE"),
        ],
    )
    def test_aliases_fold(self, raw, expected):
        assert normalize_profile_type_token(raw) == expected

    def test_unknown_token_is_kept(self):
        assert normalize_profile_type_token("zeta") == "ZETA"
        assert to_canonical_type("zeta") is None

    def test_empty_token(self):
        assert normalize_profile_type_token("  ") is None
        assert normalize_profile_type_token(None) is None

    def test_designation_prefix(self):
        assert to_canonical_type("H-400x200x8x13") == SectionType.H


class TestInference:
    def test_pipe_from_diameter_and_wall(self):
        assert infer_section_type_from_dimensions({"D": 216.3, "t": 8.2}) == SectionType.PIPE

    def test_circle_from_diameter(self):
        assert infer_section_type_from_dimensions({"D": 800}) == SectionType.CIRCLE

    def test_box_from_width_height_thickness(self):
        dims = {"width": 300, "height": 300, "thickness": 12}
        assert infer_section_type_from_dimensions(dims) == SectionType.BOX

    def test_h_from_flanges(self):
        dims = {"overall_depth": 400, "overall_width": 200, "web_thickness": 8, "flange_thickness": 13}
        assert infer_section_type_from_dimensions(dims) == SectionType.H

    def test_rectangle_from_rc_widths(self):
        assert infer_section_type_from_dimensions({"width_X": 600, "width_Y": 600}) == SectionType.RECTANGLE

    def test_nothing_recognizable(self):
        assert infer_section_type_from_dimensions({"foo": 1}) is None
        assert infer_section_type_from_dimensions(None) is None


class TestResolutionChain:
    def test_explicit_wins(self):
        section = SectionData(section_type="BOX", dimensions={"profile_hint": "H"})
        assert resolve_profile_type_with_source(section) == (SectionType.BOX, "explicit")

    def test_profile_hint(self):
        section = SectionData(dimensions={"profile_hint": "H", "D": 300})
        assert resolve_profile_type_with_source(section) == (SectionType.H, "profile_hint")

    def test_legacy_section_tag(self):
        section = SectionData(section_tag="StbSecColumn_CFT")
        assert resolve_profile_type_with_source(section) == (SectionType.CFT, "legacy")

    def test_steel_shape_type(self):
        section = SectionData(steel_shape=SectionData(section_type="H"))
        assert resolve_geometry_profile_type(section) == SectionType.H

    def test_dimension_inference(self):
        section = SectionData(dimensions={"D": 165.2, "t": 5})
        assert resolve_profile_type_with_source(section) == (SectionType.PIPE, "dimensions")

    def test_inference_can_be_disabled(self):
        section = SectionData(dimensions={"D": 165.2, "t": 5})
        resolved = resolve_geometry_profile_type(section, infer_from_dimensions=False)
        assert resolved == SectionType.RECTANGLE

    def test_default(self):
        assert resolve_profile_type_with_source(SectionData()) == (SectionType.RECTANGLE, "default")
        assert resolve_geometry_profile_type(SectionData(), default_type="CIRCLE") == SectionType.CIRCLE

    def test_plain_mapping(self):
        assert resolve_geometry_profile_type({"type": "pipe"}) == SectionType.PIPE

    def test_categories(self):
        assert is_steel_type("H")
        assert not is_steel_type("RECTANGLE")
        assert is_composite_type("SRC")
        assert not is_composite_type(None)
