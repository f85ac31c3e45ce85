"""Tests for the version semantics registry and element name mapping."""

import pytest

from stb_diff.semantics.element_names import (
    are_element_names_equivalent,
    canonical_element_type,
    get_element_variants,
    get_fallback_types,
    get_v202_name,
    normalize_element_name,
)
from stb_diff.semantics.versions import (
    ATTRIBUTE_EQUIVALENTS,
    V202,
    V210,
    VERSION_SPECIFIC_ATTRIBUTES,
    are_attribute_names_equivalent,
    get_value_rule,
    get_version_specific_attributes,
    is_cross_version_comparison,
    is_version_specific_attribute,
    normalize_attribute_name,
    normalize_version,
)


class TestNormalizeVersion:
    @pytest.mark.parametrize("raw", ["2.0.2", "2.0.1", "2.0", " 2.0.2 "])
    def test_v20_family(self, raw):
        assert normalize_version(raw) == V202

    @pytest.mark.parametrize("raw", ["2.1.0", "2.1", "2.1.1"])
    def test_v21_family(self, raw):
        assert normalize_version(raw) == V210

    @pytest.mark.parametrize("raw", [None, "", "1.4", "garbage"])
    def test_unknown(self, raw):
        assert normalize_version(raw) == "unknown"

    def test_cross_version(self):
        assert is_cross_version_comparison("2.0.2", "2.1.0")
        assert not is_cross_version_comparison("2.1.0", "2.1")
        assert not is_cross_version_comparison("2.0.2", "unknown")


class TestVersionSpecificAttributes:
    def test_column_condition_is_202_only(self):
        assert is_version_specific_attribute("Column", "condition_bottom", "2.0.2")
        assert not is_version_specific_attribute("Column", "condition_bottom", "2.1.0")

    def test_tag_and_type_resolve_alike(self):
        """'StbColumn' and 'Column' look up the same entries."""
        assert get_version_specific_attributes("StbColumn", V202) == get_version_specific_attributes(
            "Column", V202
        )

    def test_raw_version_string_accepted(self):
        assert is_version_specific_attribute("Slab", "kind_slab", "2.1")

    def test_unknown_type_has_none(self):
        assert get_version_specific_attributes("Nonexistent", V202) == ()
        assert not is_version_specific_attribute("Nonexistent", "anything", V202)

    def test_table_is_immutable(self):
        with pytest.raises(TypeError):
            VERSION_SPECIFIC_ATTRIBUTES[V202]["Column"] = ("x",)


class TestAttributeEquivalence:
    def test_renamed_opening_attributes(self):
        assert normalize_attribute_name("position_X") == "offset_X"
        assert normalize_attribute_name("length_Y") == "height"
        assert normalize_attribute_name("offset_X") == "offset_X"

    @pytest.mark.parametrize(
        "name", [*ATTRIBUTE_EQUIVALENTS, *ATTRIBUTE_EQUIVALENTS.values(), "width_X", "condition_bottom"]
    )
    def test_normalize_is_idempotent(self, name):
        once = normalize_attribute_name(name)
        assert normalize_attribute_name(once) == once

    def test_equivalence_is_symmetric(self):
        assert are_attribute_names_equivalent("position_X", "offset_X")
        assert are_attribute_names_equivalent("offset_X", "position_X")
        assert not are_attribute_names_equivalent("position_X", "offset_Y")

    def test_boolean_value_rule(self):
        rule = get_value_rule("Slab", "isFoundation")
        assert rule is not None
        assert rule("TRUE") == "true"
        assert rule("maybe") == "maybe"

    def test_no_rule_for_plain_attribute(self):
        assert get_value_rule("Column", "name") is None


class TestElementNames:
    def test_202_section_tag_renamed(self):
        assert normalize_element_name("StbSecColumn_RC_Rect") == "StbSecColumnRect"
        assert normalize_element_name("StbColumn") == "StbColumn"

    def test_equivalence(self):
        assert are_element_names_equivalent("StbSecBeam_RC_Straight", "StbSecBeamStraight")
        assert not are_element_names_equivalent("StbSecBeamStraight", "StbSecBeamTaper")

    def test_reverse_and_variants(self):
        assert get_v202_name("StbSecColumnRect") == "StbSecColumn_RC_Rect"
        assert get_element_variants("StbSecColumnRect") == ("StbSecColumn_RC_Rect", "StbSecColumnRect")
        assert get_element_variants("StbColumn") == ("StbColumn",)

    def test_canonical_type(self):
        assert canonical_element_type("StbColumn") == "Column"
        assert canonical_element_type("Column") == "Column"
        assert canonical_element_type("StbSecColumn_RC_Rect") == "SecColumnRect"

    def test_fallback_types(self):
        assert get_fallback_types("Girder") == ("Beam",)
        assert get_fallback_types("StbBeam") == ("Girder",)
        assert get_fallback_types("Column") == ()
