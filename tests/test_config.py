"""Tests for comparison configuration and the element/issue models."""

import pytest
from pydantic import ValidationError

from stb_diff.config import ComparisonConfig, SectionTolerances
from stb_diff.issues import ComparisonIssue, IssueCode
from stb_diff.models import ElementNode, KeyType, ModelDocument, Point3D, SectionData


class TestComparisonConfig:
    def test_defaults(self):
        config = ComparisonConfig()
        assert config.key_type == KeyType.ID
        assert config.fallbacks_for("StbGirder") == ("Beam",)
        assert config.section_tolerances.dimension_rel == 1.0
        assert config.section_tolerances.dimension_abs == 0.01

    def test_fallback_keys_folded(self):
        config = ComparisonConfig(fallback_types={"StbColumn": ["StbPost"]})
        assert config.fallbacks_for("Column") == ("Post",)
        assert config.fallbacks_for("Girder") == ()

    def test_roundtrip(self, tmp_path):
        config = ComparisonConfig(key_type=KeyType.GUID, section_tolerances=SectionTolerances(strength=10))
        path = config.save(tmp_path / "cfg" / "config.json")
        loaded = ComparisonConfig.load(path)
        assert loaded == config

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            SectionTolerances(area=-1)


class TestElementNode:
    def test_absent_vs_empty(self):
        node = ElementNode(tag="StbColumn", attributes={"name": ""})
        assert node.get("name") == ""
        assert node.get("rotate") is None
        assert node.has("name") and not node.has("rotate")

    def test_values_as_text(self):
        node = ElementNode(tag="StbSlab", attributes={"isFoundation": True, "depth": 200, "skip": None})
        assert node.attributes == {"isFoundation": "true", "depth": "200"}

    def test_frozen(self):
        node = ElementNode(tag="StbColumn", id="1")
        with pytest.raises(ValidationError):
            node.id = "2"

    def test_label(self):
        node = ElementNode(tag="StbColumn", id="1", attributes={"name": "C1"})
        assert node.label() == "StbColumn#1 'C1'"
        assert node.element_type == "Column"


class TestModelDocument:
    def test_roundtrip(self, tmp_path, model_v202):
        path = model_v202.save(tmp_path / "model.json")
        loaded = ModelDocument.load(path)
        assert loaded == model_v202
        assert loaded.schema_version == "2.0.2"

    def test_section_lookup(self, model_v202):
        assert isinstance(model_v202.get_section("10"), SectionData)
        assert model_v202.get_section(None) is None
        assert model_v202.get_section("404") is None


class TestIssues:
    def test_to_dict(self):
        issue = ComparisonIssue("warning", IssueCode.MISSING_IDENTITY, "Column", "", "no id")
        assert issue.to_dict()["code"] == "missing_identity"


class TestNodeCoordinates:
    def test_node_coordinates(self):
        doc = ModelDocument(
            elements={"StbNode": [
                ElementNode(tag="StbNode", id="1", attributes={"X": "0", "Y": "10.5", "Z": "3000"}),
                ElementNode(tag="StbNode", id="2", attributes={"X": "abc", "Y": "0", "Z": "0"}),
            ]},
            nodes={"9": Point3D(x=1, y=2, z=3)},
        )
        coords = doc.node_coordinates()
        assert coords["1"] == Point3D(x=0, y=10.5, z=3000)
        assert "2" not in coords
        assert coords["9"].z == 3.0

    def test_coordinate_precision_bounds(self):
        assert ComparisonConfig().coordinate_precision == 3
        with pytest.raises(ValidationError):
            ComparisonConfig(coordinate_precision=-1)
