"""Data models: parsed elements, sections, and comparison results."""

from stb_diff.models.section import SectionData
from stb_diff.models.element import ElementNode, KeyType, ModelDocument
from stb_diff.models.geometry import Point3D
from stb_diff.models.results import (
    AttributeComparison,
    AttributeDifference,
    ComparisonResult,
    DiffType,
    ElementComparison,
    MatchedPair,
    ModelComparison,
    PairComparison,
    SectionCheck,
    SectionEquivalenceResult,
    TypeComparison,
)

__all__ = [
    "SectionData",
    "ElementNode",
    "KeyType",
    "ModelDocument",
    "Point3D",
    "AttributeComparison",
    "AttributeDifference",
    "ComparisonResult",
    "DiffType",
    "ElementComparison",
    "MatchedPair",
    "ModelComparison",
    "PairComparison",
    "SectionCheck",
    "SectionEquivalenceResult",
    "TypeComparison",
]
