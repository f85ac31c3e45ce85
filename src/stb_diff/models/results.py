"""Comparison results: matches, attribute differences, per-type and per-model views.

Results are built once per run and only read afterwards. Any change to either
document or to the importance policy produces a new result; nothing here is
updated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from stb_diff.issues import ComparisonIssue
from stb_diff.models.element import ElementNode


class DiffType(str, Enum):
    """Cause assigned to one attribute difference."""

    REAL_DIFF = "real_diff"  # actual value difference
    VERSION_SPECIFIC = "version_specific"  # attribute exists in one schema version only
    ELEMENT_NAME = "element_name"  # renamed attribute, same value
    STRUCTURAL = "structural"  # nested vs flattened representation


@dataclass(frozen=True)
class MatchedPair:
    """Two elements sharing an identity.

    ``type_a``/``type_b`` are the collections each element was found in. They
    differ only for a fallback match (a Girder matched against a Beam entry),
    which the presentation layer shows with a type-mismatch warning.
    """

    element_a: ElementNode
    element_b: ElementNode
    type_a: str
    type_b: str
    key: str

    @property
    def type_mismatch(self) -> bool:
        return self.type_a != self.type_b


@dataclass
class ComparisonResult:
    """Partition of one element type's collections into matched / onlyA / onlyB."""

    element_type: str
    matched: list[MatchedPair] = field(default_factory=list)
    only_a: list[ElementNode] = field(default_factory=list)
    only_b: list[ElementNode] = field(default_factory=list)
    issues: list[ComparisonIssue] = field(default_factory=list)

    @property
    def fallback_matches(self) -> list[MatchedPair]:
        return [m for m in self.matched if m.type_mismatch]


@dataclass(frozen=True)
class AttributeComparison:
    """Raw comparison of one canonical attribute of a matched pair."""

    normalized_attribute: str
    attribute_a: str | None
    attribute_b: str | None
    value_a: str | None
    value_b: str | None
    equal: bool

    @property
    def renamed(self) -> bool:
        """Present on both sides under different raw names."""
        return (
            self.attribute_a is not None
            and self.attribute_b is not None
            and self.attribute_a != self.attribute_b
        )


@dataclass(frozen=True)
class AttributeDifference:
    """One attribute-level difference of a matched pair."""

    attribute: str
    normalized_attribute: str
    value_a: str | None
    value_b: str | None
    is_version_specific: bool = False
    attribute_a: str | None = None
    attribute_b: str | None = None
    diff_type: DiffType = DiffType.REAL_DIFF
    version: str | None = None

    def to_dict(self) -> dict:
        return {
            "attribute": self.attribute,
            "normalized_attribute": self.normalized_attribute,
            "value_a": self.value_a,
            "value_b": self.value_b,
            "is_version_specific": self.is_version_specific,
            "diff_type": self.diff_type.value,
            **({"version": self.version} if self.version else {}),
        }


@dataclass(frozen=True)
class ElementComparison:
    """Version-aware comparison of one matched element pair."""

    element_type: str
    version_a: str
    version_b: str
    differences: tuple[AttributeDifference, ...] = ()
    version_only_differences: tuple[AttributeDifference, ...] = ()
    name_only_differences: tuple[AttributeDifference, ...] = ()
    structural_differences: tuple[AttributeDifference, ...] = ()

    @property
    def is_equal(self) -> bool:
        return not self.differences

    @property
    def has_real_differences(self) -> bool:
        return bool(self.differences)

    @property
    def has_version_differences(self) -> bool:
        return bool(self.version_only_differences)

    @property
    def is_version_specific_only(self) -> bool:
        return not self.differences and bool(self.version_only_differences)

    def all_differences(self) -> tuple[AttributeDifference, ...]:
        return (
            self.differences
            + self.version_only_differences
            + self.name_only_differences
            + self.structural_differences
        )

    def to_dict(self) -> dict:
        return {
            "is_equal": self.is_equal,
            "differences": [d.to_dict() for d in self.differences],
            "version_only_differences": [d.to_dict() for d in self.version_only_differences],
            "name_only_differences": [d.to_dict() for d in self.name_only_differences],
            "structural_differences": [d.to_dict() for d in self.structural_differences],
            "has_real_differences": self.has_real_differences,
            "has_version_differences": self.has_version_differences,
            "is_version_specific_only": self.is_version_specific_only,
        }


@dataclass(frozen=True)
class SectionCheck:
    """One pass/fail check of a section comparison.

    ``applicable`` is False when the data needed for the check was missing or
    malformed; such a check is reported but does not count toward the result.
    """

    category: str
    name: str
    passed: bool
    details: str
    applicable: bool = True
    sub_checks: tuple[SectionCheck, ...] = ()

    def failed_sub_checks(self) -> list[SectionCheck]:
        return [c for c in self.sub_checks if c.applicable and not c.passed]

    def to_dict(self) -> dict:
        data = {
            "category": self.category,
            "name": self.name,
            "passed": self.passed,
            "applicable": self.applicable,
            "details": self.details,
        }
        if self.sub_checks:
            data["sub_checks"] = [c.to_dict() for c in self.sub_checks]
        return data


@dataclass(frozen=True)
class SectionEquivalenceResult:
    """Outcome of comparing two cross-sections."""

    is_equivalent: bool
    checks: tuple[SectionCheck, ...]
    summary: str
    pass_rate: float
    type_a: str | None = None
    type_b: str | None = None
    issues: tuple[ComparisonIssue, ...] = ()

    def failed_checks(self) -> list[SectionCheck]:
        return [c for c in self.checks if c.applicable and not c.passed]

    def to_dict(self) -> dict:
        return {
            "is_equivalent": self.is_equivalent,
            "checks": [c.to_dict() for c in self.checks],
            "summary": self.summary,
            "pass_rate": self.pass_rate,
            "type_a": self.type_a,
            "type_b": self.type_b,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class PairComparison:
    """A matched pair with its attribute and section comparisons."""

    pair: MatchedPair
    comparison: ElementComparison
    section: SectionEquivalenceResult | None = None


@dataclass
class TypeComparison:
    """Everything compared for one element type."""

    element_type: str
    result: ComparisonResult
    pairs: list[PairComparison] = field(default_factory=list)

    @property
    def differences(self) -> list[AttributeDifference]:
        return [d for p in self.pairs for d in p.comparison.differences]

    @property
    def version_only_differences(self) -> list[AttributeDifference]:
        return [d for p in self.pairs for d in p.comparison.version_only_differences]

    @property
    def changed_pairs(self) -> list[PairComparison]:
        return [p for p in self.pairs if p.comparison.has_real_differences]


@dataclass
class ModelComparison:
    """Per-type comparison of two model documents."""

    version_a: str
    version_b: str
    by_type: dict[str, TypeComparison] = field(default_factory=dict)
    issues: list[ComparisonIssue] = field(default_factory=list)

    @property
    def is_cross_version(self) -> bool:
        return self.version_a != self.version_b
