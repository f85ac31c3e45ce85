"""Cross-section equivalence evaluation.

Compares two extracted section descriptions check by check:

1. Section Type: canonical profile category, or a declared compatible pair
2. Dimensions: per canonical dimension, within the configured tolerance
3. Material: designation match or declared compatibility
4. Strength: nominal strength derived from the designation
5. Properties: section area and second moments of area
6. Composite (SRC/CFT only): embedded steel shape and concrete envelope

A check whose data is missing or malformed on either side is reported as not
applicable and does not count. Every check is symmetric in A and B.
"""

from __future__ import annotations

import logging
import math
import re
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from stb_diff.config import SectionTolerances
from stb_diff.issues import ComparisonIssue, IssueCode
from stb_diff.models.results import SectionCheck, SectionEquivalenceResult
from stb_diff.models.section import SectionData
from stb_diff.semantics.section_types import (
    DEFAULT_SECTION_TYPE,
    SectionType,
    is_composite_type,
    resolve_profile_type_with_source,
)

logger = logging.getLogger(__name__)

# Pairs of distinct canonical types that describe the same member.
# A CFT tube is written as its bare steel tube by some exporters.
SECTION_TYPE_COMPATIBILITY = frozenset({
    frozenset({SectionType.CFT, SectionType.BOX}),
    frozenset({SectionType.CFT, SectionType.PIPE}),
})

# Steel grades that may replace each other (base grade, without B/C suffix).
MATERIAL_COMPATIBILITY = frozenset({
    frozenset({"SS400", "SN400"}),
    frozenset({"SN400", "SN490"}),
    frozenset({"SN490", "SM490"}),
})

# Nominal strength in N/mm2: yield strength for steel, Fc for concrete.
NOMINAL_STRENGTH: Mapping[str, float] = MappingProxyType({
    "SS400": 235,
    "SN400": 235,
    "SN490": 325,
    "SM490": 325,
    "SS540": 400,
    "FC18": 18,
    "FC21": 21,
    "FC24": 24,
    "FC27": 27,
    "FC30": 30,
    "FC33": 33,
    "FC36": 36,
    "FC40": 40,
    "FC45": 45,
    "FC50": 50,
})

_STEEL_GRADE = re.compile(r"^(S[NMS]\d{3})[ABC]?$")
_CONCRETE_GRADE = re.compile(r"^FC(\d+)$")

_H_LIKE = {
    "height": ("A", "H", "height", "overall_depth"),
    "width": ("B", "width", "overall_width", "flange_width"),
    "web_thickness": ("t1", "tw", "web_thickness", "webThickness"),
    "flange_thickness": ("t2", "tf", "flange_thickness", "flangeThickness"),
}

_GENERIC_DIMENSIONS = {
    "width": ("width", "B", "width_X"),
    "height": ("height", "depth", "A", "width_Y"),
    "diameter": ("diameter", "D", "outer_diameter"),
    "thickness": ("t", "thickness", "wall_thickness"),
}

# canonical type -> canonical dimension -> source keys, most specific first
DIMENSION_KEYS: Mapping[SectionType, Mapping[str, tuple[str, ...]]] = MappingProxyType({
    SectionType.H: _H_LIKE,
    SectionType.C: _H_LIKE,
    SectionType.T: _H_LIKE,
    SectionType.BOX: {
        "height": ("A", "H", "height", "outer_height"),
        "width": ("B", "width", "outer_width"),
        "thickness": ("t", "thickness", "wall_thickness"),
    },
    SectionType.PIPE: {
        "diameter": ("D", "diameter", "outer_diameter"),
        "thickness": ("t", "thickness", "wall_thickness"),
    },
    SectionType.L: {
        "height": ("A", "height", "depth"),
        "width": ("B", "width"),
        "thickness": ("t1", "t", "thickness"),
        "thickness_2": ("t2",),
    },
    SectionType.FB: {
        "width": ("B", "width"),
        "thickness": ("t", "thickness"),
    },
    SectionType.RECTANGLE: {
        "width": ("width", "width_X", "B"),
        "height": ("height", "depth", "width_Y", "A"),
    },
    SectionType.CIRCLE: {
        "diameter": ("diameter", "D", "outer_diameter"),
    },
})

PROPERTY_KEYS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "area": ("area", "A_section"),
    "Iy": ("Iy", "moment_y"),
    "Iz": ("Iz", "moment_z"),
})

_PROPERTY_UNITS = {"area": "mm²", "Iy": "mm⁴", "Iz": "mm⁴"}

_SECTION_FIELDS = frozenset({
    "id", "name", "section_type", "type", "profile_type", "section_tag", "sectionType",
    "material", "strength_name", "strength_main", "strength",
    "dimensions", "properties", "steel_shape", "concrete",
})


class _Malformed(Exception):
    """Raised while reading a value that is present but not numeric."""


def _number(value: Any) -> float | None:
    """Numeric value, ``None`` when absent. Raises ``_Malformed`` when unparsable."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise _Malformed(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise _Malformed(value) from None
    if not math.isfinite(number):
        raise _Malformed(value)
    return number


def within_tolerance(a: float, b: float, rel_percent: float, abs_tol: float = 0.0) -> bool:
    """``|a - b| <= max(rel_percent% of max(|a|, |b|), abs_tol)``. Symmetric."""
    return abs(a - b) <= max(rel_percent / 100.0 * max(abs(a), abs(b)), abs_tol)


def _diff_percent(a: float, b: float) -> float:
    scale = max(abs(a), abs(b))
    return abs(a - b) / scale * 100.0 if scale else 0.0


def coerce_section(raw: Any) -> SectionData | None:
    """Accept a :class:`SectionData` or a plain mapping.

    Mappings without a ``dimensions`` block are treated as flat: every key
    that is not a section field becomes a dimension, and known property
    keys become properties.
    """
    if raw is None or isinstance(raw, SectionData):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"Unsupported section description: {type(raw).__name__}")
    data = dict(raw)
    if "dimensions" not in data:
        property_names = {k for keys in PROPERTY_KEYS.values() for k in keys}
        extras = {k: v for k, v in data.items() if k not in _SECTION_FIELDS}
        data = {k: v for k, v in data.items() if k in _SECTION_FIELDS}
        data["dimensions"] = {k: v for k, v in extras.items() if k not in property_names}
        data.setdefault("properties", {k: v for k, v in extras.items() if k in property_names})
    return SectionData.model_validate(data)


def extract_dimensions(section: SectionData, section_type: SectionType | None) -> dict[str, Any]:
    """Raw dimension values keyed by canonical dimension name."""
    table = DIMENSION_KEYS.get(section_type, _GENERIC_DIMENSIONS)
    dims = section.dimensions
    out: dict[str, Any] = {}
    for name, keys in table.items():
        for key in keys:
            if dims.get(key) is not None:
                out[name] = dims[key]
                break
    return out


def material_base_grade(material: str | None) -> str | None:
    """Upper-cased designation with the steel toughness suffix removed (SN490B -> SN490)."""
    if not material:
        return None
    token = str(material).strip().upper()
    if not token:
        return None
    steel = _STEEL_GRADE.match(token)
    return steel.group(1) if steel else token


def nominal_strength(material: str | None) -> float | None:
    """Nominal strength in N/mm2 for a steel or concrete designation."""
    grade = material_base_grade(material)
    if grade is None:
        return None
    if grade in NOMINAL_STRENGTH:
        return float(NOMINAL_STRENGTH[grade])
    concrete = _CONCRETE_GRADE.match(grade)
    return float(concrete.group(1)) if concrete else None


def are_materials_compatible(material_a: str | None, material_b: str | None) -> bool:
    grade_a = material_base_grade(material_a)
    grade_b = material_base_grade(material_b)
    if grade_a is None or grade_b is None:
        return False
    return grade_a == grade_b or frozenset({grade_a, grade_b}) in MATERIAL_COMPATIBILITY


def are_section_types_compatible(type_a: SectionType | None, type_b: SectionType | None) -> bool:
    if type_a is None or type_b is None:
        return False
    return type_a == type_b or frozenset({type_a, type_b}) in SECTION_TYPE_COMPATIBILITY


class _Evaluation:
    """Per-call state: resolved types, tolerances, and collected issues."""

    def __init__(
        self,
        section_a: SectionData,
        section_b: SectionData,
        element_type: str,
        tolerances: SectionTolerances,
        default_type: SectionType,
    ):
        self.a = section_a
        self.b = section_b
        self.element_type = element_type
        self.tol = tolerances
        self.default_type = default_type
        self.issues: list[ComparisonIssue] = []
        self.type_a = self._resolve(section_a, "A")
        self.type_b = self._resolve(section_b, "B")

    def _section_id(self) -> str:
        return self.a.id or self.b.id or ""

    def _issue(self, code: IssueCode, message: str, severity: str = "warning") -> None:
        logger.warning("%s section %s: %s", self.element_type, self._section_id() or "?", message)
        self.issues.append(
            ComparisonIssue(
                severity=severity,
                code=code,
                element_type=self.element_type,
                element_id=self._section_id(),
                message=message,
            )
        )

    def _resolve(self, section: SectionData, side: str) -> SectionType | None:
        resolved, source = resolve_profile_type_with_source(section, default_type=self.default_type)
        if source == "default":
            self._issue(
                IssueCode.UNRESOLVABLE_PROFILE_TYPE,
                f"Profile type of section {side} could not be resolved; "
                f"using default {self.default_type.value}",
                severity="info",
            )
        return resolved

    def check_section_type(self) -> SectionCheck:
        a, b = self.type_a, self.type_b
        if a is not None and a == b:
            return SectionCheck("Section Type", "Type Match", True, f"Both: {a.value}")
        compatible = are_section_types_compatible(a, b)
        label_a = a.value if a else "?"
        label_b = b.value if b else "?"
        return SectionCheck(
            "Section Type",
            "Type Compatibility",
            compatible,
            f"Compatible: {label_a} ≈ {label_b}" if compatible else f"Incompatible: {label_a} ≠ {label_b}",
        )

    def check_dimensions(self) -> SectionCheck:
        dims_a = extract_dimensions(self.a, self.type_a)
        dims_b = extract_dimensions(self.b, self.type_b)
        common = [name for name in dims_a if name in dims_b]
        if not common:
            return SectionCheck(
                "Dimensions", "Dimension Data", False,
                "No common dimensions to compare", applicable=False,
            )

        sub_checks: list[SectionCheck] = []
        for name in common:
            try:
                value_a = _number(dims_a[name])
                value_b = _number(dims_b[name])
            except _Malformed:
                self._issue(
                    IssueCode.MALFORMED_SECTION_DATA,
                    f"Dimension '{name}' is not numeric ({dims_a[name]!r} vs {dims_b[name]!r})",
                )
                sub_checks.append(SectionCheck(
                    "Dimensions", name, False,
                    f"Non-numeric value: {dims_a[name]!r} vs {dims_b[name]!r}", applicable=False,
                ))
                continue
            if value_a is None or value_b is None:
                sub_checks.append(SectionCheck("Dimensions", name, False, "Missing value", applicable=False))
                continue
            passed = within_tolerance(value_a, value_b, self.tol.dimension_rel, self.tol.dimension_abs)
            sub_checks.append(SectionCheck(
                "Dimensions", name, passed,
                f"{value_a:.1f} vs {value_b:.1f} ({_diff_percent(value_a, value_b):.2f}%)",
            ))

        return _rollup(
            "Dimensions", "Dimension Comparison", sub_checks,
            passed_details=f"within {self.tol.dimension_rel}% tolerance",
            failed_details=f"exceed {self.tol.dimension_rel}% tolerance",
        )

    def check_material(self) -> SectionCheck:
        grade_a = material_base_grade(self.a.material)
        grade_b = material_base_grade(self.b.material)
        if grade_a is None or grade_b is None:
            return SectionCheck(
                "Material", "Material Data", False,
                "Material data not available", applicable=False,
            )
        mat_a = str(self.a.material).strip().upper()
        mat_b = str(self.b.material).strip().upper()
        if mat_a == mat_b:
            return SectionCheck("Material", "Material Match", True, f"Both: {mat_a}")
        compatible = are_materials_compatible(mat_a, mat_b)
        return SectionCheck(
            "Material",
            "Material Compatibility",
            compatible,
            f"Compatible: {mat_a} ≈ {mat_b}" if compatible else f"Incompatible: {mat_a} ≠ {mat_b}",
        )

    def check_strength(self) -> SectionCheck:
        strength_a = nominal_strength(self.a.material)
        strength_b = nominal_strength(self.b.material)
        if strength_a is None or strength_b is None:
            return SectionCheck(
                "Strength", "Strength Data", False,
                "Strength data not available", applicable=False,
            )
        passed = within_tolerance(strength_a, strength_b, self.tol.strength)
        return SectionCheck(
            "Strength",
            "Nominal Strength",
            passed,
            f"{strength_a:g} vs {strength_b:g} N/mm² ({_diff_percent(strength_a, strength_b):.1f}%)",
        )

    def check_properties(self) -> SectionCheck:
        tolerances = {"area": self.tol.area, "Iy": self.tol.moment, "Iz": self.tol.moment}
        sub_checks: list[SectionCheck] = []
        for name, keys in PROPERTY_KEYS.items():
            raw_a = _first(self.a.properties, keys)
            raw_b = _first(self.b.properties, keys)
            if raw_a is None or raw_b is None:
                continue
            try:
                value_a = _number(raw_a)
                value_b = _number(raw_b)
            except _Malformed:
                self._issue(
                    IssueCode.MALFORMED_SECTION_DATA,
                    f"Property '{name}' is not numeric ({raw_a!r} vs {raw_b!r})",
                )
                sub_checks.append(SectionCheck(
                    "Properties", name, False,
                    f"Non-numeric value: {raw_a!r} vs {raw_b!r}", applicable=False,
                ))
                continue
            if value_a is None or value_b is None:
                continue
            passed = within_tolerance(value_a, value_b, tolerances[name])
            sub_checks.append(SectionCheck(
                "Properties", name, passed,
                f"{value_a:.1f} vs {value_b:.1f} {_PROPERTY_UNITS[name]} "
                f"({_diff_percent(value_a, value_b):.1f}%)",
            ))
        if not sub_checks:
            return SectionCheck(
                "Properties", "Property Data", False,
                "Property data not available", applicable=False,
            )
        return _rollup(
            "Properties", "Section Properties", sub_checks,
            passed_details="within tolerance", failed_details="exceed tolerance",
        )

    def check_composite(self) -> SectionCheck:
        sub_checks = [
            self._composite_part("Steel Shape", self.a.steel_shape, self.b.steel_shape),
            self._composite_part("Concrete Envelope", self.a.concrete, self.b.concrete),
        ]
        return _rollup(
            "Composite", "Composite Parts", sub_checks,
            passed_details="equivalent", failed_details="differ",
        )

    def _composite_part(
        self, name: str, part_a: SectionData | None, part_b: SectionData | None
    ) -> SectionCheck:
        if part_a is None or part_b is None:
            return SectionCheck("Composite", name, False, f"{name} data not available", applicable=False)
        result = evaluate_section_equivalence(
            part_a, part_b, self.element_type,
            tolerances=self.tol, default_type=self.default_type,
        )
        self.issues.extend(result.issues)
        if result.is_equivalent:
            return SectionCheck("Composite", name, True, result.summary)
        failed = ", ".join(f"{c.category}: {c.details}" for c in result.failed_checks())
        return SectionCheck("Composite", name, False, f"{result.summary} ({failed})")

    def run(self) -> list[SectionCheck]:
        checks = [
            self.check_section_type(),
            self.check_dimensions(),
            self.check_material(),
            self.check_strength(),
            self.check_properties(),
        ]
        if is_composite_type(self.type_a) or is_composite_type(self.type_b):
            checks.append(self.check_composite())
        return checks


def _first(values: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if values.get(key) is not None:
            return values[key]
    return None


def _rollup(
    category: str,
    name: str,
    sub_checks: list[SectionCheck],
    *,
    passed_details: str,
    failed_details: str,
) -> SectionCheck:
    applicable = [c for c in sub_checks if c.applicable]
    if not applicable:
        return SectionCheck(
            category, name, False, "No comparable data",
            applicable=False, sub_checks=tuple(sub_checks),
        )
    failed = [c.name for c in applicable if not c.passed]
    if failed:
        details = f"{', '.join(failed)}: {failed_details}"
    else:
        details = f"All {len(applicable)} {passed_details}"
    return SectionCheck(category, name, not failed, details, sub_checks=tuple(sub_checks))


def _missing(summary: str, issues: tuple[ComparisonIssue, ...] = ()) -> SectionEquivalenceResult:
    return SectionEquivalenceResult(
        is_equivalent=False, checks=(), summary=summary, pass_rate=0.0, issues=issues
    )


def evaluate_section_equivalence(
    section_a: SectionData | Mapping[str, Any] | None,
    section_b: SectionData | Mapping[str, Any] | None,
    element_type: str,
    *,
    tolerances: SectionTolerances | None = None,
    default_type: SectionType = DEFAULT_SECTION_TYPE,
) -> SectionEquivalenceResult:
    """Decide whether two cross-sections are structurally equivalent.

    Args:
        section_a: Section of model A (``SectionData`` or a plain mapping).
        section_b: Section of model B.
        element_type: Element type the section belongs to, for reporting.
        tolerances: Numeric tolerances; defaults to :class:`SectionTolerances`.
        default_type: Category used when a profile type cannot be resolved.

    Returns:
        SectionEquivalenceResult. Missing input gives a non-equivalent result
        with summary ``"Missing section data"``; never raises for bad data.
    """
    if section_a is None or section_b is None:
        return _missing("Missing section data")
    try:
        data_a = coerce_section(section_a)
        data_b = coerce_section(section_b)
    except (PydanticValidationError, TypeError) as e:
        logger.warning("%s: malformed section data: %s", element_type, e)
        issue = ComparisonIssue(
            severity="warning",
            code=IssueCode.MALFORMED_SECTION_DATA,
            element_type=element_type,
            element_id="",
            message=f"Malformed section data: {e}",
        )
        return _missing("Malformed section data", (issue,))

    evaluation = _Evaluation(data_a, data_b, element_type, tolerances or SectionTolerances(), default_type)
    checks = evaluation.run()

    applicable = [c for c in checks if c.applicable]
    passed = sum(1 for c in applicable if c.passed)
    total = len(applicable)
    pass_rate = round(passed / total * 100, 1) if total else 0.0

    logger.debug("%s section %s: %d / %d checks passed", element_type, data_a.id or "?", passed, total)
    return SectionEquivalenceResult(
        is_equivalent=total > 0 and passed == total,
        checks=tuple(checks),
        summary=f"{passed} / {total} checks passed",
        pass_rate=pass_rate,
        type_a=evaluation.type_a.value if evaluation.type_a else None,
        type_b=evaluation.type_b.value if evaluation.type_b else None,
        issues=tuple(evaluation.issues),
    )
