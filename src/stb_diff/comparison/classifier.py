"""Version-aware classification of attribute differences.

Every raw difference of a matched pair gets exactly one cause:

1. ``VERSION_SPECIFIC``: present on one side only, and registered as
   exclusive to that side's schema version for the element type;
2. ``ELEMENT_NAME``: the two sides spell the attribute differently but the
   names are declared equivalent and the values agree;
3. ``REAL_DIFF``: anything else.

Version exclusivity is checked before absence is treated as a change;
otherwise every legitimate schema evolution would read as a regression.
``STRUCTURAL`` is never assigned here; it comes from the pre-pass in
:mod:`stb_diff.comparison.restructure`, and attributes the pre-pass reports
are not classified again.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping, Union

from stb_diff.comparison.differ import diff_attributes, normalize_attribute_value
from stb_diff.comparison.restructure import (
    detect_structural_differences,
    flatten_element,
)
from stb_diff.issues import require
from stb_diff.models.element import ElementNode
from stb_diff.models.results import (
    AttributeComparison,
    AttributeDifference,
    DiffType,
    ElementComparison,
)
from stb_diff.semantics.element_names import canonical_element_type
from stb_diff.semantics.versions import (
    V202,
    V210,
    are_attribute_names_equivalent,
    is_version_specific_attribute,
    normalize_version,
)

ElementLike = Union[ElementNode, Mapping[str, str]]


def classify_difference(
    diff: AttributeDifference,
    version_a: str,
    version_b: str,
    element_type: str,
) -> DiffType:
    """Cause of one attribute difference. Total: unclassifiable -> REAL_DIFF."""
    require(diff, "diff", "classify_difference")
    name_a = diff.attribute_a or diff.attribute
    name_b = diff.attribute_b or diff.attribute

    if diff.value_a is not None and diff.value_b is None:
        if is_version_specific_attribute(element_type, name_a, version_a):
            return DiffType.VERSION_SPECIFIC
    if diff.value_b is not None and diff.value_a is None:
        if is_version_specific_attribute(element_type, name_b, version_b):
            return DiffType.VERSION_SPECIFIC

    if (
        diff.value_a is not None
        and diff.value_b is not None
        and diff.attribute_a is not None
        and diff.attribute_b is not None
        and diff.attribute_a != diff.attribute_b
        and are_attribute_names_equivalent(diff.attribute_a, diff.attribute_b)
    ):
        norm_a = normalize_attribute_value(element_type, diff.normalized_attribute, diff.value_a)
        norm_b = normalize_attribute_value(element_type, diff.normalized_attribute, diff.value_b)
        if norm_a == norm_b:
            return DiffType.ELEMENT_NAME

    return DiffType.REAL_DIFF


def _to_difference(comparison: AttributeComparison) -> AttributeDifference:
    return AttributeDifference(
        attribute=comparison.attribute_a or comparison.attribute_b or comparison.normalized_attribute,
        normalized_attribute=comparison.normalized_attribute,
        value_a=comparison.value_a,
        value_b=comparison.value_b,
        attribute_a=comparison.attribute_a,
        attribute_b=comparison.attribute_b,
    )


def _classified(
    diff: AttributeDifference, version_a: str, version_b: str, element_type: str
) -> AttributeDifference:
    diff_type = classify_difference(diff, version_a, version_b, element_type)
    if diff_type == DiffType.VERSION_SPECIFIC:
        version = normalize_version(version_a if diff.value_a is not None else version_b)
        return replace(diff, diff_type=diff_type, is_version_specific=True, version=version)
    return replace(diff, diff_type=diff_type)


def _as_node(element: ElementLike, element_type: str) -> ElementNode:
    if isinstance(element, ElementNode):
        return element
    return ElementNode(tag=f"Stb{element_type}" if element_type else "Element", attributes=dict(element))


def compare_elements_with_version_awareness(
    elem_a: ElementLike,
    elem_b: ElementLike,
    version_a: str = V202,
    version_b: str = V210,
    *,
    element_type: str | None = None,
    structural: bool = True,
) -> ElementComparison:
    """Compare one matched pair and classify every difference.

    Args:
        elem_a: Element from document A, or its bare attribute map.
        elem_b: Element from document B, or its bare attribute map.
        version_a: Schema version of document A.
        version_b: Schema version of document B.
        element_type: Overrides the type taken from ``elem_a``'s tag; needed
            when plain attribute maps are passed.
        structural: Run the nested/flattened pre-pass before classifying.

    Raises:
        ContractViolation: if either element is ``None``.
    """
    require(elem_a, "elem_a", "compare_elements_with_version_awareness")
    require(elem_b, "elem_b", "compare_elements_with_version_awareness")

    if element_type is None and isinstance(elem_a, ElementNode):
        element_type = elem_a.element_type
    element_type = canonical_element_type(element_type or "")

    node_a = _as_node(elem_a, element_type)
    node_b = _as_node(elem_b, element_type)
    if structural:
        flat_a = flatten_element(node_a)
        flat_b = flatten_element(node_b)
        attrs_a, attrs_b = flat_a.attributes, flat_b.attributes
        structural_diffs = detect_structural_differences(flat_a, flat_b, element_type)
    else:
        attrs_a, attrs_b = node_a.attributes, node_b.attributes
        structural_diffs = []
    claimed = {d.normalized_attribute for d in structural_diffs}

    differences: list[AttributeDifference] = []
    version_only: list[AttributeDifference] = []
    name_only: list[AttributeDifference] = []

    for comparison in diff_attributes(attrs_a, attrs_b, element_type):
        if comparison.equal and not comparison.renamed:
            continue
        if comparison.normalized_attribute in claimed:
            continue
        diff = _classified(_to_difference(comparison), version_a, version_b, element_type)
        if diff.diff_type == DiffType.VERSION_SPECIFIC:
            version_only.append(diff)
        elif diff.diff_type == DiffType.ELEMENT_NAME:
            name_only.append(diff)
        else:
            differences.append(diff)

    return ElementComparison(
        element_type=element_type,
        version_a=normalize_version(version_a),
        version_b=normalize_version(version_b),
        differences=tuple(differences),
        version_only_differences=tuple(version_only),
        name_only_differences=tuple(name_only),
        structural_differences=tuple(structural_diffs),
    )


def filter_version_specific_differences(
    comparisons: Iterable[ElementComparison],
) -> list[ElementComparison]:
    """Drop comparisons whose only differences are version-specific."""
    return [c for c in comparisons if not c.is_version_specific_only]
