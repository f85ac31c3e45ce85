"""Structural/reorganization pre-pass.

Two reorganizations are common between schema versions and writers:

- **renamed, role-preserved elements**: a 2.0.2 ``StbPost`` is a 2.1.0
  ``StbColumn`` whose ``kind_column`` says ``POST``; section sub-elements were
  renamed outright. :func:`normalize_roles` folds these so matching always
  runs on role-normalized collections.
- **nested vs. flattened attributes**: the same figure data is held by nested
  child elements in one document and directly on the parent in the other.
  :func:`flatten_element` lifts nested values onto the parent and remembers
  where they came from; :func:`detect_structural_differences` reports the
  representation change when the values agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from stb_diff.comparison.differ import normalize_attribute_value
from stb_diff.issues import require
from stb_diff.models.element import ElementNode, ModelDocument
from stb_diff.models.results import AttributeDifference, DiffType
from stb_diff.semantics.element_names import canonical_element_type, normalize_element_name
from stb_diff.semantics.versions import normalize_attribute_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleRule:
    """Element type ``source_type`` is ``target_type`` with ``discriminator=value``."""

    source_type: str
    target_type: str
    discriminator: str
    value: str


ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule("Post", "Column", "kind_column", "POST"),
)

# Wrapper elements that carry no data of their own; flattening descends through them.
TRANSPARENT_TAGS = frozenset({
    "StbSecSlab_RC_Conventional",
    "StbSecSteelColumn_S",
    "StbSecSteelBeam_S",
})

# element type -> child tags (canonical) whose attributes may be lifted onto it
LIFTABLE_CHILDREN: Mapping[str, frozenset[str]] = MappingProxyType({
    "SecSlab_RC": frozenset({
        "StbSecFigureSlab_RC_Conventional",
        "StbSecSlab_RC_ConventionalStraight",
    }),
    "SecColumn_RC": frozenset({
        "StbSecFigureColumn_RC",
        "StbSecColumnRect",
        "StbSecColumnCircle",
    }),
    "SecBeam_RC": frozenset({
        "StbSecFigureBeam_RC",
        "StbSecBeamStraight",
    }),
    "SecColumn_S": frozenset({
        "StbSecSteelFigureColumn_S",
        "StbSecSteelColumnSame",
    }),
    "SecBeam_S": frozenset({
        "StbSecSteelFigureBeam_S",
        "StbSecSteelBeamStraight",
    }),
})

# Never lifted: identity and ordering attributes of the child itself.
_NOT_LIFTED = frozenset({"id", "guid", "pos", "order"})


@dataclass
class FlattenedElement:
    """An element's attributes with nested figure values lifted onto it.

    ``nested`` maps each lifted attribute to the child tag it came from.
    """

    element: ElementNode
    attributes: dict[str, str]
    nested: dict[str, str] = field(default_factory=dict)

    def is_nested(self, attr_name: str) -> bool:
        return attr_name in self.nested


def flatten_element(element: ElementNode) -> FlattenedElement:
    """Lift attributes of declared nested children onto the element.

    Parent attributes always win. A child tag that occurs more than once at
    one level (e.g. START/END figures) is ambiguous and left nested.
    """
    require(element, "element", "flatten_element")
    attributes = dict(element.attributes)
    nested: dict[str, str] = {}
    liftable = LIFTABLE_CHILDREN.get(element.element_type)
    if liftable:
        _lift(element.children, liftable, attributes, nested)
    return FlattenedElement(element=element, attributes=attributes, nested=nested)


def _lift(
    children: list[ElementNode],
    liftable: frozenset[str],
    attributes: dict[str, str],
    nested: dict[str, str],
) -> None:
    counts: dict[str, int] = {}
    for child in children:
        tag = normalize_element_name(child.tag)
        counts[tag] = counts.get(tag, 0) + 1

    for child in children:
        tag = normalize_element_name(child.tag)
        if tag in TRANSPARENT_TAGS:
            _lift(child.children, liftable, attributes, nested)
            continue
        if tag not in liftable:
            continue
        if counts[tag] > 1:
            logger.debug("%s occurs %d times; left nested", tag, counts[tag])
            continue
        for name, value in child.attributes.items():
            if name in _NOT_LIFTED or name in attributes:
                continue
            attributes[name] = value
            nested[name] = tag
        _lift(child.children, liftable, attributes, nested)


def detect_structural_differences(
    flat_a: FlattenedElement,
    flat_b: FlattenedElement,
    element_type: str | None = None,
) -> list[AttributeDifference]:
    """Attributes held nested on one side and flat on the other, with equal values.

    Value disagreements are left to the per-attribute classifier.
    """
    element_type = element_type or flat_a.element.element_type
    by_canonical_b = {normalize_attribute_name(n): n for n in flat_b.attributes}
    found: list[AttributeDifference] = []

    for name_a, value_a in flat_a.attributes.items():
        canonical = normalize_attribute_name(name_a)
        name_b = by_canonical_b.get(canonical)
        if name_b is None:
            continue
        if flat_a.is_nested(name_a) == flat_b.is_nested(name_b):
            continue
        value_b = flat_b.attributes[name_b]
        norm_a = normalize_attribute_value(element_type, canonical, value_a)
        if norm_a != normalize_attribute_value(element_type, canonical, value_b):
            continue
        found.append(
            AttributeDifference(
                attribute=name_a,
                normalized_attribute=canonical,
                value_a=value_a,
                value_b=value_b,
                attribute_a=name_a,
                attribute_b=name_b,
                diff_type=DiffType.STRUCTURAL,
            )
        )
    return found


def normalize_role(element: ElementNode) -> tuple[ElementNode, str]:
    """Role-normalized element and the element type it belongs under."""
    element_type = element.element_type
    tag = normalize_element_name(element.tag)
    for rule in ROLE_RULES:
        if element_type != rule.source_type:
            continue
        attributes = dict(element.attributes)
        attributes.setdefault(rule.discriminator, rule.value)
        renamed = element.model_copy(
            update={"tag": f"Stb{rule.target_type}", "attributes": attributes}
        )
        return renamed, rule.target_type
    if tag != element.tag:
        return element.model_copy(update={"tag": tag}), canonical_element_type(tag)
    return element, element_type


def normalize_roles(document: ModelDocument) -> ModelDocument:
    """Copy of ``document`` with renamed-but-role-preserved elements folded.

    Elements are moved to the collection of their resolved type, keeping
    document order within each collection. The input is not modified.
    """
    require(document, "document", "normalize_roles")
    collections: dict[str, list[ElementNode]] = {}
    moved = 0
    for element_type, elements in document.elements.items():
        for element in elements:
            normalized, target_type = normalize_role(element)
            if target_type != element_type:
                moved += 1
            collections.setdefault(target_type, []).append(normalized)
    if moved:
        logger.info("Role normalization moved %d element(s) in '%s'", moved, document.name)
    return document.model_copy(update={"elements": collections})
