"""Element matching across two document revisions.

Partitions the two collections of one element type into matched pairs,
A-only and B-only elements by comparison key (id, guid or node position, see
:mod:`stb_diff.comparison.keys`). Unmatched keys are looked up in the declared
fallback types before giving up, since authoring tools disagree on whether
some horizontal members are Girders or Beams.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from stb_diff.comparison.keys import KeyFunction, NodeMap, key_function
from stb_diff.issues import ComparisonIssue, IssueCode, require
from stb_diff.models.element import ElementNode, KeyType
from stb_diff.models.geometry import COORDINATE_PRECISION
from stb_diff.models.results import ComparisonResult, MatchedPair
from stb_diff.semantics.element_names import canonical_element_type

logger = logging.getLogger(__name__)

FallbackPools = Mapping[str, Sequence[ElementNode]]


def match_elements(
    elements_a: Sequence[ElementNode],
    elements_b: Sequence[ElementNode],
    element_type: str,
    *,
    key_type: KeyType = KeyType.ID,
    fallback_a: FallbackPools | None = None,
    fallback_b: FallbackPools | None = None,
    nodes_a: NodeMap | None = None,
    nodes_b: NodeMap | None = None,
    precision: int = COORDINATE_PRECISION,
) -> ComparisonResult:
    """Match two element collections of one type by comparison key.

    Args:
        elements_a: Elements of ``element_type`` in document A, in document order.
        elements_b: Elements of ``element_type`` in document B.
        element_type: Element type being compared (``Column``, ``StbGirder``...).
        key_type: What to pair on: id, guid or node position.
        fallback_a: Fallback type -> elements of document A, consulted for
            B elements whose key has no A counterpart. Iterated in
            mapping order; the first candidate found wins.
        fallback_b: Same for document B.
        nodes_a: Node coordinates of document A, used by position keys.
        nodes_b: Node coordinates of document B.
        precision: Decimals kept in position keys.

    Returns:
        ComparisonResult whose matched/only_a/only_b cover every element with
        a key exactly once. Elements without a key are excluded and reported
        as issues.
    """
    require(elements_a, "elements_a", "match_elements")
    require(elements_b, "elements_b", "match_elements")
    element_type = canonical_element_type(element_type)
    result = ComparisonResult(element_type=element_type)

    key_a = key_function(key_type, nodes_a, precision)
    key_b = key_function(key_type, nodes_b, precision)
    index_a = _index(elements_a, element_type, key_a, key_type, "A", result)
    index_b = _index(elements_b, element_type, key_b, key_type, "B", result)
    taken_a: set[int] = set()
    taken_b: set[int] = set()

    for key, elem_a in index_a.items():
        elem_b = index_b.pop(key, None)
        if elem_b is not None:
            result.matched.append(MatchedPair(elem_a, elem_b, element_type, element_type, key))
            continue
        found = _find_fallback(key, fallback_b, key_b, taken_b)
        if found is None:
            result.only_a.append(elem_a)
            continue
        elem_b, type_b, candidates = found
        taken_b.add(id(elem_b))
        result.matched.append(MatchedPair(elem_a, elem_b, element_type, type_b, key))
        result.issues.append(_fallback_issue(element_type, type_b, key, "B", candidates))

    for key, elem_b in index_b.items():
        found = _find_fallback(key, fallback_a, key_a, taken_a)
        if found is None:
            result.only_b.append(elem_b)
            continue
        elem_a, type_a, candidates = found
        taken_a.add(id(elem_a))
        result.matched.append(MatchedPair(elem_a, elem_b, type_a, element_type, key))
        result.issues.append(_fallback_issue(element_type, type_a, key, "A", candidates))

    logger.debug(
        "%s: %d matched, %d only in A, %d only in B",
        element_type, len(result.matched), len(result.only_a), len(result.only_b),
    )
    return result


def _index(
    elements: Sequence[ElementNode],
    element_type: str,
    key_of: KeyFunction,
    key_type: KeyType,
    side: str,
    result: ComparisonResult,
) -> dict[str, ElementNode]:
    """Index elements by key, last write wins.

    Shadowed duplicates are reported as one-sided so the partition stays
    exhaustive; elements without a key are dropped.
    """
    index: dict[str, ElementNode] = {}
    only = result.only_a if side == "A" else result.only_b
    missing = 0

    for element in elements:
        key = key_of(element)
        if key is None:
            missing += 1
            result.issues.append(
                ComparisonIssue(
                    severity="warning",
                    code=IssueCode.MISSING_IDENTITY,
                    element_type=element_type,
                    element_id="",
                    message=(
                        f"{element.tag} in model {side} has no {key_type.value}; "
                        f"excluded from matching"
                    ),
                )
            )
            continue
        previous = index.get(key)
        if previous is not None:
            only.append(previous)
            result.issues.append(
                ComparisonIssue(
                    severity="warning",
                    code=IssueCode.DUPLICATE_IDENTITY,
                    element_type=element_type,
                    element_id=key,
                    message=(
                        f"Duplicate {key_type.value} '{key}' in model {side}; "
                        f"the last occurrence is matched, earlier ones are reported one-sided"
                    ),
                )
            )
        index[key] = element

    if missing:
        logger.warning(
            "%s: %d element(s) in model %s without %s excluded from matching",
            element_type, missing, side, key_type.value,
        )
    return index


def _find_fallback(
    key: str,
    pools: FallbackPools | None,
    key_of: KeyFunction,
    taken: set[int],
) -> tuple[ElementNode, str, int] | None:
    """First fallback element carrying ``key``, its type, and the candidate count."""
    if not pools:
        return None
    first: tuple[ElementNode, str] | None = None
    candidates = 0
    for fallback_type, elements in pools.items():
        for element in elements:
            if id(element) in taken or key_of(element) != key:
                continue
            candidates += 1
            if first is None:
                first = (element, canonical_element_type(fallback_type))
    if first is None:
        return None
    return first[0], first[1], candidates


def _fallback_issue(
    element_type: str, found_type: str, key: str, side: str, candidates: int
) -> ComparisonIssue:
    message = (
        f"{element_type} '{key}' matched a {found_type} in model {side}; "
        f"element types differ"
    )
    if candidates > 1:
        message += f" ({candidates} fallback candidates, first declared one used)"
    logger.warning(message)
    return ComparisonIssue(
        severity="warning",
        code=IssueCode.AMBIGUOUS_FALLBACK_MATCH,
        element_type=element_type,
        element_id=key,
        message=message,
    )
