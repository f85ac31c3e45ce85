"""Whole-model comparison: pre-pass, matching, classification, sections.

Runs every element type of two documents through the pipeline and collects
the per-type results into one :class:`ModelComparison`. Element types are
processed in document order (A's types first, then types only B has).
"""

from __future__ import annotations

import logging

from stb_diff.comparison.classifier import compare_elements_with_version_awareness
from stb_diff.comparison.keys import KeyFunction, key_function
from stb_diff.comparison.matcher import match_elements
from stb_diff.comparison.restructure import normalize_roles
from stb_diff.config import ComparisonConfig
from stb_diff.issues import ComparisonIssue, IssueCode, require
from stb_diff.models.element import ElementNode, KeyType, ModelDocument
from stb_diff.models.results import (
    MatchedPair,
    ModelComparison,
    PairComparison,
    SectionEquivalenceResult,
    TypeComparison,
)
from stb_diff.sections.equivalence import evaluate_section_equivalence
from stb_diff.semantics.element_names import canonical_element_type
from stb_diff.semantics.versions import UNKNOWN_VERSION

logger = logging.getLogger(__name__)

SECTION_REFERENCE = "id_section"


def _resolve_version(document: ModelDocument, default: str) -> str:
    version = document.schema_version
    if version == UNKNOWN_VERSION:
        logger.warning(
            "Model '%s' has unrecognized version %r; assuming %s",
            document.name, document.version, default,
        )
        return default
    return version


def _element_types(doc_a: ModelDocument, doc_b: ModelDocument, config: ComparisonConfig) -> list[str]:
    if config.element_types is not None:
        return [canonical_element_type(t) for t in config.element_types]
    types = list(doc_a.element_types())
    types.extend(t for t in doc_b.element_types() if t not in types)
    return types


def _fallback_pool(
    own: ModelDocument,
    other: ModelDocument,
    fallback_type: str,
    own_key: KeyFunction,
    other_key: KeyFunction,
    consumed: set[int],
) -> list[ElementNode]:
    """Elements of ``fallback_type`` in ``own`` that its own run cannot match."""
    other_keys = {other_key(e) for e in other.elements_of(fallback_type)}
    pool = []
    for element in own.elements_of(fallback_type):
        key = own_key(element)
        if id(element) not in consumed and key is not None and key not in other_keys:
            pool.append(element)
    return pool


def _compare_section(
    pair: MatchedPair,
    doc_a: ModelDocument,
    doc_b: ModelDocument,
    element_type: str,
    config: ComparisonConfig,
    issues: list[ComparisonIssue],
) -> SectionEquivalenceResult | None:
    ref_a = pair.element_a.get(SECTION_REFERENCE)
    ref_b = pair.element_b.get(SECTION_REFERENCE)
    if ref_a is None and ref_b is None:
        return None

    section_a = doc_a.get_section(ref_a)
    section_b = doc_b.get_section(ref_b)
    for side, ref, section in (("A", ref_a, section_a), ("B", ref_b, section_b)):
        if ref is not None and section is None:
            message = f"{element_type} '{pair.key}': section '{ref}' not found in model {side}"
            logger.warning(message)
            issues.append(
                ComparisonIssue(
                    severity="warning",
                    code=IssueCode.MISSING_SECTION,
                    element_type=element_type,
                    element_id=pair.key,
                    message=message,
                )
            )
    if section_a is None or section_b is None:
        return None

    result = evaluate_section_equivalence(
        section_a,
        section_b,
        element_type,
        tolerances=config.section_tolerances,
        default_type=config.default_section_type,
    )
    issues.extend(result.issues)
    return result


def compare_models(
    doc_a: ModelDocument,
    doc_b: ModelDocument,
    *,
    config: ComparisonConfig | None = None,
) -> ModelComparison:
    """Compare two parsed model documents.

    Args:
        doc_a: Model A (usually the older revision).
        doc_b: Model B.
        config: Comparison settings; defaults to :class:`ComparisonConfig`.

    Returns:
        ModelComparison with one TypeComparison per element type. Elements
        matched across types by a fallback (Girder/Beam) are reported in the
        run that matched them and excluded from their own type's run.

    Raises:
        ContractViolation: if either document is ``None``.
    """
    require(doc_a, "doc_a", "compare_models")
    require(doc_b, "doc_b", "compare_models")
    config = config or ComparisonConfig()

    version_a = _resolve_version(doc_a, config.default_version_a)
    version_b = _resolve_version(doc_b, config.default_version_b)
    logger.info("Comparing '%s' (%s) with '%s' (%s)", doc_a.name, version_a, doc_b.name, version_b)

    norm_a = normalize_roles(doc_a)
    norm_b = normalize_roles(doc_b)
    comparison = ModelComparison(version_a=version_a, version_b=version_b)

    consumed_a: set[int] = set()
    consumed_b: set[int] = set()
    processed: set[str] = set()
    key_type = config.key_type
    nodes_a = norm_a.node_coordinates() if key_type == KeyType.POSITION else None
    nodes_b = norm_b.node_coordinates() if key_type == KeyType.POSITION else None
    key_a = key_function(key_type, nodes_a, config.coordinate_precision)
    key_b = key_function(key_type, nodes_b, config.coordinate_precision)

    for element_type in _element_types(norm_a, norm_b, config):
        fallback_types = [t for t in config.fallbacks_for(element_type) if t not in processed]
        pool_a = {t: _fallback_pool(norm_a, norm_b, t, key_a, key_b, consumed_a) for t in fallback_types}
        pool_b = {t: _fallback_pool(norm_b, norm_a, t, key_b, key_a, consumed_b) for t in fallback_types}

        result = match_elements(
            [e for e in norm_a.elements_of(element_type) if id(e) not in consumed_a],
            [e for e in norm_b.elements_of(element_type) if id(e) not in consumed_b],
            element_type,
            key_type=key_type,
            fallback_a=pool_a,
            fallback_b=pool_b,
            nodes_a=nodes_a,
            nodes_b=nodes_b,
            precision=config.coordinate_precision,
        )
        processed.add(element_type)

        type_comparison = TypeComparison(element_type=element_type, result=result)
        section_issues: list[ComparisonIssue] = []
        for pair in result.matched:
            if pair.type_a != element_type:
                consumed_a.add(id(pair.element_a))
            if pair.type_b != element_type:
                consumed_b.add(id(pair.element_b))
            element_comparison = compare_elements_with_version_awareness(
                pair.element_a,
                pair.element_b,
                version_a,
                version_b,
                element_type=element_type,
            )
            section = None
            if config.compare_sections:
                section = _compare_section(pair, norm_a, norm_b, element_type, config, section_issues)
            type_comparison.pairs.append(PairComparison(pair, element_comparison, section))

        comparison.by_type[element_type] = type_comparison
        comparison.issues.extend(result.issues)
        comparison.issues.extend(section_issues)
        logger.debug(
            "%s: %d pair(s), %d with real differences",
            element_type, len(type_comparison.pairs), len(type_comparison.changed_pairs),
        )

    logger.info(
        "Compared %d element type(s), %d issue(s)", len(comparison.by_type), len(comparison.issues)
    )
    return comparison
