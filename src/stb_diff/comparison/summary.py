"""Aggregation of classified differences into counts.

Pure functions over already built results. Re-running with another
importance policy only changes the weighting, never the matching.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from stb_diff.config import ImportanceLevel, ImportancePolicy
from stb_diff.models.results import ModelComparison, TypeComparison

ComparisonMap = Union[ModelComparison, Mapping[str, TypeComparison]]


def _by_type(comparison_map: ComparisonMap) -> Mapping[str, Any]:
    if isinstance(comparison_map, ModelComparison):
        return comparison_map.by_type
    return comparison_map


def _items(data: Any, name: str) -> list:
    if isinstance(data, Mapping):
        return list(data.get(name) or [])
    return list(getattr(data, name, None) or [])


def _attribute_of(diff: Any) -> str | None:
    if isinstance(diff, Mapping):
        return diff.get("normalized_attribute") or diff.get("attribute")
    return diff.normalized_attribute


def generate_version_difference_summary(
    comparison_map: ComparisonMap,
    *,
    importance: ImportancePolicy | None = None,
) -> dict:
    """Totals and per-type counts of real and version-only differences.

    ``comparison_map`` maps element type to anything exposing
    ``differences`` and ``version_only_differences`` (a
    :class:`TypeComparison`, or a plain dict of lists). With an importance
    policy, real differences are also counted per importance level, and
    those at the ``required`` level are reported as ``critical_differences``.
    """
    total_real = 0
    total_version = 0
    by_element_type: dict[str, dict[str, int]] = {}
    by_importance = {level.value: 0 for level in ImportanceLevel}

    for element_type, data in _by_type(comparison_map).items():
        diffs = _items(data, "differences")
        version_diffs = _items(data, "version_only_differences")
        by_element_type[element_type] = {
            "real_differences": len(diffs),
            "version_differences": len(version_diffs),
        }
        total_real += len(diffs)
        total_version += len(version_diffs)
        if importance is not None:
            for diff in diffs:
                level = importance.level_for(element_type, _attribute_of(diff))
                by_importance[level.value] += 1

    summary: dict[str, Any] = {
        "total_real_differences": total_real,
        "total_version_differences": total_version,
        "by_element_type": by_element_type,
    }
    if importance is not None:
        summary["importance_policy"] = importance.name
        summary["by_importance"] = by_importance
        summary["critical_differences"] = by_importance[ImportanceLevel.REQUIRED.value]
    return summary


def generate_comparison_statistics(comparison: ModelComparison) -> dict:
    """Matched / one-sided counts per element type and in total."""
    by_type: dict[str, dict[str, int]] = {}
    totals = {"matched": 0, "only_a": 0, "only_b": 0, "changed": 0, "section_mismatches": 0}

    for element_type, type_comparison in comparison.by_type.items():
        result = type_comparison.result
        stats = {
            "matched": len(result.matched),
            "only_a": len(result.only_a),
            "only_b": len(result.only_b),
            "fallback_matches": len(result.fallback_matches),
            "changed": len(type_comparison.changed_pairs),
            "section_mismatches": sum(
                1 for p in type_comparison.pairs
                if p.section is not None and not p.section.is_equivalent
            ),
        }
        by_type[element_type] = stats
        for key in totals:
            totals[key] += stats[key]

    return {
        "version_a": comparison.version_a,
        "version_b": comparison.version_b,
        "is_cross_version": comparison.is_cross_version,
        "by_element_type": by_type,
        "totals": totals,
        "issues": len(comparison.issues),
    }
