"""Comparison pipeline: pre-pass, matching, differencing, classification, summary."""

from stb_diff.comparison.classifier import (
    classify_difference,
    compare_elements_with_version_awareness,
    filter_version_specific_differences,
)
from stb_diff.comparison.differ import diff_attributes, normalize_value
from stb_diff.comparison.keys import element_key, position_key
from stb_diff.comparison.matcher import match_elements
from stb_diff.comparison.model import compare_models
from stb_diff.comparison.restructure import (
    detect_structural_differences,
    flatten_element,
    normalize_roles,
)
from stb_diff.comparison.summary import (
    generate_comparison_statistics,
    generate_version_difference_summary,
)

__all__ = [
    "classify_difference",
    "compare_elements_with_version_awareness",
    "filter_version_specific_differences",
    "diff_attributes",
    "normalize_value",
    "element_key",
    "position_key",
    "match_elements",
    "compare_models",
    "detect_structural_differences",
    "flatten_element",
    "normalize_roles",
    "generate_comparison_statistics",
    "generate_version_difference_summary",
]
