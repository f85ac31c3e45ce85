"""Cross-section equivalence evaluation."""

from stb_diff.sections.equivalence import (
    coerce_section,
    evaluate_section_equivalence,
    nominal_strength,
    within_tolerance,
)

__all__ = [
    "coerce_section",
    "evaluate_section_equivalence",
    "nominal_strength",
    "within_tolerance",
]
