"""stb-diff: version-aware comparison of ST-Bridge structural models."""

__version__ = "0.1.0"

from stb_diff.comparison import (
    compare_elements_with_version_awareness,
    compare_models,
    generate_version_difference_summary,
    match_elements,
)
from stb_diff.config import ComparisonConfig, ImportancePolicy
from stb_diff.issues import ComparisonIssue, ContractViolation, IssueCode
from stb_diff.models import ElementNode, KeyType, ModelDocument, SectionData
from stb_diff.sections import evaluate_section_equivalence

__all__ = [
    "__version__",
    "compare_elements_with_version_awareness",
    "compare_models",
    "generate_version_difference_summary",
    "match_elements",
    "ComparisonConfig",
    "ImportancePolicy",
    "ComparisonIssue",
    "ContractViolation",
    "IssueCode",
    "ElementNode",
    "KeyType",
    "ModelDocument",
    "SectionData",
    "evaluate_section_equivalence",
]
