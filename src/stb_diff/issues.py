"""Data-quality issues and contract violations.

Data problems never abort a comparison: the affected element or check is
degraded and an issue is attached to the result for display. Only a missing
required input at an operation's entry point raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ContractViolation(ValueError):
    """A required input was ``None`` at an operation's entry point."""


class IssueCode(str, Enum):
    MISSING_IDENTITY = "missing_identity"
    DUPLICATE_IDENTITY = "duplicate_identity"
    AMBIGUOUS_FALLBACK_MATCH = "ambiguous_fallback_match"
    UNRESOLVABLE_PROFILE_TYPE = "unresolvable_profile_type"
    MALFORMED_SECTION_DATA = "malformed_section_data"
    MISSING_SECTION = "missing_section"


@dataclass
class ComparisonIssue:
    """A single non-fatal issue found while comparing."""

    severity: str  # "warning" | "info"
    code: IssueCode
    element_type: str
    element_id: str
    message: str

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "code": self.code.value,
            "element_type": self.element_type,
            "element_id": self.element_id,
            "message": self.message,
        }


def require(value: Any, name: str, operation: str) -> Any:
    """Return ``value``, raising :class:`ContractViolation` if it is ``None``."""
    if value is None:
        raise ContractViolation(f"{operation}: '{name}' is required")
    return value
