"""Comparison configuration and importance policies.

Both are pydantic models persisted as JSON, loaded once by the caller and
passed explicitly into every operation. The core keeps no global settings.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stb_diff.models.element import KeyType
from stb_diff.models.geometry import COORDINATE_PRECISION
from stb_diff.semantics.element_names import FALLBACK_TYPES, canonical_element_type
from stb_diff.semantics.section_types import DEFAULT_SECTION_TYPE, SectionType
from stb_diff.semantics.versions import V202, V210


class SectionTolerances(BaseModel):
    """Numeric tolerances for section equivalence.

    Dimensions pass when ``|a - b| <= max(dimension_rel% * max(|a|, |b|), dimension_abs)``.
    The absolute floor keeps rounding of small plate thicknesses (8.0 vs 8.005)
    from failing; the relative part scales with member size.
    """

    model_config = ConfigDict(frozen=True)

    dimension_rel: float = Field(default=1.0, ge=0, description="Dimension tolerance in percent")
    dimension_abs: float = Field(default=0.01, ge=0, description="Dimension tolerance in mm")
    strength: float = Field(default=5.0, ge=0, description="Strength tolerance in percent")
    area: float = Field(default=2.0, ge=0, description="Section area tolerance in percent")
    moment: float = Field(default=3.0, ge=0, description="Second moment of area tolerance in percent")


class ComparisonConfig(BaseModel):
    """Settings for one comparison run."""

    model_config = ConfigDict(frozen=True)

    default_version_a: str = V202
    default_version_b: str = V210
    key_type: KeyType = KeyType.ID
    coordinate_precision: int = Field(
        default=COORDINATE_PRECISION, ge=0, le=9, description="Decimals kept in position keys"
    )
    fallback_types: dict[str, tuple[str, ...]] = Field(
        default_factory=lambda: dict(FALLBACK_TYPES),
        description="Element type -> types consulted when an identity is unmatched",
    )
    element_types: list[str] | None = Field(
        default=None, description="Restrict comparison to these types (None = all present)"
    )
    section_tolerances: SectionTolerances = Field(default_factory=SectionTolerances)
    default_section_type: SectionType = DEFAULT_SECTION_TYPE
    compare_sections: bool = True

    @field_validator("fallback_types", mode="before")
    @classmethod
    def canonical_fallback_keys(cls, v):
        if isinstance(v, dict):
            return {
                canonical_element_type(k): tuple(canonical_element_type(t) for t in types)
                for k, types in v.items()
            }
        return v

    def fallbacks_for(self, element_type: str) -> tuple[str, ...]:
        return self.fallback_types.get(canonical_element_type(element_type), ())

    @classmethod
    def load(cls, path: str | Path) -> ComparisonConfig:
        path = Path(path)
        return cls.model_validate_json(path.read_text())

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
        return path


class ImportanceLevel(str, Enum):
    """Importance of an attribute under an evaluation scope (S2/S4)."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    UNNECESSARY = "unnecessary"
    NOT_APPLICABLE = "notApplicable"


class ImportancePolicy(BaseModel):
    """Named weighting profile: which attributes matter for a scope.

    Keys are ``"<ElementType>/<attribute>"`` (``"Column/rotate"``) or
    ``"<ElementType>"`` for every attribute of a type. Lookups try the
    specific key first, then the type, then fall back to ``default_level``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "S2"
    levels: dict[str, ImportanceLevel] = Field(default_factory=dict)
    default_level: ImportanceLevel = ImportanceLevel.OPTIONAL

    def level_for(self, element_type: str, attribute: str | None = None) -> ImportanceLevel:
        element_type = canonical_element_type(element_type)
        if attribute is not None:
            specific = self.levels.get(f"{element_type}/{attribute}")
            if specific is not None:
                return specific
        return self.levels.get(element_type, self.default_level)

    @classmethod
    def load(cls, path: str | Path) -> ImportancePolicy:
        path = Path(path)
        return cls.model_validate_json(path.read_text())
