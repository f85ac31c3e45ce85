"""Cross-section descriptions and section comparison results.

A :class:`SectionData` is what the section extractor hands over: whichever
type fields the source document carried, the material/strength designation,
the resolved profile dimensions, and, for composite sections, the embedded
steel shape and the concrete envelope as nested descriptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SectionData(BaseModel):
    """An extracted cross-section (type, material, dimensions, sub-figures)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    name: str | None = None
    section_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("section_type", "type"),
        description="Explicit profile category, e.g. 'H', 'RECTANGLE'",
    )
    profile_type: str | None = Field(default=None, description="Legacy profile type field")
    section_tag: str | None = Field(
        default=None,
        validation_alias=AliasChoices("section_tag", "sectionType"),
        description="Section element tag, e.g. 'StbSecColumn_SRC'",
    )
    material: str | None = Field(
        default=None,
        validation_alias=AliasChoices("material", "strength_name", "strength_main", "strength"),
        description="Material / strength designation, e.g. 'SN490B', 'FC24'",
    )
    dimensions: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Section properties, e.g. area, Iy, Iz"
    )
    steel_shape: SectionData | None = Field(
        default=None, description="Embedded steel shape of an SRC/CFT section"
    )
    concrete: SectionData | None = Field(
        default=None, description="Concrete envelope or fill of an SRC/CFT section"
    )
