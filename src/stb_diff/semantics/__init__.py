"""Static schema knowledge shared by the comparison core.

- versions: version-exclusive attributes, renamed attributes, value rules
- element_names: 2.0.2 -> 2.1.0 tag renames, element types, fallback types
- section_types: canonical profile categories and type resolution
"""

from stb_diff.semantics.element_names import (
    are_element_names_equivalent,
    canonical_element_type,
    get_fallback_types,
    normalize_element_name,
)
from stb_diff.semantics.section_types import (
    SectionType,
    normalize_profile_type_token,
    resolve_geometry_profile_type,
)
from stb_diff.semantics.versions import (
    V202,
    V210,
    are_attribute_names_equivalent,
    get_version_specific_attributes,
    is_cross_version_comparison,
    is_version_specific_attribute,
    normalize_attribute_name,
    normalize_version,
)

__all__ = [
    "V202",
    "V210",
    "are_element_names_equivalent",
    "canonical_element_type",
    "get_fallback_types",
    "normalize_element_name",
    "SectionType",
    "normalize_profile_type_token",
    "resolve_geometry_profile_type",
    "are_attribute_names_equivalent",
    "get_version_specific_attributes",
    "is_cross_version_comparison",
    "is_version_specific_attribute",
    "normalize_attribute_name",
    "normalize_version",
]
