"""Cross-section profile type resolution.

One physical profile reaches us through different attribute sets depending on
schema version and section sub-type: an explicit ``section_type``, a
``profile_hint`` carried in the resolved dimensions, a legacy tag such as
``StbSecBeam_S``, or nothing but a dimension signature. The geometry layer and
the section comparison both resolve through :func:`resolve_geometry_profile_type`
so they always agree on the category.

Priority chain:
1. explicit type field (``section_type`` / ``type``)
2. ``dimensions["profile_hint"]``
3. legacy type fields (``profile_type``, section tag, steel shape type)
4. dimension-signature inference
5. the declared default (``RECTANGLE``)
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class SectionType(str, Enum):
    """Canonical section profile categories."""

    H = "H"
    BOX = "BOX"
    PIPE = "PIPE"
    C = "C"
    L = "L"
    T = "T"
    FB = "FB"
    RECTANGLE = "RECTANGLE"
    CIRCLE = "CIRCLE"
    CFT = "CFT"
    SRC = "SRC"


CANONICAL_TYPES = frozenset(t.value for t in SectionType)

STEEL_TYPES = frozenset({
    SectionType.H, SectionType.BOX, SectionType.PIPE, SectionType.C,
    SectionType.L, SectionType.T, SectionType.FB, SectionType.CFT, SectionType.SRC,
})

COMPOSITE_TYPES = frozenset({SectionType.CFT, SectionType.SRC})

# spelling variant -> canonical token
ALIAS_MAP: Mapping[str, str] = MappingProxyType({
    # H shapes
    "H-SECTION": "H",
    "I": "H",
    "IBEAM": "H",
    "I-BEAM": "H",
    "WIDE-FLANGE": "H",
    "WIDE_FLANGE": "H",
    "CROSS_H": "H",
    "CROSS-H": "H",
    "CROSS": "H",
    "CRUCIFORM": "H",
    "+": "H",
    # square / rectangular tubes
    "BOX-SECTION": "BOX",
    "SQUARE-SECTION": "BOX",
    "SQUARE-TUBE": "BOX",
    "RECTANGULAR-TUBE": "BOX",
    # round tubes
    "PIPE-SECTION": "PIPE",
    "ROUND-SECTION": "PIPE",
    "CIRCULAR-TUBE": "PIPE",
    "P": "PIPE",
    # channels
    "CHANNEL": "C",
    "U": "C",
    "U-SHAPE": "C",
    "C-CHANNEL": "C",
    # tees
    "T-SHAPE": "T",
    "TSHAPE": "T",
    "TEE": "T",
    # flat bars
    "FLATBAR": "FB",
    "FLAT-BAR": "FB",
    "FLAT": "FB",
    # solid rectangles
    "RECT": "RECTANGLE",
    "RC-SECTION": "RECTANGLE",
    "SQUARE": "RECTANGLE",
    "RECTANGULAR": "RECTANGLE",
    # solid circles
    "ROUND": "CIRCLE",
    "ROUNDBAR": "CIRCLE",
    "ROUND-BAR": "CIRCLE",
    "CIRCULAR": "CIRCLE",
    # section tags (legacy type fields)
    "STBSECCOLUMN_S": "H",
    "STBSECCOLUMN_RC": "RECTANGLE",
    "STBSECCOLUMN_SRC": "SRC",
    "STBSECCOLUMN_CFT": "CFT",
    "STBSECBEAM_S": "H",
    "STBSECBEAM_RC": "RECTANGLE",
    "STBSECBEAM_SRC": "SRC",
    "STBSECGIRDER_S": "H",
    "STBSECGIRDER_RC": "RECTANGLE",
    "STBSECGIRDER_SRC": "SRC",
    "STBSECBRACE_S": "H",
    "STBSECPILE_S": "PIPE",
    "STBSECPILE_RC": "CIRCLE",
    "STBSECFOUNDATION_RC": "RECTANGLE",
})

DEFAULT_SECTION_TYPE = SectionType.RECTANGLE

_DIAMETER_KEYS = ("outer_diameter", "diameter", "D", "d", "D_axial")
_WALL_KEYS = ("wall_thickness", "t", "thickness")


def normalize_profile_type_token(raw: Any) -> str | None:
    """Upper-case a raw type token and fold known aliases.

    Unknown tokens come back upper-cased, not rejected; callers decide.
    """
    if raw is None:
        return None
    if isinstance(raw, Enum):
        raw = raw.value
    token = str(raw).strip().upper()
    if not token:
        return None
    if token in CANONICAL_TYPES:
        return token
    return ALIAS_MAP.get(token, token)


def to_canonical_type(raw: Any) -> SectionType | None:
    """Resolve a raw token to a canonical :class:`SectionType`, or ``None``."""
    token = normalize_profile_type_token(raw)
    if not token or token == "UNKNOWN":
        return None
    if token in CANONICAL_TYPES:
        return SectionType(token)
    # "H-400x200" style designations
    for candidate in CANONICAL_TYPES:
        if token.startswith(candidate + "-") or token.startswith(candidate + "_"):
            return SectionType(candidate)
    return None


def _has(dims: Mapping[str, Any], *keys: str) -> bool:
    return any(_present(dims.get(k)) for k in keys)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return value != 0


def infer_section_type_from_dimensions(dimensions: Mapping[str, Any] | None) -> SectionType | None:
    """Guess the profile from which dimension names are present."""
    if not isinstance(dimensions, Mapping):
        return None
    d = dimensions

    if _has(d, *_DIAMETER_KEYS):
        return SectionType.PIPE if _has(d, *_WALL_KEYS) else SectionType.CIRCLE

    if _has(d, "outer_height") and _has(d, "outer_width") and _has(d, "wall_thickness"):
        return SectionType.BOX

    if _has(d, "width") and _has(d, "height") and _has(d, "thickness", "wall_thickness"):
        return SectionType.BOX

    if (_has(d, "overall_depth") and _has(d, "overall_width")
            and _has(d, "web_thickness") and _has(d, "flange_thickness")):
        return SectionType.H

    if (_has(d, "overall_depth") and _has(d, "flange_width")
            and _has(d, "web_thickness") and _has(d, "flange_thickness")):
        return SectionType.C

    if (_has(d, "depth") and _has(d, "width") and _has(d, "thickness")
            and not _has(d, "overall_depth", "web_thickness")):
        return SectionType.L

    if _has(d, "radius") and not _has(d, "thickness", "wall_thickness"):
        return SectionType.CIRCLE

    if (_has(d, "width") and _has(d, "height")
            and not _has(d, "thickness", "wall_thickness", "web_thickness", "flange_thickness")):
        return SectionType.RECTANGLE

    if _has(d, "width_X") and _has(d, "width_Y"):
        return SectionType.RECTANGLE

    return None


def _field(section: Any, *names: str) -> Any:
    for name in names:
        if isinstance(section, Mapping):
            value = section.get(name)
        else:
            value = getattr(section, name, None)
        if value is not None:
            return value
    return None


def resolve_profile_type_with_source(
    section: Any,
    *,
    default_type: SectionType | str | None = DEFAULT_SECTION_TYPE,
    infer_from_dimensions: bool = True,
) -> tuple[SectionType | None, str]:
    """Resolve the profile type and report which rule produced it.

    ``section`` is a :class:`~stb_diff.models.section.SectionData` or a plain
    mapping with the same field names. The source is one of ``"explicit"``,
    ``"profile_hint"``, ``"legacy"``, ``"dimensions"``, ``"default"``.
    """
    if section is None:
        return to_canonical_type(default_type), "default"

    dimensions = _field(section, "dimensions") or {}
    steel_shape = _field(section, "steel_shape")

    chain = (
        ("explicit", _field(section, "section_type", "type")),
        ("profile_hint", dimensions.get("profile_hint") if isinstance(dimensions, Mapping) else None),
        ("legacy", _field(section, "profile_type")),
        ("legacy", _field(section, "section_tag", "sectionType")),
        ("legacy", _field(steel_shape, "section_type", "type") if steel_shape is not None else None),
    )
    for source, candidate in chain:
        resolved = to_canonical_type(candidate)
        if resolved is not None:
            return resolved, source

    if infer_from_dimensions:
        inferred = infer_section_type_from_dimensions(dimensions or (
            section if isinstance(section, Mapping) else None
        ))
        if inferred is not None:
            return inferred, "dimensions"

    return to_canonical_type(default_type), "default"


def resolve_geometry_profile_type(
    section: Any,
    *,
    default_type: SectionType | str | None = DEFAULT_SECTION_TYPE,
    infer_from_dimensions: bool = True,
) -> SectionType | None:
    """Canonical profile type of a section description (see module docstring)."""
    resolved, _ = resolve_profile_type_with_source(
        section, default_type=default_type, infer_from_dimensions=infer_from_dimensions
    )
    return resolved


def is_steel_type(section_type: Any) -> bool:
    return to_canonical_type(section_type) in STEEL_TYPES


def is_composite_type(section_type: Any) -> bool:
    return to_canonical_type(section_type) in COMPOSITE_TYPES
