"""Element tag mapping between ST-Bridge 2.0.2 and 2.1.0.

Several section sub-elements were renamed in 2.1.0 without changing their
meaning (``StbSecColumn_RC_Rect`` became ``StbSecColumnRect``). The parsing
layer and the comparison core both fold tags through this table so a tag from
either version resolves to one canonical (2.1.0) name.

Element *types* (``Column``, ``Girder``) are tags without the ``Stb`` prefix.
"""

from __future__ import annotations

from types import MappingProxyType

V202_TO_V210_MAP = MappingProxyType({
    # RC column sections
    "StbSecColumn_RC_Rect": "StbSecColumnRect",
    "StbSecColumn_RC_Circle": "StbSecColumnCircle",
    # RC beam sections
    "StbSecBeam_RC_Straight": "StbSecBeamStraight",
    "StbSecBeam_RC_Haunch": "StbSecBeamHaunch",
    "StbSecBeam_RC_Taper": "StbSecBeamTaper",
    # S beam sections (children of the figure element)
    "StbSecSteelBeam_S_Straight": "StbSecSteelBeamStraight",
    "StbSecSteelBeam_S_Taper": "StbSecSteelBeamTaper",
    "StbSecSteelBeam_S_Joint": "StbSecSteelBeamJoint",
    # S column sections
    "StbSecSteelColumn_S_Same": "StbSecSteelColumnSame",
    "StbSecSteelColumn_S_NotSame": "StbSecSteelColumnNotSame",
    # RC slab sections (2.1.0 wraps these in StbSecSlab_RC_Conventional)
    "StbSecFigureSlab_RC": "StbSecFigureSlab_RC_Conventional",
    "StbSecSlab_RC_Straight": "StbSecSlab_RC_ConventionalStraight",
    "StbSecSlab_RC_Taper": "StbSecSlab_RC_ConventionalTaper",
    "StbSecSlab_RC_Haunch": "StbSecSlab_RC_ConventionalHaunch",
    # RC bar arrangement
    "StbSecBarColumn_RC_RectSame": "StbSecBarColumnRectSame",
    "StbSecBarColumn_RC_RectNotSame": "StbSecBarColumnRectNotSame",
    "StbSecBarColumn_RC_CircleSame": "StbSecBarColumnCircleSame",
    "StbSecBarColumn_RC_CircleNotSame": "StbSecBarColumnCircleNotSame",
})

V210_TO_V202_MAP = MappingProxyType({v: k for k, v in V202_TO_V210_MAP.items()})

# Types whose members may be recorded under each other's collection.
FALLBACK_TYPES = MappingProxyType({
    "Girder": ("Beam",),
    "Beam": ("Girder",),
})

_TAG_PREFIX = "Stb"


def normalize_element_name(tag: str) -> str:
    """Canonical (2.1.0) tag for a tag from either schema version."""
    return V202_TO_V210_MAP.get(tag, tag)


def are_element_names_equivalent(tag_a: str, tag_b: str) -> bool:
    if tag_a == tag_b:
        return True
    return normalize_element_name(tag_a) == normalize_element_name(tag_b)


def get_v202_name(tag: str) -> str:
    return V210_TO_V202_MAP.get(tag, tag)


def get_element_variants(canonical_tag: str) -> tuple[str, ...]:
    """All known spellings of a canonical tag, 2.0.2 first."""
    old = V210_TO_V202_MAP.get(canonical_tag)
    return (old, canonical_tag) if old else (canonical_tag,)


def canonical_element_type(name: str) -> str:
    """Element type for a tag or type name: ``StbColumn`` -> ``Column``.

    Section tags are normalized first, so ``StbSecColumn_RC_Rect`` and
    ``StbSecColumnRect`` share the type ``SecColumnRect``.
    """
    name = normalize_element_name(name.strip())
    if name.startswith(_TAG_PREFIX) and len(name) > len(_TAG_PREFIX):
        return name[len(_TAG_PREFIX):]
    return name


def get_fallback_types(element_type: str) -> tuple[str, ...]:
    return FALLBACK_TYPES.get(canonical_element_type(element_type), ())
