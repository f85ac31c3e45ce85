"""Version semantics registry for ST-Bridge 2.0.2 and 2.1.0.

Static knowledge the classifier consults:
- attributes that exist in only one schema version, per element type
- attribute names that were renamed between versions without changing meaning
- explicit value rules where the two versions spell the same value differently

Everything here is plain lookup data. Covering a new attribute or version is a
table edit; the classifier never changes for it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from stb_diff.semantics.element_names import canonical_element_type

V202 = "2.0.2"
V210 = "2.1.0"
UNKNOWN_VERSION = "unknown"


def _freeze(table: dict[str, dict[str, tuple[str, ...]]]) -> Mapping[str, Mapping[str, tuple[str, ...]]]:
    return MappingProxyType({
        version: MappingProxyType(dict(by_type)) for version, by_type in table.items()
    })


_COLUMN_202 = (
    "condition_bottom",
    "condition_top",
    "joint_top",
    "joint_bottom",
    "kind_joint_top",
    "kind_joint_bottom",
    "joint_id_top",
    "joint_id_bottom",
)

_GIRDER_202 = (
    "condition_start",
    "condition_end",
    "kind_joint_start",
    "kind_joint_end",
    "joint_start",
    "joint_end",
    "joint_id_start",
    "joint_id_end",
    # moved to StbCalGirder in 2.1.0
    "haunch_start",
    "haunch_end",
    "kind_haunch_start",
    "kind_haunch_end",
    "type_haunch_H",
    "type_haunch_V",
)

_STEEL_BEAM_FIGURE_202 = (
    "joint_id_start",
    "joint_id_end",
    "strength_web",
    "strength_flange",
    "offset",
    "level",
    "center_top",
    "center_bottom",
)

_RC_FIGURE_202 = (
    "depth_cover_start_X",
    "depth_cover_end_X",
    "depth_cover_start_Y",
    "depth_cover_end_Y",
    "depth_cover_left",
    "depth_cover_right",
    "depth_cover_top",
    "depth_cover_bottom",
    "kind_corner",
    "interval",
    "isSpiral",
    "center_start_X",
    "center_end_X",
    "center_start_Y",
    "center_end_Y",
    "center_interval",
    "center_top",
    "center_bottom",
)

# version -> element type -> attribute names defined only in that version
VERSION_SPECIFIC_ATTRIBUTES = _freeze({
    V202: {
        "Column": _COLUMN_202,
        "Post": _COLUMN_202,
        "Girder": _GIRDER_202,
        "Beam": _GIRDER_202,
        "Brace": (
            "condition_start",
            "condition_end",
            # replaced by aim_offset_* in 2.1.0
            "offset_start_X",
            "offset_start_Y",
            "offset_start_Z",
            "offset_end_X",
            "offset_end_Y",
            "offset_end_Z",
        ),
        "Slab": ("level", "offset"),
        "SecSteelBeamStraight": _STEEL_BEAM_FIGURE_202,
        "SecSteelBeamTaper": _STEEL_BEAM_FIGURE_202,
        "SecSteelBeamJoint": _STEEL_BEAM_FIGURE_202,
        "SecColumnRect": _RC_FIGURE_202,
        "SecColumnCircle": _RC_FIGURE_202,
    },
    V210: {
        "Story": ("level_name", "kind", "strength_concrete"),
        "Slab": ("kind_structure", "kind_slab", "direction_load", "isFoundation"),
        "Wall": ("kind_structure",),
        "Foundation": ("kind_structure",),
        "Brace": (
            "aim_offset_start_X",
            "aim_offset_start_Y",
            "aim_offset_start_Z",
            "aim_offset_end_X",
            "aim_offset_end_Y",
            "aim_offset_end_Z",
        ),
    },
})

# 2.0.2 name -> 2.1.0 name (opening attributes)
ATTRIBUTE_EQUIVALENTS: Mapping[str, str] = MappingProxyType({
    "position_X": "offset_X",
    "position_Y": "offset_Y",
    "length_X": "width",
    "length_Y": "height",
})

ATTRIBUTE_EQUIVALENTS_REVERSE: Mapping[str, str] = MappingProxyType(
    {new: old for old, new in ATTRIBUTE_EQUIVALENTS.items()}
)


def _check_equivalents(table: Mapping[str, str]) -> None:
    # A target that is also a source would make normalization non-idempotent.
    chained = set(table) & set(table.values())
    if chained:
        raise ValueError(f"Attribute equivalence targets are also sources: {sorted(chained)}")
    if len(set(table.values())) != len(table):
        raise ValueError("Attribute equivalence map is not one-to-one")


_check_equivalents(ATTRIBUTE_EQUIVALENTS)


def _fold_boolean(value: str) -> str:
    lowered = value.strip().lower()
    return lowered if lowered in ("true", "false") else value


# Boolean flags: 2.0.2 writers emit "TRUE"/"FALSE", 2.1.0 requires "true"/"false".
BOOLEAN_ATTRIBUTES = frozenset({
    "isFoundation",
    "isSpiral",
    "isReferenceDirection",
    "isPress",
})

# (element type or "*", canonical attribute) -> value transform
VALUE_RULES: Mapping[tuple[str, str], Callable[[str], str]] = MappingProxyType({
    **{("*", name): _fold_boolean for name in BOOLEAN_ATTRIBUTES},
})


def normalize_version(version: str | None) -> str:
    """Fold a raw version string onto a supported schema version.

    >>> normalize_version("2.0.1")
    '2.0.2'
    >>> normalize_version("2.1")
    '2.1.0'
    """
    if not version:
        return UNKNOWN_VERSION
    raw = str(version).strip()
    if raw.startswith("2.0"):
        return V202
    if raw.startswith("2.1"):
        return V210
    return UNKNOWN_VERSION


def is_cross_version_comparison(version_a: str, version_b: str) -> bool:
    a, b = normalize_version(version_a), normalize_version(version_b)
    return a != b and UNKNOWN_VERSION not in (a, b)


def get_version_specific_attributes(element_type: str, version: str) -> tuple[str, ...]:
    by_type = VERSION_SPECIFIC_ATTRIBUTES.get(normalize_version(version), {})
    return by_type.get(canonical_element_type(element_type), ())


def is_version_specific_attribute(element_type: str, attr_name: str, version: str) -> bool:
    """True if ``attr_name`` is defined only in ``version`` for this element type.

    Both the raw name and its canonical form are checked, so a 2.0.2 spelling
    and its 2.1.0 rename resolve the same way.
    """
    attrs = get_version_specific_attributes(element_type, version)
    if not attrs:
        return False
    return attr_name in attrs or normalize_attribute_name(attr_name) in attrs


def normalize_attribute_name(attr_name: str) -> str:
    """Canonical (2.1.0) attribute name. Idempotent."""
    return ATTRIBUTE_EQUIVALENTS.get(attr_name, attr_name)


def are_attribute_names_equivalent(name_a: str, name_b: str) -> bool:
    if name_a == name_b:
        return True
    return normalize_attribute_name(name_a) == normalize_attribute_name(name_b)


def get_value_rule(element_type: str, attr_name: str) -> Callable[[str], str] | None:
    """Explicit value transform for a canonical attribute, if one is declared."""
    canonical = normalize_attribute_name(attr_name)
    return VALUE_RULES.get((canonical_element_type(element_type), canonical)) or VALUE_RULES.get(
        ("*", canonical)
    )
