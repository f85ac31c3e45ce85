"""Attribute-level differencing of a matched element pair.

Attribute names are folded to their canonical (2.1.0) form before pairing, so
``position_X`` on one side meets ``offset_X`` on the other. Values are compared
as text after normalization: surrounding whitespace is dropped, numerals are
reduced to one spelling (``"500"`` == ``"500.00"``), and declared value rules
from the version registry apply. Nothing else is coerced.
"""

from __future__ import annotations

import math
import re
from typing import Mapping

from stb_diff.models.results import AttributeComparison
from stb_diff.semantics.versions import get_value_rule, normalize_attribute_name

_NUMERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def normalize_value(value: str | None) -> str | None:
    """Canonical text of an attribute value; ``None`` stays ``None``."""
    if value is None:
        return None
    text = value.strip()
    if not _NUMERAL.match(text):
        return text
    number = float(text)
    if not math.isfinite(number):
        return text
    if number == 0:
        number = 0.0  # drop the sign of -0
    return repr(number)


def normalize_attribute_value(element_type: str, attr_name: str, value: str | None) -> str | None:
    """Apply the declared value rule for this attribute, then :func:`normalize_value`."""
    if value is None:
        return None
    rule = get_value_rule(element_type, attr_name)
    if rule is not None:
        value = rule(value)
    return normalize_value(value)


def canonicalize_attributes(attributes: Mapping[str, str]) -> dict[str, tuple[str, str]]:
    """Map canonical attribute name -> (raw name, raw value).

    If one element carries both an old and a new spelling, the new spelling
    keeps the canonical slot and the old one stays under its raw name.
    """
    out: dict[str, tuple[str, str]] = {}
    for raw, value in attributes.items():
        canonical = normalize_attribute_name(raw)
        existing = out.get(canonical)
        if existing is None:
            out[canonical] = (raw, value)
        elif raw == canonical:
            out[existing[0]] = existing
            out[canonical] = (raw, value)
        else:
            out[raw] = (raw, value)
    return out


def diff_attributes(
    attrs_a: Mapping[str, str],
    attrs_b: Mapping[str, str],
    element_type: str,
) -> list[AttributeComparison]:
    """Compare two attribute maps over the union of canonical names.

    Returns one :class:`AttributeComparison` per canonical attribute, equal or
    not, in A's order followed by names only B has. Pure function.
    """
    canon_a = canonicalize_attributes(attrs_a)
    canon_b = canonicalize_attributes(attrs_b)

    comparisons: list[AttributeComparison] = []
    for name in {**canon_a, **canon_b}:
        raw_a, value_a = canon_a.get(name, (None, None))
        raw_b, value_b = canon_b.get(name, (None, None))
        norm_a = normalize_attribute_value(element_type, name, value_a)
        norm_b = normalize_attribute_value(element_type, name, value_b)
        comparisons.append(
            AttributeComparison(
                normalized_attribute=name,
                attribute_a=raw_a,
                attribute_b=raw_b,
                value_a=value_a,
                value_b=value_b,
                equal=norm_a is not None and norm_a == norm_b,
            )
        )
    return comparisons
