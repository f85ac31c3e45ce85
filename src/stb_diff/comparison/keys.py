"""Comparison keys: what pairs an element with its counterpart.

``id`` and ``guid`` keys are read off the element. A ``position`` key is
built from the coordinates of the nodes the element references, each rounded
to a fixed number of decimals:

- node elements (``StbNode``): their own coordinates;
- line elements (columns, girders, braces): start and end node, in either order;
- single-node elements (piles, footings): the node shifted by
  ``offset_X``/``offset_Y``, at ``level_top`` or ``level_bottom`` when given;
- surface elements (slabs, walls): the ``StbNodeIdOrder`` vertices, in any order.

An element whose nodes cannot all be resolved has no position key.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Mapping, Optional, Sequence

from stb_diff.models.element import ElementNode, KeyType
from stb_diff.models.geometry import COORDINATE_PRECISION, Point3D

LINE_NODE_ATTRIBUTES = (
    ("id_node_start", "id_node_end"),
    ("id_node_bottom", "id_node_top"),
)
SINGLE_NODE_ATTRIBUTE = "id_node"
NODE_ORDER_TAG = "StbNodeIdOrder"
MIN_POLYGON_VERTICES = 3

NodeMap = Mapping[str, Point3D]
KeyFunction = Callable[[ElementNode], Optional[str]]


def _fixed(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}"
    if text.startswith("-") and not text.strip("-0."):
        return text[1:]  # -0.000
    return text


def node_coord_key(point: Point3D, precision: int = COORDINATE_PRECISION) -> str:
    return ",".join(_fixed(v, precision) for v in (point.x, point.y, point.z))


def line_element_key(start: Point3D, end: Point3D, precision: int = COORDINATE_PRECISION) -> str:
    """Key of a member between two nodes, independent of its direction."""
    return "|".join(sorted((node_coord_key(start, precision), node_coord_key(end, precision))))


def poly_element_key(vertices: Sequence[Point3D], precision: int = COORDINATE_PRECISION) -> str | None:
    """Key of a surface, independent of vertex order. ``None`` below three vertices."""
    if len(vertices) < MIN_POLYGON_VERTICES:
        return None
    return ";".join(sorted(node_coord_key(v, precision) for v in vertices))


def _number(value: str | None, default: float) -> float | None:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return None


def _single_node_key(element: ElementNode, node: Point3D | None, precision: int) -> str | None:
    if node is None:
        return None
    dx = _number(element.get("offset_X"), 0.0)
    dy = _number(element.get("offset_Y"), 0.0)
    level = element.get("level_top")
    if level is None:
        level = element.get("level_bottom")
    z = _number(level, node.z)
    if dx is None or dy is None or z is None:
        return None
    return node_coord_key(Point3D(x=node.x + dx, y=node.y + dy, z=z), precision)


def _vertex_ids(element: ElementNode) -> list[str] | None:
    for child in element.iter_children(NODE_ORDER_TAG):
        return (child.text or "").split() or None
    return None


def position_key(
    element: ElementNode, nodes: NodeMap, precision: int = COORDINATE_PRECISION
) -> str | None:
    """Coordinate key of ``element``, or ``None`` when its nodes are unresolved."""
    if element.element_type == "Node":
        point = nodes.get(element.id) if element.id is not None else None
        return node_coord_key(point, precision) if point is not None else None

    for start_attr, end_attr in LINE_NODE_ATTRIBUTES:
        start_id = element.get(start_attr)
        end_id = element.get(end_attr)
        if start_id is None and end_id is None:
            continue
        start = nodes.get(start_id) if start_id is not None else None
        end = nodes.get(end_id) if end_id is not None else None
        if start is None or end is None:
            return None
        return line_element_key(start, end, precision)

    node_id = element.get(SINGLE_NODE_ATTRIBUTE)
    if node_id is not None:
        return _single_node_key(element, nodes.get(node_id), precision)

    vertex_ids = _vertex_ids(element)
    if vertex_ids is not None:
        vertices = [nodes.get(i) for i in vertex_ids]
        if any(v is None for v in vertices):
            return None
        return poly_element_key(vertices, precision)
    return None


def element_key(
    element: ElementNode,
    key_type: KeyType = KeyType.ID,
    nodes: NodeMap | None = None,
    precision: int = COORDINATE_PRECISION,
) -> str | None:
    if key_type == KeyType.POSITION:
        return position_key(element, nodes or {}, precision)
    return element.identity(key_type)


def key_function(
    key_type: KeyType, nodes: NodeMap | None = None, precision: int = COORDINATE_PRECISION
) -> KeyFunction:
    """``element -> key`` for one document."""
    return partial(element_key, key_type=key_type, nodes=nodes, precision=precision)
