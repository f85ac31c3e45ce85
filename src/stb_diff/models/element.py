"""Parsed structural elements and model documents.

An :class:`ElementNode` is one element of an already parsed ST-Bridge
document: its tag, identity, attribute map and children. The parsing layer
owns construction; the comparison core only reads. Attribute values are kept
as the text the document carried, so ``get()`` returns ``None`` for an absent
attribute and never conflates it with an empty value.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stb_diff.models.geometry import Point3D
from stb_diff.models.section import SectionData
from stb_diff.semantics.element_names import canonical_element_type
from stb_diff.semantics.versions import normalize_version


class KeyType(str, Enum):
    """What pairs elements across documents.

    ``id`` and ``guid`` read the element itself. ``position`` keys an element
    on the rounded coordinates of the nodes it references.
    """

    ID = "id"
    GUID = "guid"
    POSITION = "position"


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ElementNode(BaseModel):
    """One structural element instance (column, girder, slab, section...)."""

    model_config = ConfigDict(frozen=True)

    tag: str = Field(description="Schema tag, e.g. 'StbColumn'")
    id: str | None = Field(default=None, description="Document-local identity")
    guid: str | None = Field(default=None, description="Cross-document GUID, if present")
    attributes: dict[str, str] = Field(default_factory=dict)
    children: list[ElementNode] = Field(default_factory=list)
    text: str | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_identity(cls, data: Any) -> Any:
        # Parsers that keep id/guid inside the attribute map are accepted as-is.
        if isinstance(data, dict):
            attrs = data.get("attributes") or {}
            for key in ("id", "guid"):
                if data.get(key) is None and attrs.get(key) is not None:
                    data = {**data, key: attrs[key]}
        return data

    @field_validator("attributes", mode="before")
    @classmethod
    def attribute_values_as_text(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k): _as_text(val) for k, val in v.items() if val is not None}
        return v

    @field_validator("id", "guid", mode="before")
    @classmethod
    def identity_as_text(cls, v: Any) -> Any:
        if v is None:
            return None
        text = _as_text(v).strip()
        return text or None

    @property
    def element_type(self) -> str:
        """Tag without the ``Stb`` prefix, after 2.0.2 -> 2.1.0 renames."""
        return canonical_element_type(self.tag)

    def get(self, name: str) -> str | None:
        """Attribute value, or ``None`` when the attribute is absent."""
        return self.attributes.get(name)

    def has(self, name: str) -> bool:
        return name in self.attributes

    def identity(self, key_type: KeyType = KeyType.ID) -> str | None:
        """Document identity (id or guid). Position keys need the node map, see
        :func:`stb_diff.comparison.keys.element_key`."""
        return self.guid if key_type == KeyType.GUID else self.id

    def iter_children(self, tag: str | None = None) -> Iterator[ElementNode]:
        for child in self.children:
            if tag is None or child.tag == tag:
                yield child

    def label(self) -> str:
        """Short human label for messages."""
        name = self.get("name")
        ident = self.id or "?"
        return f"{self.tag}#{ident}" + (f" '{name}'" if name else "")


class ModelDocument(BaseModel):
    """One parsed building model: element collections per type plus sections.

    ``elements`` is keyed by element type (``Column``, ``Girder``...). Keys
    given as tags (``StbColumn``) are folded to types on load.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = Field(default="unknown", description="Raw ST-Bridge version attribute")
    elements: dict[str, list[ElementNode]] = Field(default_factory=dict)
    sections: dict[str, SectionData] = Field(default_factory=dict)
    nodes: dict[str, Point3D] = Field(
        default_factory=dict, description="Node id -> coordinates, in addition to StbNode elements"
    )

    @field_validator("elements", mode="before")
    @classmethod
    def fold_type_keys(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        folded: dict[str, list] = {}
        for key, items in v.items():
            folded.setdefault(canonical_element_type(str(key)), []).extend(items or [])
        return folded

    @property
    def schema_version(self) -> str:
        """Version folded onto a supported schema version ('2.0.2', '2.1.0', 'unknown')."""
        return normalize_version(self.version)

    def elements_of(self, element_type: str) -> list[ElementNode]:
        return self.elements.get(canonical_element_type(element_type), [])

    def element_types(self) -> list[str]:
        return list(self.elements)

    def node_coordinates(self) -> dict[str, Point3D]:
        """Node id -> position, from ``StbNode`` elements (X/Y/Z) and ``nodes``.

        Nodes with a missing or non-numeric coordinate are skipped; explicit
        ``nodes`` entries win over node elements with the same id.
        """
        coordinates: dict[str, Point3D] = {}
        for node in self.elements_of("Node"):
            if node.id is None:
                continue
            try:
                coordinates[node.id] = Point3D(
                    x=float(node.get("X")), y=float(node.get("Y")), z=float(node.get("Z"))
                )
            except (TypeError, ValueError):
                continue
        coordinates.update(self.nodes)
        return coordinates

    def get_section(self, section_id: str | None) -> SectionData | None:
        if section_id is None:
            return None
        return self.sections.get(section_id)

    @classmethod
    def load(cls, path: str | Path) -> ModelDocument:
        """Load a parsed model snapshot from a JSON file."""
        path = Path(path)
        return cls.model_validate_json(path.read_text())

    def save(self, path: str | Path) -> Path:
        """Save the model snapshot to a JSON file. Creates parent dirs if needed."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
        return path
