"""
Entity - a node of the live scene graph.

Entities refer to their parent by id only; the EntityStore resolves ids to
live objects. Type-specific state lives in `payload`, editor-only flags in
`metadata`.
"""

from __future__ import annotations

import copy
import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np


class EntityType(str, enum.Enum):
    MESH = "Mesh"
    LIGHT = "Light"
    CAMERA = "Camera"
    TRANSFORM_NODE = "TransformNode"


# Metadata keys
DO_NOT_EXPORT = "doNotExport"
IS_PICKABLE = "isPickable"
TOUCHED_PROPERTIES = "touchedProperties"

VECTOR_FIELDS = frozenset({
    "position",
    "rotation",
    "scaling",
    "direction",
    "diffuse",
    "specular",
    "target",
})


def _vec(*values: float) -> np.ndarray:
    return np.array(values, dtype=np.float64)


def _transform_defaults() -> Dict[str, Any]:
    return {
        "position": _vec(0.0, 0.0, 0.0),
        "rotation": _vec(0.0, 0.0, 0.0),
        "scaling": _vec(1.0, 1.0, 1.0),
    }


def default_payload(entity_type: EntityType) -> Dict[str, Any]:
    """Fresh payload with every field the given type carries."""
    if entity_type is EntityType.TRANSFORM_NODE:
        return _transform_defaults()

    if entity_type is EntityType.MESH:
        payload = _transform_defaults()
        payload.update({
            "is_visible": True,
            # Always True while editing; the user's value is kept in metadata.
            "is_pickable": True,
            "receive_shadows": False,
            "geometry_id": None,
            "material_id": None,
        })
        return payload

    if entity_type is EntityType.LIGHT:
        return {
            "kind": "point",
            "position": _vec(0.0, 0.0, 0.0),
            "direction": _vec(0.0, -1.0, 0.0),
            "diffuse": _vec(1.0, 1.0, 1.0),
            "specular": _vec(1.0, 1.0, 1.0),
            "intensity": 1.0,
            "enabled": True,
        }

    if entity_type is EntityType.CAMERA:
        return {
            "kind": "free",
            "position": _vec(0.0, 0.0, -10.0),
            "target": _vec(0.0, 0.0, 0.0),
            "fov": 0.8,
            "min_z": 1.0,
            "max_z": 10000.0,
        }

    raise ValueError(f"Unknown entity type: {entity_type!r}")


def random_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class Entity:
    """
    Scene graph node.

    eq=False: entities are compared by identity; payloads may hold numpy
    arrays which have no boolean equality.
    """

    name: str
    type: EntityType
    id: str = ""
    parent_id: str | None = None
    payload: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = EntityType(self.type)
        merged = default_payload(self.type)
        for key, value in self.payload.items():
            if key in VECTOR_FIELDS and value is not None:
                value = np.asarray(value, dtype=np.float64)
            merged[key] = value
        self.payload = merged
        touched = self.metadata.get(TOUCHED_PROPERTIES)
        if touched is not None and not isinstance(touched, set):
            self.metadata[TOUCHED_PROPERTIES] = set(touched)

    @property
    def do_not_export(self) -> bool:
        return bool(self.metadata.get(DO_NOT_EXPORT, False))

    @property
    def touched_properties(self) -> set[str]:
        touched = self.metadata.get(TOUCHED_PROPERTIES)
        if touched is None:
            touched = set()
            self.metadata[TOUCHED_PROPERTIES] = touched
        return touched

    def clone(self, name: str | None = None, new_id: str | None = None) -> "Entity":
        """
        Independent copy of this entity.

        Arrays and metadata are deep-copied so the clone never aliases the
        original's state.
        """
        return Entity(
            name=self.name if name is None else name,
            type=self.type,
            id=new_id if new_id is not None else random_id(),
            parent_id=self.parent_id,
            payload=copy.deepcopy(self.payload),
            metadata=copy.deepcopy(self.metadata),
        )

    def __repr__(self) -> str:
        return f"Entity({self.type.value} {self.name!r} id={self.id!r} parent={self.parent_id!r})"
