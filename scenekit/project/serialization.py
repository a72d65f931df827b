"""
Entity and texture documents.

One codec per entity type, looked up through CODECS by the entity's type
tag. Documents are flat JSON objects:

{
    "id": "...",
    "name": "...",
    "type": "Mesh",
    "parentId": "..." | null,
    <payload fields>,
    "metadata": {...}
}
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict

import numpy as np

from scenekit.errors import EntityDocumentError
from scenekit.scene.entity import (
    TOUCHED_PROPERTIES,
    VECTOR_FIELDS,
    Entity,
    EntityType,
)
from scenekit.scene.texture import Texture

_RESERVED_KEYS = frozenset({"id", "name", "type", "parentId", "metadata"})

# Runtime attachments a renderer may put on a mesh; never written to disk
MESH_RUNTIME_FIELDS = frozenset({"vertex_data", "index_data", "material", "textures"})


def numpy_encoder(obj):
    """Convert numpy types to plain Python types for JSON."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def validate_serializable(obj, path: str = ""):
    """
    Check that obj only holds JSON-serializable types.

    Allowed: dict, list, tuple, set, str, int, float, bool, None, numpy types.
    Raises TypeError with the path of the offending value.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return
    if isinstance(obj, (np.floating, np.integer, np.bool_)):
        return
    if isinstance(obj, dict):
        for k, v in obj.items():
            validate_serializable(v, f"{path}.{k}" if path else str(k))
        return
    if isinstance(obj, (list, tuple, set, frozenset, np.ndarray)):
        for i, v in enumerate(obj):
            validate_serializable(v, f"{path}[{i}]")
        return
    raise TypeError(f"Non-serializable type {type(obj).__name__} at path: {path or 'root'}")


def dumps(data: Any) -> str:
    """Project JSON text: tab-indented, UTF-8 friendly."""
    return json.dumps(data, indent="\t", ensure_ascii=False, default=numpy_encoder)


def _metadata_to_data(metadata: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(metadata)
    touched = result.get(TOUCHED_PROPERTIES)
    if touched is not None:
        result[TOUCHED_PROPERTIES] = sorted(touched)
    return result


def _metadata_from_data(data: Any, document: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise EntityDocumentError(document, "'metadata' must be an object")
    result = dict(data)
    touched = result.get(TOUCHED_PROPERTIES)
    if touched is not None:
        result[TOUCHED_PROPERTIES] = set(touched)
    return result


class EntityCodec:
    """Full serialization of one entity type."""

    def __init__(self, entity_type: EntityType):
        self.entity_type = entity_type

    def payload_to_data(self, entity: Entity) -> Dict[str, Any]:
        return dict(entity.payload)

    def serialize(self, entity: Entity) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": entity.id,
            "name": entity.name,
            "type": entity.type.value,
            "parentId": entity.parent_id,
        }
        for key, value in self.payload_to_data(entity).items():
            data[key] = value
        data["metadata"] = _metadata_to_data(entity.metadata)
        return data

    def deserialize(self, data: Any, document: str = "<memory>") -> Entity:
        """
        Build a root entity from its document.

        The parent id is not applied: read it with `parent_id_of()` and link
        once every entity of the project exists.
        """
        if not isinstance(data, dict):
            raise EntityDocumentError(document, "entity document must be an object")

        type_tag = data.get("type", self.entity_type.value)
        if type_tag != self.entity_type.value:
            raise EntityDocumentError(
                document, f"expected type '{self.entity_type.value}', got '{type_tag}'"
            )

        entity_id = data.get("id")
        name = data.get("name")
        if not isinstance(entity_id, str) or not entity_id:
            raise EntityDocumentError(document, "missing 'id'")
        if not isinstance(name, str):
            raise EntityDocumentError(document, "missing 'name'")

        payload = {k: v for k, v in data.items() if k not in _RESERVED_KEYS}
        for key in VECTOR_FIELDS.intersection(payload):
            value = payload[key]
            if value is None:
                continue
            try:
                payload[key] = np.asarray(value, dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise EntityDocumentError(document, f"field '{key}' is not a vector") from e

        return Entity(
            name=name,
            type=self.entity_type,
            id=entity_id,
            parent_id=None,
            payload=payload,
            metadata=_metadata_from_data(data.get("metadata"), document),
        )

    @staticmethod
    def parent_id_of(data: Dict[str, Any]) -> str | None:
        parent_id = data.get("parentId")
        if isinstance(parent_id, str) and parent_id:
            return parent_id
        return None


class MeshCodec(EntityCodec):
    """
    Shallow mesh serialization: geometry and material are written as
    references, buffers and texture objects are left out.
    """

    def __init__(self):
        super().__init__(EntityType.MESH)

    def payload_to_data(self, entity: Entity) -> Dict[str, Any]:
        return {k: v for k, v in entity.payload.items() if k not in MESH_RUNTIME_FIELDS}


CODECS: Dict[EntityType, EntityCodec] = {
    EntityType.MESH: MeshCodec(),
    EntityType.LIGHT: EntityCodec(EntityType.LIGHT),
    EntityType.CAMERA: EntityCodec(EntityType.CAMERA),
    EntityType.TRANSFORM_NODE: EntityCodec(EntityType.TRANSFORM_NODE),
}


def entity_to_data(entity: Entity) -> Dict[str, Any]:
    """Plain JSON-ready snapshot of an entity (numpy arrays become lists)."""
    return json.loads(json.dumps(CODECS[entity.type].serialize(entity), default=numpy_encoder))


# --- textures ---


def texture_to_data(texture: Texture) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": texture.id,
        "name": texture.name,
        "url": texture.url,
    }
    data.update(texture.payload)
    data["metadata"] = dict(texture.metadata)
    return data


def texture_from_data(data: Any, root_dir: str | None = None, document: str = "<memory>") -> Texture:
    """
    Build texture from its document.

    root_dir – project directory; a relative url is resolved against it.
    """
    if not isinstance(data, dict):
        raise EntityDocumentError(document, "texture document must be an object")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise EntityDocumentError(document, "missing 'name'")

    texture_id = data.get("id") or ""
    if not isinstance(texture_id, str):
        raise EntityDocumentError(document, "'id' must be a string")

    url = data.get("url") or name
    if root_dir is not None and not os.path.isabs(url):
        url = os.path.normpath(os.path.join(root_dir, url))

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise EntityDocumentError(document, "'metadata' must be an object")

    payload = {k: v for k, v in data.items() if k not in ("id", "name", "url", "metadata")}
    return Texture(name=name, url=url, id=texture_id, payload=payload, metadata=dict(metadata))
