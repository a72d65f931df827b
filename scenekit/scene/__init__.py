"""Live scene graph: entities, textures and the store holding them."""

from scenekit.scene.entity import (
    DO_NOT_EXPORT,
    IS_PICKABLE,
    TOUCHED_PROPERTIES,
    Entity,
    EntityType,
    default_payload,
)
from scenekit.scene.entity_store import EntityStore
from scenekit.scene.factory import SceneFactory
from scenekit.scene.texture import Texture

__all__ = [
    "DO_NOT_EXPORT",
    "IS_PICKABLE",
    "TOUCHED_PROPERTIES",
    "Entity",
    "EntityType",
    "EntityStore",
    "SceneFactory",
    "Texture",
    "default_payload",
]
