"""
EntityStore - the live scene graph.

Holds one collection per entity type plus the scene textures. Guarantees id
uniqueness; versioning of changes is the CommandStack's job.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from scenekit.errors import DuplicateIdError
from scenekit.scene.entity import Entity, EntityType, random_id
from scenekit.scene.inspect_field import resolve_path_delete, resolve_path_get, resolve_path_set
from scenekit.scene.texture import Texture

# Enumeration order of all_entities()
ENTITY_TYPE_ORDER = (
    EntityType.MESH,
    EntityType.LIGHT,
    EntityType.CAMERA,
    EntityType.TRANSFORM_NODE,
)


def _check_editable(path: str) -> None:
    if path in ("id", "type", "parent_id"):
        raise ValueError(f"Property '{path}' cannot be edited directly")


class EntityStore:
    def __init__(self) -> None:
        self._collections: Dict[EntityType, List[Entity]] = {t: [] for t in ENTITY_TYPE_ORDER}
        self._by_id: Dict[str, Entity] = {}
        self._textures: List[Texture] = []
        self._textures_by_id: Dict[str, Texture] = {}

    # --- collections ---

    @property
    def meshes(self) -> List[Entity]:
        return list(self._collections[EntityType.MESH])

    @property
    def lights(self) -> List[Entity]:
        return list(self._collections[EntityType.LIGHT])

    @property
    def cameras(self) -> List[Entity]:
        return list(self._collections[EntityType.CAMERA])

    @property
    def transform_nodes(self) -> List[Entity]:
        return list(self._collections[EntityType.TRANSFORM_NODE])

    @property
    def textures(self) -> List[Texture]:
        return list(self._textures)

    def collection(self, entity_type: EntityType) -> List[Entity]:
        return list(self._collections[EntityType(entity_type)])

    def all_entities(self) -> List[Entity]:
        result: List[Entity] = []
        for entity_type in ENTITY_TYPE_ORDER:
            result.extend(self._collections[entity_type])
        return result

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.all_entities())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._by_id

    # --- entities ---

    def _id_in_use(self, entity_id: str) -> bool:
        return entity_id in self._by_id or entity_id in self._textures_by_id

    def _new_id(self) -> str:
        entity_id = random_id()
        while self._id_in_use(entity_id):
            entity_id = random_id()
        return entity_id

    def add(self, entity: Entity, index: int | None = None) -> Entity:
        """
        Add entity to its type collection.

        index – position inside the collection (None appends). Used by undo
                to put an entity back where it was.

        The parent id is kept as is; it must refer to a live entity or be
        None. Loaders add entities as roots and link parents afterwards.
        """
        if not entity.id:
            entity.id = self._new_id()
        elif self._id_in_use(entity.id):
            raise DuplicateIdError(entity.id)

        if entity.parent_id is not None and entity.parent_id not in self._by_id:
            raise ValueError(
                f"Parent '{entity.parent_id}' of entity '{entity.name}' is not in the store"
            )

        collection = self._collections[entity.type]
        if index is None or index >= len(collection):
            collection.append(entity)
        else:
            collection.insert(max(index, 0), entity)
        self._by_id[entity.id] = entity
        return entity

    def remove(self, entity_id: str) -> Entity:
        """
        Remove entity. Its children become roots.

        Raises KeyError if the id is unknown.
        """
        entity = self._by_id.pop(entity_id)
        self._collections[entity.type].remove(entity)
        for child in self.children(entity_id):
            child.parent_id = None
        return entity

    def find(self, entity_id: str | None) -> Entity | None:
        if entity_id is None:
            return None
        return self._by_id.get(entity_id)

    def get(self, entity_id: str) -> Entity:
        return self._by_id[entity_id]

    def index_of(self, entity: Entity) -> int:
        return self._collections[entity.type].index(entity)

    # --- hierarchy ---

    def get_parent(self, entity: Entity) -> Entity | None:
        return self.find(entity.parent_id)

    def set_parent(self, entity_id: str, parent_id: str | None) -> None:
        """
        Reparent entity. parent_id None makes it a root.

        Raises KeyError for an unknown entity, ValueError for an unknown
        parent or when the new parent is the entity itself or one of its
        descendants.
        """
        entity = self._by_id[entity_id]
        if parent_id is not None:
            if parent_id not in self._by_id:
                raise ValueError(f"Unknown parent id '{parent_id}'")
            if parent_id == entity_id or any(d.id == parent_id for d in self.descendants(entity_id)):
                raise ValueError(f"Cannot parent '{entity.name}' under its own subtree")
        entity.parent_id = parent_id

    def children(self, entity_id: str | None) -> List[Entity]:
        return [e for e in self.all_entities() if e.parent_id == entity_id]

    def root_entities(self) -> List[Entity]:
        return self.children(None)

    def descendants(self, entity_id: str) -> List[Entity]:
        """All descendants, depth-first, parents before children."""
        result: List[Entity] = []
        stack = list(reversed(self.children(entity_id)))
        while stack:
            entity = stack.pop()
            result.append(entity)
            stack.extend(reversed(self.children(entity.id)))
        return result

    # --- properties ---

    def get_property(self, entity_id: str, path: str, *default: Any) -> Any:
        """Like getattr(): with a default, a missing path returns it instead of raising."""
        return resolve_path_get(self._by_id[entity_id], path, *default)

    def set_property(self, entity_id: str, path: str, value: Any) -> None:
        _check_editable(path)
        resolve_path_set(self._by_id[entity_id], path, value)

    def delete_property(self, entity_id: str, path: str) -> None:
        _check_editable(path)
        resolve_path_delete(self._by_id[entity_id], path)

    # --- textures ---

    def add_texture(self, texture: Texture, index: int | None = None) -> Texture:
        if not texture.id:
            texture.id = self._new_id()
        elif self._id_in_use(texture.id):
            raise DuplicateIdError(texture.id)

        if index is None or index >= len(self._textures):
            self._textures.append(texture)
        else:
            self._textures.insert(max(index, 0), texture)
        self._textures_by_id[texture.id] = texture
        return texture

    def remove_texture(self, texture_id: str) -> Texture:
        texture = self._textures_by_id.pop(texture_id)
        self._textures.remove(texture)
        return texture

    def find_texture(self, texture_id: str) -> Texture | None:
        return self._textures_by_id.get(texture_id)

    # ---

    def clear(self) -> None:
        for collection in self._collections.values():
            collection.clear()
        self._by_id.clear()
        self._textures.clear()
        self._textures_by_id.clear()
