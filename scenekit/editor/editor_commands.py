from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List

from scenekit.editor.undo_stack import UndoCommand
from scenekit.scene.entity import TOUCHED_PROPERTIES, Entity, EntityType, random_id
from scenekit.scene.entity_store import EntityStore
from scenekit.scene.inspect_field import MISSING, clone_value

# Types whose clone copies the whole subtree
SUBTREE_CLONE_TYPES = (EntityType.MESH, EntityType.TRANSFORM_NODE)


@dataclass
class _Placement:
    """Where an entity lived before it was removed."""
    entity: Entity
    parent_id: str | None
    index: int


class SetPropertyCommand(UndoCommand):
    """
    Change of one entity property through the inspector.

    The path is dotted ("name", "payload.intensity"). The edited path is
    recorded in the entity's touched properties; undo forgets it again if
    it was not touched before. A path that did not exist before the edit
    (a metadata key, say) is removed again on undo.
    """

    def __init__(
        self,
        store: EntityStore,
        entity_id: str,
        path: str,
        old_value: Any,
        new_value: Any,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        super().__init__(text or f"Set '{path}'", on_common)
        self._store = store
        self._entity_id = entity_id
        self._path = path
        self._old_value = clone_value(old_value)
        self._new_value = clone_value(new_value)
        self._existed = store.get_property(entity_id, path, MISSING) is not MISSING
        metadata = store.get(entity_id).metadata
        self._had_touched_key = TOUCHED_PROPERTIES in metadata
        self._was_touched = path in metadata.get(TOUCHED_PROPERTIES, ())

    @property
    def entity_id(self) -> str:
        return self._entity_id

    @property
    def path(self) -> str:
        return self._path

    def redo(self) -> None:
        # A copy per application, so the command and the entity never share arrays.
        self._store.set_property(self._entity_id, self._path, clone_value(self._new_value))
        self._store.get(self._entity_id).touched_properties.add(self._path)

    def undo(self) -> None:
        if self._existed:
            self._store.set_property(self._entity_id, self._path, clone_value(self._old_value))
        else:
            self._store.delete_property(self._entity_id, self._path)
        if self._was_touched:
            return
        metadata = self._store.get(self._entity_id).metadata
        touched = metadata.get(TOUCHED_PROPERTIES)
        if touched is not None:
            touched.discard(self._path)
            if not touched and not self._had_touched_key:
                del metadata[TOUCHED_PROPERTIES]

    def merge_with(self, other: UndoCommand) -> bool:
        """
        Squash consecutive edits of the same property of the same entity.
        The old value stays the one before the first edit.
        """
        if not isinstance(other, SetPropertyCommand):
            return False
        if other._entity_id != self._entity_id or other._path != self._path:
            return False

        self._new_value = clone_value(other._new_value)
        return True


class RenameEntityCommand(UndoCommand):
    def __init__(
        self,
        store: EntityStore,
        entity_id: str,
        old_name: str,
        new_name: str,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        if text is None:
            text = f"Rename entity '{old_name}' to '{new_name}'"
        super().__init__(text, on_common)
        self._store = store
        self._entity_id = entity_id
        self._old_name = old_name
        self._new_name = new_name

    def redo(self) -> None:
        self._store.get(self._entity_id).name = self._new_name

    def undo(self) -> None:
        self._store.get(self._entity_id).name = self._old_name

    def merge_with(self, other: UndoCommand) -> bool:
        if not isinstance(other, RenameEntityCommand):
            return False
        if other._entity_id != self._entity_id:
            return False

        self._new_name = other._new_name
        self.text = other.text
        return True


class ReparentEntityCommand(UndoCommand):
    """
    Move an entity under another parent (drag and drop in the scene tree).
    None stands for the scene root.
    """

    def __init__(
        self,
        store: EntityStore,
        entity_id: str,
        old_parent_id: str | None,
        new_parent_id: str | None,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        if text is None:
            entity = store.get(entity_id)
            old_parent = store.find(old_parent_id)
            new_parent = store.find(new_parent_id)
            old_name = old_parent.name if old_parent is not None else "root"
            new_name = new_parent.name if new_parent is not None else "root"
            text = f"Reparent '{entity.name}' from '{old_name}' to '{new_name}'"
        super().__init__(text, on_common)
        self._store = store
        self._entity_id = entity_id
        self._old_parent_id = old_parent_id
        self._new_parent_id = new_parent_id

    def redo(self) -> None:
        self._store.set_parent(self._entity_id, self._new_parent_id)

    def undo(self) -> None:
        self._store.set_parent(self._entity_id, self._old_parent_id)


class AddEntityCommand(UndoCommand):
    """
    Add an entity to the scene.

    An entity without id gets one at construction time, so undo and redo
    keep addressing the same id.
    """

    def __init__(
        self,
        store: EntityStore,
        entity: Entity,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        super().__init__(text or f"Add {entity.type.value.lower()} '{entity.name}'", on_common)
        if not entity.id:
            entity.id = random_id()
        self._store = store
        self._entity = entity

    @property
    def entity(self) -> Entity:
        return self._entity

    def redo(self) -> None:
        self._store.add(self._entity)

    def undo(self) -> None:
        self._store.remove(self._entity.id)


class DeleteEntityCommand(UndoCommand):
    """
    Remove an entity together with its descendants.

    Undo puts every removed entity back under its parent and at its old
    position in the type collection.
    """

    def __init__(
        self,
        store: EntityStore,
        entity_id: str,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        entity = store.get(entity_id)
        super().__init__(text or f"Delete entity '{entity.name}'", on_common)
        self._store = store
        self._entity_id = entity_id
        self._placements: List[_Placement] = []

    @property
    def entity_id(self) -> str:
        return self._entity_id

    def redo(self) -> None:
        store = self._store
        subtree = [store.get(self._entity_id)] + store.descendants(self._entity_id)
        self._placements = [_Placement(e, e.parent_id, store.index_of(e)) for e in subtree]
        # Leaves first, so no entity is ever orphaned on the way.
        for placement in reversed(self._placements):
            store.remove(placement.entity.id)

    def undo(self) -> None:
        store = self._store
        # Ascending indexes rebuild every type collection as it was. The
        # entities come back as roots and get their parents afterwards.
        for placement in sorted(self._placements, key=lambda p: p.index):
            placement.entity.parent_id = None
            store.add(placement.entity, placement.index)
        for placement in self._placements:
            store.set_parent(placement.entity.id, placement.parent_id)


class CloneEntityCommand(UndoCommand):
    """
    Duplicate an entity next to the original.

    Meshes and transform nodes are cloned with their whole subtree. The
    clone of the root is named "<name> Cloned"; every clone gets a fresh id
    chosen once, at construction time.
    """

    def __init__(
        self,
        store: EntityStore,
        entity_id: str,
        on_common: Callable[[], None] | None = None,
        text: str | None = None,
    ) -> None:
        source = store.get(entity_id)
        super().__init__(text or f"Clone entity '{source.name}'", on_common)
        self._store = store

        subtree = [source]
        if source.type in SUBTREE_CLONE_TYPES:
            subtree += store.descendants(entity_id)

        new_ids = {e.id: random_id() for e in subtree}
        self._clones: List[Entity] = []
        for entity in subtree:
            name = f"{entity.name} Cloned" if entity is source else None
            clone = entity.clone(name=name, new_id=new_ids[entity.id])
            if entity is not source:
                clone.parent_id = new_ids[entity.parent_id]
            self._clones.append(clone)

    @property
    def root(self) -> Entity:
        return self._clones[0]

    @property
    def clones(self) -> List[Entity]:
        return list(self._clones)

    def redo(self) -> None:
        # Parents first.
        for clone in self._clones:
            self._store.add(clone)

    def undo(self) -> None:
        for clone in reversed(self._clones):
            self._store.remove(clone.id)
