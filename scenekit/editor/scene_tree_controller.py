from __future__ import annotations

from typing import Any, Callable, Iterable, List

from scenekit import log
from scenekit.editor.editor_commands import (
    SUBTREE_CLONE_TYPES,
    AddEntityCommand,
    CloneEntityCommand,
    DeleteEntityCommand,
    RenameEntityCommand,
    ReparentEntityCommand,
    SetPropertyCommand,
)
from scenekit.editor.undo_stack import CommandGroup, UndoCommand, UndoStack
from scenekit.editor.views import EditorViews
from scenekit.scene.entity import Entity, EntityType
from scenekit.scene.entity_store import EntityStore
from scenekit.scene.inspect_field import MISSING, values_equal


class SceneTreeController:
    """
    Actions of the scene hierarchy panel, without the widgets:
    - turns user actions (rename, drag and drop, clone, delete) into commands;
    - pushes them to the undo stack, one history entry per action;
    - every command's common callback refreshes the views; edits of a
      single entity also notify the views about that entity.

    Failing actions are logged and leave the history as it was.
    """

    def __init__(self, store: EntityStore, undo_stack: UndoStack, views: EditorViews) -> None:
        self._store = store
        self._undo_stack = undo_stack
        self._views = views

    @property
    def store(self) -> EntityStore:
        return self._store

    # ---------- actions ----------

    def add(self, entity: Entity) -> Entity | None:
        cmd = AddEntityCommand(self._store, entity, on_common=self._views.refresh)
        if not self._push(cmd):
            return None
        return cmd.entity

    def rename(self, entity_id: str, new_name: str) -> bool:
        entity = self._store.find(entity_id)
        if entity is None:
            return False

        new_name = new_name.strip()
        if not new_name or new_name == entity.name:
            return False

        cmd = RenameEntityCommand(
            self._store, entity_id, entity.name, new_name, on_common=self._entity_changed(entity_id)
        )
        return self._push(cmd, merge=True)

    def set_property(self, entity_id: str, path: str, value: Any, merge: bool = True) -> bool:
        """
        Inspector edit. Consecutive edits of the same property merge into one
        history entry unless merge is False.
        """
        if self._store.find(entity_id) is None:
            return False

        old_value = self._store.get_property(entity_id, path, MISSING)
        if values_equal(old_value, value):
            return False
        if old_value is MISSING:
            old_value = None
        cmd = SetPropertyCommand(
            self._store, entity_id, path, old_value, value, on_common=self._entity_changed(entity_id)
        )
        return self._push(cmd, merge=merge)

    def reparent(self, entity_ids: Iterable[str], target_id: str | None) -> bool:
        """
        Drop entities onto target_id (None drops them at the root).

        Entities that cannot move there (unknown, already there, or the
        target lies in their own subtree) are skipped.
        """
        if target_id is not None and self._store.find(target_id) is None:
            log.warn(f"[SceneTreeController] Unknown reparent target '{target_id}'")
            return False

        commands: List[UndoCommand] = []
        for entity_id in entity_ids:
            entity = self._store.find(entity_id)
            if entity is None or entity.parent_id == target_id:
                continue
            if target_id is not None and (
                target_id == entity_id
                or any(d.id == target_id for d in self._store.descendants(entity_id))
            ):
                log.warn(f"[SceneTreeController] Cannot move '{entity.name}' under its own subtree")
                continue
            commands.append(
                ReparentEntityCommand(self._store, entity_id, entity.parent_id, target_id, on_common=self._views.refresh)
            )

        return self._push_many(commands, "Reparent entities")

    def clone(self, entity_ids: Iterable[str]) -> List[Entity]:
        """Clone entities. Returns the cloned roots."""
        commands = [
            CloneEntityCommand(self._store, entity_id, on_common=self._views.refresh)
            for entity_id in self._top_level(entity_ids, SUBTREE_CLONE_TYPES)
        ]
        if not self._push_many(commands, "Clone entities"):
            return []
        return [cmd.root for cmd in commands]

    def remove(self, entity_ids: Iterable[str]) -> bool:
        """Delete entities with their descendants."""
        commands = [
            DeleteEntityCommand(self._store, entity_id, on_common=self._views.refresh)
            for entity_id in self._top_level(entity_ids)
        ]
        return self._push_many(commands, "Delete entities")

    # ---------- helpers ----------

    def _top_level(self, entity_ids: Iterable[str], subtree_types: Iterable[EntityType] | None = None) -> List[str]:
        """
        Known ids without duplicates and without those below another selected
        id. With subtree_types, only ancestors of those types cover their
        descendants.
        """
        selected = [entity_id for entity_id in dict.fromkeys(entity_ids) if entity_id in self._store]
        # A selected descendant is handled together with its selected ancestor.
        covered = {
            d.id
            for entity_id in selected
            if subtree_types is None or self._store.get(entity_id).type in subtree_types
            for d in self._store.descendants(entity_id)
        }
        return [entity_id for entity_id in selected if entity_id not in covered]

    def _entity_changed(self, entity_id: str) -> Callable[[], None]:
        def common() -> None:
            self._views.refresh()
            entity = self._store.find(entity_id)
            if entity is not None:
                self._views.notify(entity)

        return common

    def _push_many(self, commands: List[UndoCommand], text: str) -> bool:
        if not commands:
            return False
        if len(commands) == 1:
            return self._push(commands[0])
        # Only the group refreshes the views.
        return self._push(CommandGroup(commands, text=text, on_common=self._views.refresh))

    def _push(self, cmd: UndoCommand, merge: bool = False) -> bool:
        try:
            self._undo_stack.push(cmd, merge=merge)
        except Exception as e:
            log.error(e, f"[SceneTreeController] {cmd.text} failed")
            return False
        return True
