"""Editor commands against a live EntityStore."""

import numpy as np
import pytest

from scenekit.editor.editor_commands import (
    AddEntityCommand,
    CloneEntityCommand,
    DeleteEntityCommand,
    RenameEntityCommand,
    ReparentEntityCommand,
    SetPropertyCommand,
)
from scenekit.editor.undo_stack import CommandGroup, UndoStack
from scenekit.project.serialization import entity_to_data
from scenekit.scene import IS_PICKABLE, Entity, EntityStore, EntityType


def _snapshot(store):
    return (
        {e.id: entity_to_data(e) for e in store},
        {t: [e.id for e in store.collection(t)] for t in EntityType},
    )


@pytest.fixture
def store():
    store = EntityStore()
    store.add(Entity(name="Root", type=EntityType.TRANSFORM_NODE, id="root"))
    store.add(Entity(name="Crate", type=EntityType.MESH, id="crate", parent_id="root"))
    store.add(Entity(name="Barrel", type=EntityType.MESH, id="barrel"))
    store.add(Entity(name="Lamp", type=EntityType.LIGHT, id="lamp", parent_id="crate"))
    store.add(Entity(name="Group", type=EntityType.TRANSFORM_NODE, id="group"))
    return store


def test_set_property_and_touched_mark(store):
    stack = UndoStack()
    crate = store.get("crate")

    stack.push(SetPropertyCommand(store, "crate", "payload.position", crate.payload["position"], [1, 2, 3]))

    assert np.allclose(crate.payload["position"], [1, 2, 3])
    assert "payload.position" in crate.touched_properties

    stack.undo()
    assert np.allclose(crate.payload["position"], [0, 0, 0])
    assert "payload.position" not in crate.touched_properties


def test_set_property_keeps_earlier_touched_mark(store):
    stack = UndoStack()
    lamp = store.get("lamp")
    lamp.touched_properties.add("payload.intensity")

    stack.push(SetPropertyCommand(store, "lamp", "payload.intensity", 1.0, 3.0))
    stack.undo()

    assert lamp.payload["intensity"] == 1.0
    assert "payload.intensity" in lamp.touched_properties


def test_set_property_on_absent_metadata_key_is_removed_on_undo(store):
    stack = UndoStack()
    crate = store.get("crate")
    before = _snapshot(store)

    # The caller passes None for a key the entity does not carry yet.
    stack.push(SetPropertyCommand(store, "crate", "metadata.isPickable", None, False))
    assert crate.metadata[IS_PICKABLE] is False

    stack.undo()
    assert IS_PICKABLE not in crate.metadata
    assert _snapshot(store) == before

    stack.redo()
    assert crate.metadata[IS_PICKABLE] is False


def test_set_property_does_not_alias_arrays(store):
    stack = UndoStack()
    crate = store.get("crate")
    new_position = np.array([5.0, 5.0, 5.0])

    stack.push(SetPropertyCommand(store, "crate", "payload.position", crate.payload["position"], new_position))
    new_position[0] = 100.0
    crate.payload["position"][1] = -1.0

    stack.undo()
    stack.redo()
    assert np.allclose(crate.payload["position"], [5.0, 5.0, 5.0])


def test_set_property_edits_merge(store):
    stack = UndoStack()
    lamp = store.get("lamp")

    stack.push(SetPropertyCommand(store, "lamp", "payload.intensity", 1.0, 2.0))
    stack.push(SetPropertyCommand(store, "lamp", "payload.intensity", 2.0, 3.0), merge=True)
    stack.push(SetPropertyCommand(store, "lamp", "payload.enabled", True, False), merge=True)

    assert len(stack) == 2
    stack.undo()
    stack.undo()
    assert lamp.payload["intensity"] == 1.0
    assert lamp.payload["enabled"] is True


def test_rename_merges_consecutive_renames(store):
    stack = UndoStack()
    stack.push(RenameEntityCommand(store, "crate", "Crate", "Box"))
    stack.push(RenameEntityCommand(store, "crate", "Box", "Big Box"), merge=True)

    assert len(stack) == 1
    assert store.get("crate").name == "Big Box"

    stack.undo()
    assert store.get("crate").name == "Crate"


def test_reparent(store):
    stack = UndoStack()
    stack.push(ReparentEntityCommand(store, "lamp", "crate", "group"))
    assert store.get("lamp").parent_id == "group"

    stack.undo()
    assert store.get("lamp").parent_id == "crate"

    stack.push(ReparentEntityCommand(store, "lamp", "crate", None))
    assert store.get("lamp").parent_id is None


def test_add_entity(store):
    stack = UndoStack()
    cmd = AddEntityCommand(store, Entity(name="Sun", type=EntityType.LIGHT))
    entity_id = cmd.entity.id

    stack.push(cmd)
    assert store.get(entity_id).name == "Sun"

    stack.undo()
    assert entity_id not in store

    stack.redo()
    assert entity_id in store


def test_delete_restores_subtree_and_positions(store):
    stack = UndoStack()
    before = _snapshot(store)

    stack.push(DeleteEntityCommand(store, "root"))
    assert "root" not in store
    assert "crate" not in store
    assert "lamp" not in store
    assert [e.id for e in store.meshes] == ["barrel"]

    stack.undo()
    assert _snapshot(store) == before

    stack.redo()
    assert len(store) == 2


def test_clone_mesh_with_subtree(store):
    stack = UndoStack()
    cmd = CloneEntityCommand(store, "crate")

    stack.push(cmd)
    clone = cmd.root
    assert clone.name == "Crate Cloned"
    assert clone.id != "crate"
    assert clone.parent_id == "root"

    cloned_children = store.children(clone.id)
    assert [c.name for c in cloned_children] == ["Lamp"]
    assert cloned_children[0].id != "lamp"
    # The original subtree is untouched
    assert store.get("lamp").parent_id == "crate"

    stack.undo()
    assert clone.id not in store
    assert len(store) == 5

    stack.redo()
    assert store.get(clone.id) is clone


def test_clone_light_is_single(store):
    cmd = CloneEntityCommand(store, "lamp")
    assert len(cmd.clones) == 1
    assert cmd.root.name == "Lamp Cloned"


def test_undo_redo_symmetry_over_mixed_sequence(store):
    stack = UndoStack()
    initial = _snapshot(store)

    commands = [
        SetPropertyCommand(store, "barrel", "payload.scaling", [1, 1, 1], [2, 2, 2]),
        ReparentEntityCommand(store, "barrel", None, "group"),
        RenameEntityCommand(store, "group", "Group", "Props"),
        AddEntityCommand(store, Entity(name="Fill", type=EntityType.LIGHT, id="fill", parent_id="group")),
    ]
    for cmd in commands:
        stack.push(cmd)
    stack.push(CloneEntityCommand(store, "group"))
    stack.push(DeleteEntityCommand(store, "root"))
    final = _snapshot(store)

    while stack.can_undo:
        stack.undo()
    assert _snapshot(store) == initial

    while stack.can_redo:
        stack.redo()
    assert _snapshot(store) == final


def test_group_of_deletes_is_one_step(store):
    stack = UndoStack()
    before = _snapshot(store)
    refreshes = []

    stack.push(CommandGroup(
        [DeleteEntityCommand(store, "barrel"), DeleteEntityCommand(store, "group")],
        text="Delete entities",
        on_common=lambda: refreshes.append(len(store)),
    ))
    assert len(stack) == 1
    assert refreshes == [3]

    stack.undo()
    assert _snapshot(store) == before
    assert refreshes == [3, 5]
