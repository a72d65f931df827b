"""SceneTreeController: one history entry and one refresh per action."""

import pytest

from scenekit.editor.scene_tree_controller import SceneTreeController
from scenekit.editor.undo_stack import UndoStack
from scenekit.editor.views import EditorViews
from scenekit.scene import IS_PICKABLE, Entity, EntityStore, EntityType


class CountingView:
    def __init__(self):
        self.refreshes = 0
        self.notified = []

    def refresh(self):
        self.refreshes += 1

    def notify(self, entity):
        self.notified.append(entity.id)


@pytest.fixture
def setup():
    store = EntityStore()
    store.add(Entity(name="Root", type=EntityType.TRANSFORM_NODE, id="root"))
    store.add(Entity(name="A", type=EntityType.MESH, id="a", parent_id="root"))
    store.add(Entity(name="B", type=EntityType.MESH, id="b", parent_id="a"))
    store.add(Entity(name="C", type=EntityType.LIGHT, id="c"))

    views = EditorViews()
    view = CountingView()
    views.register(view)
    stack = UndoStack()
    return SceneTreeController(store, stack, views), store, stack, view


def test_reparent_several_entities_is_one_step(setup):
    controller, store, stack, view = setup

    assert controller.reparent(["b", "c"], "root")

    assert store.get("b").parent_id == "root"
    assert store.get("c").parent_id == "root"
    assert len(stack) == 1
    assert view.refreshes == 1

    stack.undo()
    assert store.get("b").parent_id == "a"
    assert store.get("c").parent_id is None
    assert view.refreshes == 2


def test_reparent_skips_moves_into_own_subtree(setup):
    controller, store, stack, view = setup

    assert not controller.reparent(["a"], "b")
    assert store.get("a").parent_id == "root"
    assert len(stack) == 0
    assert view.refreshes == 0


def test_reparent_to_unknown_target(setup):
    controller, _, stack, _ = setup
    assert not controller.reparent(["c"], "ghost")
    assert len(stack) == 0


def test_remove_selection_with_nested_ids(setup):
    controller, store, stack, view = setup

    assert controller.remove(["b", "a", "c"])

    assert len(store) == 1
    assert len(stack) == 1
    assert view.refreshes == 1

    stack.undo()
    assert len(store) == 4
    assert store.get("b").parent_id == "a"


def test_clone_returns_cloned_roots(setup):
    controller, store, stack, _ = setup

    clones = controller.clone(["a", "c"])

    assert [c.name for c in clones] == ["A Cloned", "C Cloned"]
    assert len(store) == 4 + 3
    assert len(stack) == 1


def test_rename(setup):
    controller, store, stack, view = setup

    assert controller.rename("c", "  Sun  ")
    assert store.get("c").name == "Sun"
    assert not controller.rename("c", "Sun")
    assert not controller.rename("c", "   ")
    assert not controller.rename("ghost", "X")
    assert view.refreshes == 1


def test_set_property_merges_inspector_drags(setup):
    controller, store, stack, view = setup

    controller.set_property("c", "payload.intensity", 0.5)
    controller.set_property("c", "payload.intensity", 0.7)

    assert len(stack) == 1
    assert view.refreshes == 2

    stack.undo()
    assert store.get("c").payload["intensity"] == 1.0


def test_add(setup):
    controller, store, stack, _ = setup

    entity = controller.add(Entity(name="Cam", type=EntityType.CAMERA))

    assert entity.id in store
    stack.undo()
    assert entity.id not in store


def test_failing_action_is_not_recorded(setup):
    controller, store, stack, _ = setup
    # "type" cannot be edited through a property path
    assert not controller.set_property("c", "type", "Mesh")
    assert len(stack) == 0
    assert store.get("c").type is EntityType.LIGHT


def test_views_survive_a_failing_view():
    class Broken:
        def refresh(self):
            raise RuntimeError("boom")

    views = EditorViews()
    good = CountingView()
    views.register(Broken())
    views.register(good)

    views.refresh()
    views.notify(Entity(name="X", type=EntityType.LIGHT, id="x"))

    assert good.refreshes == 1
    assert good.notified == ["x"]


def test_set_property_on_absent_metadata_key(setup):
    controller, store, stack, _ = setup
    mesh = store.get("a")
    assert IS_PICKABLE not in mesh.metadata

    assert controller.set_property("a", "metadata.isPickable", False)
    assert mesh.metadata[IS_PICKABLE] is False
    assert len(stack) == 1

    stack.undo()
    assert IS_PICKABLE not in mesh.metadata

    stack.redo()
    assert mesh.metadata[IS_PICKABLE] is False


def test_entity_edits_notify_views_once_per_call(setup):
    controller, _, stack, view = setup

    controller.set_property("c", "payload.intensity", 0.5)
    assert view.notified == ["c"]

    stack.undo()
    stack.redo()
    assert view.notified == ["c", "c", "c"]

    controller.rename("c", "Sun")
    assert view.notified == ["c", "c", "c", "c"]
    assert view.refreshes == 4


def test_clone_skips_selected_descendants_of_cloned_subtree(setup):
    controller, store, stack, _ = setup

    clones = controller.clone(["a", "b"])

    # "b" is cloned once, as part of the subtree of "a"
    assert [c.name for c in clones] == ["A Cloned"]
    assert [e.name for e in store.meshes].count("B") == 2
    assert len(store) == 4 + 2
    assert len(stack) == 1


def test_clone_light_with_selected_child_clones_both(setup):
    controller, store, _, _ = setup
    store.add(Entity(name="D", type=EntityType.MESH, id="d", parent_id="c"))

    clones = controller.clone(["c", "d"])

    assert [c.name for c in clones] == ["C Cloned", "D Cloned"]
    assert len(store) == 5 + 2
