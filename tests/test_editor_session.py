"""EditorSession: project lifecycle and history wiring."""

import pytest

from scenekit.editor.editor_session import EditorSession
from scenekit.editor.settings import EditorSettings
from scenekit.scene import Entity, EntityType


class CountingView:
    def __init__(self):
        self.refreshes = 0

    def refresh(self):
        self.refreshes += 1


@pytest.fixture
def session(tmp_path, feedback):
    settings = EditorSettings(str(tmp_path / "editor.ini"))
    settings.set_undo_depth(10)
    return EditorSession(settings=settings, feedback=feedback)


def test_undo_depth_comes_from_settings(session):
    assert session.undo_stack.max_depth == 10


@pytest.mark.asyncio
async def test_save_as_then_open(session, tmp_path):
    session.scene_tree.add(Entity(name="Root", type=EntityType.TRANSFORM_NODE, id="n1"))
    session.scene_tree.add(Entity(name="Box", type=EntityType.MESH, id="n2", parent_id="n1"))
    project_dir = tmp_path / "p"

    assert await session.save_as(str(project_dir))
    project_file = str(project_dir / "scene.editorproject")
    assert session.settings.get_last_project_file() == project_file

    view = CountingView()
    session.views.register(view)
    session.close_project()
    assert len(session.store) == 0
    assert not session.undo_stack.can_undo

    assert await session.open_project(project_file)
    assert session.store.get("n2").parent_id == "n1"
    assert not session.undo_stack.can_undo
    # One refresh on close, one after the load
    assert view.refreshes == 2


@pytest.mark.asyncio
async def test_save_without_location_reports_failure(session):
    session.scene_tree.add(Entity(name="Box", type=EntityType.MESH))
    assert not await session.save()


@pytest.mark.asyncio
async def test_open_broken_project_gives_empty_project(session, tmp_path):
    path = tmp_path / "scene.editorproject"
    path.write_text("[]", encoding="utf-8")

    assert not await session.open_project(str(path))
    assert len(session.store) == 0
    assert session.context.path is None


def test_undo_redo(session):
    entity = session.scene_tree.add(Entity(name="Lamp", type=EntityType.LIGHT))

    assert session.undo() is not None
    assert entity.id not in session.store
    assert session.redo() is not None
    assert entity.id in session.store
    assert session.redo() is None


def test_failed_undo_is_logged_and_keeps_history(session):
    entity = session.scene_tree.add(Entity(name="Lamp", type=EntityType.LIGHT))
    # Removed behind the history's back: undo of the add cannot run.
    session.store.remove(entity.id)

    assert session.undo() is None
    assert session.undo_stack.cursor == 1
