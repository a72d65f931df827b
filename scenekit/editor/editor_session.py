"""
EditorSession - one editing session of one project.

Wires the project context, the undo stack, the views and the persistence
layer together. The editor window owns exactly one session; nothing here
is global.
"""

from __future__ import annotations

from typing import Callable

from scenekit import log
from scenekit.editor.scene_tree_controller import SceneTreeController
from scenekit.editor.settings import EditorSettings
from scenekit.editor.undo_stack import UndoCommand, UndoStack
from scenekit.editor.views import EditorViews
from scenekit.errors import CommandReplayError, ScenekitError
from scenekit.project.assets import MeshAssets, TextureAssets
from scenekit.project.feedback import LogTaskFeedback, TaskFeedback
from scenekit.project.project import ProjectContext
from scenekit.project.project_exporter import ProjectExporter
from scenekit.project.project_importer import ProjectImporter


class EditorSession:
    def __init__(
        self,
        settings: EditorSettings | None = None,
        feedback: TaskFeedback | None = None,
        on_undo_stack_changed: Callable[[], None] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else EditorSettings.instance()
        self.feedback = feedback if feedback is not None else LogTaskFeedback()

        self.context = ProjectContext()
        self.views = EditorViews()
        self.undo_stack = UndoStack(
            max_depth=self.settings.get_undo_depth(),
            on_changed=on_undo_stack_changed,
        )
        self.scene_tree = SceneTreeController(self.context.store, self.undo_stack, self.views)
        self.textures = TextureAssets(self.context)
        self.meshes = MeshAssets(self.context)

        self._exporter = ProjectExporter(self.context, self.feedback, self.settings)
        self._importer = ProjectImporter(self.context, self.feedback, on_ready=self.views.refresh)

    @property
    def store(self):
        return self.context.store

    # ---------- project lifecycle ----------

    async def open_project(self, path: str) -> bool:
        """
        Open the project at path. The history of the previous project is
        dropped; a broken manifest leaves an empty project.
        """
        self.undo_stack.clear()
        loaded = await self._importer.import_project(path)
        if loaded:
            self.settings.set_last_project_file(self.context.path)
        return loaded

    def close_project(self) -> None:
        self.undo_stack.clear()
        self.context.reset()
        self.views.refresh()

    async def save(self) -> bool:
        try:
            await self._exporter.save()
        except ScenekitError as e:
            log.error(e, "[EditorSession] Save failed")
            return False
        return True

    async def save_as(self, dir_path: str, file_name: str | None = None) -> bool:
        if file_name is None:
            file_name = self.settings.get_project_file_name()
        try:
            await self._exporter.save_as(dir_path, file_name)
        except (ScenekitError, OSError) as e:
            log.error(e, f"[EditorSession] Save to '{dir_path}' failed")
            return False
        return True

    # ---------- history ----------

    def undo(self) -> UndoCommand | None:
        try:
            return self.undo_stack.undo()
        except CommandReplayError as e:
            log.error(e, "[EditorSession] Undo failed")
            return None

    def redo(self) -> UndoCommand | None:
        try:
            return self.undo_stack.redo()
        except CommandReplayError as e:
            log.error(e, "[EditorSession] Redo failed")
            return None
