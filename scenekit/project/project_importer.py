"""
ProjectImporter - rebuilds the live scene from a project directory.

Entity documents only carry the id of their parent, and a parent may be
listed after its children (or in another type directory). Loading therefore
runs in two phases: every document is materialized as a root entity first,
then the recorded parent ids are linked against the complete store.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Callable, Dict, List

from scenekit import log
from scenekit.errors import DuplicateIdError, EntityDocumentError, ProjectLoadError
from scenekit.project.feedback import LogTaskFeedback, TaskFeedback
from scenekit.project.project import ProjectContext
from scenekit.project.serialization import CODECS, texture_from_data
from scenekit.project.typings import (
    ASSETS_DIR,
    ENTITY_DIRS,
    FILES_DIR,
    PROJECT_EXTENSION,
    TEXTURES_DIR,
    ProjectManifest,
)
from scenekit.scene.entity import IS_PICKABLE, Entity, EntityType

# Errors of a single document; the document is skipped and loading goes on.
_DOCUMENT_ERRORS = (OSError, ValueError, TypeError, EntityDocumentError, DuplicateIdError)

_PHASE_MESSAGES = {
    EntityType.MESH: "Creating Meshes...",
    EntityType.LIGHT: "Creating Lights...",
    EntityType.CAMERA: "Creating Cameras...",
    EntityType.TRANSFORM_NODE: "Creating Transform Nodes...",
}


def is_project_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() == PROJECT_EXTENSION


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


async def _load_json(path: str) -> Any:
    """_read_json() on the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _read_json, path)


class ProjectImporter:
    def __init__(
        self,
        context: ProjectContext,
        feedback: TaskFeedback | None = None,
        on_ready: Callable[[], None] | None = None,
    ):
        """
        Args:
            context: Project state to fill.
            feedback: Progress sink.
            on_ready: Called once after a load finished (views refresh).
        """
        self._context = context
        self._feedback = feedback if feedback is not None else LogTaskFeedback()
        self._on_ready = on_ready

    async def import_project(self, project_path: str) -> bool:
        """
        Load the project, falling back to an empty project when the manifest
        cannot be read.

        Returns:
            True if the project was loaded.
        """
        try:
            await self.load(project_path)
            return True
        except ProjectLoadError as e:
            log.warn(e, "[ProjectImporter] Falling back to an empty project")
            self._context.reset()
            self._notify_ready()
            return False

    async def load(self, project_path: str) -> ProjectManifest:
        """
        Replace the context content with the project at project_path.

        Raises ProjectLoadError if the manifest is missing or malformed.
        Broken entity documents are skipped.
        """
        context = self._context
        context.open(project_path)
        context.clear_content()
        root = context.dir_path

        try:
            manifest = ProjectManifest.from_dict(await _load_json(context.path))
        except (OSError, ValueError) as e:
            raise ProjectLoadError(project_path, str(e)) from e

        token = self._feedback.add_task_feedback(0, "Importing Project...")
        total = manifest.document_count()
        step = 100.0 / total if total else 100.0
        progress = 0.0

        def advance() -> None:
            nonlocal progress
            progress = min(100.0, progress + step)
            self._feedback.update_task_feedback(token, progress)

        for name in manifest.files_list:
            path = os.path.join(root, FILES_DIR, name)
            context.files.register(path, os.path.basename(name))

        for name in manifest.asset_meshes:
            context.mesh_assets.register(os.path.join(root, ASSETS_DIR, "meshes", name), name)

        # Phase 1: materialize
        self._feedback.update_task_feedback(token, progress, "Creating Textures...")
        for name in manifest.textures:
            try:
                data = await _load_json(os.path.join(root, TEXTURES_DIR, name))
                context.store.add_texture(texture_from_data(data, root, name))
            except _DOCUMENT_ERRORS as e:
                log.warn(e, f"[ProjectImporter] Skipping texture '{name}'")
            advance()

        pending_parents: Dict[str, str] = {}
        for entity_type, dir_name in ENTITY_DIRS.items():
            self._feedback.update_task_feedback(token, progress, _PHASE_MESSAGES[entity_type])
            for name in manifest.entity_documents(entity_type):
                try:
                    data = await _load_json(os.path.join(root, dir_name, name))
                    self._materialize(entity_type, data, name, pending_parents)
                except _DOCUMENT_ERRORS as e:
                    log.warn(e, f"[ProjectImporter] Skipping {entity_type.value} document '{name}'")
                advance()

        # Phase 2: link parents
        self._link_parents(pending_parents)

        self._feedback.update_task_feedback(token, 100, "Done!")
        self._feedback.close_task_feedback(token)

        context.manifest = manifest
        log.info(f"[ProjectImporter] Project loaded: {project_path}")
        self._notify_ready()
        return manifest

    def _materialize(
        self,
        entity_type: EntityType,
        data: Any,
        document: str,
        pending_parents: Dict[str, str],
    ) -> List[Entity]:
        codec = CODECS[entity_type]
        if entity_type is EntityType.MESH:
            if not isinstance(data, dict) or not isinstance(data.get("meshes"), list):
                raise EntityDocumentError(document, "'meshes' list is missing")
            items = data["meshes"]
        else:
            items = [data]

        # Decode the whole document before touching the store.
        decoded = [(codec.deserialize(item, document), codec.parent_id_of(item)) for item in items]

        created: List[Entity] = []
        for entity, parent_id in decoded:
            if entity_type is EntityType.MESH:
                pickable = bool(entity.payload.get("is_pickable", True))
                if not pickable or IS_PICKABLE in entity.metadata:
                    entity.metadata[IS_PICKABLE] = pickable
                entity.payload["is_pickable"] = True
            try:
                self._context.store.add(entity)
            except DuplicateIdError as e:
                log.warn(e, f"[ProjectImporter] Skipping '{entity.name}' from '{document}'")
                continue
            if parent_id is not None:
                pending_parents[entity.id] = parent_id
            created.append(entity)
        return created

    def _link_parents(self, pending_parents: Dict[str, str]) -> None:
        store = self._context.store
        for entity_id, parent_id in pending_parents.items():
            if store.find(parent_id) is None:
                log.warn(f"[ProjectImporter] Parent '{parent_id}' of '{entity_id}' not found, keeping it at the root")
                continue
            try:
                store.set_parent(entity_id, parent_id)
            except ValueError as e:
                log.warn(e, f"[ProjectImporter] Cannot link '{entity_id}' to '{parent_id}'")

    def _notify_ready(self) -> None:
        if self._on_ready is not None:
            self._on_ready()
