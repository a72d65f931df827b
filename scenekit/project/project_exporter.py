"""
ProjectExporter - writes the live scene into a project directory.

Layout:
    <root>/scene.editorproject
    <root>/files/<name>
    <root>/textures/<base>.json
    <root>/meshes/<base>.json
    <root>/lights/<base>.json
    <root>/cameras/<base>.json
    <root>/transformNodes/<base>.json
    <root>/assets/meshes/<name>
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from typing import TYPE_CHECKING, Any, Set

from scenekit import log
from scenekit.errors import EntityDocumentError, ProjectIOError
from scenekit.project.feedback import LogTaskFeedback, TaskFeedback
from scenekit.project.files import FileRecord
from scenekit.project.project import ProjectContext
from scenekit.project.serialization import (
    CODECS,
    dumps,
    texture_to_data,
    validate_serializable,
)
from scenekit.project.typings import (
    ASSETS_DIR,
    DEFAULT_PROJECT_FILE,
    ENTITY_DIRS,
    FILES_DIR,
    TEXTURES_DIR,
    ProjectManifest,
)
from scenekit.scene.entity import IS_PICKABLE, Entity, EntityType

if TYPE_CHECKING:
    from scenekit.editor.settings import EditorSettings

_PHASE_MESSAGES = {
    EntityType.MESH: "Saving Meshes",
    EntityType.LIGHT: "Saving Lights",
    EntityType.CAMERA: "Saving Cameras",
    EntityType.TRANSFORM_NODE: "Saving Transform Nodes",
}


def write_text_atomic(file_path: str, text: str) -> None:
    """Write UTF-8 text through a temp file in the same directory."""
    dir_path = os.path.dirname(file_path) or "."
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        suffix=".tmp",
        dir=dir_path,
        delete=False,
    ) as f:
        f.write(text)
        temp_path = f.name

    try:
        os.replace(temp_path, file_path)
    except OSError:
        os.unlink(temp_path)
        raise


async def _run_blocking(fn, *args):
    """Run blocking file IO on the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fn, *args)


def document_file_name(name: str, entity_id: str, used: Set[str]) -> str:
    """
    "<basename>.json" for the given entity name.

    A second entity with the same base name within one save gets
    "<basename>-<id>.json", then "<basename>-<id>-2.json" and so on until
    the name is free. Names are compared case-insensitively, as on the
    Windows and macOS file systems. used holds the casefolded names.
    """
    base = os.path.basename(os.path.normpath(name)) if name else ""
    if base in ("", ".", ".."):
        base = entity_id
    file_name = f"{base}.json"
    if file_name.casefold() in used:
        file_name = f"{base}-{entity_id}.json"
        counter = 2
        while file_name.casefold() in used:
            file_name = f"{base}-{entity_id}-{counter}.json"
            counter += 1
    used.add(file_name.casefold())
    return file_name


class _Progress:
    """Percent progress of one save phase."""

    def __init__(self, feedback: TaskFeedback, token: int, count: int):
        self._feedback = feedback
        self._token = token
        self._step = 100.0 / count if count else 100.0
        self._value = 0.0

    def advance(self) -> None:
        self._value = min(100.0, self._value + self._step)
        self._feedback.update_task_feedback(self._token, self._value)


class ProjectExporter:
    def __init__(
        self,
        context: ProjectContext,
        feedback: TaskFeedback | None = None,
        settings: "EditorSettings | None" = None,
    ):
        self._context = context
        self._feedback = feedback if feedback is not None else LogTaskFeedback()
        self._settings = settings

    async def save_as(self, destination_dir: str, file_name: str = DEFAULT_PROJECT_FILE) -> ProjectManifest:
        """Make destination_dir the project location and save there."""
        os.makedirs(destination_dir, exist_ok=True)
        self._context.set_directory(destination_dir, file_name)
        if self._settings is not None:
            self._settings.set_last_project_file(self._context.path)
        return await self.save()

    async def save(self, destination_dir: str | None = None) -> ProjectManifest:
        """
        Save the project.

        destination_dir – where to write; defaults to the opened project's
        directory. The project context is not repointed (see save_as()).

        Raises ProjectIOError when nothing tells where to save or when a
        write/copy fails. Files written before the failure stay on disk.
        """
        context = self._context
        if destination_dir is None:
            if context.dir_path is None:
                raise ProjectIOError("Project has no location yet, use save_as()")
            destination_dir = context.dir_path

        if context.path is not None:
            file_name = os.path.basename(context.path)
        else:
            file_name = DEFAULT_PROJECT_FILE

        token = self._feedback.add_task_feedback(0, "Saving Files...")
        try:
            manifest = await self._save(destination_dir, file_name, token)
        except ProjectIOError:
            raise
        except OSError as e:
            log.error(e, f"[ProjectExporter] Save to '{destination_dir}' failed")
            raise ProjectIOError(f"Failed to save project to '{destination_dir}': {e}") from e

        self._feedback.update_task_feedback(token, 100, "Done!")
        self._feedback.close_task_feedback(token)

        context.manifest = manifest
        log.info(f"[ProjectExporter] Project saved: {os.path.join(destination_dir, file_name)}")
        return manifest

    async def _save(self, root: str, file_name: str, token: int) -> ProjectManifest:
        store = self._context.store
        manifest = ProjectManifest()

        files_dir = os.path.join(root, FILES_DIR)
        textures_dir = os.path.join(root, TEXTURES_DIR)
        for path in [files_dir, textures_dir] + [os.path.join(root, d) for d in ENTITY_DIRS.values()]:
            os.makedirs(path, exist_ok=True)

        # Files
        records = list(self._context.files)
        progress = _Progress(self._feedback, token, len(records))
        for record in records:
            manifest.files_list.append(record.name)
            await self._copy_if_missing(record, os.path.join(files_dir, record.name))
            progress.advance()

        mesh_sources = list(self._context.mesh_assets)
        if mesh_sources:
            assets_dir = os.path.join(root, ASSETS_DIR, "meshes")
            os.makedirs(assets_dir, exist_ok=True)
            for record in mesh_sources:
                manifest.asset_meshes.append(record.name)
                await self._copy_if_missing(record, os.path.join(assets_dir, record.name))

        # Textures
        self._feedback.update_task_feedback(token, 0, "Saving Textures")
        textures = [t for t in store.textures if not t.do_not_export]
        progress = _Progress(self._feedback, token, len(textures))
        used: Set[str] = set()
        for texture in textures:
            data = texture_to_data(texture)
            relative = "/".join((FILES_DIR, os.path.basename(texture.name)))
            data["name"] = relative
            data["url"] = relative

            dest = document_file_name(texture.name, texture.id, used)
            await self._write_document(os.path.join(textures_dir, dest), data)
            manifest.textures.append(dest)
            progress.advance()

        # Entities
        for entity_type, dir_name in ENTITY_DIRS.items():
            self._feedback.update_task_feedback(token, 0, _PHASE_MESSAGES[entity_type])
            entities = [e for e in store.collection(entity_type) if not e.do_not_export]
            progress = _Progress(self._feedback, token, len(entities))
            target_list = manifest.entity_documents(entity_type)
            used = set()
            for entity in entities:
                data = self._serialize_entity(entity)
                dest = document_file_name(entity.name, entity.id, used)
                await self._write_document(os.path.join(root, dir_name, dest), data)
                target_list.append(dest)
                progress.advance()

        await _run_blocking(write_text_atomic, os.path.join(root, file_name), dumps(manifest.to_dict()))
        return manifest

    def _serialize_entity(self, entity: Entity) -> Any:
        codec = CODECS[entity.type]
        if entity.type is not EntityType.MESH:
            return codec.serialize(entity)

        # Meshes are always pickable in the editor; save the user's value.
        pickable = entity.metadata.get(IS_PICKABLE)
        entity.payload["is_pickable"] = True if pickable is None else bool(pickable)
        try:
            data = codec.serialize(entity)
        finally:
            entity.payload["is_pickable"] = True
        return {"meshes": [data]}

    async def _write_document(self, file_path: str, data: Any) -> None:
        try:
            validate_serializable(data)
        except TypeError as e:
            raise EntityDocumentError(os.path.basename(file_path), str(e)) from e
        await _run_blocking(write_text_atomic, file_path, dumps(data))

    async def _copy_if_missing(self, record: FileRecord, dest: str) -> bool:
        if os.path.exists(dest):
            return False
        await _run_blocking(shutil.copyfile, record.path, dest)
        log.debug(f"[ProjectExporter] Copied '{record.path}' -> '{dest}'")
        return True
