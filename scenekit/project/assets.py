"""
Asset libraries - files dropped into the editor's asset panels.

Textures are copied to <project>/files/ and registered in the FileRegistry;
mesh sources are copied to <project>/assets/meshes/ and kept in the mesh
asset library.
"""

from __future__ import annotations

import os
import shutil
from typing import Iterable, List, Tuple

from PIL import Image, UnidentifiedImageError

from scenekit import log
from scenekit.errors import ProjectIOError
from scenekit.project.files import FileRecord
from scenekit.project.project import ProjectContext
from scenekit.project.typings import ASSETS_DIR, FILES_DIR
from scenekit.scene.texture import Texture


def image_size(path: str) -> Tuple[int, int]:
    """(width, height) of an image file; (0, 0) if it cannot be read."""
    try:
        with Image.open(path) as image:
            return image.size
    except (OSError, UnidentifiedImageError) as e:
        log.warn(f"[TextureAssets] Cannot read image size of '{path}': {e}")
        return 0, 0


def _require_project_dir(context: ProjectContext) -> str:
    if context.dir_path is None:
        raise ProjectIOError("Project has no location yet, save it before importing assets")
    return context.dir_path


class TextureAssets:
    EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tga"}

    def __init__(self, context: ProjectContext):
        self._context = context

    def import_files(self, paths: Iterable[str]) -> List[Texture]:
        """
        Import image files as scene textures.

        Files already known by base name are copied again but do not create
        a second texture. Returns the created textures.
        """
        root = _require_project_dir(self._context)
        files_dir = os.path.join(root, FILES_DIR)
        os.makedirs(files_dir, exist_ok=True)

        created: List[Texture] = []
        for source in paths:
            name = os.path.basename(source)
            if os.path.splitext(name)[1].lower() not in self.EXTENSIONS:
                continue

            dest = os.path.join(files_dir, name)
            if self._context.files.find_by_base_name(name) is None:
                self._context.files.register(dest, name)
                width, height = image_size(source)
                texture = Texture(
                    name="/".join((FILES_DIR, name)),
                    url=dest,
                    payload={"width": width, "height": height},
                )
                created.append(self._context.store.add_texture(texture))

            if os.path.abspath(source) != os.path.abspath(dest):
                shutil.copyfile(source, dest)

        return created

    def records(self) -> List[FileRecord]:
        return [r for r in self._context.files if os.path.splitext(r.name)[1].lower() in self.EXTENSIONS]


class MeshAssets:
    EXTENSIONS = {".babylon", ".gltf", ".glb", ".obj", ".stl"}

    def __init__(self, context: ProjectContext):
        self._context = context

    @property
    def meshes(self) -> List[FileRecord]:
        return list(self._context.mesh_assets)

    def find(self, name: str) -> FileRecord | None:
        return self._context.mesh_assets.find_by_base_name(name)

    def import_files(self, paths: Iterable[str]) -> List[FileRecord]:
        """
        Copy mesh sources into the project's asset library.

        Returns the records added to the library (known names are only
        copied over).
        """
        root = _require_project_dir(self._context)
        meshes_dir = os.path.join(root, ASSETS_DIR, "meshes")
        os.makedirs(meshes_dir, exist_ok=True)

        added: List[FileRecord] = []
        for source in paths:
            name = os.path.basename(source)
            if os.path.splitext(name)[1].lower() not in self.EXTENSIONS:
                continue

            dest = os.path.join(meshes_dir, name)
            if os.path.abspath(source) != os.path.abspath(dest):
                shutil.copyfile(source, dest)

            if self.find(name) is None:
                added.append(self._context.mesh_assets.register(dest, name))

        return added
