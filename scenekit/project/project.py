"""
ProjectContext - state of the currently opened project.

One instance lives for the whole editor session and is passed by reference
to the exporter, the importer and the asset libraries. `open()` and
`reset()` are tied to the "open project" / "close project" events.
"""

from __future__ import annotations

import os

from scenekit.project.files import FileRecord, FileRegistry
from scenekit.project.typings import DEFAULT_PROJECT_FILE, ProjectManifest
from scenekit.scene.entity_store import EntityStore


class ProjectContext:
    def __init__(
        self,
        store: EntityStore | None = None,
        files: FileRegistry | None = None,
        mesh_assets: FileRegistry | None = None,
    ) -> None:
        self.store = store if store is not None else EntityStore()
        self.files = files if files is not None else FileRegistry()
        # Mesh sources imported into the asset library (assets/meshes/<name>)
        self.mesh_assets = mesh_assets if mesh_assets is not None else FileRegistry()
        self.manifest: ProjectManifest | None = None
        self._path: str | None = None
        self._dir_path: str | None = None

    @property
    def path(self) -> str | None:
        """Path of the project manifest file, None for an unsaved project."""
        return self._path

    @property
    def dir_path(self) -> str | None:
        """Directory containing the project."""
        return self._dir_path

    @property
    def is_open(self) -> bool:
        return self._path is not None

    def open(self, path: str) -> None:
        """Point the context at an existing or future manifest file."""
        path = os.path.abspath(path)
        self._path = path
        self._dir_path = os.path.dirname(path)
        self.files.project = FileRecord(name=os.path.basename(path), path=path)

    def set_directory(self, dir_path: str, file_name: str = DEFAULT_PROJECT_FILE) -> None:
        self.open(os.path.join(dir_path, file_name))

    def clear_content(self) -> None:
        """Forget entities, textures and registered files; keep the path."""
        project = self.files.project
        self.files.clear()
        self.files.project = project
        self.mesh_assets.clear()
        self.store.clear()
        self.manifest = None

    def reset(self) -> None:
        """Close the project: empty state and no path."""
        self.clear_content()
        self.files.clear()
        self._path = None
        self._dir_path = None
