"""Project persistence: file registry, manifest, exporter and importer."""

from scenekit.project.assets import MeshAssets, TextureAssets
from scenekit.project.feedback import LogTaskFeedback, TaskFeedback
from scenekit.project.files import FileRecord, FileRegistry
from scenekit.project.project import ProjectContext
from scenekit.project.project_exporter import ProjectExporter
from scenekit.project.project_importer import ProjectImporter, is_project_file
from scenekit.project.typings import DEFAULT_PROJECT_FILE, PROJECT_EXTENSION, ProjectManifest

__all__ = [
    "DEFAULT_PROJECT_FILE",
    "PROJECT_EXTENSION",
    "FileRecord",
    "FileRegistry",
    "LogTaskFeedback",
    "MeshAssets",
    "ProjectContext",
    "ProjectExporter",
    "ProjectImporter",
    "ProjectManifest",
    "TaskFeedback",
    "TextureAssets",
    "is_project_file",
]
