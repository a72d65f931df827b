"""
ProjectManifest - the top-level index of a project directory.

File format (scene.editorproject, tab-indented JSON):
{
    "filesList": ["brick.png", ...],
    "textures": ["brick.png.json", ...],
    "meshes": ["Cube.json", ...],
    "lights": ["Sun.json", ...],
    "cameras": [...],
    "transformNodes": [...],
    "assets": {"meshes": ["tree.glb", ...]}
}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from scenekit.scene.entity import EntityType

PROJECT_EXTENSION = ".editorproject"
DEFAULT_PROJECT_FILE = "scene" + PROJECT_EXTENSION

FILES_DIR = "files"
TEXTURES_DIR = "textures"
ASSETS_DIR = "assets"

# Manifest list key, which is also the subdirectory name, per entity type
ENTITY_DIRS: Dict[EntityType, str] = {
    EntityType.MESH: "meshes",
    EntityType.LIGHT: "lights",
    EntityType.CAMERA: "cameras",
    EntityType.TRANSFORM_NODE: "transformNodes",
}


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return list(value)


@dataclass
class ProjectManifest:
    files_list: List[str] = field(default_factory=list)
    textures: List[str] = field(default_factory=list)
    meshes: List[str] = field(default_factory=list)
    lights: List[str] = field(default_factory=list)
    cameras: List[str] = field(default_factory=list)
    transform_nodes: List[str] = field(default_factory=list)
    asset_meshes: List[str] = field(default_factory=list)

    def entity_documents(self, entity_type: EntityType) -> List[str]:
        return {
            EntityType.MESH: self.meshes,
            EntityType.LIGHT: self.lights,
            EntityType.CAMERA: self.cameras,
            EntityType.TRANSFORM_NODE: self.transform_nodes,
        }[entity_type]

    def document_count(self) -> int:
        return (
            len(self.textures)
            + len(self.meshes)
            + len(self.lights)
            + len(self.cameras)
            + len(self.transform_nodes)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filesList": list(self.files_list),
            "textures": list(self.textures),
            "meshes": list(self.meshes),
            "lights": list(self.lights),
            "cameras": list(self.cameras),
            "transformNodes": list(self.transform_nodes),
            "assets": {
                "meshes": list(self.asset_meshes),
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectManifest":
        """
        Build manifest from parsed JSON.

        Raises ValueError when the data does not have the manifest shape.
        Absent lists are read as empty.
        """
        if not isinstance(data, dict):
            raise ValueError("manifest root must be an object")

        assets = data.get("assets", {})
        if not isinstance(assets, dict):
            raise ValueError("'assets' must be an object")

        return cls(
            files_list=_string_list(data, "filesList"),
            textures=_string_list(data, "textures"),
            meshes=_string_list(data, "meshes"),
            lights=_string_list(data, "lights"),
            cameras=_string_list(data, "cameras"),
            transform_nodes=_string_list(data, "transformNodes"),
            asset_meshes=_string_list(assets, "meshes"),
        )
