"""Scene textures. Owned by the EntityStore, never parented."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict

from scenekit.scene.entity import DO_NOT_EXPORT, random_id


def default_texture_payload() -> Dict[str, Any]:
    return {
        "has_alpha": False,
        "level": 1.0,
        "u_scale": 1.0,
        "v_scale": 1.0,
        "wrap_u": 1,
        "wrap_v": 1,
        "width": 0,
        "height": 0,
    }


@dataclass(eq=False)
class Texture:
    """
    Texture used by scene materials.

    name – as shown in the asset panel, usually "files/<basename>" once the
           texture belongs to a project, or the absolute source path before.
    url  – location the image is read from.
    """

    name: str
    url: str | None = None
    id: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        merged = default_texture_payload()
        merged.update(self.payload)
        self.payload = merged

    @property
    def do_not_export(self) -> bool:
        return bool(self.metadata.get(DO_NOT_EXPORT, False))

    def clone(self) -> "Texture":
        return Texture(
            name=self.name,
            url=self.url,
            id=random_id(),
            payload=copy.deepcopy(self.payload),
            metadata=copy.deepcopy(self.metadata),
        )
