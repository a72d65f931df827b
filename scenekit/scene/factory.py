"""Creation of default scene entities from the editor's "Add" menu."""

from __future__ import annotations

from scenekit.scene.entity import Entity, EntityType, random_id
from scenekit.scene.entity_store import EntityStore


class SceneFactory:
    @staticmethod
    def create_cube() -> Entity:
        return Entity(
            name="New Cube",
            type=EntityType.MESH,
            id=random_id(),
            payload={"geometry_id": "box"},
        )

    @staticmethod
    def create_sphere() -> Entity:
        return Entity(
            name="New Sphere",
            type=EntityType.MESH,
            id=random_id(),
            payload={"geometry_id": "sphere"},
        )

    @staticmethod
    def create_point_light() -> Entity:
        return Entity(
            name="New Point Light",
            type=EntityType.LIGHT,
            id=random_id(),
            payload={"kind": "point"},
        )

    @staticmethod
    def create_transform_node(name: str = "New Transform Node") -> Entity:
        return Entity(name=name, type=EntityType.TRANSFORM_NODE, id=random_id())

    @staticmethod
    def create_camera(name: str = "New Camera") -> Entity:
        return Entity(name=name, type=EntityType.CAMERA, id=random_id())

    # Direct helpers, bypassing undo. Editor code goes through AddEntityCommand.

    @classmethod
    def add_cube(cls, store: EntityStore) -> Entity:
        return store.add(cls.create_cube())

    @classmethod
    def add_sphere(cls, store: EntityStore) -> Entity:
        return store.add(cls.create_sphere())

    @classmethod
    def add_point_light(cls, store: EntityStore) -> Entity:
        return store.add(cls.create_point_light())

    @classmethod
    def add_transform_node(cls, store: EntityStore, name: str = "New Transform Node") -> Entity:
        return store.add(cls.create_transform_node(name))

    @classmethod
    def add_camera(cls, store: EntityStore, name: str = "New Camera") -> Entity:
        return store.add(cls.create_camera(name))
