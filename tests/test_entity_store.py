"""EntityStore: collections, id uniqueness and hierarchy."""

import numpy as np
import pytest

from scenekit.errors import DuplicateIdError
from scenekit.scene.inspect_field import MISSING
from scenekit.scene import Entity, EntityStore, EntityType, SceneFactory, Texture


def _node(name, entity_id, parent_id=None, entity_type=EntityType.TRANSFORM_NODE):
    return Entity(name=name, type=entity_type, id=entity_id, parent_id=parent_id)


def test_add_puts_entities_into_their_type_collection():
    store = EntityStore()
    cube = SceneFactory.add_cube(store)
    light = SceneFactory.add_point_light(store)
    node = SceneFactory.add_transform_node(store)
    camera = SceneFactory.add_camera(store)
    sphere = SceneFactory.add_sphere(store)

    assert store.meshes == [cube, sphere]
    assert store.lights == [light]
    assert store.transform_nodes == [node]
    assert store.cameras == [camera]
    assert store.all_entities() == [cube, sphere, light, camera, node]
    assert sphere.payload["geometry_id"] == "sphere"
    assert len(store) == 5


def test_add_generates_missing_id():
    store = EntityStore()
    entity = store.add(Entity(name="Cube", type=EntityType.MESH))

    assert entity.id
    assert store.get(entity.id) is entity


def test_duplicate_id_is_rejected():
    store = EntityStore()
    store.add(_node("A", "n1"))

    with pytest.raises(DuplicateIdError) as exc_info:
        store.add(_node("B", "n1"))

    assert exc_info.value.entity_id == "n1"
    # Also a KeyError for callers that only know the mapping protocol
    assert isinstance(exc_info.value, KeyError)
    assert len(store) == 1


def test_texture_ids_share_the_id_space():
    store = EntityStore()
    store.add_texture(Texture(name="files/brick.png", id="t1"))

    with pytest.raises(DuplicateIdError):
        store.add(_node("A", "t1"))


def test_add_with_unknown_parent_fails():
    store = EntityStore()
    with pytest.raises(ValueError):
        store.add(_node("B", "n2", parent_id="missing"))


def test_add_at_index():
    store = EntityStore()
    a = store.add(_node("A", "a"))
    c = store.add(_node("C", "c"))
    b = store.add(_node("B", "b"), index=1)

    assert store.transform_nodes == [a, b, c]
    assert store.index_of(b) == 1


def test_remove_makes_children_roots():
    store = EntityStore()
    store.add(_node("A", "n1"))
    child = store.add(_node("B", "n2", parent_id="n1"))

    store.remove("n1")

    assert "n1" not in store
    assert child.parent_id is None
    assert store.root_entities() == [child]


def test_remove_unknown_id_raises_key_error():
    store = EntityStore()
    with pytest.raises(KeyError):
        store.remove("missing")


def test_set_parent_and_children():
    store = EntityStore()
    store.add(_node("A", "n1"))
    mesh = store.add(_node("B", "n2", entity_type=EntityType.MESH))

    store.set_parent("n2", "n1")

    assert store.get_parent(mesh).id == "n1"
    assert store.children("n1") == [mesh]

    store.set_parent("n2", None)
    assert mesh.parent_id is None


def test_set_parent_rejects_cycles():
    store = EntityStore()
    store.add(_node("A", "a"))
    store.add(_node("B", "b", parent_id="a"))
    store.add(_node("C", "c", parent_id="b"))

    with pytest.raises(ValueError):
        store.set_parent("a", "c")
    with pytest.raises(ValueError):
        store.set_parent("a", "a")
    with pytest.raises(ValueError):
        store.set_parent("a", "unknown")


def test_descendants_are_depth_first_parents_first():
    store = EntityStore()
    store.add(_node("A", "a"))
    store.add(_node("B", "b", parent_id="a"))
    store.add(_node("C", "c", parent_id="b"))
    store.add(_node("D", "d", parent_id="a"))

    assert [e.id for e in store.descendants("a")] == ["b", "c", "d"]


def test_property_paths():
    store = EntityStore()
    light = SceneFactory.add_point_light(store)

    store.set_property(light.id, "payload.intensity", 0.5)
    store.set_property(light.id, "payload.diffuse", [1, 0, 0])
    store.set_property(light.id, "name", "Sun")

    assert store.get_property(light.id, "payload.intensity") == 0.5
    assert light.name == "Sun"
    diffuse = store.get_property(light.id, "payload.diffuse")
    assert isinstance(diffuse, np.ndarray)
    assert np.allclose(diffuse, [1.0, 0.0, 0.0])


def test_identity_fields_cannot_be_set_as_properties():
    store = EntityStore()
    store.add(_node("A", "n1"))

    for path in ("id", "type", "parent_id"):
        with pytest.raises(ValueError):
            store.set_property("n1", path, "x")


def test_textures():
    store = EntityStore()
    texture = store.add_texture(Texture(name="files/brick.png"))

    assert texture.id
    assert store.find_texture(texture.id) is texture
    assert store.textures == [texture]

    store.remove_texture(texture.id)
    assert store.textures == []


def test_clear():
    store = EntityStore()
    SceneFactory.add_cube(store)
    store.add_texture(Texture(name="files/brick.png"))

    store.clear()

    assert len(store) == 0
    assert store.textures == []


def test_entity_defaults_and_clone():
    mesh = Entity(name="Cube", type="Mesh", payload={"position": [1, 2, 3]})

    assert mesh.type is EntityType.MESH
    assert mesh.payload["is_pickable"] is True
    assert mesh.payload["position"].dtype == np.float64

    clone = mesh.clone(name="Cube Cloned")
    clone.payload["position"][0] = 10.0

    assert clone.id != mesh.id
    assert mesh.payload["position"][0] == 1.0


def test_missing_property_paths():
    store = EntityStore()
    cube = SceneFactory.add_cube(store)

    with pytest.raises(KeyError):
        store.get_property(cube.id, "metadata.isPickable")
    assert store.get_property(cube.id, "metadata.isPickable", MISSING) is MISSING

    store.set_property(cube.id, "metadata.isPickable", False)
    store.delete_property(cube.id, "metadata.isPickable")
    assert "isPickable" not in cube.metadata
    # Deleting an absent key is a no-op
    store.delete_property(cube.id, "metadata.isPickable")

    with pytest.raises(ValueError):
        store.delete_property(cube.id, "id")
