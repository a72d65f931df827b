"""
Scenekit - scene editor core: project persistence and undoable editing.

Main packages:
- scene - entities, textures and the entity store
- project - file registry, manifest, project exporter and importer
- editor - undo stack, editor commands, settings and the editor session
"""

__version__ = '0.1.0'
