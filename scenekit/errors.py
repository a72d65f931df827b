"""Exceptions raised by the project persistence layer and the command stack."""

from __future__ import annotations


class ScenekitError(Exception):
    """Base class for scenekit errors."""


class ProjectLoadError(ScenekitError):
    """
    The project manifest is missing, unreadable or malformed.

    Recoverable: the editor falls back to an empty project.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot load project '{path}': {reason}")
        self.path = path
        self.reason = reason


class EntityDocumentError(ScenekitError):
    """A single entity document cannot be turned into an entity (or back)."""

    def __init__(self, document: str, reason: str):
        super().__init__(f"Invalid entity document '{document}': {reason}")
        self.document = document
        self.reason = reason


class DuplicateIdError(ScenekitError, KeyError):
    """An entity with an explicit id collides with one already in the store."""

    def __init__(self, entity_id: str):
        super().__init__(entity_id)
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"Entity id '{self.entity_id}' is already in use"


class ProjectIOError(ScenekitError, OSError):
    """Writing or copying a project file failed; the save is aborted."""


class CommandReplayError(ScenekitError):
    """A command failed while being undone or redone."""

    def __init__(self, text: str, direction: str):
        super().__init__(f"Failed to {direction} '{text}'")
        self.text = text
        self.direction = direction
