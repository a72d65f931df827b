"""Editor-side helpers: undo stack, commands, controllers and settings."""

from scenekit.editor.undo_stack import Command, CommandGroup, CommandStack, UndoCommand, UndoStack

__all__ = [
    "Command",
    "CommandGroup",
    "CommandStack",
    "UndoCommand",
    "UndoStack",
]
