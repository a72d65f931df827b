from __future__ import annotations

from typing import Callable, List, Tuple

from scenekit import log
from scenekit.errors import CommandReplayError


class UndoCommand:
    """
    Base class of an undoable editor action.

    - redo() brings the state to the "new" value;
    - undo() brings it back to the "old" value;
    - common() runs once after either direction was applied, e.g. to refresh
      the hierarchy view. It is not undoable itself;
    - merge_with() tries to absorb the command pushed right after this one.

    Commands keep copies of the values they need (ids, snapshots, indexes),
    never references to containers that may change before a replay.
    """

    def __init__(self, text: str = "", on_common: Callable[[], None] | None = None) -> None:
        self.text = text
        self._on_common = on_common

    def redo(self) -> None:
        raise NotImplementedError

    def undo(self) -> None:
        raise NotImplementedError

    def common(self) -> None:
        if self._on_common is not None:
            self._on_common()

    def merge_with(self, other: "UndoCommand") -> bool:
        """
        Absorb `other`, which follows this command in time.

        Commands do not merge by default.
        """
        return False


class CommandGroup(UndoCommand):
    """
    Several commands applied as one logical action.

    Children run in order on redo and in reverse on undo. Only the group's
    own common() runs; the children's are skipped.
    """

    def __init__(
        self,
        commands: List[UndoCommand],
        text: str = "",
        on_common: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(text or ", ".join(c.text for c in commands), on_common)
        self._commands = list(commands)

    @property
    def commands(self) -> List[UndoCommand]:
        return list(self._commands)

    def redo(self) -> None:
        done: List[UndoCommand] = []
        try:
            for cmd in self._commands:
                cmd.redo()
                done.append(cmd)
        except Exception:
            for cmd in reversed(done):
                cmd.undo()
            raise

    def undo(self) -> None:
        done: List[UndoCommand] = []
        try:
            for cmd in reversed(self._commands):
                cmd.undo()
                done.append(cmd)
        except Exception:
            for cmd in reversed(done):
                cmd.redo()
            raise


class UndoStack:
    """
    Undo/redo history without GUI bindings.

    Commands are kept in one list with a cursor: everything before the
    cursor can be undone, everything from the cursor on can be redone.

    max_depth > 0 limits the history: on overflow the oldest command is
    dropped, the state stays as it is but cannot go back any further.

    Pushes issued while a command is being applied (from its redo, undo or
    common) are queued and run, in arrival order, once the current call
    has finished, even when that call raised. A failing queued push is
    logged and the rest still run; the error of the outer call is the one
    that propagates.
    """

    def __init__(
        self,
        max_depth: int = 1000,
        on_changed: Callable[[], None] | None = None,
    ) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        self._commands: List[UndoCommand] = []
        self._cursor = 0
        self._max_depth = max_depth
        self._on_changed = on_changed
        self._applying = False
        self._pending: List[Tuple[UndoCommand, bool]] = []

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._commands)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def is_applying(self) -> bool:
        return self._applying

    @property
    def commands(self) -> List[UndoCommand]:
        return list(self._commands)

    @property
    def done_commands(self) -> List[UndoCommand]:
        return self._commands[:self._cursor]

    @property
    def undone_commands(self) -> List[UndoCommand]:
        return self._commands[self._cursor:]

    def clear(self) -> None:
        """
        Forget the whole history.
        The edited objects are not touched, that is the caller's business.
        """
        self._commands.clear()
        self._cursor = 0
        self._changed()

    def push(self, cmd: UndoCommand, merge: bool = False) -> None:
        """
        Apply a new command and add it to the history.

        merge == True tries to merge cmd into the last applied command:
        if merge_with() accepts it, cmd is applied but only the old command
        stays in history, now covering both changes.

        The redo branch is dropped in any case. An exception raised by
        cmd.redo() propagates and nothing is recorded.
        """
        if self._applying:
            self._pending.append((cmd, merge))
            return
        self._run(self._push, cmd, merge)

    def undo(self) -> UndoCommand | None:
        """
        Undo the last applied command, if any.

        Raises CommandReplayError if the command fails; the cursor does not
        move in that case.
        """
        if not self.can_undo:
            return None
        return self._run(self._undo)

    def redo(self) -> UndoCommand | None:
        """Re-apply the last undone command, if any."""
        if not self.can_redo:
            return None
        return self._run(self._redo)

    def _run(self, fn, *args):
        self._applying = True
        try:
            result = fn(*args)
        finally:
            self._applying = False
            self._drain_pending()
        self._changed()
        return result

    def _drain_pending(self) -> None:
        while self._pending and not self._applying:
            cmd, merge = self._pending.pop(0)
            try:
                self._run(self._push, cmd, merge)
            except Exception as e:
                log.error(e, f"[UndoStack] Queued command '{cmd.text}' failed")

    def _push(self, cmd: UndoCommand, merge: bool) -> UndoCommand:
        last = self._commands[self._cursor - 1] if self._cursor > 0 else None

        cmd.redo()
        del self._commands[self._cursor:]

        if merge and last is not None and last.merge_with(cmd):
            # Absorbed: history keeps the old command with its updated state.
            last.common()
            return last

        self._commands.append(cmd)
        self._cursor += 1

        if self._max_depth > 0 and len(self._commands) > self._max_depth:
            self._commands.pop(0)
            self._cursor -= 1

        cmd.common()
        return cmd

    def _undo(self) -> UndoCommand:
        cmd = self._commands[self._cursor - 1]
        try:
            cmd.undo()
        except Exception as e:
            raise CommandReplayError(cmd.text, "undo") from e
        self._cursor -= 1
        cmd.common()
        return cmd

    def _redo(self) -> UndoCommand:
        cmd = self._commands[self._cursor]
        try:
            cmd.redo()
        except Exception as e:
            raise CommandReplayError(cmd.text, "redo") from e
        self._cursor += 1
        cmd.common()
        return cmd

    def _changed(self) -> None:
        if self._on_changed is not None:
            self._on_changed()

    def __len__(self) -> int:
        """Number of applied commands (the undo branch)."""
        return self._cursor


# Names used by the editor shell
Command = UndoCommand
CommandStack = UndoStack
