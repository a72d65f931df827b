"""
Editor settings.

Keeps editor preferences between sessions. Uses QSettings for
cross-platform storage.
"""

from __future__ import annotations

import os
from typing import Any

from PyQt6.QtCore import QSettings

from scenekit.project.typings import DEFAULT_PROJECT_FILE


class EditorSettings:
    """
    Editor settings manager.

    instance() gives the shared object. Settings are stored in:
    - Windows: registry HKEY_CURRENT_USER\\Software\\Scenekit\\ScenekitEditor
    - Linux: ~/.config/Scenekit/ScenekitEditor.conf
    - macOS: ~/Library/Preferences/com.scenekit.ScenekitEditor.plist

    Passing ini_path keeps everything in one INI file instead (tests,
    portable installs).
    """

    _instance: "EditorSettings | None" = None

    # Setting keys
    KEY_LAST_PROJECT_FILE = "Project/lastProjectFile"
    KEY_PROJECT_FILE_NAME = "Project/projectFileName"
    KEY_UNDO_DEPTH = "Editor/undoDepth"

    DEFAULT_UNDO_DEPTH = 1000

    def __init__(self, ini_path: str | None = None):
        if ini_path is not None:
            self._settings = QSettings(ini_path, QSettings.Format.IniFormat)
        else:
            self._settings = QSettings("Scenekit", "ScenekitEditor")

    @classmethod
    def instance(cls) -> "EditorSettings":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.value(key, default)

    def set(self, key: str, value: Any) -> None:
        self._settings.setValue(key, value)

    def sync(self) -> None:
        """Flush the settings to disk."""
        self._settings.sync()

    # --- Shortcuts for frequent settings ---

    def get_last_project_file(self) -> str | None:
        """Last saved or opened project file, if it still exists."""
        path = self.get(self.KEY_LAST_PROJECT_FILE)
        if path and os.path.isfile(path):
            return path
        return None

    def set_last_project_file(self, path: str | None) -> None:
        if path:
            self.set(self.KEY_LAST_PROJECT_FILE, str(path))
        else:
            self._settings.remove(self.KEY_LAST_PROJECT_FILE)

    def get_project_file_name(self) -> str:
        """File name used by "save as" when none is given."""
        return self.get(self.KEY_PROJECT_FILE_NAME) or DEFAULT_PROJECT_FILE

    def set_project_file_name(self, name: str) -> None:
        self.set(self.KEY_PROJECT_FILE_NAME, name)

    def get_undo_depth(self) -> int:
        return self._settings.value(self.KEY_UNDO_DEPTH, self.DEFAULT_UNDO_DEPTH, type=int)

    def set_undo_depth(self, depth: int) -> None:
        self.set(self.KEY_UNDO_DEPTH, int(depth))
