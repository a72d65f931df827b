"""
FileRegistry - auxiliary files (textures, raw sources) known to the project.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterator


@dataclass
class FileRecord:
    """
    name – file name in the file system (not necessarily unique).
    path – absolute path of the file; the registry key.
    """
    name: str
    path: str


class FileRegistry:
    """
    Records keyed by absolute path, in registration order.

    `project` references the currently opened project file and is reset
    together with the records.
    """

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}
        self.project: FileRecord | None = None

    def register(self, path: str, name: str) -> FileRecord:
        """Insert or overwrite the record stored at `path`."""
        record = FileRecord(name=name, path=path)
        self._records[path] = record
        return record

    def find_by_path(self, path: str) -> FileRecord | None:
        return self._records.get(path)

    def find_by_base_name(self, name: str) -> FileRecord | None:
        """First record, in registration order, whose base name is `name`."""
        for record in self._records.values():
            if os.path.basename(record.name) == name:
                return record
        return None

    def remove_by_path(self, path: str) -> None:
        self._records.pop(path, None)

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records = {}
        self.project = None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records.values()))
