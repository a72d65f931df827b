from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from scenekit import log
from scenekit.scene.entity import Entity


@runtime_checkable
class View(Protocol):
    def refresh(self) -> None:
        ...


class EditorViews:
    """
    Views that mirror the scene (hierarchy, inspector, viewport).

    Commands and the importer do not know the views; they call refresh()
    through their common callback. A view with a notify(entity) method is
    also told about single entity changes.
    """

    def __init__(self) -> None:
        self._views: List[View] = []

    @property
    def views(self) -> List[View]:
        return list(self._views)

    def register(self, view: View) -> None:
        if view not in self._views:
            self._views.append(view)

    def unregister(self, view: View) -> None:
        if view in self._views:
            self._views.remove(view)

    def refresh(self) -> None:
        for view in list(self._views):
            try:
                view.refresh()
            except Exception as e:
                log.error(e, f"[EditorViews] Refresh failed for {type(view).__name__}")

    def notify(self, entity: Entity) -> None:
        for view in list(self._views):
            notify = getattr(view, "notify", None)
            if notify is None:
                continue
            try:
                notify(entity)
            except Exception as e:
                log.error(e, f"[EditorViews] Notify failed for {type(view).__name__}")
