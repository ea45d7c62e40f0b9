"""Host page surface the presentation layer draws on."""

from abc import ABC, abstractmethod
from typing import TypeVar

W = TypeVar("W")


class PageSurface(ABC):
    """Where widgets are attached in the host page."""

    @abstractmethod
    def mount(self, widget: object) -> None:
        pass

    @abstractmethod
    def unmount(self, widget: object) -> None:
        pass

    @abstractmethod
    def set_scroll_locked(self, locked: bool) -> None:
        """Block or restore scrolling and interaction behind a modal."""
        pass


class InMemoryPage(PageSurface):
    """Page surface that records mounted widgets."""

    def __init__(self) -> None:
        self.widgets: list[object] = []
        self.scroll_locked = False

    def mount(self, widget: object) -> None:
        self.widgets.append(widget)

    def unmount(self, widget: object) -> None:
        self.widgets = [w for w in self.widgets if w is not widget]

    def set_scroll_locked(self, locked: bool) -> None:
        self.scroll_locked = locked

    def find_all(self, widget_type: type[W]) -> list[W]:
        return [w for w in self.widgets if isinstance(w, widget_type)]
