"""On-page UI: trigger button, summary overlay and notifications."""

from .page import InMemoryPage, PageSurface
from .shortcut import KeyboardShortcut
from .state_machine import PresentationStateMachine, render_message, render_summary
from .widgets import Notification, Overlay, TriggerButton

__all__ = [
    "InMemoryPage",
    "KeyboardShortcut",
    "Notification",
    "Overlay",
    "PageSurface",
    "PresentationStateMachine",
    "TriggerButton",
    "render_message",
    "render_summary",
]
