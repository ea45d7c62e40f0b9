"""UI elements owned by the presentation state machine."""

import asyncio
from dataclasses import dataclass, field

from digest.constants import TRIGGER_LABEL
from digest.types import NotificationKind


@dataclass
class TriggerButton:
    """Floating button; click summarizes, double-click resets the key."""

    models: list[str]
    selected_model: str
    label: str = TRIGGER_LABEL
    visible: bool = True


@dataclass
class Overlay:
    """Modal surface showing loading state, summary or error text."""

    content_html: str = ""
    visible: bool = True
    close_label: str = "×"


@dataclass
class Notification:
    """Transient message in the page corner."""

    message: str
    kind: NotificationKind = NotificationKind.ERROR
    visible: bool = True
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)
