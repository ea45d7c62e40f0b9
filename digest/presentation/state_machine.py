"""Lifecycle of the trigger button, summary overlay and notifications."""

import asyncio
import html

from digest.constants import LOADING_HTML, MSG_CANCELLED, NOTIFICATION_DISMISS_SECONDS
from digest.exceptions import PresentationStateError
from digest.log import get_logger
from digest.models import FocusTarget
from digest.types import NotificationKind, PresentationState

from .page import PageSurface
from .widgets import Notification, Overlay, TriggerButton

logger = get_logger(__name__)

S = PresentationState

_IDLE = {S.HIDDEN, S.TRIGGER_VISIBLE}
_TERMINAL = {S.DONE, S.FAILED, S.CANCELLED}
_BUSY = {S.PROMPTING, S.LOADING, S.STREAMING}

TRANSITIONS: dict[PresentationState, set[PresentationState]] = {
    S.HIDDEN: {S.TRIGGER_VISIBLE, S.PROMPTING},
    S.TRIGGER_VISIBLE: {S.HIDDEN, S.PROMPTING},
    S.PROMPTING: {S.LOADING, S.FAILED, S.HIDDEN, S.TRIGGER_VISIBLE},
    S.LOADING: {S.STREAMING, S.DONE, S.FAILED, S.CANCELLED},
    S.STREAMING: {S.DONE, S.FAILED, S.CANCELLED},
    S.DONE: {S.HIDDEN, S.TRIGGER_VISIBLE, S.PROMPTING},
    S.FAILED: {S.HIDDEN, S.TRIGGER_VISIBLE, S.PROMPTING},
    S.CANCELLED: {S.HIDDEN, S.TRIGGER_VISIBLE, S.PROMPTING},
}


def render_summary(text: str) -> str:
    """Summaries are HTML already; only bare newlines need converting."""
    return text.replace("\n", "<br>")


def render_message(message: str) -> str:
    return f"<p>{html.escape(message)}</p>"


class PresentationStateMachine:
    """Owns the on-page widgets and keeps them consistent.

    The overlay and the notification are singletons held by reference: showing
    either one again updates the mounted instance. Trigger visibility depends
    only on whether the page is an article and whether an editable element is
    focused.
    """

    def __init__(
        self,
        page: PageSurface,
        models: list[str],
        selected_model: str,
        notification_delay: float = NOTIFICATION_DISMISS_SECONDS,
    ) -> None:
        self.page = page
        self.notification_delay = notification_delay
        self.is_article = False
        self.editable_focused = False

        self.trigger = TriggerButton(models=list(models), selected_model=selected_model)
        self.overlay: Overlay | None = None
        self.notification: Notification | None = None

        self._state = S.HIDDEN
        self._trigger_mounted = False

    # State

    @property
    def state(self) -> PresentationState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state in _BUSY

    @property
    def trigger_visible(self) -> bool:
        return self.is_article and not self.editable_focused

    def _transition(self, target: PresentationState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise PresentationStateError(
                f"Illegal transition {self._state.value} -> {target.value}"
            )
        logger.debug(f"Presentation {self._state.value} -> {target.value}")
        self._state = target

    def _idle_state(self) -> PresentationState:
        return S.TRIGGER_VISIBLE if self.is_article else S.HIDDEN

    def _return_to_idle(self) -> None:
        if self._state not in _IDLE:
            self._transition(self._idle_state())

    # Trigger

    def attach(self, is_article: bool) -> None:
        """Show the trigger on article pages."""
        self.is_article = is_article
        if is_article and not self._trigger_mounted:
            self.page.mount(self.trigger)
            self._trigger_mounted = True
        self._refresh_trigger()
        if self._state in _IDLE and self._state != self._idle_state():
            self._transition(self._idle_state())

    def update_focus(self, target: FocusTarget | None) -> None:
        """Hide the trigger while an editable element has focus."""
        self.editable_focused = target is not None and target.is_editable
        self._refresh_trigger()

    def select_model(self, model_id: str) -> None:
        if model_id not in self.trigger.models:
            raise ValueError(f"Model {model_id} is not offered")
        self.trigger.selected_model = model_id

    def _refresh_trigger(self) -> None:
        self.trigger.visible = self.trigger_visible

    # Summarization lifecycle

    def begin_prompting(self) -> None:
        self._transition(S.PROMPTING)

    def abort_prompting(self, message: str) -> None:
        """Leave the prompt without a request, e.g. when no key was given."""
        self.notify(message, NotificationKind.INFO)
        self._transition(self._idle_state())

    def show_loading(self) -> None:
        self._transition(S.LOADING)
        self.open_overlay(LOADING_HTML)

    def show_partial(self, text: str) -> None:
        """Replace the overlay content with the text streamed so far."""
        if self._state == S.LOADING:
            self._transition(S.STREAMING)
        elif self._state != S.STREAMING:
            logger.debug(f"Ignoring streamed text in state {self._state.value}")
            return
        if self.overlay is not None:
            self.overlay.content_html = render_summary(text)

    def complete(self, text: str) -> None:
        self._transition(S.DONE)
        if self.overlay is not None:
            self.overlay.content_html = render_summary(text)
        else:
            logger.debug("Summary finished after the overlay was closed")
            self._return_to_idle()

    def fail(self, message: str) -> None:
        """Report an error in both the notification and the overlay."""
        self._transition(S.FAILED)
        self.notify(message, NotificationKind.ERROR)
        self.open_overlay(render_message(message))

    def cancel(self, message: str = MSG_CANCELLED) -> None:
        """Move to CANCELLED, keeping any text already streamed."""
        nothing_streamed = self._state == S.LOADING
        self._transition(S.CANCELLED)
        self.notify(message, NotificationKind.INFO)

        if self.overlay is None:
            self._return_to_idle()
        elif nothing_streamed:
            self.overlay.content_html = render_message(message)

    # Overlay

    def open_overlay(self, content_html: str) -> Overlay:
        """Show the overlay, reusing the mounted instance if there is one."""
        if self.overlay is None:
            self.overlay = Overlay(content_html=content_html)
            self.page.mount(self.overlay)
            self.page.set_scroll_locked(True)
        else:
            self.overlay.content_html = content_html
        return self.overlay

    def close_overlay(self) -> bool:
        """Remove the overlay; returns False if none was open.

        Closing during a request leaves the state to the caller, which is
        expected to cancel it.
        """
        if self.overlay is None:
            return False

        self.overlay.visible = False
        self.page.unmount(self.overlay)
        self.page.set_scroll_locked(False)
        self.overlay = None

        if self._state in _TERMINAL:
            self._return_to_idle()
        return True

    def handle_backdrop_click(self, inside_content: bool) -> bool:
        if inside_content:
            return False
        return self.close_overlay()

    # Notification

    def notify(
        self, message: str, kind: NotificationKind = NotificationKind.ERROR
    ) -> Notification:
        """Show a notification that dismisses itself after the delay.

        A notification already on screen gets the new text and a fresh timer.
        """
        loop = asyncio.get_running_loop()

        if self.notification is None:
            self.notification = Notification(message=message, kind=kind)
            self.page.mount(self.notification)
        else:
            if self.notification.timer is not None:
                self.notification.timer.cancel()
            self.notification.message = message
            self.notification.kind = kind

        self.notification.timer = loop.call_later(
            self.notification_delay, self.dismiss_notification
        )
        log = logger.warning if kind == NotificationKind.ERROR else logger.info
        log(f"Notification: {message}")
        return self.notification

    def dismiss_notification(self) -> None:
        if self.notification is None:
            return
        if self.notification.timer is not None:
            self.notification.timer.cancel()
        self.notification.visible = False
        self.page.unmount(self.notification)
        self.notification = None
