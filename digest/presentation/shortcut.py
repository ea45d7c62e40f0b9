"""Keyboard shortcut parsing."""

from dataclasses import dataclass

from digest.models import KeyEvent

_MODIFIERS = {"ctrl", "control", "alt", "option", "meta", "cmd", "shift"}


@dataclass(frozen=True)
class KeyboardShortcut:
    """A key with optional modifiers, e.g. ``S`` or ``Alt+S``.

    Letter case and Shift are ignored unless Shift is part of the shortcut.
    """

    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False
    shift: bool = False

    @classmethod
    def parse(cls, spec: str) -> "KeyboardShortcut":
        parts = [part.strip() for part in spec.split("+") if part.strip()]
        if not parts:
            raise ValueError("Shortcut must name a key")

        *modifiers, key = parts
        names = {modifier.lower() for modifier in modifiers}
        unknown = names - _MODIFIERS
        if unknown:
            raise ValueError(f"Unknown modifier(s): {', '.join(sorted(unknown))}")

        return cls(
            key=key.lower(),
            ctrl=bool(names & {"ctrl", "control"}),
            alt=bool(names & {"alt", "option"}),
            meta=bool(names & {"meta", "cmd"}),
            shift="shift" in names,
        )

    def matches(self, event: KeyEvent) -> bool:
        if event.key.lower() != self.key:
            return False
        if (event.ctrl, event.alt, event.meta) != (self.ctrl, self.alt, self.meta):
            return False
        return event.shift if self.shift else True
