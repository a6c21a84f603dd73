"""Terminal backend contract used by the render loop.

The render loop owns the terminal through this protocol; the only concrete
backend in production is `app.TextualTerminal`, tests use an in-memory fake.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Protocol

from rich.console import RenderableType

from controller.messages import KeyPress, MouseEvent
from model.app_error import TerminalError


@dataclass(frozen=True)
class TerminalSize:
    width: int
    height: int


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class KeyEvent:
    """A raw key event; only presses are forwarded as input."""

    key: KeyPress
    pressed: bool = True


TerminalEvent = KeyEvent | MouseEvent | ResizeEvent


class Terminal(Protocol):
    """What the render loop needs from a terminal device."""

    def setup(self) -> None:
        """Enter raw mode and the alternate screen with restricted mouse capture.

        Raises TerminalError on failure.
        """

    def restore(self) -> None:
        """Leave the alternate screen, disable mouse and raw mode, show the cursor."""

    def set_mouse_capture(self, enabled: bool) -> None:
        """Enable or disable mouse reporting. Raises TerminalError on failure."""

    async def poll(self, timeout: float) -> TerminalEvent | None:
        """Wait up to timeout seconds for the next terminal event."""

    def draw(self, renderable: RenderableType) -> None:
        """Replace the screen contents. Raises TerminalError on failure."""

    def size(self) -> TerminalSize: ...

    def autoresize(self) -> None:
        """Recompute buffer dimensions after a resize."""

    def suspend(self) -> AbstractContextManager[None]:
        """Release the terminal for an external program, reacquire on exit."""


__all__ = [
    "KeyEvent",
    "ResizeEvent",
    "Terminal",
    "TerminalError",
    "TerminalEvent",
    "TerminalSize",
]
