"""Messages exchanged over the input and docker command channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MouseKind(Enum):
    """Mouse event kinds reported by the terminal."""

    DOWN = "down"
    UP = "up"
    MOVE = "move"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


# Mouse kinds forwarded to the input handler, motion is dropped
FORWARDED_MOUSE = frozenset({MouseKind.DOWN, MouseKind.SCROLL_UP, MouseKind.SCROLL_DOWN})

LEFT_BUTTON = 1


@dataclass(frozen=True)
class KeyPress:
    """A key press: the key code ("q", "tab", "pageup", ...) plus modifiers."""

    code: str
    modifiers: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class MouseEvent:
    """A mouse event at a 0-based terminal cell."""

    kind: MouseKind
    column: int
    row: int
    button: int = LEFT_BUTTON


InputMessage = KeyPress | MouseEvent


class DockerCommand(Enum):
    """Container lifecycle commands executed by the runtime driver."""

    PAUSE = "pause"
    UNPAUSE = "unpause"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    DELETE = "delete"


@dataclass(frozen=True)
class DockerMessage:
    """A command for one container."""

    command: DockerCommand
    container_id: str
