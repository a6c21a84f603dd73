"""Controller layer: input coordination between terminal events and state.

This package contains:
- messages: input and docker command channel messages
- input_handler: InputHandler, the input coordinator loop
"""

from controller.input_handler import InputHandler, toggle_sort
from controller.messages import (
    DockerCommand,
    DockerMessage,
    KeyPress,
    MouseEvent,
    MouseKind,
)

__all__ = [
    "InputHandler",
    "toggle_sort",
    # Messages
    "DockerCommand",
    "DockerMessage",
    "KeyPress",
    "MouseEvent",
    "MouseKind",
]
