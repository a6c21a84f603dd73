"""Model classes for dockwatch: the two shared state stores and their data."""

from model.app_data import AppData, AppSnapshot, ContainerRow, ContainerStats, ContainerSummary
from model.app_error import (
    AppError,
    DockerCommandError,
    DockerConnectError,
    ExecError,
    MouseCaptureError,
    TerminalError,
)
from model.containers import (
    ContainerItem,
    ContainerPort,
    DockerControls,
    FilterBy,
    Header,
    SortedOrder,
    State,
    StatefulList,
)
from model.gui_state import ExecMode, GuiSnapshot, GuiState, Rect, SelectablePanel, Status

__all__ = [
    # Stores
    "AppData",
    "AppSnapshot",
    "GuiSnapshot",
    "GuiState",
    # Data
    "ContainerItem",
    "ContainerPort",
    "ContainerRow",
    "ContainerStats",
    "ContainerSummary",
    "DockerControls",
    "ExecMode",
    "FilterBy",
    "Header",
    "Rect",
    "SelectablePanel",
    "SortedOrder",
    "State",
    "StatefulList",
    "Status",
    # Errors
    "AppError",
    "DockerCommandError",
    "DockerConnectError",
    "ExecError",
    "MouseCaptureError",
    "TerminalError",
]
