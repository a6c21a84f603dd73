"""Interface state store: selected panel, overlays, info banner and hit regions."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum

from model.containers import Header

# Spinner frames shown in the heading while docker commands run
LOADING_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"


class SelectablePanel(Enum):
    """Panels that keyboard navigation can be routed to."""

    CONTAINERS = "containers"
    COMMANDS = "commands"
    LOGS = "logs"

    def next(self) -> SelectablePanel:
        members = list(SelectablePanel)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> SelectablePanel:
        members = list(SelectablePanel)
        return members[(members.index(self) - 1) % len(members)]


class Status(Enum):
    """Overlay flags. The error overlay lives in AppData as the stored error."""

    HELP = "help"
    FILTER = "filter"
    DELETE_CONFIRM = "delete_confirm"
    EXEC = "exec"
    DOCKER_CONNECT = "docker_connect"


@dataclass(frozen=True)
class Rect:
    """Screen rectangle in cells, origin top-left."""

    x: int
    y: int
    width: int
    height: int

    def contains(self, column: int, row: int) -> bool:
        return self.x <= column < self.x + self.width and self.y <= row < self.y + self.height

    def intersects(self, other: Rect) -> bool:
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )


@dataclass(frozen=True)
class ExecMode:
    """A pending exec hand-off into a container."""

    container_id: str


class GuiState:
    """Lock-guarded interface state shared by the render loop and input handler."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._selected_panel = SelectablePanel.CONTAINERS
        self._status: set[Status] = set()
        self._info_box: tuple[str, float] | None = None
        self._header_map: dict[Header, Rect] = {}
        self._panel_map: dict[SelectablePanel, Rect] = {}
        self._delete_container: str | None = None
        self._exec_mode: ExecMode | None = None
        self._loading: set[str] = set()
        self._loading_frame = 0

    # =========================================================================
    # Panels
    # =========================================================================

    def get_selected_panel(self) -> SelectablePanel:
        with self._lock:
            return self._selected_panel

    def set_selected_panel(self, panel: SelectablePanel) -> None:
        with self._lock:
            self._selected_panel = panel

    def next_panel(self) -> None:
        with self._lock:
            self._selected_panel = self._selected_panel.next()

    def previous_panel(self) -> None:
        with self._lock:
            self._selected_panel = self._selected_panel.prev()

    # =========================================================================
    # Overlays
    # =========================================================================

    def get_status(self) -> frozenset[Status]:
        with self._lock:
            return frozenset(self._status)

    def has_status(self, status: Status) -> bool:
        with self._lock:
            return status in self._status

    def status_push(self, status: Status) -> None:
        with self._lock:
            self._status.add(status)

    def status_del(self, status: Status) -> None:
        with self._lock:
            self._status.discard(status)

    @property
    def show_help(self) -> bool:
        return self.has_status(Status.HELP)

    @show_help.setter
    def show_help(self, value: bool) -> None:
        if value:
            self.status_push(Status.HELP)
        else:
            self.status_del(Status.HELP)

    def get_delete_container(self) -> str | None:
        with self._lock:
            return self._delete_container

    def set_delete_container(self, container_id: str | None) -> None:
        """Open (or close, with None) the delete confirmation for a container."""
        with self._lock:
            self._delete_container = container_id
            if container_id is None:
                self._status.discard(Status.DELETE_CONFIRM)
            else:
                self._status.add(Status.DELETE_CONFIRM)

    def get_exec_mode(self) -> ExecMode | None:
        with self._lock:
            return self._exec_mode

    def set_exec_mode(self, mode: ExecMode | None) -> None:
        with self._lock:
            self._exec_mode = mode
            if mode is None:
                self._status.discard(Status.EXEC)
            else:
                self._status.add(Status.EXEC)

    # =========================================================================
    # Loading spinner
    # =========================================================================

    def start_loading(self) -> str:
        """Mark a background operation as running; returns the handle to stop it."""
        handle = uuid.uuid4().hex
        with self._lock:
            self._loading.add(handle)
        return handle

    def stop_loading(self, handle: str) -> None:
        with self._lock:
            self._loading.discard(handle)
            if not self._loading:
                self._loading_frame = 0

    def is_loading(self) -> bool:
        with self._lock:
            return bool(self._loading)

    def next_loading(self) -> None:
        """Advance the spinner one frame, only while something is loading."""
        with self._lock:
            if self._loading:
                self._loading_frame = (self._loading_frame + 1) % len(LOADING_FRAMES)

    def get_loading(self) -> str:
        with self._lock:
            return LOADING_FRAMES[self._loading_frame]

    # =========================================================================
    # Info banner
    # =========================================================================

    def get_info_box(self) -> tuple[str, float] | None:
        with self._lock:
            return self._info_box

    def set_info_box(self, text: str) -> None:
        with self._lock:
            self._info_box = (text, time.monotonic())

    def reset_info_box(self) -> None:
        with self._lock:
            self._info_box = None

    def snapshot(self) -> GuiSnapshot:
        with self._lock:
            return GuiSnapshot(
                selected_panel=self._selected_panel,
                status=frozenset(self._status),
                info_box=self._info_box,
                delete_container=self._delete_container,
                loading_icon=LOADING_FRAMES[self._loading_frame] if self._loading else None,
            )

    # =========================================================================
    # Hit-test regions
    # =========================================================================

    def update_regions(
        self, headers: dict[Header, Rect], panels: dict[SelectablePanel, Rect]
    ) -> None:
        """Cache the regions produced by the latest draw."""
        with self._lock:
            self._header_map = dict(headers)
            self._panel_map = dict(panels)

    def clear_area_map(self) -> None:
        with self._lock:
            self._header_map.clear()
            self._panel_map.clear()

    def header_intersect(self, rect: Rect) -> Header | None:
        with self._lock:
            for header, area in self._header_map.items():
                if area.intersects(rect):
                    return header
        return None

    def panel_intersect(self, rect: Rect) -> SelectablePanel | None:
        """Select the panel under rect, if any, and return it."""
        with self._lock:
            for panel, area in self._panel_map.items():
                if area.intersects(rect):
                    self._selected_panel = panel
                    return panel
        return None


@dataclass(frozen=True)
class GuiSnapshot:
    """Point-in-time copy of the interface state."""

    selected_panel: SelectablePanel
    status: frozenset[Status]
    info_box: tuple[str, float] | None
    delete_container: str | None
    loading_icon: str | None = None
