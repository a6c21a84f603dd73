"""Input coordinator: turns key and mouse messages into state changes and commands."""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from typing import Callable

from controller.messages import (
    DockerCommand,
    DockerMessage,
    KeyPress,
    LEFT_BUTTON,
    MouseEvent,
    MouseKind,
)
from model import AppData, GuiState
from model.app_error import MouseCaptureError, TerminalError
from model.containers import DockerControls, Header, SortedOrder, SortSpec, State
from model.gui_state import ExecMode, Rect, SelectablePanel, Status

log = logging.getLogger(__name__)

# How long the info banner stays on screen, in seconds
INFO_BOX_DELAY = 4.0

# A page is this many single steps
PAGE_STEPS = 7

SORT_KEYS: dict[str, Header] = {
    "1": Header.STATE,
    "2": Header.STATUS,
    "3": Header.CPU,
    "4": Header.MEMORY,
    "5": Header.ID,
    "6": Header.NAME,
    "7": Header.IMAGE,
    "8": Header.RX,
    "9": Header.TX,
}

CONTROL_COMMANDS: dict[DockerControls, DockerCommand] = {
    DockerControls.PAUSE: DockerCommand.PAUSE,
    DockerControls.UNPAUSE: DockerCommand.UNPAUSE,
    DockerControls.START: DockerCommand.START,
    DockerControls.STOP: DockerCommand.STOP,
    DockerControls.RESTART: DockerCommand.RESTART,
}


def toggle_sort(current: SortSpec, header: Header) -> SortSpec:
    """Next sort after clicking header: descending first, then flip to ascending."""
    if current == (header, SortedOrder.DESC):
        return (header, SortedOrder.ASC)
    return (header, SortedOrder.DESC)


class InputHandler:
    """Single consumer of the input channel.

    Each message is routed by the current mode, in precedence order:
    error, help, delete confirmation, filter, then normal.
    """

    def __init__(
        self,
        app_data: AppData,
        gui_state: GuiState,
        rx: asyncio.Queue,
        docker_tx: queue.Queue,
        is_running: threading.Event,
        set_mouse_capture: Callable[[bool], None],
        info_delay: float = INFO_BOX_DELAY,
    ) -> None:
        self.app_data = app_data
        self.gui_state = gui_state
        self.rx = rx
        self.docker_tx = docker_tx
        self.is_running = is_running
        self._set_mouse_capture = set_mouse_capture
        self.info_delay = info_delay
        self.mouse_capture = True
        self.info_sleep: asyncio.TimerHandle | None = None

    async def run(self) -> None:
        """Drain the input channel until it closes or the app stops running."""
        log.debug("input handler started")
        try:
            while True:
                message = await self.rx.get()
                if message is None:
                    break
                self.handle(message)
                if not self.is_running.is_set():
                    break
        finally:
            if self.info_sleep is not None:
                self.info_sleep.cancel()
            log.debug("input handler stopped")

    def handle(self, message: KeyPress | MouseEvent) -> None:
        if isinstance(message, KeyPress):
            self.button_press(message)
        elif isinstance(message, MouseEvent):
            if not self.app_data.has_error() and not self.gui_state.show_help:
                self.mouse_press(message)

    # =========================================================================
    # Keyboard
    # =========================================================================

    def button_press(self, key: KeyPress) -> None:
        """Route a key press by the current mode."""
        status = self.gui_state.get_status()
        if self.app_data.has_error():
            self._error_mode(key)
        elif Status.HELP in status:
            self._help_mode(key)
        elif Status.DELETE_CONFIRM in status:
            self._delete_mode(key)
        elif Status.FILTER in status:
            self._filter_mode(key)
        else:
            self._normal_mode(key)

    def _error_mode(self, key: KeyPress) -> None:
        if key.code == "q":
            self.quit()
        elif key.code == "c":
            self.app_data.remove_error()

    def _help_mode(self, key: KeyPress) -> None:
        if key.code == "q":
            self.quit()
        elif key.code == "h":
            self.gui_state.show_help = False
        elif key.code == "m":
            self.m_button()

    def _delete_mode(self, key: KeyPress) -> None:
        if key.code == "q":
            self.quit()
        elif key.code == "y":
            container_id = self.gui_state.get_delete_container()
            if container_id is not None:
                self._send(DockerMessage(DockerCommand.DELETE, container_id))
            self.gui_state.set_delete_container(None)
        elif key.code in ("n", "escape"):
            self.gui_state.set_delete_container(None)

    def _filter_mode(self, key: KeyPress) -> None:
        code = key.code
        if code == "escape":
            self.app_data.set_filter_term(None)
            self.gui_state.status_del(Status.FILTER)
        elif code == "enter":
            self.gui_state.status_del(Status.FILTER)
        elif code == "backspace":
            self.app_data.filter_term_pop()
        elif code == "left":
            self.app_data.filter_by_prev()
        elif code == "right":
            self.app_data.filter_by_next()
        elif len(code) == 1 and code.isprintable() and not key.modifiers - {"shift"}:
            self.app_data.filter_term_push(code)

    def _normal_mode(self, key: KeyPress) -> None:
        code = key.code
        if code in SORT_KEYS:
            self.sort(SORT_KEYS[code])
        elif code == "0":
            self.app_data.set_sorted(None)
        elif code == "q":
            self.quit()
        elif code == "h":
            self.gui_state.show_help = True
        elif code == "m":
            self.m_button()
        elif code == "e":
            self.exec_container()
        elif code in ("/", "f1"):
            self.gui_state.status_push(Status.FILTER)
        elif code == "backtab" or (code == "tab" and "shift" in key.modifiers):
            self.gui_state.previous_panel()
        elif code == "tab":
            self.gui_state.next_panel()
        elif code == "home":
            self.start()
        elif code == "end":
            self.end()
        elif code in ("up", "k"):
            self.previous()
        elif code in ("down", "j"):
            self.next()
        elif code == "pageup":
            for _ in range(PAGE_STEPS):
                self.previous()
        elif code == "pagedown":
            for _ in range(PAGE_STEPS):
                self.next()
        elif code == "enter":
            self.activate()

    # =========================================================================
    # Mouse
    # =========================================================================

    def mouse_press(self, event: MouseEvent) -> None:
        if event.kind == MouseKind.SCROLL_UP:
            self.previous()
        elif event.kind == MouseKind.SCROLL_DOWN:
            self.next()
        elif event.kind == MouseKind.DOWN and event.button == LEFT_BUTTON:
            point = Rect(event.column, event.row, 1, 1)
            header = self.gui_state.header_intersect(point)
            if header is not None:
                self.sort(header)
            self.gui_state.panel_intersect(point)

    # =========================================================================
    # Actions
    # =========================================================================

    def quit(self) -> None:
        log.info("quit requested")
        self.is_running.clear()

    def sort(self, header: Header) -> None:
        self.app_data.set_sorted(toggle_sort(self.app_data.get_sorted(), header))

    def m_button(self) -> None:
        """Toggle mouse capture and show a banner that clears itself."""
        enable = not self.mouse_capture
        try:
            self._set_mouse_capture(enable)
        except TerminalError:
            log.exception("mouse capture toggle failed")
            self.app_data.set_error(MouseCaptureError(enable))
        else:
            text = "✓ mouse capture enabled" if enable else "✖ mouse capture disabled"
            self.gui_state.set_info_box(text)

        # Cancel before rescheduling, otherwise the older timer clears the newer banner
        if self.info_sleep is not None:
            self.info_sleep.cancel()
        loop = asyncio.get_running_loop()
        self.info_sleep = loop.call_later(self.info_delay, self.gui_state.reset_info_box)

        self.mouse_capture = enable

    def exec_container(self) -> None:
        container_id = self.app_data.get_selected_container_id()
        if container_id is None:
            return
        if self.app_data.get_selected_container_state() != State.RUNNING:
            return
        self.gui_state.set_exec_mode(ExecMode(container_id))

    def activate(self) -> None:
        """Send the highlighted command for the selected container."""
        if self.gui_state.get_selected_panel() != SelectablePanel.COMMANDS:
            return
        control = self.app_data.get_selected_command()
        if control is None:
            return
        container_id = self.app_data.get_selected_container_id()
        if container_id is None:
            return
        if control == DockerControls.DELETE:
            self.gui_state.set_delete_container(container_id)
            return
        self._send(DockerMessage(CONTROL_COMMANDS[control], container_id))

    def _send(self, message: DockerMessage) -> None:
        try:
            self.docker_tx.put_nowait(message)
        except queue.Full:
            log.debug("docker command channel full, dropped %s", message)

    def start(self) -> None:
        match self.gui_state.get_selected_panel():
            case SelectablePanel.CONTAINERS:
                self.app_data.containers_start()
            case SelectablePanel.LOGS:
                self.app_data.log_start()
            case SelectablePanel.COMMANDS:
                self.app_data.docker_command_start()

    def end(self) -> None:
        match self.gui_state.get_selected_panel():
            case SelectablePanel.CONTAINERS:
                self.app_data.containers_end()
            case SelectablePanel.LOGS:
                self.app_data.log_end()
            case SelectablePanel.COMMANDS:
                self.app_data.docker_command_end()

    def next(self) -> None:
        match self.gui_state.get_selected_panel():
            case SelectablePanel.CONTAINERS:
                self.app_data.containers_next()
            case SelectablePanel.LOGS:
                self.app_data.log_next()
            case SelectablePanel.COMMANDS:
                self.app_data.docker_command_next()

    def previous(self) -> None:
        match self.gui_state.get_selected_panel():
            case SelectablePanel.CONTAINERS:
                self.app_data.containers_previous()
            case SelectablePanel.LOGS:
                self.app_data.log_previous()
            case SelectablePanel.COMMANDS:
                self.app_data.docker_command_previous()
