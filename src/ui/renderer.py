"""Render/lifecycle loop: owns the terminal, draws frames and forwards input."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable

from controller.messages import FORWARDED_MOUSE, MouseEvent
from model import AppData, GuiState
from model.app_error import AppError, DockerConnectError, TerminalError
from model.gui_state import ExecMode, Status
from runtime.exec import ExecSession
from terminal import KeyEvent, ResizeEvent, Terminal, TerminalEvent
from ui.draw import draw_error, draw_frame
from ui.frame import FrameData

log = logging.getLogger(__name__)

# Seconds to wait for terminal input per tick
INPUT_POLL_RATE = 0.1

# The startup connection error stays up this many seconds
ERROR_COUNTDOWN = 5


class Ui:
    """Draws once per tick, then waits briefly for one terminal event.

    Drawing and terminal I/O never happen while either store lock is held:
    each tick copies the stores into a FrameData first.
    """

    def __init__(
        self,
        app_data: AppData,
        gui_state: GuiState,
        terminal: Terminal,
        input_tx: asyncio.Queue,
        is_running: threading.Event,
        exec_factory: Callable[[ExecMode], ExecSession] = ExecSession.from_mode,
        poll_rate: float = INPUT_POLL_RATE,
        error_tick: float = 1.0,
    ) -> None:
        self.app_data = app_data
        self.gui_state = gui_state
        self.terminal = terminal
        self.input_tx = input_tx
        self.is_running = is_running
        self.exec_factory = exec_factory
        self.poll_rate = poll_rate
        self.error_tick = error_tick

    async def run(self) -> None:
        """Set up the terminal, run the loops, and always restore the terminal."""
        try:
            self.terminal.setup()
            await self.draw_ui()
        finally:
            self.is_running.clear()
            try:
                self.terminal.restore()
            finally:
                self.input_tx.put_nowait(None)
                log.info("render loop stopped")

    async def draw_ui(self) -> None:
        """Show the connection error countdown, or run the dashboard."""
        if self.gui_state.has_status(Status.DOCKER_CONNECT):
            await self.err_loop()
        else:
            await self.gui_loop()

    async def err_loop(self) -> None:
        """Redraw the connection error once per tick, counting down to exit."""
        error = self.app_data.get_error() or DockerConnectError()
        for seconds in range(ERROR_COUNTDOWN, 0, -1):
            size = self.terminal.size()
            self.terminal.draw(draw_error(error, seconds, size.width, size.height))
            await asyncio.sleep(self.error_tick)

    async def gui_loop(self) -> None:
        while self.is_running.is_set():
            self.gui_state.next_loading()
            frame = self.snapshot()
            if Status.EXEC in frame.status:
                await self.exec()
                frame = self.snapshot()

            self.draw(frame)

            event = await self.terminal.poll(self.poll_rate)
            if event is not None:
                await self.handle_event(event)

    def snapshot(self) -> FrameData:
        size = self.terminal.size()
        return FrameData.from_stores(self.app_data, self.gui_state, size.width, size.height)

    def draw(self, frame: FrameData) -> None:
        drawn = draw_frame(frame)
        self.terminal.draw(drawn.renderable)
        self.gui_state.update_regions(drawn.headers, drawn.panels)

        # The container pending deletion was removed elsewhere
        if frame.gui.delete_container is not None and frame.delete_confirm_name is None:
            self.gui_state.set_delete_container(None)

    async def handle_event(self, event: TerminalEvent) -> None:
        if isinstance(event, KeyEvent):
            if event.pressed:
                await self.input_tx.put(event.key)
        elif isinstance(event, MouseEvent):
            if event.kind in FORWARDED_MOUSE:
                await self.input_tx.put(event)
        elif isinstance(event, ResizeEvent):
            self.gui_state.clear_area_map()
            self.terminal.autoresize()

    async def exec(self) -> None:
        """Hand the terminal to an interactive exec session, then take it back."""
        mode = self.gui_state.get_exec_mode()
        try:
            if mode is not None:
                session = self.exec_factory(mode)
                size = self.terminal.size()
                log.info("exec into %s", mode.container_id)
                try:
                    with self.terminal.suspend():
                        await asyncio.to_thread(session.run, size)
                except TerminalError:
                    raise
                except AppError as error:
                    self.app_data.set_error(error)
                self.terminal.setup()
        finally:
            self.gui_state.set_exec_mode(None)

