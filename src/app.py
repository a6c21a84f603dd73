"""Main TUI application for dockwatch."""

import asyncio
import logging
import os
import queue
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from rich.console import RenderableType
from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.css.query import NoMatches
from textual.widgets import Static

from controller import InputHandler
from controller.input_handler import INFO_BOX_DELAY
from controller.messages import KeyPress, MouseEvent, MouseKind
from model import AppData, GuiState
from model.app_error import ExecError, TerminalError
from model.gui_state import ExecMode
from runtime.exec import ExecSession
from terminal import KeyEvent, ResizeEvent, TerminalEvent, TerminalSize
from ui import Ui
from ui.ids import css
import ui.ids as ids


# Set up logging to XDG state directory
def _get_log_path() -> Path:
    """Get the log file path using XDG Base Directory spec."""
    xdg_state = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))
    log_dir = Path(xdg_state) / "dockwatch"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "dockwatch.log"


logging.basicConfig(
    filename=str(_get_log_path()),
    level=logging.DEBUG,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
log = logging.getLogger(__name__)

APP_CSS = """
Screen {
    layers: base;
}

#canvas {
    width: 100%;
    height: 100%;
    padding: 0;
}
"""

# xterm mouse reporting: buttons, urxvt and SGR extended coordinates
MOUSE_ON = "\x1b[?1000h\x1b[?1015h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1000l\x1b[?1015l\x1b[?1006l"
# Any-motion tracking, which Textual enables by default
MOUSE_MOTION_OFF = "\x1b[?1003l"
# Erase the screen and home the cursor
CLEAR_SCREEN = "\x1b[2J\x1b[H"


def key_press(event: events.Key) -> KeyPress:
    """Normalize a Textual key event, e.g. "shift+tab" -> KeyPress("tab", {"shift"})."""
    *modifiers, name = event.key.split("+")
    if event.is_printable and event.character and not modifiers:
        name = event.character
    return KeyPress(name, frozenset(modifiers))


def mouse_event(event: events.MouseEvent, kind: MouseKind) -> MouseEvent:
    return MouseEvent(kind, int(event.screen_x), int(event.screen_y), event.button)


class ScreenCanvas(Static):
    """Full screen widget that displays frames and reports raw input."""

    can_focus = True

    def __init__(self, sink: Callable[[TerminalEvent], None], **kwargs) -> None:
        super().__init__("", **kwargs)
        self._sink = sink

    def on_key(self, event: events.Key) -> None:
        # Every key belongs to the dashboard, including tab
        event.stop()
        event.prevent_default()
        self._sink(KeyEvent(key_press(event)))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._sink(mouse_event(event, MouseKind.DOWN))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self._sink(mouse_event(event, MouseKind.UP))

    def on_mouse_move(self, event: events.MouseMove) -> None:
        self._sink(mouse_event(event, MouseKind.MOVE))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self._sink(mouse_event(event, MouseKind.SCROLL_UP))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self._sink(mouse_event(event, MouseKind.SCROLL_DOWN))

    def on_resize(self, event: events.Resize) -> None:
        self._sink(ResizeEvent(event.size.width, event.size.height))


class TextualTerminal:
    """Terminal backend on top of a running Textual app.

    Textual's driver owns raw mode and the alternate screen. This class adds
    the pieces the render loop needs: mouse mode control, an event queue with
    a timeout, and a single full screen canvas to draw into.
    """

    def __init__(self, app: App) -> None:
        self.app = app
        self.events: asyncio.Queue[TerminalEvent] = asyncio.Queue()
        self.mouse_enabled = True
        self._restored = False

    def push(self, event: TerminalEvent) -> None:
        self.events.put_nowait(event)

    def _write(self, data: str) -> None:
        driver = self.app._driver
        if driver is None:
            raise TerminalError("terminal driver is not running")
        try:
            driver.write(data)
        except OSError as e:
            raise TerminalError(f"unable to write to terminal: {e}") from e

    def _canvas(self) -> ScreenCanvas:
        try:
            return self.app.query_one(css(ids.CANVAS), ScreenCanvas)
        except NoMatches as e:
            raise TerminalError("canvas is not mounted") from e

    def setup(self) -> None:
        self._write(MOUSE_MOTION_OFF)
        if not self.mouse_enabled:
            self._write(MOUSE_OFF)
        self._canvas().focus()

    def restore(self) -> None:
        if self._restored:
            return
        self._restored = True
        log.debug("restoring terminal")
        self.app.exit()

    def set_mouse_capture(self, enabled: bool) -> None:
        self._write(MOUSE_ON if enabled else MOUSE_OFF)
        if enabled:
            self._write(MOUSE_MOTION_OFF)
        self.mouse_enabled = enabled

    async def poll(self, timeout: float) -> TerminalEvent | None:
        try:
            return await asyncio.wait_for(self.events.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def draw(self, renderable: RenderableType) -> None:
        self._canvas().update(renderable)

    def size(self) -> TerminalSize:
        width, height = self.app.size
        return TerminalSize(width, height)

    def autoresize(self) -> None:
        self._canvas().refresh(layout=True)

    def _clear_screen(self) -> None:
        stream = sys.__stdout__
        if stream is None:
            return
        try:
            stream.write(CLEAR_SCREEN)
            stream.flush()
        except OSError as e:
            raise TerminalError(f"unable to clear terminal: {e}") from e

    @contextmanager
    def suspend(self) -> Iterator[None]:
        try:
            with self.app.suspend():
                self._clear_screen()
                yield
        except SuspendNotSupported as e:
            raise ExecError("this terminal cannot be suspended") from e


class DashboardApp(App):
    """Hosts the render loop and input handler on Textual's event loop."""

    TITLE = "dockwatch"
    ENABLE_COMMAND_PALETTE = False
    CSS = APP_CSS

    def __init__(
        self,
        app_data: AppData,
        gui_state: GuiState,
        docker_tx: queue.Queue,
        is_running: threading.Event,
        host: str | None = None,
        exec_factory: Callable[[ExecMode], ExecSession] | None = None,
        info_delay: float = INFO_BOX_DELAY,
    ) -> None:
        super().__init__()
        self.app_data = app_data
        self.gui_state = gui_state
        self._running_flag = is_running
        self.fatal_error: TerminalError | None = None
        self.backend = TextualTerminal(self)

        input_tx: asyncio.Queue = asyncio.Queue()
        if exec_factory is None:

            def exec_factory(mode: ExecMode) -> ExecSession:
                return ExecSession.from_mode(mode, host=host)

        self.ui = Ui(app_data, gui_state, self.backend, input_tx, is_running, exec_factory=exec_factory)
        self.input_handler = InputHandler(
            app_data,
            gui_state,
            input_tx,
            docker_tx,
            is_running,
            self.backend.set_mouse_capture,
            info_delay=info_delay,
        )

    def compose(self) -> ComposeResult:
        yield ScreenCanvas(self.backend.push, id=ids.CANVAS)

    async def _run_ui(self) -> None:
        try:
            await self.ui.run()
        except TerminalError as e:
            log.exception("terminal failure")
            self.fatal_error = e

    def on_mount(self) -> None:
        log.info("dashboard mounted, size %s", self.size)
        self.run_worker(self.input_handler.run(), name="input", group="dashboard")
        self.run_worker(self._run_ui(), name="render", group="dashboard")

    def on_unmount(self) -> None:
        self._running_flag.clear()
