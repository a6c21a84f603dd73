"""Shared fixtures for dockwatch tests."""

import asyncio
import io
import queue
import threading
from contextlib import contextmanager

import pytest
from rich.console import Console

from model import AppData, GuiState, State
from model.app_data import ContainerStats, ContainerSummary
from model.app_error import TerminalError
from terminal import TerminalSize


def make_summary(
    container_id: str, name: str, state: State = State.RUNNING, image: str = "nginx:latest", ports: tuple = ()
) -> ContainerSummary:
    """ContainerSummary with sensible defaults."""
    return ContainerSummary(
        id=container_id,
        name=name,
        image=image,
        state=state,
        status="Up 2 hours" if state == State.RUNNING else "Exited (0) 1 hour ago",
        ports=ports,
    )


def make_stats(cpu: float = 1.0, memory: int = 1024) -> ContainerStats:
    return ContainerStats(cpu=cpu, memory=memory, memory_limit=1024**3, rx=10, tx=20)


def render_text(renderable, width: int = 120, height: int = 40) -> str:
    """Render to plain text, one string for the whole screen."""
    console = Console(file=io.StringIO(), width=width, height=height, color_system=None, legacy_windows=False)
    console.print(renderable)
    return console.file.getvalue()


class FakeTerminal:
    """In-memory terminal backend that records every call.

    Scripted events are returned by poll() in order; once they run out,
    on_idle (if set) is called so tests can stop the render loop.
    """

    def __init__(self, width: int = 120, height: int = 40, events=None) -> None:
        self.width = width
        self.height = height
        self.events = list(events or [])
        self.on_idle = None
        self.setup_calls = 0
        self.restore_calls = 0
        self.autoresize_calls = 0
        self.suspend_calls = 0
        self.draws = []
        self.mouse_modes: list[bool] = []
        self.fail_setup = False
        self.fail_draw = False
        self.fail_mouse = False

    def setup(self) -> None:
        self.setup_calls += 1
        if self.fail_setup:
            raise TerminalError("setup failed")

    def restore(self) -> None:
        self.restore_calls += 1

    def set_mouse_capture(self, enabled: bool) -> None:
        if self.fail_mouse:
            raise TerminalError("mouse capture failed")
        self.mouse_modes.append(enabled)

    async def poll(self, timeout: float):
        await asyncio.sleep(0)
        if self.events:
            return self.events.pop(0)
        if self.on_idle is not None:
            self.on_idle()
        return None

    def draw(self, renderable) -> None:
        if self.fail_draw:
            raise TerminalError("draw failed")
        self.draws.append(renderable)

    def size(self) -> TerminalSize:
        return TerminalSize(self.width, self.height)

    def autoresize(self) -> None:
        self.autoresize_calls += 1

    @contextmanager
    def suspend(self):
        self.suspend_calls += 1
        yield


@pytest.fixture
def app_data():
    return AppData()


@pytest.fixture
def gui_state():
    return GuiState()


@pytest.fixture
def is_running():
    flag = threading.Event()
    flag.set()
    return flag


@pytest.fixture
def docker_tx():
    return queue.Queue(maxsize=64)


@pytest.fixture
def populated(app_data):
    """AppData with three containers: two running, one exited."""
    app_data.update_containers(
        [
            make_summary("aaa111", "web"),
            make_summary("bbb222", "db", image="postgres:16"),
            make_summary("ccc333", "worker", state=State.EXITED, image="python:3.12"),
        ]
    )
    return app_data


@pytest.fixture
def terminal():
    return FakeTerminal()
