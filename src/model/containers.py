"""Container data model: items, headers, sort orders and selectable lists."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")

# Number of cpu/memory samples kept for the charts
CHART_POINTS = 60

# Log lines kept per container
MAX_LOG_LINES = 5000


class State(Enum):
    """Container state as reported by `docker ps`."""

    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    CREATED = "created"
    EXITED = "exited"
    DEAD = "dead"
    REMOVING = "removing"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> State:
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    def is_alive(self) -> bool:
        return self in (State.RUNNING, State.PAUSED, State.RESTARTING)


class Header(Enum):
    """Sortable columns of the containers table, in display order."""

    STATE = "state"
    STATUS = "status"
    CPU = "cpu"
    MEMORY = "memory"
    ID = "id"
    NAME = "name"
    IMAGE = "image"
    RX = "↓ rx"
    TX = "↑ tx"

    @property
    def label(self) -> str:
        return self.value


class SortedOrder(Enum):
    ASC = "asc"
    DESC = "desc"


SortSpec = tuple[Header, SortedOrder] | None


class FilterBy(Enum):
    """Which container attribute the filter term is matched against."""

    NAME = "name"
    IMAGE = "image"
    STATUS = "status"
    ALL = "all"

    def next(self) -> FilterBy:
        members = list(FilterBy)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> FilterBy:
        members = list(FilterBy)
        return members[(members.index(self) - 1) % len(members)]


class DockerControls(Enum):
    """Commands offered in the commands panel."""

    PAUSE = "pause"
    UNPAUSE = "unpause"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    DELETE = "delete"

    @classmethod
    def for_state(cls, state: State) -> list[DockerControls]:
        """Controls that make sense for a container in the given state."""
        if state == State.RUNNING:
            return [cls.PAUSE, cls.RESTART, cls.STOP, cls.DELETE]
        if state == State.PAUSED:
            return [cls.UNPAUSE, cls.STOP, cls.DELETE]
        if state == State.RESTARTING:
            return [cls.STOP, cls.DELETE]
        if state in (State.EXITED, State.DEAD, State.CREATED):
            return [cls.START, cls.RESTART, cls.DELETE]
        return [cls.DELETE]


class StatefulList(Generic[T]):
    """A list with an optional selected index.

    Navigation clamps at both ends; selecting on an empty list is a no-op.
    """

    def __init__(self, items: list[T] | None = None) -> None:
        self.items: list[T] = list(items or [])
        self.selected: int | None = 0 if self.items else None

    def __len__(self) -> int:
        return len(self.items)

    def start(self) -> None:
        if self.items:
            self.selected = 0

    def end(self) -> None:
        if self.items:
            self.selected = len(self.items) - 1

    def next(self) -> None:
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, len(self.items) - 1)

    def previous(self) -> None:
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = max(self.selected - 1, 0)

    def selected_item(self) -> T | None:
        if self.selected is None or not self.items:
            return None
        return self.items[min(self.selected, len(self.items) - 1)]

    def set_items(self, items: list[T]) -> None:
        """Replace items, keeping the selected index in range."""
        self.items = list(items)
        if not self.items:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected, len(self.items) - 1)


# Column headings of the ports panel
PORT_HEADINGS = ("ip", "private", "public")


@dataclass(frozen=True)
class ContainerPort:
    """One port from `docker ps`: private is "80/tcp", public is empty if unpublished."""

    ip: str
    private: str
    public: str = ""

    def columns(self) -> tuple[str, str, str]:
        return self.ip, self.private, self.public


@dataclass
class ContainerItem:
    """One container, with its latest stats and buffered logs."""

    id: str
    name: str
    image: str
    state: State = State.UNKNOWN
    status: str = ""
    ports: tuple[ContainerPort, ...] = ()
    created: str = ""
    cpu: float = 0.0
    memory: int = 0
    memory_limit: int = 0
    rx: int = 0
    tx: int = 0
    cpu_history: deque[float] = field(default_factory=lambda: deque(maxlen=CHART_POINTS))
    mem_history: deque[int] = field(default_factory=lambda: deque(maxlen=CHART_POINTS))
    logs: StatefulList[str] = field(default_factory=StatefulList)
    controls: StatefulList[DockerControls] = field(default_factory=StatefulList)

    def __post_init__(self) -> None:
        if not self.controls.items:
            self.controls.set_items(DockerControls.for_state(self.state))

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def set_state(self, state: State) -> None:
        """Update state, regenerating the controls list when it changes."""
        if state != self.state:
            self.state = state
            self.controls = StatefulList(DockerControls.for_state(state))

    def add_logs(self, lines: list[str]) -> None:
        """Append log lines, following the tail if the last line was selected."""
        if not lines:
            return
        logs = self.logs
        following = logs.selected is None or logs.selected >= len(logs.items) - 1
        merged = logs.items + lines
        if len(merged) > MAX_LOG_LINES:
            merged = merged[-MAX_LOG_LINES:]
        logs.set_items(merged)
        if following:
            logs.end()

    def sort_key(self, header: Header) -> tuple:
        """Key for sorting by header; ties are broken by name."""
        value: object
        if header == Header.STATE:
            value = self.state.value
        elif header == Header.STATUS:
            value = self.status
        elif header == Header.CPU:
            value = self.cpu
        elif header == Header.MEMORY:
            value = self.memory
        elif header == Header.ID:
            value = self.id
        elif header == Header.NAME:
            value = self.name
        elif header == Header.IMAGE:
            value = self.image
        elif header == Header.RX:
            value = self.rx
        else:
            value = self.tx
        return (value, self.name)
