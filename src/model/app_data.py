"""Application state store: containers, sort/filter settings, logs and errors.

Every public method takes the store's lock for the duration of the call only.
Callers never see the lock and never observe a partially applied update.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from model.app_error import AppError
from model.containers import (
    PORT_HEADINGS,
    ContainerItem,
    ContainerPort,
    DockerControls,
    FilterBy,
    Header,
    SortedOrder,
    SortSpec,
    State,
    StatefulList,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerSummary:
    """Container listing as produced by the runtime driver."""

    id: str
    name: str
    image: str
    state: State
    status: str
    ports: tuple[ContainerPort, ...] = ()
    created: str = ""


@dataclass(frozen=True)
class ContainerStats:
    """One stats sample for a container."""

    cpu: float
    memory: int
    memory_limit: int
    rx: int
    tx: int


@dataclass(frozen=True)
class ContainerRow:
    """Immutable copy of one row of the containers table."""

    id: str
    name: str
    image: str
    state: State
    status: str
    cpu: float
    memory: int
    memory_limit: int
    rx: int
    tx: int


@dataclass(frozen=True)
class AppSnapshot:
    """Point-in-time copy of the application state."""

    rows: tuple[ContainerRow, ...]
    selected_index: int | None
    selected: ContainerRow | None
    ports: tuple[ContainerPort, ...]
    port_widths: tuple[int, int, int]
    controls: tuple[DockerControls, ...]
    control_index: int | None
    logs: tuple[str, ...]
    log_index: int | None
    cpu_history: tuple[float, ...]
    mem_history: tuple[int, ...]
    names: dict[str, str]
    sorted_by: SortSpec
    filter_by: FilterBy
    filter_term: str | None
    error: AppError | None


class AppData:
    """Lock-guarded application state shared by every task."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._all: dict[str, ContainerItem] = {}
        self.containers: StatefulList[ContainerItem] = StatefulList()
        self._sorted_by: SortSpec = None
        self._filter_by = FilterBy.NAME
        self._filter_term: str | None = None
        self._error: AppError | None = None

    # =========================================================================
    # Sort and filter
    # =========================================================================

    def get_sorted(self) -> SortSpec:
        with self._lock:
            return self._sorted_by

    def set_sorted(self, sorted_by: SortSpec) -> None:
        with self._lock:
            self._sorted_by = sorted_by
            self._refresh()

    def get_filter(self) -> tuple[FilterBy, str | None]:
        with self._lock:
            return self._filter_by, self._filter_term

    def set_filter_term(self, term: str | None) -> None:
        with self._lock:
            self._filter_term = term or None
            self._refresh()

    def filter_term_push(self, char: str) -> None:
        with self._lock:
            self._filter_term = (self._filter_term or "") + char
            self._refresh()

    def filter_term_pop(self) -> None:
        with self._lock:
            if self._filter_term:
                self._filter_term = self._filter_term[:-1] or None
                self._refresh()

    def filter_by_next(self) -> None:
        with self._lock:
            self._filter_by = self._filter_by.next()
            self._refresh()

    def filter_by_prev(self) -> None:
        with self._lock:
            self._filter_by = self._filter_by.prev()
            self._refresh()

    # =========================================================================
    # Errors
    # =========================================================================

    def get_error(self) -> AppError | None:
        with self._lock:
            return self._error

    def has_error(self) -> bool:
        with self._lock:
            return self._error is not None

    def set_error(self, error: AppError) -> None:
        log.warning("recorded error: %s", error)
        with self._lock:
            self._error = error

    def remove_error(self) -> None:
        with self._lock:
            self._error = None

    # =========================================================================
    # Selection lookups
    # =========================================================================

    def get_container_len(self) -> int:
        with self._lock:
            return len(self.containers)

    def get_selected_container_id(self) -> str | None:
        with self._lock:
            item = self.containers.selected_item()
            return item.id if item else None

    def get_selected_container_state(self) -> State | None:
        with self._lock:
            item = self.containers.selected_item()
            return item.state if item else None

    def get_selected_command(self) -> DockerControls | None:
        with self._lock:
            item = self.containers.selected_item()
            return item.controls.selected_item() if item else None

    def get_container_name_by_id(self, container_id: str) -> str | None:
        with self._lock:
            item = self._all.get(container_id)
            return item.name if item else None

    def get_container_ids(self) -> list[str]:
        """Ids of every known container, including filtered-out ones."""
        with self._lock:
            return list(self._all)

    # =========================================================================
    # Navigation, one group per selectable panel
    # =========================================================================

    def containers_start(self) -> None:
        with self._lock:
            self.containers.start()

    def containers_end(self) -> None:
        with self._lock:
            self.containers.end()

    def containers_next(self) -> None:
        with self._lock:
            self.containers.next()

    def containers_previous(self) -> None:
        with self._lock:
            self.containers.previous()

    def log_start(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.logs.start()

    def log_end(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.logs.end()

    def log_next(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.logs.next()

    def log_previous(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.logs.previous()

    def docker_command_start(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.controls.start()

    def docker_command_end(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.controls.end()

    def docker_command_next(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.controls.next()

    def docker_command_previous(self) -> None:
        with self._lock:
            if item := self.containers.selected_item():
                item.controls.previous()

    # =========================================================================
    # Runtime driver updates
    # =========================================================================

    def update_containers(self, summaries: list[ContainerSummary]) -> None:
        """Replace the container set, keeping stats, logs and the selection."""
        with self._lock:
            current: dict[str, ContainerItem] = {}
            for summary in summaries:
                item = self._all.get(summary.id)
                if item is None:
                    item = ContainerItem(
                        id=summary.id,
                        name=summary.name,
                        image=summary.image,
                        state=summary.state,
                    )
                item.name = summary.name
                item.image = summary.image
                item.status = summary.status
                item.ports = summary.ports
                item.created = summary.created
                item.set_state(summary.state)
                if not item.state.is_alive():
                    item.cpu = 0.0
                    item.memory = 0
                current[summary.id] = item
            self._all = current
            self._refresh()

    def update_stats(self, container_id: str, stats: ContainerStats) -> None:
        with self._lock:
            item = self._all.get(container_id)
            if item is None:
                return
            item.cpu = stats.cpu
            item.memory = stats.memory
            item.memory_limit = stats.memory_limit
            item.rx = stats.rx
            item.tx = stats.tx
            item.cpu_history.append(stats.cpu)
            item.mem_history.append(stats.memory)
            if self._sorted_by is not None:
                self._refresh()

    def update_logs(self, container_id: str, lines: list[str]) -> None:
        with self._lock:
            item = self._all.get(container_id)
            if item is not None:
                item.add_logs(lines)

    # =========================================================================
    # Snapshot helpers, used by the renderer while it holds no other lock
    # =========================================================================

    def snapshot(self) -> AppSnapshot:
        """Copy out everything the drawing layer needs, under one lock hold."""
        with self._lock:
            selected = self.containers.selected_item()
            rows = tuple(
                ContainerRow(
                    id=item.id,
                    name=item.name,
                    image=item.image,
                    state=item.state,
                    status=item.status,
                    cpu=item.cpu,
                    memory=item.memory,
                    memory_limit=item.memory_limit,
                    rx=item.rx,
                    tx=item.tx,
                )
                for item in self.containers.items
            )
            return AppSnapshot(
                rows=rows,
                selected_index=self.containers.selected,
                selected=rows[self.containers.selected] if selected else None,
                ports=selected.ports if selected else (),
                port_widths=self._port_widths(),
                controls=tuple(selected.controls.items) if selected else (),
                control_index=selected.controls.selected if selected else None,
                logs=tuple(selected.logs.items) if selected else (),
                log_index=selected.logs.selected if selected else None,
                cpu_history=tuple(selected.cpu_history) if selected else (),
                mem_history=tuple(selected.mem_history) if selected else (),
                names={cid: item.name for cid, item in self._all.items()},
                sorted_by=self._sorted_by,
                filter_by=self._filter_by,
                filter_term=self._filter_term,
                error=self._error,
            )

    # Called with the lock held
    def _refresh(self) -> None:
        selected = self.containers.selected_item()
        selected_id = selected.id if selected else None

        items = [item for item in self._all.values() if self._matches(item)]
        if self._sorted_by is not None:
            header, order = self._sorted_by
            items.sort(key=lambda item: item.sort_key(header), reverse=order == SortedOrder.DESC)

        self.containers.set_items(items)
        if selected_id is not None:
            for index, item in enumerate(items):
                if item.id == selected_id:
                    self.containers.selected = index
                    break

    def _port_widths(self) -> tuple[int, int, int]:
        """Widest ip, private and public value over every container, headings included."""
        ip, private, public = (len(heading) for heading in PORT_HEADINGS)
        for item in self._all.values():
            for port in item.ports:
                ip = max(ip, len(port.ip))
                private = max(private, len(port.private))
                public = max(public, len(port.public))
        return ip, private, public

    def _matches(self, item: ContainerItem) -> bool:
        if not self._filter_term:
            return True
        term = self._filter_term.lower()
        if self._filter_by == FilterBy.NAME:
            haystacks = [item.name]
        elif self._filter_by == FilterBy.IMAGE:
            haystacks = [item.image]
        elif self._filter_by == FilterBy.STATUS:
            haystacks = [item.status, item.state.value]
        else:
            haystacks = [item.name, item.image, item.status, item.state.value]
        return any(term in haystack.lower() for haystack in haystacks)
