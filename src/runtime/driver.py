"""Runtime driver: polls docker into AppData and executes queued commands."""

from __future__ import annotations

import logging
import queue
import threading
import time

from controller.messages import DockerMessage
from model import AppData, GuiState
from model.app_error import AppError
from runtime.client import DockerClient

log = logging.getLogger(__name__)

# Default seconds between docker polls
DEFAULT_INTERVAL = 1.0


def split_timestamp(line: str) -> tuple[str, str]:
    """Split a `docker logs --timestamps` line into (timestamp, message)."""
    timestamp, _, message = line.partition(" ")
    return timestamp, message


class DockerData:
    """Background worker keeping AppData in sync with the docker daemon.

    Runs on its own thread until the shared running flag clears. Commands from
    the input handler are drained between polls, each on a short-lived thread
    so a slow stop or restart never delays the next refresh.
    """

    def __init__(
        self,
        app_data: AppData,
        gui_state: GuiState,
        client: DockerClient,
        commands: queue.Queue,
        is_running: threading.Event,
        interval: float = DEFAULT_INTERVAL,
        log_tail: int = 1000,
        show_timestamps: bool = False,
    ) -> None:
        self.app_data = app_data
        self.gui_state = gui_state
        self.client = client
        self.commands = commands
        self.is_running = is_running
        self.interval = interval
        self.log_tail = log_tail
        self.show_timestamps = show_timestamps
        self._log_since: dict[str, str] = {}
        self._thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="docker-data", daemon=True)
        self._thread.start()
        return self._thread

    def run(self) -> None:
        log.info("docker driver started, interval %.2fs", self.interval)
        while self.is_running.is_set():
            try:
                self.update()
            except Exception:
                log.exception("docker update failed")
            self.drain_commands(time.monotonic() + self.interval)
        log.info("docker driver stopped")

    def drain_commands(self, deadline: float) -> None:
        """Execute queued commands until the deadline or shutdown."""
        while self.is_running.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                message = self.commands.get(timeout=min(remaining, 0.1))
            except queue.Empty:
                continue
            threading.Thread(
                target=self.execute,
                args=(message,),
                name=f"docker-{message.command.value}",
                daemon=True,
            ).start()

    def execute(self, message: DockerMessage) -> None:
        """Run one command, showing the loading spinner until it finishes."""
        log.info("docker %s %s", message.command.value, message.container_id)
        handle = self.gui_state.start_loading()
        try:
            self.client.run_command(message.command, message.container_id)
        except AppError as error:
            self.app_data.set_error(error)
            return
        finally:
            self.gui_state.stop_loading(handle)
        self.update_containers()

    def update(self) -> None:
        self.update_containers()
        self.update_stats()
        self.update_logs()

    def update_containers(self) -> None:
        self.app_data.update_containers(self.client.containers())

    def update_stats(self) -> None:
        stats = self.client.stats()
        if not stats:
            return
        for container_id in self.app_data.get_container_ids():
            for stats_id, sample in stats.items():
                if container_id.startswith(stats_id):
                    self.app_data.update_stats(container_id, sample)
                    break

    def update_logs(self) -> None:
        known = set(self.app_data.get_container_ids())
        for container_id in list(self._log_since):
            if container_id not in known:
                del self._log_since[container_id]

        for container_id in known:
            since = self._log_since.get(container_id)
            lines = self.client.logs(container_id, since=since, tail=self.log_tail)
            new_lines = []
            for line in lines:
                timestamp, message = split_timestamp(line)
                # --since is inclusive, skip what was already seen
                if since is not None and timestamp <= since:
                    continue
                new_lines.append(line if self.show_timestamps else message)
                since = timestamp
            if since is not None:
                self._log_since[container_id] = since
            if new_lines:
                self.app_data.update_logs(container_id, new_lines)
