"""Tests for the runtime driver that keeps AppData in sync with docker."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from conftest import make_stats, make_summary
from controller.messages import DockerCommand, DockerMessage
from model.app_error import DockerCommandError
from runtime.client import DockerClient
from runtime.driver import DockerData, split_timestamp


@pytest.fixture
def client():
    client = MagicMock(spec=DockerClient)
    client.containers.return_value = [make_summary("abc123456789", "web")]
    client.stats.return_value = {"abc123456789": make_stats(cpu=4.0)}
    client.logs.return_value = []
    return client


@pytest.fixture
def driver(app_data, gui_state, client, docker_tx, is_running):
    return DockerData(app_data, gui_state, client, docker_tx, is_running, interval=0.05)


class TestSplitTimestamp:
    def test_split(self):
        assert split_timestamp("2024-01-01T00:00:01.5Z hello world") == ("2024-01-01T00:00:01.5Z", "hello world")

    def test_no_message(self):
        assert split_timestamp("2024-01-01T00:00:01Z") == ("2024-01-01T00:00:01Z", "")


class TestUpdate:
    def test_update_fills_app_data(self, driver, app_data):
        driver.update()
        snapshot = app_data.snapshot()
        assert [row.name for row in snapshot.rows] == ["web"]
        assert snapshot.selected.cpu == 4.0

    def test_stats_matched_by_short_id(self, driver, client, app_data):
        client.stats.return_value = {"abc123": make_stats(cpu=9.0)}
        driver.update()
        assert app_data.snapshot().selected.cpu == 9.0

    def test_logs_strip_timestamps_by_default(self, driver, client, app_data):
        client.logs.return_value = ["2024-01-01T00:00:01Z first", "2024-01-01T00:00:02Z second"]
        driver.update()
        assert app_data.snapshot().logs == ("first", "second")

    def test_logs_keep_timestamps_when_asked(self, driver, client, app_data):
        driver.show_timestamps = True
        client.logs.return_value = ["2024-01-01T00:00:01Z first"]
        driver.update()
        assert app_data.snapshot().logs == ("2024-01-01T00:00:01Z first",)

    def test_incremental_logs_skip_seen_lines(self, driver, client, app_data):
        """docker logs --since is inclusive, so the boundary line comes back."""
        client.logs.return_value = ["2024-01-01T00:00:01Z first", "2024-01-01T00:00:02Z second"]
        driver.update()
        client.logs.return_value = ["2024-01-01T00:00:02Z second", "2024-01-01T00:00:03Z third"]
        driver.update()
        assert app_data.snapshot().logs == ("first", "second", "third")
        assert client.logs.call_args.kwargs["since"] == "2024-01-01T00:00:02Z"

    def test_first_fetch_uses_tail(self, app_data, gui_state, client, docker_tx, is_running):
        driver = DockerData(app_data, gui_state, client, docker_tx, is_running, log_tail=25)
        driver.update()
        assert client.logs.call_args.kwargs == {"since": None, "tail": 25}

    def test_removed_container_forgets_log_position(self, driver, client):
        client.logs.return_value = ["2024-01-01T00:00:01Z first"]
        driver.update()
        client.containers.return_value = []
        driver.update()
        assert driver._log_since == {}


class TestCommands:
    def test_execute_runs_command(self, driver, client):
        driver.execute(DockerMessage(DockerCommand.STOP, "abc123456789"))
        client.run_command.assert_called_once_with(DockerCommand.STOP, "abc123456789")
        client.containers.assert_called()

    def test_execute_failure_sets_error(self, driver, client, app_data):
        client.run_command.side_effect = DockerCommandError("stop", "No such container")
        driver.execute(DockerMessage(DockerCommand.STOP, "abc123456789"))
        assert isinstance(app_data.get_error(), DockerCommandError)

    def test_execute_shows_loading_while_running(self, driver, client, gui_state):
        seen = []
        client.run_command.side_effect = lambda command, container_id: seen.append(gui_state.is_loading())
        driver.execute(DockerMessage(DockerCommand.RESTART, "abc123456789"))
        assert seen == [True]
        assert not gui_state.is_loading()

    def test_failed_command_stops_loading(self, driver, client, gui_state):
        client.run_command.side_effect = DockerCommandError("stop", "No such container")
        driver.execute(DockerMessage(DockerCommand.STOP, "abc123456789"))
        assert not gui_state.is_loading()

    def test_drain_commands_dispatches_queued(self, driver, client, docker_tx):
        done = threading.Event()
        client.run_command.side_effect = lambda command, container_id: done.set()
        docker_tx.put_nowait(DockerMessage(DockerCommand.RESTART, "abc123456789"))
        driver.drain_commands(time.monotonic() + 0.3)
        assert done.wait(timeout=1)
        assert docker_tx.empty()

    def test_drain_commands_returns_at_deadline(self, driver):
        started = time.monotonic()
        driver.drain_commands(started + 0.1)
        assert time.monotonic() - started < 1


class TestThread:
    def test_runs_until_flag_clears(self, driver, client, is_running, app_data):
        thread = driver.start()
        deadline = time.monotonic() + 2
        while not app_data.get_container_ids() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert app_data.get_container_ids() == ["abc123456789"]
        is_running.clear()
        thread.join(timeout=2)
        assert not thread.is_alive()

    def test_update_errors_do_not_kill_thread(self, driver, client, is_running):
        calls = []

        def containers():
            calls.append(1)
            if len(calls) == 1:
                raise OSError("boom")
            return [make_summary("abc123456789", "web")]

        client.containers.side_effect = containers
        thread = driver.start()
        deadline = time.monotonic() + 2
        while client.containers.call_count < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        is_running.clear()
        thread.join(timeout=2)
        assert client.containers.call_count >= 2
