"""Tests for CLI argument parsing and startup wiring."""

from unittest.mock import MagicMock, patch

import pytest

from cli import COMMAND_QUEUE_SIZE, load_config, main, parse_args, print_error_box
from model import Status
from model.app_error import DockerConnectError, TerminalError


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.delay is None
        assert args.host is None
        assert args.tail is None
        assert args.timestamps is False
        assert args.config_path is None

    def test_all_flags(self, tmp_path):
        args = parse_args(["-d", "500", "--host", "ssh://me@box", "--tail", "20", "--timestamps", "--config", str(tmp_path / "c.json")])
        assert args.delay == 500
        assert args.host == "ssh://me@box"
        assert args.tail == 20
        assert args.timestamps is True
        assert args.config_path == tmp_path / "c.json"

    @pytest.mark.parametrize("value", ["50", "fast"])
    def test_bad_delay_rejected(self, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--delay", value])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "dockwatch" in capsys.readouterr().out


class TestLoadConfig:
    def test_flags_override_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"docker_interval": 3000, "log_tail": 50}')
        config = load_config(parse_args(["--config", str(path), "-d", "200"]))
        assert config.docker_interval == 200
        assert config.log_tail == 50

    def test_invalid_file_exits(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text("{broken")
        with pytest.raises(SystemExit) as exc_info:
            load_config(parse_args(["--config", str(path)]))
        assert exc_info.value.code == 2
        assert "Invalid configuration" in capsys.readouterr().err


class TestPrintErrorBox:
    def test_format(self, capsys):
        print_error_box("Something broke", "line one", "line two")
        err = capsys.readouterr().err
        assert "Error: Something broke" in err
        assert "line one" in err
        assert err.startswith("=" * 60)


class TestMain:
    """main() wires the stores, driver and app together."""

    @pytest.fixture
    def argv(self, tmp_path):
        return ["--config", str(tmp_path / "none.json")]

    def test_docker_unreachable_shows_error_and_exits(self, argv, capsys):
        with (
            patch("cli.DockerClient") as client_cls,
            patch("cli.DockerData") as driver_cls,
            patch("cli.DashboardApp") as app_cls,
            patch("cli.signal.signal"),
        ):
            client_cls.return_value.ping.return_value = False
            app_cls.return_value.fatal_error = None
            with pytest.raises(SystemExit) as exc_info:
                main(argv)

        assert exc_info.value.code == 1
        driver_cls.assert_not_called()
        app_data, gui_state, docker_tx, is_running = app_cls.call_args.args
        assert isinstance(app_data.get_error(), DockerConnectError)
        assert gui_state.has_status(Status.DOCKER_CONNECT)
        assert "Unable to access docker daemon" in capsys.readouterr().err

    def test_normal_start(self, argv):
        with (
            patch("cli.DockerClient") as client_cls,
            patch("cli.DockerData") as driver_cls,
            patch("cli.DashboardApp") as app_cls,
            patch("cli.signal.signal"),
        ):
            client_cls.return_value.ping.return_value = True
            app_cls.return_value.fatal_error = None
            main(argv + ["-d", "250"])

        driver = driver_cls.return_value
        driver.update.assert_called_once()
        driver.start.assert_called_once()
        assert driver_cls.call_args.kwargs["interval"] == 0.25
        app_cls.return_value.run.assert_called_once()
        _, _, docker_tx, is_running = app_cls.call_args.args
        assert docker_tx.maxsize == COMMAND_QUEUE_SIZE
        # Cleared once the app returns so the driver thread stops
        assert not is_running.is_set()

    def test_terminal_failure_exits_nonzero(self, argv, capsys):
        with (
            patch("cli.DockerClient") as client_cls,
            patch("cli.DockerData"),
            patch("cli.DashboardApp") as app_cls,
            patch("cli.signal.signal"),
        ):
            client_cls.return_value.ping.return_value = True
            app_cls.return_value = MagicMock(fatal_error=TerminalError("unable to write to terminal"))
            with pytest.raises(SystemExit) as exc_info:
                main(argv)

        assert exc_info.value.code == 1
        assert "unable to write to terminal" in capsys.readouterr().err

    def test_sigterm_clears_running_flag(self, argv):
        with (
            patch("cli.DockerClient") as client_cls,
            patch("cli.DockerData"),
            patch("cli.DashboardApp") as app_cls,
            patch("cli.signal.signal") as signal_mock,
        ):
            client_cls.return_value.ping.return_value = True
            app_cls.return_value.fatal_error = None
            main(argv)

        handler = signal_mock.call_args.args[1]
        is_running = app_cls.call_args.args[3]
        is_running.set()
        handler(15, None)
        assert not is_running.is_set()
