"""Command-line interface for dockwatch."""

import argparse
import logging
import queue
import signal
import sys
import threading
from dataclasses import dataclass
from pathlib import Path

from app import DashboardApp
from config import MIN_DELAY_MS, Config, ConfigError
from model import AppData, DockerConnectError, GuiState, Status
from runtime import DockerClient, DockerData

DOCKWATCH_VERSION = "0.3.0"

# Bound on queued docker commands; extra key presses are dropped
COMMAND_QUEUE_SIZE = 64

log = logging.getLogger(__name__)


@dataclass
class ParsedArgs:
    """Parsed command-line arguments."""

    delay: int | None
    host: str | None
    tail: int | None
    timestamps: bool
    config_path: Path | None


def print_error_box(title: str, *lines: str) -> None:
    """Print a formatted error box to stderr.

    Args:
        title: The error title (will be prefixed with "Error: ")
        *lines: Additional lines to print in the box
    """
    print("=" * 60, file=sys.stderr)
    print(f"Error: {title}", file=sys.stderr)
    print("", file=sys.stderr)
    for line in lines:
        print(line, file=sys.stderr)
    print("=" * 60, file=sys.stderr)


def delay_ms(value: str) -> int:
    """argparse type for the polling delay."""
    try:
        delay = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid delay: {value!r}")
    if delay < MIN_DELAY_MS:
        raise argparse.ArgumentTypeError(f"delay must be at least {MIN_DELAY_MS}ms")
    return delay


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the dockwatch CLI."""
    parser = argparse.ArgumentParser(
        prog="dockwatch",
        description="A simple tui to view & control docker containers.",
    )
    parser.add_argument(
        "-d",
        "--delay",
        type=delay_ms,
        metavar="MS",
        help=f"docker update interval in milliseconds, minimum {MIN_DELAY_MS}",
    )
    parser.add_argument("--host", metavar="HOST", help="docker host, e.g. ssh://user@server")
    parser.add_argument("--tail", type=int, metavar="N", help="log lines to load per container")
    parser.add_argument("--timestamps", action="store_true", help="show log timestamps")
    parser.add_argument("--config", type=Path, metavar="PATH", help="config file to read")
    parser.add_argument("--version", action="version", version=f"dockwatch {DOCKWATCH_VERSION}")
    return parser


def parse_args(argv: list[str] | None = None) -> ParsedArgs:
    """Parse command line arguments."""
    args = create_parser().parse_args(argv)
    return ParsedArgs(
        delay=args.delay,
        host=args.host,
        tail=args.tail,
        timestamps=args.timestamps,
        config_path=args.config,
    )


def load_config(args: ParsedArgs) -> Config:
    """Read the config file and apply the command line on top."""
    try:
        config = Config.load(args.config_path)
        return config.merge_args(args.delay, args.host, args.tail, args.timestamps)
    except ConfigError as e:
        print_error_box("Invalid configuration", str(e))
        sys.exit(2)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    config = load_config(args)
    log.info(f"starting dockwatch {DOCKWATCH_VERSION} with {config}")

    app_data = AppData()
    gui_state = GuiState()
    is_running = threading.Event()
    is_running.set()
    docker_tx: queue.Queue = queue.Queue(maxsize=COMMAND_QUEUE_SIZE)

    client = DockerClient(host=config.host)
    if client.ping():
        driver = DockerData(
            app_data,
            gui_state,
            client,
            docker_tx,
            is_running,
            interval=config.interval_seconds,
            log_tail=config.log_tail,
            show_timestamps=config.show_timestamps,
        )
        driver.update()
        driver.start()
    else:
        log.warning("docker daemon unreachable")
        app_data.set_error(DockerConnectError())
        gui_state.status_push(Status.DOCKER_CONNECT)

    signal.signal(signal.SIGTERM, lambda signum, frame: is_running.clear())

    app = DashboardApp(app_data, gui_state, docker_tx, is_running, host=config.host)
    app.run()
    is_running.clear()

    if app.fatal_error is not None:
        print_error_box("Terminal failure", str(app.fatal_error))
        sys.exit(1)
    if gui_state.has_status(Status.DOCKER_CONNECT):
        print_error_box("Unable to access docker daemon", "Is docker running and accessible to this user?")
        sys.exit(1)


if __name__ == "__main__":
    main()
