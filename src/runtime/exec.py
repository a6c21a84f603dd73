"""Interactive `docker exec` session run while the dashboard releases the terminal."""

from __future__ import annotations

import logging
import os
import subprocess

from model.app_error import ExecError
from model.gui_state import ExecMode
from terminal import TerminalSize

log = logging.getLogger(__name__)

# Prefer bash, fall back to sh for minimal images
SHELL_COMMAND = "command -v bash >/dev/null 2>&1 && exec bash || exec sh"

# Clean exit, or a shell left with ctrl+c
IGNORED_EXIT_CODES = {0, 130}


class ExecSession:
    """Runs an interactive shell in a container on the real terminal."""

    def __init__(self, container_id: str, host: str | None = None, binary: str = "docker") -> None:
        self.container_id = container_id
        self.host = host
        self.binary = binary

    @classmethod
    def from_mode(cls, mode: ExecMode, host: str | None = None) -> ExecSession:
        return cls(mode.container_id, host=host)

    def command(self) -> list[str]:
        cmd = [self.binary]
        if self.host:
            cmd += ["-H", self.host]
        return cmd + ["exec", "-it", self.container_id, "sh", "-c", SHELL_COMMAND]

    def run(self, size: TerminalSize) -> None:
        """Block until the session ends. Raises ExecError if it could not run."""
        env = dict(os.environ, COLUMNS=str(size.width), LINES=str(size.height))
        try:
            result = subprocess.run(self.command(), env=env)
        except OSError as e:
            raise ExecError(f"unable to run {self.binary}: {e}") from e
        log.info("exec session in %s exited with %d", self.container_id, result.returncode)
        if result.returncode not in IGNORED_EXIT_CODES:
            raise ExecError(f"exec exited with status {result.returncode}")
