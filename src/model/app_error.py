"""Typed application errors surfaced through the error overlay."""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors recorded in AppData and shown to the user."""

    title = "error"


class DockerConnectError(AppError):
    """The docker daemon could not be reached."""

    title = "docker connection"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail or "unable to access docker daemon")


class DockerCommandError(AppError):
    """A container command failed."""

    title = "docker command"

    def __init__(self, command: str, detail: str = "") -> None:
        self.command = command
        self.detail = detail
        message = f"unable to {command} container"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ExecError(AppError):
    """The interactive exec session failed."""

    title = "exec"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail or "unable to exec into container")


class MouseCaptureError(AppError):
    """Toggling mouse capture failed."""

    title = "mouse capture"

    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled
        action = "enable" if enabled else "disable"
        super().__init__(f"unable to {action} mouse capture")


class TerminalError(AppError):
    """Fatal failure setting up, drawing to, or restoring the terminal."""

    title = "terminal"
