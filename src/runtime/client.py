"""Docker CLI wrapper using subprocess."""

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess

from controller.messages import DockerCommand
from model.app_data import ContainerStats, ContainerSummary
from model.app_error import DockerCommandError
from model.containers import ContainerPort, State

log = logging.getLogger(__name__)

VALID_ID_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.")

SIZE_UNITS = {
    "b": 1,
    "kb": 1000,
    "kib": 1024,
    "mb": 1000**2,
    "mib": 1024**2,
    "gb": 1000**3,
    "gib": 1024**3,
    "tb": 1000**4,
    "tib": 1024**4,
}

_SIZE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([a-zA-Z]*)\s*$")

# Verbs of the docker CLI for each command
COMMAND_ARGS: dict[DockerCommand, list[str]] = {
    DockerCommand.PAUSE: ["pause"],
    DockerCommand.UNPAUSE: ["unpause"],
    DockerCommand.START: ["start"],
    DockerCommand.STOP: ["stop"],
    DockerCommand.RESTART: ["restart"],
    DockerCommand.DELETE: ["rm", "--force"],
}


def is_valid_id(container_id: str) -> bool:
    """Check the id only has characters docker uses in ids and names."""
    return bool(container_id) and all(c in VALID_ID_CHARS for c in container_id)


def parse_size(value: str) -> int:
    """Parse docker's human sizes ("1.5MiB", "648B", "0B") into bytes."""
    match = _SIZE_RE.match(value)
    if not match:
        return 0
    number, unit = match.groups()
    multiplier = SIZE_UNITS.get(unit.lower() or "b")
    if multiplier is None:
        return 0
    return int(float(number) * multiplier)


def parse_pair(value: str) -> tuple[int, int]:
    """Parse "used / limit" pairs such as MemUsage and NetIO."""
    left, _, right = value.partition("/")
    return parse_size(left), parse_size(right)


def parse_percent(value: str) -> float:
    try:
        return float(value.strip().rstrip("%") or 0)
    except ValueError:
        return 0.0


def parse_ports(value: str) -> tuple[ContainerPort, ...]:
    """Parse the Ports column, e.g. "0.0.0.0:8080->80/tcp, :::8080->80/tcp, 5432/tcp"."""
    ports = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, arrow, private = entry.partition("->")
        if not arrow:
            ports.append(ContainerPort(ip="", private=entry))
            continue
        ip, _, public = host.rpartition(":")
        ports.append(ContainerPort(ip=ip, private=private, public=public))
    return tuple(ports)


class DockerClient:
    """Runs docker CLI commands, optionally against a specific host."""

    def __init__(self, host: str | None = None, binary: str = "docker") -> None:
        self.host = host
        self.binary = binary

    def _cmd(self, args: list[str]) -> list[str]:
        cmd = [self.binary]
        if self.host:
            cmd += ["-H", self.host]
        return cmd + args

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(self._cmd(args), capture_output=True, text=True)

    def _run_json(self, args: list[str]) -> list[dict]:
        """Run a command printing one JSON object per line."""
        result = self._run(args)
        if result.returncode != 0:
            log.warning("docker %s failed: %s", " ".join(args), result.stderr.strip())
            return []
        items = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            try:
                items.append(json.loads(line))
            except json.JSONDecodeError:
                log.debug("skipping unparseable line: %s", line[:100])
        return items

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def ping(self) -> bool:
        """True if the docker daemon answers."""
        if not self.available():
            return False
        try:
            result = self._run(["version", "--format", "{{json .Server.Version}}"])
        except OSError:
            log.exception("unable to run docker")
            return False
        return result.returncode == 0

    def containers(self) -> list[ContainerSummary]:
        summaries = []
        for raw in self._run_json(["ps", "-a", "--no-trunc", "--format", "{{json .}}"]):
            container_id = raw.get("ID", "")
            if not container_id:
                continue
            summaries.append(
                ContainerSummary(
                    id=container_id,
                    name=raw.get("Names", "").lstrip("/"),
                    image=raw.get("Image", ""),
                    state=State.parse(raw.get("State", "")),
                    status=raw.get("Status", ""),
                    ports=parse_ports(raw.get("Ports", "")),
                    created=raw.get("CreatedAt", ""),
                )
            )
        return summaries

    def stats(self) -> dict[str, ContainerStats]:
        """Latest stats keyed by the (short) container id docker reports."""
        stats = {}
        for raw in self._run_json(["stats", "--no-stream", "--format", "{{json .}}"]):
            container_id = raw.get("ID") or raw.get("Container")
            if not container_id:
                continue
            memory, limit = parse_pair(raw.get("MemUsage", ""))
            rx, tx = parse_pair(raw.get("NetIO", ""))
            stats[container_id] = ContainerStats(
                cpu=parse_percent(raw.get("CPUPerc", "")),
                memory=memory,
                memory_limit=limit,
                rx=rx,
                tx=tx,
            )
        return stats

    def logs(self, container_id: str, since: str | None = None, tail: int = 1000) -> list[str]:
        """Log lines prefixed with RFC3339 timestamps, oldest first."""
        if not is_valid_id(container_id):
            log.warning("invalid container id: %s", container_id)
            return []
        args = ["logs", "--timestamps"]
        if since:
            args += ["--since", since]
        else:
            args += ["--tail", str(tail)]
        result = self._run(args + [container_id])
        if result.returncode != 0:
            return []
        # docker logs writes the container's stderr to our stderr, timestamps restore the order
        lines = result.stdout.splitlines() + result.stderr.splitlines()
        return sorted(line for line in lines if line)

    def run_command(self, command: DockerCommand, container_id: str) -> None:
        """Run a lifecycle command. Raises DockerCommandError on failure."""
        if not is_valid_id(container_id):
            raise DockerCommandError(command.value, f"invalid container id {container_id!r}")
        try:
            result = self._run(COMMAND_ARGS[command] + [container_id])
        except OSError as e:
            raise DockerCommandError(command.value, str(e)) from e
        if result.returncode != 0:
            raise DockerCommandError(command.value, result.stderr.strip())
