"""Configuration for dockwatch."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

log = logging.getLogger(__name__)

# Docker polling cannot go faster than this, in milliseconds
MIN_DELAY_MS = 100


def get_config_path() -> Path:
    """Get the config file path using XDG Base Directory spec."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config) / "dockwatch" / "config.json"


class ConfigError(ValueError):
    """The config file exists but cannot be used."""


@dataclass
class Config:
    """Runtime settings, from the config file and then the command line."""

    docker_interval: int = 1000  # milliseconds between docker polls
    host: str | None = None  # passed to docker as -H
    log_tail: int = 1000  # log lines fetched when a container first appears
    show_timestamps: bool = False

    @property
    def interval_seconds(self) -> float:
        return self.docker_interval / 1000

    def validate(self) -> None:
        if self.docker_interval < MIN_DELAY_MS:
            raise ConfigError(f"docker_interval must be at least {MIN_DELAY_MS}ms")
        if self.log_tail < 0:
            raise ConfigError("log_tail cannot be negative")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a config from a parsed file, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            log.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        config = cls(**{key: value for key, value in data.items() if key in known})
        config.validate()
        return config

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load the config file, or defaults if there is none."""
        path = path or get_config_path()
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a JSON object")
        try:
            return cls.from_dict(data)
        except TypeError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    def merge_args(self, delay: int | None, host: str | None, tail: int | None, timestamps: bool) -> "Config":
        """Return a copy with any command line overrides applied."""
        merged = Config(**self.to_dict())
        if delay is not None:
            merged.docker_interval = delay
        if host is not None:
            merged.host = host
        if tail is not None:
            merged.log_tail = tail
        if timestamps:
            merged.show_timestamps = True
        merged.validate()
        return merged
