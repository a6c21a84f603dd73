"""Runtime layer: the docker CLI client, the polling driver and exec sessions."""

from runtime.client import DockerClient, parse_size
from runtime.driver import DockerData
from runtime.exec import ExecSession

__all__ = [
    "DockerClient",
    "DockerData",
    "ExecSession",
    "parse_size",
]
