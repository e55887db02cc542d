"""Docker daemon discovery.

Tries the environment-derived connection first (DOCKER_HOST and friends),
then well-known socket locations used by Docker Engine, Rancher Desktop,
Docker Desktop and Colima. The first candidate that both connects and
answers a ping wins.

Usage:
    with resolve_engine() as engine:
        engine.inspect_image("python:3.12-slim-bookworm")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import docker
import docker.errors

from code_sandbox.container.config import DEFAULT_CLIENT_TIMEOUT
from code_sandbox.container.engine import EngineHandle
from code_sandbox.errors import EngineConnectionError

logger = logging.getLogger(__name__)

SYSTEM_SOCKET = Path("/var/run/docker.sock")

# Relative to the user's home directory
HOME_SOCKETS = (
    Path(".rd") / "docker.sock",  # Rancher Desktop
    Path(".docker") / "run" / "docker.sock",  # Docker Desktop
    Path(".colima") / "default" / "docker.sock",  # Colima
)

ENV_LABEL = "DOCKER_HOST environment"


@dataclass(frozen=True)
class TransportCandidate:
    """One way of reaching the Docker daemon.

    A candidate without a socket path uses the environment-derived
    configuration (docker.from_env).
    """

    label: str
    socket_path: Path | None = None

    @classmethod
    def from_environment(cls) -> TransportCandidate:
        return cls(label=ENV_LABEL)

    @classmethod
    def from_socket(cls, path: Path) -> TransportCandidate:
        return cls(label=str(path), socket_path=path)

    @property
    def base_url(self) -> str | None:
        if self.socket_path is None:
            return None
        return f"unix://{self.socket_path}"


def _home_dir() -> Path | None:
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def default_candidates(home: Path | None = None) -> list[TransportCandidate]:
    """Build the ordered candidate list.

    Args:
        home: Home directory for user-level sockets. Detected when omitted;
              user-level sockets are skipped if it cannot be determined.
    """
    if home is None:
        home = _home_dir()

    candidates = [
        TransportCandidate.from_environment(),
        TransportCandidate.from_socket(SYSTEM_SOCKET),
    ]
    if home is not None:
        candidates.extend(TransportCandidate.from_socket(home / rel) for rel in HOME_SOCKETS)
    return candidates


def connect(
    candidate: TransportCandidate, timeout: float = DEFAULT_CLIENT_TIMEOUT
) -> EngineHandle:
    """Create a client for one candidate with API version negotiation.

    Does not ping the daemon; see resolve_engine().
    """
    if candidate.base_url is None:
        client = docker.from_env(version="auto", timeout=timeout)
    else:
        client = docker.DockerClient(
            base_url=candidate.base_url, version="auto", timeout=timeout
        )
    return EngineHandle(client, candidate.label)


def resolve_engine(
    candidates: Sequence[TransportCandidate] | None = None,
    timeout: float = DEFAULT_CLIENT_TIMEOUT,
) -> EngineHandle:
    """Return a handle to the first candidate that connects and answers ping.

    Socket candidates whose path does not exist are skipped without a
    connection attempt. Handles that fail the ping are closed before moving
    on.

    Raises:
        EngineConnectionError: If every candidate failed. Lists all candidates.
    """
    if candidates is None:
        candidates = default_candidates()

    for candidate in candidates:
        if candidate.socket_path is not None and not candidate.socket_path.exists():
            logger.debug(f"Skipping {candidate.label}: socket does not exist")
            continue

        try:
            engine = connect(candidate, timeout=timeout)
        except (docker.errors.DockerException, OSError) as e:
            logger.debug(f"Failed to connect via {candidate.label}: {e}")
            continue

        try:
            alive = engine.ping()
        except (docker.errors.DockerException, OSError) as e:
            logger.debug(f"Ping failed via {candidate.label}: {e}")
            alive = False

        if not alive:
            engine.close()
            continue

        logger.debug(f"Connected to Docker via {candidate.label}")
        return engine

    raise EngineConnectionError([c.label for c in candidates])
