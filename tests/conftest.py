"""Test fixtures for code-sandbox."""

from __future__ import annotations

import time
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import MagicMock

import docker.errors
import pytest

from code_sandbox.container import EngineHandle, ProvisionerConfig

# =============================================================================
# Docker client doubles
# =============================================================================


class TrackingStream:
    """Pull stream double that records whether it was closed."""

    def __init__(self, chunks: list[bytes], block_after: float | None = None) -> None:
        self._chunks = list(chunks)
        self._block_after = block_after
        self.closed = False

    def __iter__(self) -> Generator[bytes, None, None]:
        yield from self._chunks
        if self._block_after is not None:
            # Simulates a registry that stops sending data
            time.sleep(self._block_after)
            yield b'{"status":"late chunk"}\n'

    def close(self) -> None:
        self.closed = True


def make_docker_client(
    *,
    image_present: bool = True,
    pull_stream: TrackingStream | None = None,
    pull_error: Exception | None = None,
    container_id: str = "abc123def456",
    create_error: Exception | None = None,
    start_error: Exception | None = None,
) -> MagicMock:
    """Create a mock docker.DockerClient with low-level API behaviour."""
    client = MagicMock()
    client.ping.return_value = True

    if image_present:
        client.api.inspect_image.return_value = {"Id": "sha256:cafe"}
    else:
        client.api.inspect_image.side_effect = docker.errors.ImageNotFound("No such image")

    if pull_error is not None:
        client.api.pull.side_effect = pull_error
    else:
        client.api.pull.return_value = pull_stream or TrackingStream(
            [b'{"status":"Pulling fs layer"}\n', b'{"status":"Download complete"}\n']
        )

    if create_error is not None:
        client.api.create_container_from_config.side_effect = create_error
    else:
        client.api.create_container_from_config.return_value = {
            "Id": container_id,
            "Warnings": [],
        }

    if start_error is not None:
        client.api.start.side_effect = start_error

    return client


@pytest.fixture
def docker_client() -> MagicMock:
    """Mock Docker client with the image already cached."""
    return make_docker_client()


@pytest.fixture
def engine_factory() -> Callable[[MagicMock], Callable[[], EngineHandle]]:
    """Build a resolver returning an EngineHandle over a given mock client.

    The created handles are recorded on the resolver as ``handles``.
    """

    def factory(client: MagicMock) -> Callable[[], EngineHandle]:
        handles: list[EngineHandle] = []

        def resolver() -> EngineHandle:
            handle = EngineHandle(client, "mock")
            handles.append(handle)
            return handle

        resolver.handles = handles  # type: ignore[attr-defined]
        return resolver

    return factory


@pytest.fixture
def fast_config() -> ProvisionerConfig:
    """Provisioner config with a tiny pull budget."""
    return ProvisionerConfig(pull_timeout=0.2)


@pytest.fixture
def socket_dir(tmp_path: Path) -> Path:
    """Directory for fake socket files (only existence is checked)."""
    path = tmp_path / "sockets"
    path.mkdir()
    return path


@pytest.fixture
def tracking_stream() -> type[TrackingStream]:
    """The TrackingStream class, for tests that build their own streams."""
    return TrackingStream


@pytest.fixture
def make_client() -> Callable[..., MagicMock]:
    """The make_docker_client builder."""
    return make_docker_client
