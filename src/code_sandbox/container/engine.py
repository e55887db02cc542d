"""Thin handle over a live Docker SDK client.

Exposes only the engine calls provisioning needs: ping, inspect, pull,
create and start.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from code_sandbox.container.config import ContainerSpec

logger = logging.getLogger(__name__)


class EngineHandle:
    """An open connection to a Docker daemon.

    Owned by whoever created it; close() releases the underlying client and
    is safe to call more than once.
    """

    def __init__(self, client: Any, label: str) -> None:
        self._client = client
        self.label = label
        self._closed = False

    def __enter__(self) -> EngineHandle:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def ping(self) -> bool:
        """Liveness check. Raises on an unresponsive daemon."""
        return self._client.ping()

    def inspect_image(self, ref: str) -> dict[str, Any]:
        return self._client.api.inspect_image(ref)

    def pull_image(self, ref: str) -> Generator[bytes, None, None]:
        """Start pulling ``ref`` and return the raw progress stream.

        The stream must be read to the end for the pull to complete.
        """
        return self._client.api.pull(ref, stream=True, decode=False)

    def create_container(self, spec: ContainerSpec) -> str:
        """Create a container and return the engine-assigned id.

        No name is passed, so the engine picks one.
        """
        response = self._client.api.create_container_from_config(
            spec.to_engine_config(), name=None
        )
        return response["Id"]

    def start_container(self, container_id: str) -> None:
        self._client.api.start(container_id)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing Docker client ({self.label})")
        self._client.close()
