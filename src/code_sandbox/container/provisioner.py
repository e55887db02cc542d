"""Container provisioning.

Provisioner turns an image reference into a running, interactive container:

    connect -> inspect image -> pull if missing -> create -> start

Every step is attempted once. Failures are raised as classified
ProvisionError subclasses by provision_or_raise(), or wrapped in a
ProvisionResult by provision().

Usage:
    provisioner = Provisioner(ProvisionerConfig.from_env())
    result = await provisioner.provision(ProvisionRequest(image="alpine:3.20"))
    print(result.to_text())
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Callable, Generator

import docker.errors
import urllib3.exceptions

from code_sandbox.container.config import ProvisionerConfig
from code_sandbox.container.connection import resolve_engine
from code_sandbox.container.engine import EngineHandle
from code_sandbox.container.pull import (
    STAGE_DRAIN,
    STAGE_PULL,
    classify_pull_failure,
    classify_pull_output,
    drain,
)
from code_sandbox.errors import ContainerCreateError, ContainerStartError, SandboxError
from code_sandbox.types import ProvisionRequest, ProvisionResult

logger = logging.getLogger(__name__)

# Errors the Docker SDK surfaces from engine calls and streamed responses
ENGINE_ERRORS = (docker.errors.DockerException, OSError, urllib3.exceptions.HTTPError)


def _close_abandoned(future: asyncio.Future[EngineHandle]) -> None:
    """Close a handle whose requester was cancelled before receiving it."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class Provisioner:
    """Provision sandbox containers on a local Docker daemon.

    Holds no per-call state: concurrent provision() calls each open and
    close their own engine handle.
    """

    def __init__(
        self,
        config: ProvisionerConfig | None = None,
        resolver: Callable[[], EngineHandle] | None = None,
    ) -> None:
        """Initialize provisioner.

        Args:
            config: Provisioning configuration. Defaults to ProvisionerConfig().
            resolver: Returns a live EngineHandle. Defaults to resolve_engine()
                      over the standard candidate list.
        """
        self.config = config or ProvisionerConfig()
        self._resolver = resolver or functools.partial(
            resolve_engine, timeout=self.config.client_timeout
        )

    async def provision(self, request: ProvisionRequest | None = None) -> ProvisionResult:
        """Provision a container, reporting failure in the result instead of raising."""
        request = request or ProvisionRequest()
        try:
            container_id = await self.provision_or_raise(request.image)
        except SandboxError as e:
            logger.warning(f"Provisioning failed: {e}")
            return ProvisionResult(error=e)
        return ProvisionResult(container_id=container_id)

    async def provision_or_raise(self, image: str | None = None) -> str:
        """Provision a container and return its id.

        Args:
            image: Image reference. Empty or None selects the default image.

        Raises:
            EngineConnectionError: No Docker daemon reachable.
            PullTimeoutError, ImageNotFoundError, ImagePullError: Image acquisition failed.
            ContainerCreateError, ContainerStartError: Engine rejected the container.
        """
        image = self.config.resolve_image(image)

        engine = await self._open_engine()
        try:
            await self._ensure_image(engine, image)

            spec = self.config.container_spec(image)
            try:
                container_id = await asyncio.to_thread(engine.create_container, spec)
            except ENGINE_ERRORS as e:
                raise ContainerCreateError(image, e) from e

            try:
                await asyncio.to_thread(engine.start_container, container_id)
            except ENGINE_ERRORS as e:
                # Not removed: teardown is the caller's concern
                logger.warning(f"Container {container_id} was created but failed to start: {e}")
                raise ContainerStartError(image, container_id, e) from e
        finally:
            await asyncio.to_thread(engine.close)

        logger.info(f"Started container {container_id} from {image}")
        return container_id

    async def _open_engine(self) -> EngineHandle:
        future = asyncio.ensure_future(asyncio.to_thread(self._resolver))
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            future.add_done_callback(_close_abandoned)
            raise

    async def _ensure_image(self, engine: EngineHandle, image: str) -> None:
        """Pull ``image`` unless the daemon already has it."""
        try:
            await asyncio.to_thread(engine.inspect_image, image)
        except ENGINE_ERRORS as e:
            # Any inspect failure means "not available locally"
            logger.debug(f"Inspect of {image} failed: {e}")
        else:
            logger.info(f"Docker image {image} found locally")
            return

        logger.info(f"Docker image {image} not found locally, pulling from registry...")
        await self._pull(engine, image)
        logger.info(f"Successfully pulled Docker image {image}")

    async def _pull(self, engine: EngineHandle, image: str) -> None:
        """Pull and fully read the progress stream within the pull budget.

        The budget nests inside the caller's task, so an earlier outer
        deadline or a cancellation still ends the pull.
        """
        stop = threading.Event()
        budget = asyncio.timeout(self.config.pull_timeout)
        stage = STAGE_PULL
        try:
            async with budget:
                stream = await asyncio.to_thread(self._start_pull, engine, image, stop)
                stage = STAGE_DRAIN
                output = await asyncio.to_thread(drain, stream, stop)
        except ENGINE_ERRORS as e:
            raise classify_pull_failure(
                image,
                e,
                timed_out=budget.expired(),
                stage=stage,
                timeout_seconds=self.config.pull_timeout,
            ) from e
        finally:
            # Lets an abandoned worker thread close the stream
            stop.set()

        error = classify_pull_output(image, output)
        if error is not None:
            raise error

    @staticmethod
    def _start_pull(
        engine: EngineHandle, image: str, stop: threading.Event
    ) -> Generator[bytes, None, None]:
        stream = engine.pull_image(image)
        if stop.is_set():
            # Budget ran out while the request was in flight
            stream.close()
        return stream
