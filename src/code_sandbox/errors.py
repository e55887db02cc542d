"""Error types for code-sandbox.

All errors inherit from SandboxError for easy catching at the tool boundary.
"""

from __future__ import annotations


class SandboxError(Exception):
    """Base class for all code-sandbox errors."""

    pass


class ConfigurationError(SandboxError):
    """Error in configuration (bad env var, invalid YAML value)."""

    pass


class EngineConnectionError(SandboxError):
    """Raised when no candidate transport reached a responsive Docker daemon."""

    def __init__(self, attempted: list[str]) -> None:
        self.attempted = list(attempted)
        super().__init__(
            "failed to create Docker client: could not connect to Docker daemon. "
            f"Tried standard connection and socket paths: {self.attempted}"
        )


class ProvisionError(SandboxError):
    """Base class for failures while provisioning a container."""

    def __init__(self, image: str, message: str) -> None:
        self.image = image
        super().__init__(message)


class PullTimeoutError(ProvisionError):
    """Raised when pulling an image exceeds its time budget."""

    def __init__(self, image: str, timeout_seconds: float, stage: str = "pull") -> None:
        self.timeout_seconds = timeout_seconds
        self.stage = stage
        if stage == "drain":
            msg = f"timeout while downloading Docker image {image}"
        else:
            msg = (
                f"timeout while trying to pull Docker image {image} - this usually "
                "means the image doesn't exist in the registry or the registry is unreachable"
            )
        super().__init__(image, msg)


class ImageNotFoundError(ProvisionError):
    """Raised when the registry reports that the image or tag does not exist."""

    def __init__(self, image: str) -> None:
        super().__init__(
            image,
            f"docker image {image} not found in registry. "
            "Please check that the image name and tag are correct",
        )


class ImagePullError(ProvisionError):
    """Raised for any other pull failure (daemon error, broken stream, error payload)."""

    def __init__(self, image: str, reason: str, stage: str = "pull") -> None:
        self.reason = reason
        self.stage = stage
        if stage == "drain":
            msg = f"failed to read pull response for image {image}: {reason}"
        else:
            msg = f"failed to pull Docker image {image}: {reason}"
        super().__init__(image, msg)


class ContainerCreateError(ProvisionError):
    """Raised when the engine rejects container creation."""

    def __init__(self, image: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(image, f"failed to create container: {cause}")


class ContainerStartError(ProvisionError):
    """Raised when a created container fails to start.

    The container still exists in the engine; its id is kept on the error
    for diagnostics but is never reported as a provisioning result.
    """

    def __init__(self, image: str, container_id: str, cause: Exception) -> None:
        self.container_id = container_id
        self.cause = cause
        super().__init__(image, f"failed to start container: {cause}")
