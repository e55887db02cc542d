"""code-sandbox: on-demand Docker containers for sandboxed code execution."""

# All errors (foundational)
from code_sandbox.errors import (
    ConfigurationError,
    ContainerCreateError,
    ContainerStartError,
    EngineConnectionError,
    ImageNotFoundError,
    ImagePullError,
    ProvisionError,
    PullTimeoutError,
    SandboxError,
)

# Core types
from code_sandbox.types import ProvisionRequest, ProvisionResult

# Provisioning
from code_sandbox.container import (
    DEFAULT_IMAGE,
    Provisioner,
    ProvisionerConfig,
    resolve_engine,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Provisioner",
    "ProvisionerConfig",
    "resolve_engine",
    "DEFAULT_IMAGE",
    # Types
    "ProvisionRequest",
    "ProvisionResult",
    # Errors
    "SandboxError",
    "ConfigurationError",
    "EngineConnectionError",
    "ProvisionError",
    "PullTimeoutError",
    "ImageNotFoundError",
    "ImagePullError",
    "ContainerCreateError",
    "ContainerStartError",
]
