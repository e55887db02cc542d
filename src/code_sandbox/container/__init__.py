"""code_sandbox.container - Docker discovery and container provisioning."""

from code_sandbox.container.config import (
    DEFAULT_IMAGE,
    DEFAULT_PULL_TIMEOUT,
    DEFAULT_WORKING_DIR,
    ContainerSpec,
    ProvisionerConfig,
)
from code_sandbox.container.connection import (
    TransportCandidate,
    connect,
    default_candidates,
    resolve_engine,
)
from code_sandbox.container.engine import EngineHandle
from code_sandbox.container.provisioner import Provisioner

__all__ = [
    "ContainerSpec",
    "DEFAULT_IMAGE",
    "DEFAULT_PULL_TIMEOUT",
    "DEFAULT_WORKING_DIR",
    "EngineHandle",
    "Provisioner",
    "ProvisionerConfig",
    "TransportCandidate",
    "connect",
    "default_candidates",
    "resolve_engine",
]
