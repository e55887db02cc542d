"""Configuration schemas for container provisioning."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from code_sandbox.errors import ConfigurationError

# Slim Debian image with a shell and Python pre-installed
DEFAULT_IMAGE = "python:3.12-slim-bookworm"

DEFAULT_WORKING_DIR = "/app"

# Budget for a single image pull (call + reading the whole stream)
DEFAULT_PULL_TIMEOUT = 300.0

# Socket timeout for individual Docker API calls (docker SDK default)
DEFAULT_CLIENT_TIMEOUT = 60.0


def _positive_float(name: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def parse_pull_timeout(name: str, raw: Any) -> float:
    """Parse a pull budget: positive and no longer than DEFAULT_PULL_TIMEOUT."""
    value = _positive_float(name, raw)
    if value > DEFAULT_PULL_TIMEOUT:
        raise ConfigurationError(
            f"{name} must be at most {DEFAULT_PULL_TIMEOUT:g} seconds, got {value:g}"
        )
    return value


def _optional_str(name: str, raw: Any, default: str) -> str:
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str):
        raise ConfigurationError(f"{name} must be a string, got {raw!r}")
    return raw


@dataclass
class ContainerSpec:
    """Container definition for an interactive sandbox.

    TTY allocated and stdin kept open across attaches so a session can run
    several commands. No resource limits are applied here.
    """

    image: str
    working_dir: str = DEFAULT_WORKING_DIR
    tty: bool = True
    open_stdin: bool = True
    stdin_once: bool = False
    host_config: dict[str, Any] = field(default_factory=dict)

    def to_engine_config(self) -> dict[str, Any]:
        """Convert to the Docker Engine API container-create body.

        Built by hand rather than through ``APIClient.create_container`` because
        the SDK forces ``StdinOnce`` on whenever stdin is opened.
        """
        return {
            "Image": self.image,
            "WorkingDir": self.working_dir,
            "Tty": self.tty,
            "OpenStdin": self.open_stdin,
            "StdinOnce": self.stdin_once,
            "HostConfig": {**self.host_config},
        }


@dataclass
class ProvisionerConfig:
    """Configuration for the Provisioner on the host side.

    Loaded from environment variables and/or a YAML config file.
    """

    default_image: str = DEFAULT_IMAGE
    working_dir: str = DEFAULT_WORKING_DIR

    # Timeouts
    pull_timeout: float = DEFAULT_PULL_TIMEOUT
    client_timeout: float = DEFAULT_CLIENT_TIMEOUT

    def resolve_image(self, requested: str | None) -> str:
        """Return the requested image, or the default when absent or empty."""
        if isinstance(requested, str) and requested:
            return requested
        return self.default_image

    def container_spec(self, image: str) -> ContainerSpec:
        """Build the container definition for a resolved image."""
        return ContainerSpec(image=image, working_dir=self.working_dir)

    @classmethod
    def from_yaml(cls, path: Path) -> ProvisionerConfig:
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping at top level")

        return cls._from_dict(data)

    @classmethod
    def from_env(cls) -> ProvisionerConfig:
        """Load configuration from environment variables.

        Raises:
            ConfigurationError: If a timeout variable is not a positive number, or
                the pull timeout exceeds DEFAULT_PULL_TIMEOUT.
        """
        config = cls()

        if image := os.environ.get("SANDBOX_DEFAULT_IMAGE"):
            config.default_image = image
        if working_dir := os.environ.get("SANDBOX_WORKING_DIR"):
            config.working_dir = working_dir

        if pull_timeout := os.environ.get("SANDBOX_PULL_TIMEOUT"):
            config.pull_timeout = parse_pull_timeout("SANDBOX_PULL_TIMEOUT", pull_timeout)
        if client_timeout := os.environ.get("SANDBOX_CLIENT_TIMEOUT"):
            config.client_timeout = _positive_float("SANDBOX_CLIENT_TIMEOUT", client_timeout)

        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> ProvisionerConfig:
        """Create config from dictionary."""
        return cls(
            default_image=_optional_str(
                "default_image", data.get("default_image"), DEFAULT_IMAGE
            ),
            working_dir=_optional_str(
                "working_dir", data.get("working_dir"), DEFAULT_WORKING_DIR
            ),
            pull_timeout=parse_pull_timeout(
                "pull_timeout", data.get("pull_timeout", DEFAULT_PULL_TIMEOUT)
            ),
            client_timeout=_positive_float(
                "client_timeout", data.get("client_timeout", DEFAULT_CLIENT_TIMEOUT)
            ),
        )
