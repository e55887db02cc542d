"""Core type definitions for code-sandbox."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from code_sandbox.errors import SandboxError


@dataclass(frozen=True)
class ProvisionRequest:
    """Arguments of one provisioning call.

    An absent or empty image means "use the configured default image".
    """

    image: str | None = None

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> ProvisionRequest:
        """Build a request from raw tool-call arguments.

        Empty or non-string values for ``image`` are treated as absent.
        """
        image = (arguments or {}).get("image")
        if not isinstance(image, str) or not image:
            image = None
        return cls(image=image)


@dataclass(frozen=True)
class ProvisionResult:
    """Outcome of a provisioning attempt: a container id or an error, never both."""

    container_id: str | None = None
    error: SandboxError | None = None

    def __post_init__(self) -> None:
        if (self.container_id is None) == (self.error is None):
            raise ValueError("ProvisionResult needs exactly one of container_id or error")

    @property
    def ok(self) -> bool:
        """True if a container was provisioned."""
        return self.error is None

    def to_text(self) -> str:
        """Render the result the way the tool surface reports it."""
        if self.error is not None:
            return f"Error: {self.error}"
        return f"container_id: {self.container_id}"
