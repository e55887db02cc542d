"""Image pull helpers.

A streaming pull can fail in two places: the call itself (or reading its
stream), and inside the payload, where the daemon may report an error
after the HTTP request already succeeded. Each has its own classifier.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from contextlib import closing
from typing import Any

from code_sandbox.errors import (
    ImageNotFoundError,
    ImagePullError,
    ProvisionError,
    PullTimeoutError,
)

NOT_FOUND_MARKERS = ("not found", "404", "manifest unknown")
ERROR_MARKERS = ("error", "Error")

# Stages of a pull, used for error wording
STAGE_PULL = "pull"
STAGE_DRAIN = "drain"


def _contains_any(text: str, markers: Iterable[str]) -> bool:
    return any(marker in text for marker in markers)


def classify_pull_failure(
    image: str,
    error: BaseException,
    *,
    timed_out: bool,
    stage: str = STAGE_PULL,
    timeout_seconds: float = 0.0,
) -> ProvisionError:
    """Classify an exception raised by the pull call or while draining it.

    An expired budget wins over anything in the error text, since a
    cancelled request can carry a misleading message. Not-found markers
    are only honoured for the call itself.
    """
    if timed_out:
        return PullTimeoutError(image, timeout_seconds, stage=stage)

    text = str(error)
    if stage == STAGE_PULL and _contains_any(text, NOT_FOUND_MARKERS):
        return ImageNotFoundError(image)
    return ImagePullError(image, text or type(error).__name__, stage=stage)


def classify_pull_output(image: str, text: str) -> ProvisionError | None:
    """Classify the drained pull stream. Returns None for a clean pull."""
    if _contains_any(text, NOT_FOUND_MARKERS):
        return ImageNotFoundError(image)
    if _contains_any(text, ERROR_MARKERS):
        return ImagePullError(image, text.strip())
    return None


def drain(stream: Iterable[Any], stop: threading.Event | None = None) -> str:
    """Read a pull stream to the end and return it as text.

    The stream is closed on every exit path. If ``stop`` is set mid-read
    the remaining chunks are abandoned and the stream closed.
    """
    chunks: list[bytes] = []
    with closing(stream):  # type: ignore[type-var]
        for chunk in stream:
            if stop is not None and stop.is_set():
                break
            if isinstance(chunk, str):
                chunk = chunk.encode()
            chunks.append(chunk)
    return b"".join(chunks).decode("utf-8", errors="replace")
