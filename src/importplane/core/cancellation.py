"""Cooperative cancellation for long-running scans."""

from __future__ import annotations

import threading

from importplane.core.errors import OperationCancelledError


class CancellationToken:
    """A one-shot, thread-safe cancellation flag.

    The token is set by the caller (possibly from another thread) and polled
    by the scanning code between modules.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()


class _NeverCancelled(CancellationToken):
    __slots__ = ()

    def cancel(self) -> None:
        raise TypeError("The shared NONE token cannot be cancelled")


NONE = _NeverCancelled()


def throw_if_cancellation_requested(token: CancellationToken | None, operation: str = "") -> None:
    """Raise ``OperationCancelledError`` if *token* has been cancelled."""
    if token is not None and token.is_cancellation_requested:
        raise OperationCancelledError.requested(operation)
