"""Tests for cooperative cancellation."""

import threading

import pytest

from importplane.core.cancellation import NONE, CancellationToken, throw_if_cancellation_requested
from importplane.core.errors import OperationCancelledError


class TestCancellationToken:
    def test_fresh_token_not_cancelled(self) -> None:
        assert CancellationToken().is_cancellation_requested is False

    def test_cancel_sets_flag(self) -> None:
        token = CancellationToken()
        token.cancel()
        assert token.is_cancellation_requested is True

    def test_cancel_is_idempotent(self) -> None:
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.is_cancellation_requested is True

    def test_cancel_from_other_thread(self) -> None:
        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()
        assert token.is_cancellation_requested is True

    def test_shared_none_token_cannot_be_cancelled(self) -> None:
        with pytest.raises(TypeError):
            NONE.cancel()
        assert NONE.is_cancellation_requested is False


class TestThrowIfCancellationRequested:
    def test_none_is_noop(self) -> None:
        throw_if_cancellation_requested(None)
        throw_if_cancellation_requested(NONE)

    def test_live_token_is_noop(self) -> None:
        throw_if_cancellation_requested(CancellationToken(), "scan")

    def test_cancelled_token_raises(self) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError) as exc_info:
            throw_if_cancellation_requested(token, "build_module_symbols_map")
        assert exc_info.value.details == {"operation": "build_module_symbols_map"}
