"""Tests for fleet_ops/utils/waiters.py."""

import time
from unittest.mock import MagicMock, call

import pytest

from fleet_ops.utils.exceptions import PollError, PollTimeout
from fleet_ops.utils.waiters import wait_for_all, wait_until


def test_wait_until_returns_after_success(sleep):
    check = MagicMock(side_effect=["pending", "pending", "completed"])

    status = wait_until(check, "snap-1", success="completed", interval=15, sleep=sleep)

    assert status == "completed"
    assert check.call_count == 3
    assert sleep.call_args_list == [call(15), call(15)]


def test_wait_until_aborts_on_first_error_status(sleep):
    check = MagicMock(return_value="error")

    with pytest.raises(PollError) as exc_info:
        wait_until(check, "snap-1", success="completed", failures=["error"], sleep=sleep)

    assert exc_info.value.resource_id == "snap-1"
    assert exc_info.value.status == "error"
    check.assert_called_once()
    sleep.assert_not_called()


def test_wait_until_times_out(sleep):
    check = MagicMock(return_value="pending")
    clock = MagicMock(side_effect=[0, 0, 15, 20])

    with pytest.raises(PollTimeout) as exc_info:
        wait_until(
            check, "vol-1", success="available", interval=15, timeout=20, sleep=sleep, clock=clock
        )

    assert exc_info.value.timeout == 20
    assert exc_info.value.last_status == "pending"
    assert sleep.call_args_list == [call(15), call(5)]


def test_wait_for_all_sequential_runs_in_order():
    order = []

    def make(name):
        def run(cancel):
            assert cancel is None
            order.append(name)
            return "completed"

        return run

    assert wait_for_all([make("a"), make("b")], parallel=False) == ["completed", "completed"]
    assert order == ["a", "b"]


def test_wait_for_all_parallel_collects_results():
    waits = [lambda cancel: "completed", lambda cancel: "available"]

    assert wait_for_all(waits, parallel=True) == ["completed", "available"]


def test_wait_for_all_parallel_cancels_remaining_waits_on_failure():
    never_ready = MagicMock(return_value="pending")

    def slow(cancel):
        return wait_until(
            never_ready, "snap-slow", success="completed", interval=0.01,
            sleep=time.sleep, cancel=cancel,
        )

    def failing(cancel):
        raise PollError("snap-bad", "error")

    with pytest.raises(PollError) as exc_info:
        wait_for_all([slow, failing], parallel=True)

    assert exc_info.value.resource_id == "snap-bad"


def test_wait_for_all_empty():
    assert wait_for_all([]) == []
