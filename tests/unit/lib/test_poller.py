"""Polling loop: bounded runs, error isolation, stop requests."""

import pytest

from agency.lib.poller import Poller, PollSummary


def test_run_once_calls_tick():
    calls = []
    poller = Poller("test", lambda: calls.append(1), 0)

    summary = poller.run_once()

    assert calls == [1]
    assert summary == PollSummary(polls=1, errors=0)


def test_run_respects_max_polls():
    calls = []
    poller = Poller("test", lambda: calls.append(1), 0)

    summary = poller.run(max_polls=3)

    assert len(calls) == 3
    assert summary.polls == 3


def test_tick_errors_are_counted_not_raised():
    def boom():
        raise RuntimeError("disk gone")

    summary = Poller("test", boom, 0).run(max_polls=2)

    assert summary.polls == 2
    assert summary.errors == 2


def test_stop_finishes_current_tick():
    calls = []

    def tick():
        calls.append(1)
        poller.stop()

    poller = Poller("test", tick, 0)
    summary = poller.run(max_polls=10)

    assert calls == [1]
    assert summary.polls == 1
    assert poller.stopping


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        Poller("test", lambda: None, -1)
