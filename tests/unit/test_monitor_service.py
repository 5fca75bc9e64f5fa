# Copyright (c) 2025 Trae AI. All rights reserved.

import time
import pytest
from unittest.mock import MagicMock
from dirmon.core.coalescer import Coalescer
from dirmon.core.models import Policy
from dirmon.services.monitor_service import MonitorService


@pytest.fixture
def service(fast_policy):
    svc = MonitorService(policy=fast_policy)
    yield svc
    svc.stop()


def test_fires_once_after_burst_settles(service, source, executor, wait_until):
    service.start(source, executor, "sync.sh")

    for _ in range(3):
        source.notify()
        time.sleep(0.01)

    assert executor.fired.wait(5)
    # Give the ticker a few more rounds to prove it does not fire again
    time.sleep(0.3)
    assert executor.calls == ["sync.sh"]
    assert not service.coalescer.pending

def test_recorder_uses_clock_for_timestamps(source, executor, wait_until):
    clock = MagicMock(return_value=1234.0)
    coalescer = Coalescer()
    # Ticker never fires: the clock is frozen and the window is long
    policy = Policy(poll_interval=0.02, quiet_period=10.0, max_window=100.0)
    svc = MonitorService(policy=policy, clock=clock, coalescer=coalescer)
    svc.start(source, executor, "sync.sh")
    try:
        source.notify()
        assert wait_until(lambda: coalescer.pending)
        state = coalescer.snapshot()
        assert state.burst_start == 1234.0
        assert state.last_event == 1234.0
    finally:
        svc.stop()
    assert executor.calls == []

def test_stop_joins_both_workers(service, source, executor):
    service.start(source, executor, "sync.sh")
    recorder = service.recorder_thread
    ticker = service.ticker_thread

    service.stop()

    assert not recorder.is_alive()
    assert not ticker.is_alive()
    assert source.closed
    assert not service.is_running()

def test_stop_twice_is_harmless(service, source, executor):
    service.start(source, executor, "sync.sh")
    service.stop()
    service.stop()

def test_stop_before_start_is_harmless(service):
    service.stop()

def test_source_closing_stops_recorder_but_not_ticker(service, source, executor, wait_until):
    service.start(source, executor, "sync.sh")
    ticker = service.ticker_thread

    source.close()

    assert service.wait(timeout=5)
    assert not service.is_running()
    time.sleep(0.1)
    assert ticker.is_alive()

    service.stop()
    assert not ticker.is_alive()

def test_pending_burst_fires_after_source_closes(service, source, executor):
    service.start(source, executor, "sync.sh")
    source.notify()
    time.sleep(0.05)
    source.close()

    assert executor.fired.wait(5)
    assert executor.calls == ["sync.sh"]

def test_ticker_survives_executor_errors(service, source, wait_until):
    calls = []

    class FlakyExecutor:
        def run(self, action):
            calls.append(action)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 0

    service.start(source, FlakyExecutor(), "sync.sh")
    source.notify()
    assert wait_until(lambda: len(calls) == 1)
    assert wait_until(lambda: not service.coalescer.pending)

    source.notify()
    assert wait_until(lambda: len(calls) == 2)

def test_start_twice_warns(service, source, executor, caplog):
    service.start(source, executor, "sync.sh")
    with caplog.at_level("WARNING"):
        service.start(source, executor, "other.sh")
    assert "already running" in caplog.text
    assert service.action == "sync.sh"

def test_default_policy_uses_fixed_constants():
    svc = MonitorService()
    assert svc.policy.poll_interval == 5.0
    assert svc.policy.quiet_period == 5.0
    assert svc.policy.max_window == 60.0

def test_burst_fires_on_stop_after_source_is_exhausted(source, executor, wait_until):
    # Quiet period too long for the ticker to fire on its own
    policy = Policy(poll_interval=0.02, quiet_period=10.0, max_window=100.0)
    svc = MonitorService(policy=policy)
    svc.start(source, executor, "sync.sh")

    source.notify()
    assert wait_until(lambda: svc.coalescer.pending)
    source.close()
    assert svc.wait(timeout=5)
    assert executor.calls == []

    svc.stop()

    assert executor.calls == ["sync.sh"]
    assert not svc.coalescer.pending

def test_burst_is_dropped_when_stopped_by_caller(source, executor, wait_until):
    policy = Policy(poll_interval=0.02, quiet_period=10.0, max_window=100.0)
    svc = MonitorService(policy=policy)
    svc.start(source, executor, "sync.sh")

    source.notify()
    assert wait_until(lambda: svc.coalescer.pending)
    svc.stop()

    assert executor.calls == []
