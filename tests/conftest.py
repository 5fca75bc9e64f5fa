# Copyright (c) 2025 Trae AI. All rights reserved.

import time
import threading
import pytest
from dirmon.core.coalescer import Coalescer
from dirmon.core.models import Policy
from dirmon.core.notifier import NotificationSource


class RecordingExecutor:
    """Stands in for a real process. Records each run and returns a fixed status."""

    def __init__(self, status: int = 0):
        self.status = status
        self.calls = []
        self.fired = threading.Event()

    def run(self, action):
        self.calls.append(action)
        self.fired.set()
        return self.status


def wait_for(predicate, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def coalescer():
    return Coalescer()

@pytest.fixture
def executor():
    return RecordingExecutor()

@pytest.fixture
def executor_factory():
    return RecordingExecutor

@pytest.fixture
def wait_until():
    return wait_for

@pytest.fixture
def source():
    src = NotificationSource()
    yield src
    src.close()

@pytest.fixture
def fast_policy():
    return Policy(poll_interval=0.02, quiet_period=0.1, max_window=1.0)

@pytest.fixture
def action_script(tmp_path):
    script = tmp_path / "action.sh"
    script.write_text("#!/bin/sh\nexit 0\n")
    script.chmod(0o755)
    return script
