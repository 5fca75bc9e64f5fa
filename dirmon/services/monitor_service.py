# Copyright (c) 2025 Trae AI. All rights reserved.

import time
import logging
import threading
from typing import Callable, Optional
from dirmon.core.models import Policy
from dirmon.core.coalescer import Coalescer
from dirmon.core.errors import SourceExhausted
from dirmon.core.executor import ActionExecutor
from dirmon.core.notifier import NotificationSource

class MonitorService:
    """
    Runs the action once per burst of directory changes.

    Two worker threads share one Coalescer: the event recorder blocks on the
    notification source and records each change, the trigger ticker wakes
    every poll interval and lets the Coalescer decide whether to fire.
    """
    def __init__(
        self,
        policy: Optional[Policy] = None,
        clock: Callable[[], float] = time.time,
        coalescer: Optional[Coalescer] = None,
    ):
        self.policy = policy or Policy()
        self.clock = clock
        self.coalescer = coalescer or Coalescer()
        self.logger = logging.getLogger(__name__)

        self.source: Optional[NotificationSource] = None
        self.executor: Optional[ActionExecutor] = None
        self.action: Optional[str] = None

        self.stop_event = threading.Event()
        self.source_exhausted = False
        self.recorder_thread = None
        self.ticker_thread = None

    def start(self, source: NotificationSource, executor: ActionExecutor, action: str):
        """Starts the recorder and ticker threads."""
        if self.ticker_thread and self.ticker_thread.is_alive():
            self.logger.warning("MonitorService is already running.")
            return

        self.source = source
        self.executor = executor
        self.action = action

        self.logger.info(
            f"Starting MonitorService (poll {self.policy.poll_interval}s, "
            f"quiet {self.policy.quiet_period}s, max window {self.policy.max_window}s)..."
        )
        self.stop_event.clear()
        self.source_exhausted = False
        self.recorder_thread = threading.Thread(target=self._record_loop, name="dirmon-recorder", daemon=True)
        self.ticker_thread = threading.Thread(target=self._tick_loop, name="dirmon-ticker", daemon=True)
        self.recorder_thread.start()
        self.ticker_thread.start()

    def stop(self):
        """Stops both workers and returns once they have exited."""
        if self.ticker_thread is None:
            return
        self.logger.info("Stopping MonitorService...")
        self.stop_event.set()
        self.source.close()
        self.recorder_thread.join()
        self.ticker_thread.join()
        self.recorder_thread = None
        self.ticker_thread = None

    def is_running(self) -> bool:
        return self.recorder_thread is not None and self.recorder_thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the event recorder exits. Returns False on timeout."""
        if self.recorder_thread is None:
            return True
        self.recorder_thread.join(timeout)
        return not self.recorder_thread.is_alive()

    def _record_loop(self):
        """Records one event per signal until the source is exhausted."""
        while True:
            try:
                self.source.wait_next()
            except SourceExhausted:
                self.logger.info("Notification source closed, event recorder stopping.")
                break
            except Exception as e:
                self.logger.error(f"Notification source failed: {e}")
                break

            now = self.clock()
            self.logger.info(f"[{time.ctime(now)}] Detected a modification. (raw)")
            self.coalescer.record_event(now)

        if not self.stop_event.is_set():
            self.source_exhausted = True

    def _tick_loop(self):
        """Evaluates the pending burst every poll interval."""
        while not self.stop_event.is_set():
            if self.stop_event.wait(self.policy.poll_interval):
                break
            self._evaluate(self.policy.quiet_period)

        # No more events can arrive once the source is gone, so the burst is complete
        if self.source_exhausted:
            self._evaluate(0.0)

    def _evaluate(self, quiet_period: float):
        try:
            self.coalescer.evaluate_and_fire(
                self.clock(),
                quiet_period,
                self.policy.max_window,
                self.executor,
                self.action,
            )
        except Exception as e:
            self.logger.error(f"Error in trigger ticker: {e}")
