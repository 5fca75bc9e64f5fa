# Copyright (c) 2025 Trae AI. All rights reserved.

import time
import logging
import threading
from .models import BurstState
from .errors import ActionCrash
from .executor import ActionExecutor


class Coalescer:
    """
    Collapses a burst of change events into a single action run.

    Every access to the burst state goes through the lock. When a burst
    fires, the lock is held while the action runs, so at most one action
    runs at a time and events arriving meanwhile start a new burst.
    """

    def __init__(self):
        self._state = BurstState()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def record_event(self, now: float):
        with self._lock:
            if self._state.burst_start is None:
                self._state.burst_start = now
            self._state.last_event = now

    def evaluate_and_fire(
        self,
        now: float,
        quiet_period: float,
        max_window: float,
        executor: ActionExecutor,
        action: str,
    ) -> bool:
        """
        Fires the action if the pending burst has gone quiet for quiet_period
        or has been alive for max_window. Returns True if it fired.
        """
        with self._lock:
            burst_start = self._state.burst_start
            if burst_start is None:
                return False

            age = now - burst_start
            idle = now - self._state.last_event

            if age < max_window and idle < quiet_period:
                # Events are still arriving
                return False

            # Past max_window the burst fires even if events keep coming.
            stamp = time.ctime(burst_start)
            self.logger.info(f"[{stamp}] Detected a modification.")
            try:
                status = executor.run(action)
                if status != 0:
                    self.logger.warning(f"[{stamp}] Non-zero error code {status} was returned by {action}")
            except ActionCrash as e:
                self.logger.error(f"[{stamp}] {e}")
            finally:
                self._state = BurstState()
            return True

    def snapshot(self) -> BurstState:
        with self._lock:
            return self._state.model_copy()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._state.pending
