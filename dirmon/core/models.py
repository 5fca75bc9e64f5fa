# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import Optional
from pydantic import BaseModel, ConfigDict

POLL_INTERVAL = 5.0
QUIET_PERIOD = 5.0
MAX_WINDOW = 60.0


class BurstState(BaseModel):
    """
    Timing of the current, not-yet-fired burst of change events.
    Both fields are None when no burst is pending.
    """

    burst_start: Optional[float] = None
    last_event: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self.burst_start is not None


class Policy(BaseModel):
    """
    Fixed firing policy, in seconds.
    """

    model_config = ConfigDict(frozen=True)

    poll_interval: float = POLL_INTERVAL
    quiet_period: float = QUIET_PERIOD
    max_window: float = MAX_WINDOW
