"""VelocityEstimator: smoothed context growth rate and time-to-wrap projection."""

from __future__ import annotations

import threading
import time
from typing import Callable

from ..types import VelocityConfig, VelocityState
from .timestamps import round_half_up


class VelocityEstimator:
    """Exponential moving average of context growth in tokens/minute.

    One instance lives for the life of the app and must be updated at most
    once per snapshot: every ``update()`` moves the baseline sample, so an
    extra call shortens the next interval and skews the rate.
    """

    def __init__(
        self,
        config: VelocityConfig | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or VelocityConfig()
        self.clock = clock or time.time
        self.state = VelocityState()
        self._lock = threading.Lock()

    @property
    def velocity(self) -> float:
        return self.state.velocity_per_min

    def update(self, current_usage: int | float, now: float | None = None) -> float:
        """Record *current_usage* and return the smoothed tokens/minute."""
        now = self.clock() if now is None else now
        with self._lock:
            s = self.state
            if s.last_usage is not None and s.last_usage_time is not None:
                elapsed = (now - s.last_usage_time) / 60.0
                if elapsed >= self.config.min_interval_minutes and elapsed > 0:
                    instant = (current_usage - s.last_usage) / elapsed
                    if s.initialized:
                        w = self.config.smoothing
                        s.velocity_per_min = s.velocity_per_min * (1 - w) + instant * w
                    else:
                        s.velocity_per_min = instant
                        s.initialized = True
            s.last_usage = current_usage
            s.last_usage_time = now
            return s.velocity_per_min


def project_minutes_to_wrap(
    used: int | float | None,
    velocity: float,
    context_window: int,
    wrap_ratio: float = 0.5,
    noise_floor: float = 100.0,
) -> int | None:
    """Minutes until *used* reaches the wrap threshold at *velocity*.

    None when there is no usage, growth is under the noise floor, or the
    threshold is already reached.
    """
    if used is None:
        return None
    tokens_to_wrap = context_window * wrap_ratio - used
    if velocity <= noise_floor or tokens_to_wrap <= 0:
        return None
    return round_half_up(tokens_to_wrap / velocity)
