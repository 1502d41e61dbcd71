"""
Per-group traffic state.
"""

import random


class GroupTraffic:
    """Tracks the traffic of one group over time, including active bursts"""

    def __init__(self, group_id: str, base_rate: float):
        self.group_id = group_id
        self.base_rate = base_rate

        self.burst_multiplier: float = 1.0
        self.burst_duration: int = 0
        # fractional events owed from earlier rounds
        self._carry: float = 0.0

    @property
    def in_burst(self) -> bool:
        return self.burst_duration > 0

    def start_burst(self, multiplier: float, duration: int | None = None) -> None:
        """Multiply the base rate for the next `duration` rounds"""
        self.burst_multiplier = multiplier
        self.burst_duration = duration if duration is not None else random.randint(3, 10)

    def events_for_round(self, interval_seconds: float, jitter: float = 0.0) -> int:
        """Number of events to emit for one round of `interval_seconds`

        Fractional events are carried into the next round so the emitted
        total tracks the configured rate over time.
        """
        multiplier = self.burst_multiplier if self.in_burst else 1.0
        if self.in_burst:
            self.burst_duration -= 1

        variation = random.uniform(1.0 - jitter, 1.0 + jitter) if jitter else 1.0
        exact = max(0.0, self.base_rate * interval_seconds * multiplier * variation) + self._carry
        count = int(exact)
        self._carry = exact - count
        return count
