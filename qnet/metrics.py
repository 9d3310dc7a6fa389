# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Running statistics for the network: the per-station wait aggregate and
#   the global time-in-system aggregate updated on every exit.
#
# Design notes:
#   - Averages are recomputed online as (avg * n + x) / (n + 1) so a fixed
#     random stream always reproduces the same bits.
#   - min/max start at +inf/-inf and are only meaningful once n > 0.
#   - Keep side-effect methods (note_*) for instrumentation from the router.
#
# Usage:
#   M = Metrics(); M.note_exit(customer, t)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Dict, Iterable, Optional


class RunningStat:
    """Online min / max / mean over a stream of observations."""
    __slots__ = ("n", "min", "max", "avg")

    def __init__(self):
        self.n: int = 0
        self.min: float = math.inf
        self.max: float = -math.inf
        self.avg: float = 0.0

    def add(self, x: float):
        if x < self.min:
            self.min = x
        if x > self.max:
            self.max = x
        self.avg = (self.avg * self.n + x) / (self.n + 1)
        self.n += 1

    @classmethod
    def over(cls, values: Iterable[float]) -> "RunningStat":
        stat = cls()
        for v in values:
            stat.add(v)
        return stat

    def as_dict(self) -> Dict[str, Optional[float]]:
        if self.n == 0:
            return {"count": 0, "min": None, "max": None, "avg": None}
        return {"count": self.n, "min": self.min, "max": self.max, "avg": self.avg}

    def __repr__(self):
        return f"RunningStat(n={self.n}, min={self.min}, max={self.max}, avg={self.avg})"


class Metrics:
    """Global counters owned by the router for the duration of one run."""
    def __init__(self):
        self.time_in_system = RunningStat()
        self.arrivals_handled: int = 0
        self.departures_handled: int = 0

    @property
    def exited(self) -> int:
        return self.time_in_system.n

    def note_arrival(self):
        self.arrivals_handled += 1

    def note_departure(self):
        self.departures_handled += 1

    def note_exit(self, customer, t: float):
        customer.exit_time = t
        self.time_in_system.add(customer.exit_time - customer.entry_time)
