# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Minimal discrete-event primitives: Event and Env (clock + Future Event
#   List). The model never looks inside the FEL; it only schedules events,
#   reads the clock, and receives events through handler.handle().
#
# Design notes:
#   - FEL entries are (t, seq, event); seq breaks ties so equal timestamps
#     are delivered in the order they were scheduled.
#   - Scheduling before the current clock is rejected: events must never
#     travel backwards in time.
#   - Each Event is marked handled once delivered and cannot be replayed.
#
# Usage:
#   from qnet.queues import Env, Event, ARRIVAL, DEPARTURE
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq, itertools, logging, math
from typing import Any, List, Tuple

from .errors import IllegalEvent

log = logging.getLogger(__name__)

ARRIVAL = "arrival"
DEPARTURE = "departure"
EVENT_KINDS = (ARRIVAL, DEPARTURE)


class Event:
    """Single-use event record: what happens, where, and to whom."""
    __slots__ = ("kind", "station", "customer", "handled")

    def __init__(self, kind: str, station: int, customer: Any):
        self.kind = kind; self.station = station; self.customer = customer
        self.handled = False

    def __repr__(self):
        cid = getattr(self.customer, "cid", None)
        return f"Event({self.kind!r}, station={self.station}, customer={cid})"


class Env:
    """Simulation environment holding the clock, FEL, and a handler hook.

    Attributes
    ----------
    t : float
        Current simulation time.
    FEL : list[tuple[float, int, Event]]
        Min-heap of scheduled events.
    handler : object
        Object with a ``handle(env, event)`` method invoked once per event.
    """
    def __init__(self, handler=None):
        self.t: float = 0.0
        self.FEL: List[Tuple[float, int, Event]] = []
        self.handler = handler
        self._seq = itertools.count()
        self.delivered = 0

    def current_time(self) -> float:
        return self.t

    def schedule(self, t: float, ev: Event):
        if t < self.t or math.isnan(t):
            raise IllegalEvent(f"{ev!r} scheduled at t={t} before current time {self.t}")
        heapq.heappush(self.FEL, (t, next(self._seq), ev))

    def pending(self) -> int:
        return len(self.FEL)

    def run_until(self, T_end: float):
        """Deliver every event with timestamp <= T_end in timestamp order."""
        if self.handler is None:
            raise RuntimeError("Env has no event handler attached")
        while self.FEL and self.FEL[0][0] <= T_end:
            t, _, ev = heapq.heappop(self.FEL)
            self.t = t
            self.handler.handle(self, ev)
            self.delivered += 1
        log.debug("run_until(%s) stopped at t=%f with %d pending", T_end, self.t, len(self.FEL))
