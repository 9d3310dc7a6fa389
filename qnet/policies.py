# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Routing policy: weighted random choice of a departing customer's next
#   station from the queue's ordered (probability, destination) table.
#
# Design notes:
#   - Keep pure functions to ease testing (table + draw -> decision).
#   - The scan is in declared order; the first route whose cumulative mass
#     reaches the draw wins.
#
# Usage:
#   from qnet.policies import route, pick_destination
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from typing import Sequence, Tuple

from .errors import RoutingExhausted

DEFAULT_TOLERANCE = 1e-9


def route(routes: Sequence[Tuple[float, int]], u: float, tolerance: float = DEFAULT_TOLERANCE) -> int:
    """
    Map a uniform draw ``u`` in [0, 1) onto a destination id.

    If rounding leaves the cumulative sum just below ``u`` (by no more than
    ``tolerance``), the last route with positive probability is taken.
    A larger shortfall raises RoutingExhausted.
    """
    cum = 0.0
    for prob, dest in routes:
        cum += prob
        if cum >= u:
            return dest
    if routes and u - cum <= tolerance:
        for prob, dest in reversed(routes):
            if prob > 0.0:
                return dest
    raise RoutingExhausted(
        f"route table {list(routes)} exhausted at cumulative {cum!r} for draw {u!r}"
    )


def pick_destination(routes: Sequence[Tuple[float, int]], rng: random.Random,
                     tolerance: float = DEFAULT_TOLERANCE) -> int:
    return route(routes, rng.random(), tolerance)
