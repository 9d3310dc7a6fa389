# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Router: the event state machine. Env delivers every event to
#   Router.handle(), which dispatches on the event kind and moves customers
#   between queues and exits.
#
# Design notes:
#   - Arrival at an Exit finalises the customer; arrival at a Queue either
#     starts service (idle server) or joins the tail of the line.
#   - Departure releases the head customer, routes it onward with zero
#     transit delay, and starts service for the next customer in line.
#   - Anything the state machine cannot account for (unknown station,
#     unknown kind, an event delivered twice) raises IllegalEvent.
#
# Usage:
#   router = Router(stations, metrics, rng)
#   env = Env(router)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, random
from typing import Optional

from .errors import IllegalEvent
from .metrics import Metrics
from .policies import DEFAULT_TOLERANCE, pick_destination
from .queues import ARRIVAL, DEPARTURE, Env, Event
from .stations import ExitStation, QueueStation, StationNetwork

log = logging.getLogger(__name__)


class Router:
    def __init__(self, stations: StationNetwork, metrics: Metrics,
                 rng: Optional[random.Random] = None, tolerance: float = DEFAULT_TOLERANCE):
        self.S = stations
        self.M = metrics
        self.rng = rng if rng is not None else random.Random()
        self.tolerance = tolerance

    def handle(self, env: Env, ev: Event):
        if ev.handled:
            raise IllegalEvent(f"{ev!r} delivered more than once")
        ev.handled = True
        if ev.kind == ARRIVAL:
            self.on_arrival(env, ev.customer, ev.station)
        elif ev.kind == DEPARTURE:
            self.on_departure(env, ev.customer, ev.station)
        else:
            raise IllegalEvent(f"illegal event kind {ev.kind!r}")

    def on_arrival(self, env: Env, cust, target: int):
        station = self.S.get(target)
        self.M.note_arrival()
        if isinstance(station, ExitStation):
            self.M.note_exit(cust, env.t)
            station.completed += 1
            log.debug("t=%f customer %d exits at %d after %f", env.t, cust.cid, target,
                      cust.exit_time - cust.entry_time)
        elif isinstance(station, QueueStation):
            station.enqueue(env, cust, self.rng)
            log.debug("t=%f customer %d arrives at queue %d (%d present)", env.t, cust.cid,
                      target, station.present)
        else:
            raise IllegalEvent(f"station {target} cannot receive customers")

    def on_departure(self, env: Env, cust, source: int):
        station = self.S.get(source)
        if not isinstance(station, QueueStation):
            raise IllegalEvent(f"departure scheduled at non-queue station {source}")
        self.M.note_departure()
        wait = station.finish(env, cust)
        dest = pick_destination(station.routes, self.rng, self.tolerance)
        env.schedule(env.t, Event(ARRIVAL, dest, cust))
        log.debug("t=%f customer %d leaves queue %d (waited %f) -> %d", env.t, cust.cid,
                  source, wait, dest)
        station.start_next(env, self.rng)
