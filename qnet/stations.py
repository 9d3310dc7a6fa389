# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Station primitives for the network: GeneratorSpec (transient source
#   description), QueueStation (single FIFO server with exponential service
#   and a route table), ExitStation (sink), and the StationNetwork that
#   indexes them by id.
#
# Design notes:
#   - QueueStation.line holds references only; customers are owned by the
#     CustomerLedger. The head of the line is the customer in service.
#   - present == len(line) at all times: +1 per arrival, -1 per departure.
#   - Generators never become runtime stations; they are consumed by
#     arrivals.generate_arrivals() at build time.
#
# Usage:
#   from qnet.stations import QueueStation, ExitStation, StationNetwork
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterator, List, Tuple, Union

from .entities import Customer
from .errors import ConfigurationError, IllegalEvent
from .metrics import RunningStat
from .queues import DEPARTURE, Env, Event

Route = Tuple[float, int]   # (probability, destination id)


@dataclass(frozen=True)
class GeneratorSpec:
    sid: int
    mean_interarrival: float
    destination: int


@dataclass(frozen=True)
class QueueSpec:
    sid: int
    mean_service: float
    routes: Tuple[Route, ...]

    def instantiate(self) -> "QueueStation":
        return QueueStation(self.sid, self.mean_service, list(self.routes))


class QueueStation:
    """Single-server FIFO station with exponential service.

    Parameters
    ----------
    sid : int
        Station id, unique across the network.
    mean_service : float
        Mean of the exponential service-time distribution.
    routes : list[tuple[float, int]]
        Ordered (probability, destination) pairs, already validated.
    """
    def __init__(self, sid: int, mean_service: float, routes: List[Route]):
        self.sid = sid
        self.mean_service = mean_service
        self.routes: List[Route] = list(routes)
        self.line: Deque[Customer] = deque()
        self.present: int = 0
        self.waits = RunningStat()

    @property
    def processed(self) -> int:
        return self.waits.n

    def draw_service(self, rng: random.Random) -> float:
        if self.mean_service <= 0.0:
            return 0.0
        return rng.expovariate(1.0 / self.mean_service)

    def enqueue(self, env: Env, cust: Customer, rng: random.Random):
        """Admit a customer; it enters service at once if the server is idle."""
        self.present += 1
        cust.queue_arrival_time = env.t
        self.line.append(cust)
        if self.present == 1:
            self._start_service(env, cust, rng)

    def finish(self, env: Env, cust: Customer) -> float:
        """Release the head customer and record its queue wait."""
        if not self.line or self.line[0] is not cust:
            raise IllegalEvent(
                f"departure of customer {cust.cid} from station {self.sid} "
                f"which is not at the head of the line"
            )
        self.present -= 1
        wait = self._extract_wait(cust, env.t)
        self.waits.add(wait)
        self.line.popleft()
        return wait

    def start_next(self, env: Env, rng: random.Random):
        if self.present >= 1:
            self._start_service(env, self.line[0], rng)

    def _start_service(self, env: Env, cust: Customer, rng: random.Random):
        st = self.draw_service(rng)
        cust.service_time = st
        # Time spent queued at this station ends now
        cust.waiting_time += env.t - cust.queue_arrival_time
        env.schedule(env.t + st, Event(DEPARTURE, self.sid, cust))

    @staticmethod
    def _extract_wait(cust: Customer, now: float) -> float:
        # wait = (departure time) - (service time) - (queue entry); rounding can
        # leave this a hair below zero, the report clamps the printed average
        return now - cust.service_time - cust.queue_arrival_time

    def __repr__(self):
        return f"QueueStation(sid={self.sid}, present={self.present}, processed={self.processed})"


class ExitStation:
    """Sink: records completions, no service and no routing."""
    def __init__(self, sid: int):
        self.sid = sid
        self.completed: int = 0

    def __repr__(self):
        return f"ExitStation(sid={self.sid}, completed={self.completed})"


Station = Union[QueueStation, ExitStation]


class StationNetwork:
    """Runtime stations indexed by id."""
    def __init__(self):
        self._stations: Dict[int, Station] = {}

    def add(self, station: Station):
        if station.sid in self._stations:
            raise ConfigurationError("duplicate station id", station.sid)
        self._stations[station.sid] = station

    def get(self, sid: int) -> Station:
        try:
            return self._stations[sid]
        except KeyError:
            raise IllegalEvent(f"event references unknown station {sid}") from None

    def queues(self) -> List[QueueStation]:
        return [s for _, s in sorted(self._stations.items()) if isinstance(s, QueueStation)]

    def exits(self) -> List[ExitStation]:
        return [s for _, s in sorted(self._stations.items()) if isinstance(s, ExitStation)]

    def __contains__(self, sid: int) -> bool:
        return sid in self._stations

    def __iter__(self) -> Iterator[Station]:
        return iter(s for _, s in sorted(self._stations.items()))

    def __len__(self) -> int:
        return len(self._stations)
