# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# topology.py
# -----------------------------------------------------------------------------
# Purpose:
#   Topology builder: parse the textual network description into station
#   specs, validate it, then instantiate runtime stations and hand every
#   generator to arrivals.generate_arrivals().
#
# Design notes:
#   - Format: a component count N, then N records
#         id G <mean_interarrival> <destination>
#         id E
#         id Q <mean_service> <k> <p_1> ... <p_k> <d_1> ... <d_k>
#     With route_layout="interleaved" a Q record lists <p_i> <d_i> pairs.
#   - Parsing has no side effects. Arrivals are only scheduled once the whole
#     description has been accepted, so a rejected description never leaves
#     events behind. Generators are expanded in declaration order, which
#     fixes the order of random draws for a given seed.
#   - A Topology is immutable; every build yields fresh stations, so one
#     parsed description can back many replications.
#
# Usage:
#   topo = parse_network(text)
#   stations = build_network(topo, env, ledger, horizon, rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math, random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

from .arrivals import generate_arrivals
from .entities import CustomerLedger
from .errors import ConfigurationError, InvalidComponentType
from .policies import DEFAULT_TOLERANCE
from .queues import Env
from .stations import ExitStation, GeneratorSpec, QueueSpec, StationNetwork

log = logging.getLogger(__name__)

ROUTE_LAYOUTS = ("grouped", "interleaved")


@dataclass
class Topology:
    generators: List[GeneratorSpec] = field(default_factory=list)
    queues: List[QueueSpec] = field(default_factory=list)
    exits: List[int] = field(default_factory=list)

    def routable_ids(self) -> Set[int]:
        """Ids a customer may be sent to: queues and exits."""
        return {q.sid for q in self.queues} | set(self.exits)

    def instantiate(self) -> StationNetwork:
        stations = StationNetwork()
        for q in self.queues:
            stations.add(q.instantiate())
        for sid in self.exits:
            stations.add(ExitStation(sid))
        return stations


class _Tokens:
    """Whitespace token stream with typed reads and positional errors."""
    def __init__(self, text: str):
        self._toks: Iterator[str] = iter(text.split())

    def _next(self, what: str, component_id: Optional[int]) -> str:
        try:
            return next(self._toks)
        except StopIteration:
            raise ConfigurationError(f"unexpected end of description while reading {what}",
                                     component_id) from None

    def read_int(self, what: str, component_id: Optional[int] = None) -> int:
        tok = self._next(what, component_id)
        try:
            return int(tok)
        except ValueError:
            raise ConfigurationError(f"expected integer {what}, got {tok!r}", component_id) from None

    def read_float(self, what: str, component_id: Optional[int] = None) -> float:
        tok = self._next(what, component_id)
        try:
            val = float(tok)
        except ValueError:
            raise ConfigurationError(f"expected number {what}, got {tok!r}", component_id) from None
        if not math.isfinite(val):
            raise ConfigurationError(f"{what} must be finite, got {tok!r}", component_id)
        return val

    def read_tag(self, component_id: int) -> str:
        return self._next("component type", component_id)

    def leftover(self) -> List[str]:
        return list(self._toks)


def parse_network(text: str, route_layout: str = "grouped",
                  tolerance: float = DEFAULT_TOLERANCE) -> Topology:
    """Parse and validate a network description.

    Raises ConfigurationError (or InvalidComponentType) on any defect.
    """
    if route_layout not in ROUTE_LAYOUTS:
        raise ConfigurationError(f"route_layout must be one of {ROUTE_LAYOUTS}, got {route_layout!r}")
    toks = _Tokens(text)
    n = toks.read_int("component count")
    if n <= 0:
        raise ConfigurationError(
            "the description must start with a positive integer: the number of components"
        )

    topo = Topology()
    seen: Set[int] = set()
    for _ in range(n):
        sid = toks.read_int("component id")
        if sid < 0:
            raise ConfigurationError("component ids must be non-negative", sid)
        if sid in seen:
            raise ConfigurationError("duplicate component id", sid)
        seen.add(sid)
        tag = toks.read_tag(sid)
        if tag == "G":
            mean = toks.read_float("mean interarrival time", sid)
            dest = toks.read_int("generator destination", sid)
            if mean <= 0.0:
                raise ConfigurationError("mean interarrival time must be positive", sid)
            topo.generators.append(GeneratorSpec(sid, mean, dest))
        elif tag == "E":
            topo.exits.append(sid)
        elif tag == "Q":
            topo.queues.append(_parse_queue(toks, sid, route_layout, tolerance))
        else:
            raise InvalidComponentType(
                f"invalid component type {tag!r}; expected one of G, E, Q (capitalised)", sid
            )

    extra = toks.leftover()
    if extra:
        log.warning("ignoring %d trailing token(s) after %d components", len(extra), n)

    _check_destinations(topo)
    return topo


def _parse_queue(toks: _Tokens, sid: int, route_layout: str, tolerance: float) -> QueueSpec:
    mean = toks.read_float("mean service time", sid)
    if mean < 0.0:
        raise ConfigurationError("mean service time must be non-negative", sid)
    k = toks.read_int("route count", sid)
    if k <= 0:
        raise ConfigurationError("a queue needs at least one route", sid)

    if route_layout == "interleaved":
        probs, dests = [], []
        for _ in range(k):
            probs.append(toks.read_float("route probability", sid))
            dests.append(toks.read_int("route destination", sid))
        _check_probabilities(probs, sid, tolerance)
    else:
        probs = [toks.read_float("route probability", sid) for _ in range(k)]
        # Probabilities are checked before destinations are read
        _check_probabilities(probs, sid, tolerance)
        dests = [toks.read_int("route destination", sid) for _ in range(k)]
    return QueueSpec(sid, mean, tuple(zip(probs, dests)))


def _check_probabilities(probs: List[float], sid: int, tolerance: float):
    for p in probs:
        if p < 0.0 or p > 1.0:
            raise ConfigurationError(f"route probability {p} outside [0, 1]", sid)
    total = math.fsum(probs)
    if abs(total - 1.0) > tolerance:
        raise ConfigurationError(f"route probabilities sum to {total!r}, not 1", sid)


def _check_destinations(topo: Topology):
    """Every destination must name an existing queue or exit."""
    routable = topo.routable_ids()
    for gen in topo.generators:
        if gen.destination not in routable:
            raise ConfigurationError(
                f"generator destination {gen.destination} is not a queue or exit", gen.sid
            )
    for q in topo.queues:
        for _, dest in q.routes:
            if dest not in routable:
                raise ConfigurationError(f"route destination {dest} is not a queue or exit", q.sid)
    if not topo.exits:
        log.warning("network has no exit station; no customer can leave the system")


def build_network(topo: Topology, env: Env, ledger: CustomerLedger, horizon: float,
                  rng: random.Random) -> StationNetwork:
    """Create fresh stations and schedule every generator's arrival stream."""
    stations = topo.instantiate()
    for gen in topo.generators:
        generate_arrivals(env, ledger, gen, horizon, rng)
    log.info("built network: %d queue(s), %d exit(s), %d generator(s), %d customer(s)",
             len(topo.queues), len(topo.exits), len(topo.generators), len(ledger))
    return stations


def load_network(path: str, route_layout: str = "grouped",
                 tolerance: float = DEFAULT_TOLERANCE) -> Topology:
    try:
        with open(path, "r") as f:
            text = f.read()
    except OSError as exc:
        raise ConfigurationError(f"cannot read network description {path!r}: {exc.strerror}") from exc
    return parse_network(text, route_layout=route_layout, tolerance=tolerance)
