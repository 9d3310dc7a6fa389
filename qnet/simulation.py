# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: parse the network, schedule every
#   exogenous arrival, run the event loop to the horizon, and summarise.
#
# Design notes:
#   - One random.Random per run, seeded from cfg["sim"]["seed"]; it drives
#     interarrival, service and routing draws, so equal seeds give equal
#     reports.
#   - With sim.drain the loop keeps going past the horizon until the FEL is
#     empty; no arrival is ever generated past the horizon.
#
# Usage:
#   from qnet.simulation import run_once
#   summary = run_once(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math, random
from dataclasses import dataclass
from typing import Dict, Optional

from .entities import CustomerLedger
from .errors import ConfigurationError, ResourceExhaustion
from .metrics import Metrics
from .network import Router
from .queues import Env
from .report import summarize
from .stations import StationNetwork
from .topology import Topology, build_network, load_network

log = logging.getLogger(__name__)


@dataclass
class Run:
    env: Env
    router: Router
    ledger: CustomerLedger
    stations: StationNetwork
    metrics: Metrics
    horizon: float

    def summary(self) -> Dict:
        return summarize(self.ledger, self.stations, self.metrics)


def prepare(cfg: Dict, topology: Optional[Topology] = None) -> Run:
    """Build stations and schedule all arrivals; the event loop is not run."""
    sim, net = cfg["sim"], cfg["network"]
    tolerance = float(net.get("probability_tolerance", 1e-9))
    if topology is None:
        if not net.get("path"):
            raise ConfigurationError("no network description given (network.path)")
        topology = load_network(net["path"], route_layout=net.get("route_layout", "grouped"),
                                tolerance=tolerance)
    rng = random.Random(sim.get("seed"))
    horizon = float(sim["end_time"])
    ledger = CustomerLedger(sim.get("max_customers"))
    metrics = Metrics()
    env = Env()
    try:
        stations = build_network(topology, env, ledger, horizon, rng)
    except MemoryError as exc:
        raise ResourceExhaustion(f"out of memory after {len(ledger)} customers") from exc
    router = Router(stations, metrics, rng, tolerance)
    env.handler = router
    return Run(env, router, ledger, stations, metrics, horizon)


def execute(run: Run, drain: bool = False) -> Run:
    run.env.run_until(run.horizon)
    if drain:
        run.env.run_until(math.inf)
    log.info("run finished at t=%f: %d entered, %d exited, %d arrivals handled, "
             "%d events delivered, %d pending",
             run.env.t, len(run.ledger), run.metrics.exited, run.metrics.arrivals_handled,
             run.env.delivered, run.env.pending())
    return run


def simulate(cfg: Dict, topology: Optional[Topology] = None) -> Run:
    return execute(prepare(cfg, topology), drain=bool(cfg["sim"].get("drain", False)))


def run_once(cfg: Dict, topology: Optional[Topology] = None) -> Dict:
    return simulate(cfg, topology).summary()
