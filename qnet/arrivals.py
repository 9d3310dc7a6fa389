# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous arrivals: one Poisson stream per generator, fully
#   materialised at build time for the whole horizon.
#
# Design notes:
#   - "Generate then schedule": every customer is created and its arrival
#     event pushed before the run starts, so the number of arrivals is fixed
#     by the seed alone.
#   - The running clock stops at the first draw past the horizon; that draw
#     produces no customer.
#
# Usage:
#   n = generate_arrivals(env, ledger, gen, horizon, rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, random

from .entities import CustomerLedger
from .errors import ConfigurationError
from .queues import ARRIVAL, Env, Event
from .stations import GeneratorSpec

log = logging.getLogger(__name__)


def generate_arrivals(env: Env, ledger: CustomerLedger, gen: GeneratorSpec,
                      horizon: float, rng: random.Random) -> int:
    """Create and schedule every arrival of ``gen`` up to ``horizon``.

    Returns the number of customers created.
    """
    if gen.mean_interarrival <= 0.0:
        raise ConfigurationError("mean interarrival time must be positive", gen.sid)
    rate = 1.0 / gen.mean_interarrival
    clock = 0.0
    created = 0
    while clock <= horizon:
        clock += rng.expovariate(rate)
        if clock > horizon:
            break
        cust = ledger.create(clock)
        env.schedule(clock, Event(ARRIVAL, gen.destination, cust))
        created += 1
    log.info("generator %d scheduled %d arrivals into station %d", gen.sid, created, gen.destination)
    return created
