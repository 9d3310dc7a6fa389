# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definitions for the queueing-network DES: Customer and the
#   CustomerLedger that owns every customer created during a run.
#
# Design notes:
#   - The ledger is the single owner of customers, in creation order.
#     Station queues only hold references to customers living here.
#   - Customers are never removed; after exit they stay for reporting.
#
# Usage:
#   from qnet.entities import Customer, CustomerLedger
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .errors import ResourceExhaustion


@dataclass
class Customer:
    cid: int                                  # unique, strictly increasing
    entry_time: float                         # time the generator released it
    exit_time: Optional[float] = None         # set on arrival at an Exit
    queue_arrival_time: float = 0.0           # arrival time at the current queue
    waiting_time: float = 0.0                 # total time queued, excluding service
    service_time: float = 0.0                 # duration of the latest service draw

    @property
    def exited(self) -> bool:
        return self.exit_time is not None

    def time_in_system(self) -> Optional[float]:
        if self.exit_time is None:
            return None
        return self.exit_time - self.entry_time


class CustomerLedger:
    """Append-only record of every customer, indexed by creation order.

    Parameters
    ----------
    max_customers : int, optional
        Upper bound on customers a single run may allocate. Exceeding it
        raises ResourceExhaustion instead of growing without limit.
    """
    def __init__(self, max_customers: Optional[int] = None):
        self._customers: List[Customer] = []
        self._last_id = 0
        self.max_customers = max_customers

    def create(self, entry_time: float) -> Customer:
        """Allocate the next customer and append it to the ledger."""
        if self.max_customers is not None and len(self._customers) >= self.max_customers:
            raise ResourceExhaustion(
                f"customer limit of {self.max_customers} reached at t={entry_time:f}"
            )
        self._last_id += 1
        cust = Customer(cid=self._last_id, entry_time=entry_time)
        self._customers.append(cust)
        return cust

    def exited(self) -> Iterator[Customer]:
        return (c for c in self._customers if c.exited)

    def __iter__(self) -> Iterator[Customer]:
        return iter(self._customers)

    def __len__(self) -> int:
        return len(self._customers)
