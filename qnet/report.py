# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# report.py
# -----------------------------------------------------------------------------
# Purpose:
#   Summarise a finished run (ledger + stations + metrics) into a JSON-
#   serialisable dict, and render that dict as the plain-text report.
#
# Design notes:
#   - summarize() only reads model state, so calling it twice over the same
#     finished run yields identical output.
#   - Time in system comes from the exit-time aggregate; time in queue is
#     computed by one pass over the ledger, restricted to exited customers.
#
# Usage:
#   summary = summarize(ledger, stations, metrics)
#   write_report(path, render_report(summary))
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, List

from .entities import CustomerLedger
from .metrics import Metrics, RunningStat
from .stations import StationNetwork


def summarize(ledger: CustomerLedger, stations: StationNetwork, metrics: Metrics) -> Dict[str, Any]:
    queue_wait = RunningStat.over(c.waiting_time for c in ledger.exited())
    per_station: List[Dict[str, Any]] = []
    for q in stations.queues():
        entry = {"id": q.sid, "processed": q.processed, "present": q.present,
                 "visited": q.processed > 0}
        entry.update({f"wait_{k}": v for k, v in q.waits.as_dict().items() if k != "count"})
        per_station.append(entry)
    return {
        "entered": len(ledger),
        "exited": metrics.exited,
        "time_in_system": metrics.time_in_system.as_dict(),
        "time_in_queue": queue_wait.as_dict(),
        "stations": per_station,
        "completed_by_exit": {e.sid: e.completed for e in stations.exits()},
    }


def render_report(summary: Dict[str, Any]) -> str:
    entered, exited = summary["entered"], summary["exited"]
    lines = [f"During the simulation, {entered} customers entered the system, "
             f"and {exited} exited the system."]
    tis = summary["time_in_system"]
    if exited <= 0:
        lines.append("No customers exited the system, so there are no statistics for the "
                     "total amount of time customers spent in the system.")
    else:
        lines.append(f"Among those who exited the system, customers averaged {tis['avg']:f} time "
                     f"units in the system, the minimum time spent in the system was "
                     f"{tis['min']:f}, and the maximum time spent was {tis['max']:f}.")
    tiq = summary["time_in_queue"]
    if entered <= 0:
        lines.append("No customers entered the system, so statistics on wait and queue times "
                     "are unavailable.")
    elif tiq["count"] == 0:
        lines.append("No customers completed their visit, so statistics on wait and queue "
                     "times are unavailable.")
    else:
        lines.append(f"The total amount of time customers spent waiting in queues averaged to "
                     f"{tiq['avg']:f}, with the least time being {tiq['min']:f}, and the "
                     f"greatest being {tiq['max']:f}.")
    if entered > 0:
        for st in summary["stations"]:
            if not st["visited"]:
                lines.append(f"For queue with ID {st['id']}, no one came to this queue!")
            else:
                # float rounding can push the exact average a hair below zero
                avg = max(st["wait_avg"], 0.0)
                lines.append(f"For queue with ID {st['id']}, the average waiting time is "
                             f"{avg:f}.")
    return "\n".join(lines) + "\n"


def write_report(path: str, text: str):
    with open(path, "w") as f:
        f.write(text)
