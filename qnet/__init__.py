"""
qnet package initializer.

This package contains the discrete-event engine, station primitives,
topology parsing, routing policy, and statistics collection for an open
queueing network of single-server FIFO stations fed by exogenous generators.
"""
__all__ = [
    "errors", "entities", "queues", "stations", "topology", "arrivals",
    "network", "policies", "metrics", "report", "config", "simulation", "cli",
]
