"""
experiments/scenarios.py

Holds scenario definitions (network + run overrides) to sweep during
experiments. Each scenario's overrides are merged recursively over the
baseline run configuration.
"""

from __future__ import annotations
import os

NETWORKS = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "networks")

BASELINE = {
    "name": "tandem",
    "overrides": {},  # baseline.yaml already points at the tandem network
}

TANDEM_LONG = {
    "name": "tandem_long",
    "overrides": {
        "sim": {"end_time": 10000.0, "drain": True},
    },
}

FEEDBACK = {
    "name": "feedback",
    "overrides": {
        "network": {"path": os.path.join(NETWORKS, "feedback.txt")},
        "sim": {"end_time": 5000.0, "seed": 11},
    },
}

SPLIT = {
    "name": "split",
    "overrides": {
        "network": {
            "path": os.path.join(NETWORKS, "split_interleaved.txt"),
            "route_layout": "interleaved",
        },
        "sim": {"end_time": 2000.0, "seed": 23},
    },
}

SCENARIOS = [BASELINE, TANDEM_LONG, FEEDBACK, SPLIT]
