# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Run configuration: built-in defaults, YAML loading, and recursive
#   overrides (used by the CLI and by experiment scenarios).
#
# Design notes:
#   - Overrides merge dicts key by key; any other value replaces outright.
#   - validate() rejects a bad configuration before anything is built.
#
# Usage:
#   cfg = load_cfg("config/baseline.yaml")
#   cfg = apply_overrides(cfg, {"sim": {"seed": 7}})
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, math, os
from typing import Dict, Optional

import yaml

from .errors import ConfigurationError
from .policies import DEFAULT_TOLERANCE
from .topology import ROUTE_LAYOUTS

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASELINE_PATH = os.path.join(ROOT, "config", "baseline.yaml")

DEFAULTS: Dict = {
    "sim": {
        "end_time": 1000.0,
        "seed": None,            # None -> OS entropy
        "drain": False,          # keep delivering scheduled events past end_time
        "max_customers": 1_000_000,
    },
    "network": {
        "path": None,
        "route_layout": "grouped",
        "probability_tolerance": DEFAULT_TOLERANCE,
    },
    "report": {
        "path": None,
    },
    "experiments": {
        "replications": 10,
        "confidence_level": 0.95,
        "plot": False,
        "output_dir": "output",
    },
}


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply overrides (recursive merge) on top of a base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides or {})
    return new


def load_cfg(path: Optional[str] = None) -> Dict:
    """Load a YAML run configuration and merge it over DEFAULTS.

    With no path, only the defaults are returned.
    """
    if path is None:
        return copy.deepcopy(DEFAULTS)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read config {path!r}: {exc.strerror}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path!r}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path!r} must be a mapping at top level")
    # Relative network/report paths are taken relative to the config file
    base = os.path.dirname(os.path.abspath(path))
    for section in ("network", "report"):
        sect = data.get(section)
        if isinstance(sect, dict) and sect.get("path") and not os.path.isabs(sect["path"]):
            sect["path"] = os.path.normpath(os.path.join(base, sect["path"]))
    return validate(apply_overrides(DEFAULTS, data))


def _number(cfg: Dict, section: str, key: str, kind=float):
    """Convert cfg[section][key] with ``kind`` or raise ConfigurationError."""
    raw = cfg[section][key]
    if isinstance(raw, bool):
        raise ConfigurationError(f"{section}.{key} must be a number, got {raw!r}")
    try:
        val = kind(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{section}.{key} must be a number, got {raw!r}") from None
    if kind is float and math.isnan(val):
        raise ConfigurationError(f"{section}.{key} must be a number, got {raw!r}")
    if kind is int and isinstance(raw, float) and not raw.is_integer():
        raise ConfigurationError(f"{section}.{key} must be an integer, got {raw!r}")
    cfg[section][key] = val
    return val


def _flag(cfg: Dict, section: str, key: str) -> bool:
    raw = cfg[section][key]
    if not isinstance(raw, bool):
        raise ConfigurationError(f"{section}.{key} must be true or false, got {raw!r}")
    return raw


def validate(cfg: Dict) -> Dict:
    sim, net = cfg["sim"], cfg["network"]
    if _number(cfg, "sim", "end_time") < 0.0:
        raise ConfigurationError(f"sim.end_time must be non-negative, got {sim['end_time']!r}")
    seed = sim["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigurationError(f"sim.seed must be an integer or null, got {seed!r}")
    _flag(cfg, "sim", "drain")
    if sim["max_customers"] is not None and _number(cfg, "sim", "max_customers", int) <= 0:
        raise ConfigurationError("sim.max_customers must be positive")
    if net["route_layout"] not in ROUTE_LAYOUTS:
        raise ConfigurationError(f"network.route_layout must be one of {ROUTE_LAYOUTS}")
    if _number(cfg, "network", "probability_tolerance") < 0.0:
        raise ConfigurationError("network.probability_tolerance must be non-negative")
    if _number(cfg, "experiments", "replications", int) < 1:
        raise ConfigurationError("experiments.replications must be at least 1")
    if not 0.0 < _number(cfg, "experiments", "confidence_level") < 1.0:
        raise ConfigurationError("experiments.confidence_level must lie in (0, 1)")
    _flag(cfg, "experiments", "plot")
    return cfg
