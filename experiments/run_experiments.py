"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs multiple independent replications, and reports network KPIs with
confidence intervals. Optionally saves a per-station wait chart per scenario.
"""

from __future__ import annotations
import argparse, copy, logging, math, os, sys
from statistics import mean, stdev
from typing import Callable, Dict, List, Optional, Tuple

from scipy.stats import t as student_t

from qnet.config import BASELINE_PATH, apply_overrides, load_cfg, validate
from qnet.errors import QnetError
from qnet.simulation import run_once
from qnet.topology import load_network

from .scenarios import SCENARIOS


def mean_ci(values: List[float], confidence_level: float) -> Tuple[float, float]:
    """Return (mean, half-width) using a Student t critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = student_t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, float(half)


def series(results: List[Dict], extractor: Callable[[Dict], Optional[float]]) -> List[float]:
    """Collect a numeric series from each replication, skipping missing values."""
    out = []
    for res in results:
        val = extractor(res)
        if val is not None:
            out.append(float(val))
    return out


def station_waits(results: List[Dict]) -> Dict[int, List[float]]:
    """Average wait per queue station across replications that visited it."""
    waits: Dict[int, List[float]] = {}
    for res in results:
        for st in res.get("stations", []):
            waits.setdefault(st["id"], [])
            if st["visited"]:
                waits[st["id"]].append(st["wait_avg"])
    return waits


def run_scenario(cfg: Dict, scenario: Dict, replications: int) -> List[Dict]:
    """Run ``replications`` independent days of one scenario (seed, seed+1, ...)."""
    sc_cfg = validate(apply_overrides(cfg, scenario["overrides"]))
    net = sc_cfg["network"]
    topology = load_network(net["path"], route_layout=net["route_layout"],
                            tolerance=float(net["probability_tolerance"]))
    base_seed = sc_cfg["sim"].get("seed") or 0
    results = []
    for rep in range(replications):
        rep_cfg = copy.deepcopy(sc_cfg)
        # Advance the seed per replication so replications remain iid
        rep_cfg["sim"]["seed"] = base_seed + rep
        results.append(run_once(rep_cfg, topology))
    return results


def summarize_scenario(results: List[Dict], confidence: float) -> Dict:
    return {
        "entered": mean_ci(series(results, lambda r: r["entered"]), confidence),
        "exited": mean_ci(series(results, lambda r: r["exited"]), confidence),
        "time_in_system": mean_ci(series(results, lambda r: r["time_in_system"]["avg"]), confidence),
        "time_in_queue": mean_ci(series(results, lambda r: r["time_in_queue"]["avg"]), confidence),
        "station_wait": {sid: mean_ci(vals, confidence) for sid, vals in station_waits(results).items()},
    }


def plot_station_waits(kpis: Dict, scenario_name: str, out_dir: str) -> Optional[str]:
    """
    Persist a PNG bar chart of per-station average wait with confidence
    half-widths as error bars.
    """
    waits = kpis["station_wait"]
    if not waits:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    ids = sorted(waits)
    labels = [str(sid) for sid in ids]
    mus = [waits[sid][0] for sid in ids]
    halves = [waits[sid][1] for sid in ids]
    plt.figure(figsize=(7, 4))
    plt.bar(labels, mus, yerr=halves, capsize=4, color="#2563eb")
    plt.xlabel("Queue station id")
    plt.ylabel("Average wait in queue")
    plt.title(f"{scenario_name}: average wait per station")
    plt.grid(True, axis="y", linestyle="--", alpha=0.4)
    os.makedirs(out_dir, exist_ok=True)
    safe_name = scenario_name.lower().replace(" ", "_")
    out_path = os.path.join(out_dir, f"{safe_name}_station_waits.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path


def print_scenario(name: str, kpis: Dict, replications: int, confidence: float):
    level_pct = confidence * 100.0
    print(f"Scenario: {name} (replications={replications}, {level_pct:.1f}% CI)")
    print(f"  Entered: {kpis['entered'][0]:.1f} ± {kpis['entered'][1]:.1f}")
    print(f"  Exited: {kpis['exited'][0]:.1f} ± {kpis['exited'][1]:.1f}")
    print(f"  Avg time in system: {kpis['time_in_system'][0]:.3f} ± {kpis['time_in_system'][1]:.3f}")
    print(f"  Avg time in queue: {kpis['time_in_queue'][0]:.3f} ± {kpis['time_in_queue'][1]:.3f}")
    for sid in sorted(kpis["station_wait"]):
        mu, half = kpis["station_wait"][sid]
        print(f"  Queue {sid} avg wait: {mu:.3f} ± {half:.3f}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point: drive all scenarios, replications, and report KPIs."""
    parser = argparse.ArgumentParser(description="Replicated runs of the queueing-network scenarios.")
    parser.add_argument("--config", "-c", default=BASELINE_PATH, help="YAML run configuration")
    parser.add_argument("--replications", "-n", type=int, help="override experiments.replications")
    parser.add_argument("--scenario", action="append", help="run only the named scenario(s)")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_cfg(args.config)
    except QnetError as err:
        print(f"error: {err}", file=sys.stderr)
        return err.exit_code
    exp_cfg = cfg["experiments"]
    replications = max(1, int(args.replications or exp_cfg["replications"]))
    confidence = float(exp_cfg["confidence_level"])
    wanted = set(args.scenario or [])

    for sc in SCENARIOS:
        if wanted and sc["name"] not in wanted:
            continue
        try:
            results = run_scenario(cfg, sc, replications)
        except QnetError as err:
            print(f"[warn] scenario {sc['name']} failed: {err}", file=sys.stderr)
            continue
        kpis = summarize_scenario(results, confidence)
        print_scenario(sc["name"], kpis, replications, confidence)
        if exp_cfg.get("plot"):
            plot_path = plot_station_waits(kpis, sc["name"], exp_cfg["output_dir"])
            if plot_path:
                print(f"  Station wait plot saved to: {plot_path}")
        print("-")
    return 0


if __name__ == "__main__":
    sys.exit(main())
