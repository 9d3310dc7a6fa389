import json
import math
import os

from qnet.entities import CustomerLedger
from qnet.metrics import RunningStat
from qnet.queues import Env
from qnet.report import render_report, summarize, write_report
from qnet.simulation import run_once, simulate
from qnet.stations import QueueSpec
from qnet.topology import load_network, parse_network

from conftest import NETWORKS, TANDEM, StubRng


def test_running_stat_online_average():
    stat = RunningStat()
    assert stat.min == math.inf and stat.max == -math.inf
    assert stat.as_dict() == {"count": 0, "min": None, "max": None, "avg": None}
    for x in (4.0, 1.0, 7.0):
        stat.add(x)
    assert (stat.n, stat.min, stat.max) == (3, 1.0, 7.0)
    assert stat.avg == 4.0


def test_zero_horizon_reports_no_customers(make_cfg):
    summary = run_once(make_cfg(end_time=0.0, seed=1), parse_network(TANDEM))
    assert summary["entered"] == 0 and summary["exited"] == 0
    text = render_report(summary)
    assert "0 customers entered the system" in text
    assert "No customers exited the system" in text
    assert "No customers entered the system" in text
    assert "For queue" not in text


def test_report_lists_every_queue(make_cfg):
    topo = load_network(os.path.join(NETWORKS, "feedback.txt"))
    summary = run_once(make_cfg(end_time=1000.0, seed=4), topo)
    text = render_report(summary)
    for sid in (2, 3, 4):
        assert f"For queue with ID {sid}, the average waiting time is" in text
    assert "customers averaged" in text


def test_unvisited_queue_is_flagged(make_cfg):
    text = "4\n0 G 1 1\n1 Q 0.5 1 1.0 3\n2 Q 1 1 1.0 3\n3 E\n"
    summary = run_once(make_cfg(end_time=100.0, seed=2), parse_network(text))
    station = {st["id"]: st for st in summary["stations"]}
    assert station[2]["visited"] is False
    assert station[2]["wait_avg"] is None
    assert "For queue with ID 2, no one came to this queue!" in render_report(summary)


def test_time_in_queue_only_counts_exited_customers(make_cfg):
    run = simulate(make_cfg(end_time=500.0, seed=8), parse_network(TANDEM))
    summary = run.summary()
    exited = [c for c in run.ledger if c.exited]
    assert summary["time_in_queue"]["count"] == len(exited) == summary["exited"]
    assert summary["time_in_queue"]["max"] == max(c.waiting_time for c in exited)


def test_reporting_is_idempotent(make_cfg):
    run = simulate(make_cfg(end_time=800.0, seed=3), parse_network(TANDEM))
    first = render_report(summarize(run.ledger, run.stations, run.metrics))
    second = render_report(summarize(run.ledger, run.stations, run.metrics))
    assert first == second


def test_same_seed_same_report(make_cfg):
    topo = load_network(os.path.join(NETWORKS, "feedback.txt"))
    a = render_report(run_once(make_cfg(end_time=1500.0, seed=42), topo))
    b = render_report(run_once(make_cfg(end_time=1500.0, seed=42), topo))
    assert a == b


def test_summary_is_json_serialisable(make_cfg):
    summary = run_once(make_cfg(end_time=200.0, seed=6), parse_network(TANDEM))
    assert json.loads(json.dumps(summary))["entered"] == summary["entered"]


def test_write_report(tmp_path, make_cfg):
    summary = run_once(make_cfg(end_time=200.0, seed=6), parse_network(TANDEM))
    path = tmp_path / "report.txt"
    write_report(str(path), render_report(summary))
    assert path.read_text().startswith("During the simulation, ")


def test_rounding_below_zero_is_clamped_only_when_printed():
    q = QueueSpec(1, 2.0, ((1.0, 2),)).instantiate()
    env, ledger = Env(), CustomerLedger()
    cust = ledger.create(1.0)
    env.t = 1.0
    q.enqueue(env, cust, StubRng())
    assert cust.service_time == 2.0
    # released early: departure - service - queue entry is negative
    env.t = 2.5
    assert q.finish(env, cust) == -0.5
    assert (q.waits.min, q.waits.max, q.waits.avg) == (-0.5, -0.5, -0.5)
    summary = {"entered": 1, "exited": 1,
               "time_in_system": {"count": 1, "min": 0.2, "max": 0.2, "avg": 0.2},
               "time_in_queue": {"count": 1, "min": 0.0, "max": 0.0, "avg": 0.0},
               "stations": [{"id": 1, "processed": 1, "present": 0, "visited": True,
                             "wait_min": -1e-17, "wait_max": -1e-17, "wait_avg": -1e-17}],
               "completed_by_exit": {2: 1}}
    assert "For queue with ID 1, the average waiting time is 0.000000." in render_report(summary)
