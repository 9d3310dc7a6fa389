import pytest

from qnet.errors import IllegalEvent
from qnet.queues import ARRIVAL, Env, Event


class Recorder:
    def __init__(self):
        self.seen = []

    def handle(self, env, ev):
        self.seen.append((env.t, ev.station))


def test_events_delivered_in_timestamp_order():
    rec = Recorder()
    env = Env(rec)
    for t, sid in [(3.0, 3), (1.0, 1), (2.0, 2)]:
        env.schedule(t, Event(ARRIVAL, sid, None))
    env.run_until(10.0)
    assert rec.seen == [(1.0, 1), (2.0, 2), (3.0, 3)]
    assert env.delivered == 3


def test_equal_timestamps_keep_scheduling_order():
    rec = Recorder()
    env = Env(rec)
    for sid in range(5):
        env.schedule(1.0, Event(ARRIVAL, sid, None))
    env.run_until(1.0)
    assert [sid for _, sid in rec.seen] == [0, 1, 2, 3, 4]


def test_run_until_stops_at_horizon():
    rec = Recorder()
    env = Env(rec)
    env.schedule(5.0, Event(ARRIVAL, 1, None))
    env.schedule(5.5, Event(ARRIVAL, 2, None))
    env.run_until(5.0)
    assert rec.seen == [(5.0, 1)]
    assert env.pending() == 1
    assert env.current_time() == 5.0


def test_scheduling_in_the_past_is_rejected():
    class Backwards:
        def handle(self, env, ev):
            env.schedule(env.t - 1.0, Event(ARRIVAL, 0, None))

    env = Env(Backwards())
    env.schedule(2.0, Event(ARRIVAL, 0, None))
    with pytest.raises(IllegalEvent):
        env.run_until(10.0)


def test_scheduling_at_current_time_is_allowed():
    class Echo:
        def __init__(self):
            self.count = 0

        def handle(self, env, ev):
            self.count += 1
            if ev.station == 0:
                env.schedule(env.t, Event(ARRIVAL, 1, None))

    echo = Echo()
    env = Env(echo)
    env.schedule(1.0, Event(ARRIVAL, 0, None))
    env.run_until(1.0)
    assert echo.count == 2


def test_run_without_handler():
    env = Env()
    env.schedule(0.0, Event(ARRIVAL, 0, None))
    with pytest.raises(RuntimeError):
        env.run_until(1.0)
