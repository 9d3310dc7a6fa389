from __future__ import annotations
import os

import pytest

from qnet.config import DEFAULTS, apply_overrides

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
NETWORKS = os.path.join(ROOT, "config", "networks")

TANDEM = """3
0 G 5 1
1 Q 3 1 1.0 2
2 E
"""


class StubRng:
    """Deterministic stand-in for random.Random: mean service, fixed uniform."""
    def __init__(self, u: float = 0.0):
        self.u = u

    def expovariate(self, rate):
        return 1.0 / rate

    def random(self):
        return self.u


@pytest.fixture
def write_network(tmp_path):
    def _write(text: str, name: str = "network.txt") -> str:
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write


@pytest.fixture
def make_cfg():
    def _make(**sim) -> dict:
        return apply_overrides(DEFAULTS, {"sim": sim})
    return _make
