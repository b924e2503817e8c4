import math
import random

import pytest

from checkpoint.entities import SimulationParameters


class FixedRandom:
    """Uniform source replaying a script, then repeating `default` forever."""

    def __init__(self, script=(), default=0.5):
        self.script = list(script)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.script:
            return self.script.pop(0)
        return self.default


def gap_uniform(gap_seconds, arrival_rate_per_min):
    """Uniform value U for which -ln(U) / (rate/60) equals gap_seconds."""
    return math.exp(-gap_seconds * arrival_rate_per_min / 60.0)


@pytest.fixture
def seeded():
    return random.Random(42)


@pytest.fixture
def params():
    return SimulationParameters(
        num_stations=3,
        arrival_rate=6,
        mu1=20,
        sigma1=8,
        mu2=20,
        sigma2=10,
        screen_prob=0.3,
        simulation_time=1200,
    )
