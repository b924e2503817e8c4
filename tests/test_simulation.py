"""Fixed-step engine: scripted scenarios with hand-computed results, plus
invariants checked on seeded random runs."""

import math
import random

import pytest

from checkpoint.entities import InvalidParameters, SimulationParameters
from checkpoint.simulation import SimulationState, advance, run_simulation
from conftest import FixedRandom, gap_uniform


def single_lane(**kw):
    base = dict(num_stations=1, arrival_rate=1, mu1=3.05, sigma1=0, mu2=1, sigma2=0,
                screen_prob=0, simulation_time=10)
    base.update(kw)
    return SimulationParameters(**base)


class TestScriptedSingleLane:
    # Every uniform draw is the same value, so every inter-arrival gap is 2.05s:
    # arrivals at steps 20, 41, 62, 83 (t = 2.0, 4.1, 6.2, 8.3). With sigma=0
    # service is exactly mu1 = 3.05s, i.e. 31 steps.

    def run(self, **kw):
        rng = FixedRandom(default=gap_uniform(2.05, 1))
        return run_simulation(single_lane(**kw), rng=rng)

    def test_fifo_waits(self):
        res = self.run()
        assert res.arrivals == 4
        assert res.waiting_times == pytest.approx((0.0, 1.0, 2.0))
        assert res.avg_waiting_time == pytest.approx(1.0)
        assert res.primary_service_times == pytest.approx((3.05, 3.05, 3.05))
        assert res.primary_completions == 2

    def test_queue_series(self):
        res = self.run()
        assert len(res.time_series) == 100
        assert res.time_series[20].time == pytest.approx(2.0)
        assert res.time_series[41].total_queue_length == 1
        assert res.time_series[51].total_queue_length == 0
        assert res.max_queue_length == 1
        # queued during steps 41-50, 62-81 and 83-99
        assert res.avg_queue_length == pytest.approx(47 / 100)
        assert res.time_series[-1].queue_lengths == (1,)

    def test_utilization_and_system_time(self):
        res = self.run()
        # busy from step 21 through step 99
        assert res.per_station_utilization == pytest.approx((0.79,))
        assert res.utilization == pytest.approx(0.79)
        assert res.senior_utilization == 0.0
        assert res.avg_system_time == pytest.approx(1.0 + 3.05)

    def test_histogram(self):
        dist = self.run().waiting_time_distribution
        assert len(dist.bins) == 20 and len(dist.counts) == 20
        assert sum(dist.counts) == 3
        assert dist.counts[0] == 1
        assert dist.counts[19] == 1

    def test_screened_travelers_visit_senior(self):
        res = self.run(screen_prob=1.0, mu2=0.55)
        assert res.screened_completions == 2
        assert res.senior_service_times == pytest.approx((0.55, 0.55))
        assert res.senior_completions == 2
        assert res.senior_utilization == pytest.approx(0.12)
        assert res.avg_system_time == pytest.approx(1.0 + 3.05 + 0.55)
        # primary wait only: senior queueing does not add samples
        assert len(res.waiting_times) == 3


def test_long_service_single_wait_is_zero():
    # mu1 = 1000s never finishes inside a 10s horizon: only the first
    # traveler starts service, and starts it on arrival.
    rng = FixedRandom(default=gap_uniform(2.05, 1))
    res = run_simulation(single_lane(mu1=1000), rng=rng)
    assert res.waiting_times == (0.0,)
    assert res.avg_waiting_time == 0.0
    assert res.waiting_time_distribution.counts[0] == 1
    assert sum(res.waiting_time_distribution.counts) == 1
    assert res.primary_completions == 0


def test_no_arrivals_gives_zeroes():
    # first gap longer than the horizon
    rng = FixedRandom(script=[gap_uniform(100.0, 1)])
    res = run_simulation(single_lane(), rng=rng)
    assert res.arrivals == 0
    assert res.avg_waiting_time == 0.0
    assert res.avg_system_time == 0.0
    assert res.max_queue_length == 0
    assert sum(res.waiting_time_distribution.counts) == 0


def test_one_arrival_per_step_cap(caplog):
    # 1200/min = 20/s, i.e. two expected arrivals per 0.1s step
    p = SimulationParameters(num_stations=2, arrival_rate=1200, mu1=5, sigma1=1, mu2=10, sigma2=1,
                             screen_prob=0.0, simulation_time=5)
    with caplog.at_level("WARNING", logger="checkpoint"):
        res = run_simulation(p, rng=random.Random(3))
    assert res.arrivals <= len(res.time_series)
    assert any("one arrival per step" in rec.getMessage() for rec in caplog.records)


class TestSeededInvariants:

    @pytest.fixture
    def result(self, params, seeded):
        return run_simulation(params, rng=seeded)

    def test_reproducible_with_seed(self, params):
        a = run_simulation(params, rng=random.Random(9))
        b = run_simulation(params, rng=random.Random(9))
        assert a == b

    def test_every_arrival_joins_a_primary_queue(self, result):
        last = result.time_series[-1]
        assert result.arrivals > 0
        assert result.arrivals == len(result.waiting_times) + sum(last.queue_lengths)

    def test_screened_conservation(self, result):
        last = result.time_series[-1]
        assert result.screened_completions == len(result.senior_service_times) + last.senior_queue_length
        assert result.senior_completions <= len(result.senior_service_times)

    def test_non_negative_samples(self, result):
        assert all(w >= 0 for w in result.waiting_times)
        assert all(s >= 0 for s in result.primary_service_times)
        assert all(s >= 0 for s in result.senior_service_times)

    def test_histogram_total(self, result):
        assert sum(result.waiting_time_distribution.counts) == len(result.waiting_times)

    def test_utilization_bounds(self, result):
        for u in result.per_station_utilization:
            assert 0.0 <= u <= 1.0
        assert 0.0 <= result.senior_utilization <= 1.0
        assert result.utilization == pytest.approx(
            sum(result.per_station_utilization) / len(result.per_station_utilization))

    def test_queue_aggregates_match_series(self, result):
        totals = [pt.total_queue_length for pt in result.time_series]
        assert result.max_queue_length == max(totals)
        assert result.avg_queue_length == pytest.approx(sum(totals) / len(totals))
        for pt in result.time_series:
            assert pt.total_queue_length == sum(pt.queue_lengths) + pt.senior_queue_length


def test_state_advances_one_step(params):
    state = SimulationState.initial(params, random.Random(1))
    state = advance(state, 0)
    assert len(state.metrics.time_series) == 1
    assert len(state.primary) == params.num_stations


def test_unseeded_runs_work(params):
    res = run_simulation(params)
    assert len(res.time_series) == 12000


@pytest.mark.parametrize("field,value", [
    ("num_stations", 0),
    ("arrival_rate", 0),
    ("mu1", -1),
    ("mu2", 0),
    ("screen_prob", 1.5),
    ("simulation_time", 0),
])
def test_invalid_parameters_rejected(field, value):
    p = SimulationParameters(**{field: value})
    with pytest.raises(InvalidParameters) as exc:
        run_simulation(p, rng=random.Random(0))
    assert any(field in msg for msg in exc.value.problems)


@pytest.mark.parametrize("field,value", [
    ("simulation_time", math.inf),
    ("arrival_rate", math.inf),
    ("mu1", math.nan),
    ("sigma2", math.inf),
    ("screen_prob", math.nan),
])
def test_non_finite_parameters_rejected(field, value):
    p = SimulationParameters(**{field: value})
    with pytest.raises(InvalidParameters) as exc:
        run_simulation(p, rng=random.Random(0))
    assert any(field in msg and "finite" in msg for msg in exc.value.problems)


def test_out_of_range_values_do_not_warn_per_run(caplog):
    # the default sigma2 (120s) is above its usual 60s range
    p = SimulationParameters(simulation_time=60)
    assert p.out_of_range() == ["sigma2"]
    with caplog.at_level("WARNING", logger="checkpoint"):
        for seed in range(3):
            run_simulation(p, rng=random.Random(seed))
    assert not any("usual range" in rec.getMessage() for rec in caplog.records)
