"""Config loading, scenario overrides and the experiment helpers."""

import math
import os
import sys

import pytest
import yaml

from checkpoint.config import apply_overrides, load_cfg, params_from_cfg, rng_from_cfg
from checkpoint.entities import InvalidParameters, SimulationParameters
import experiments.run_experiments as harness
from experiments.run_experiments import (mean_ci, plot_queue_lengths, plot_wait_histogram, replicate,
                                         run_crn, sample_stddev, t_critical, warn_out_of_range)
from experiments.scenarios import SCENARIOS
from experiments.sweep_stations import int_grid, sweep


def small_cfg(**params):
    base = {"num_stations": 1, "arrival_rate": 4, "mu1": 10, "sigma1": 2,
            "mu2": 20, "sigma2": 5, "screen_prob": 0.1, "simulation_time": 300}
    base.update(params)
    return {"params": base, "sim": {"seed": 5}}


def test_baseline_config_matches_defaults():
    cfg = load_cfg()
    assert params_from_cfg(cfg) == SimulationParameters()
    assert cfg["experiments"]["replications"] >= 1


def test_load_cfg_from_path(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(yaml.safe_dump({"params": {"num_stations": 4, "arrival_rate": 30}}))
    p = params_from_cfg(load_cfg(str(path)))
    assert p.num_stations == 4 and p.arrival_rate == 30
    assert p.mu1 == SimulationParameters().mu1


def test_overrides_merge_without_touching_base():
    cfg = {"params": {"num_stations": 2, "mu1": 30}, "sim": {"seed": 1}}
    new = apply_overrides(cfg, {"params": {"num_stations": 5}})
    assert new["params"] == {"num_stations": 5, "mu1": 30}
    assert cfg["params"]["num_stations"] == 2


def test_every_scenario_builds_valid_parameters():
    cfg = load_cfg()
    names = set()
    for sc in SCENARIOS:
        params_from_cfg(apply_overrides(cfg, sc["overrides"]))
        names.add(sc["name"])
    for pair in cfg["experiments"]["crn_compare"]:
        assert set(pair) <= names


def test_unknown_parameter_rejected():
    with pytest.raises(InvalidParameters):
        params_from_cfg({"params": {"lanes": 3}})


def test_invalid_value_rejected():
    with pytest.raises(InvalidParameters):
        params_from_cfg({"params": {"screen_prob": 2}})


def test_seeded_replications_are_reproducible():
    cfg = small_cfg()
    assert rng_from_cfg(cfg, 1).random() == rng_from_cfg(cfg, 1).random()
    first = replicate(cfg, 2)
    second = replicate(cfg, 2)
    assert first == second
    assert first[0] != first[1]


def test_mean_ci():
    mu, half = mean_ci([1.0, 2.0, 3.0], 0.95)
    assert mu == pytest.approx(2.0)
    assert half > 0
    assert mean_ci([4.0], 0.95) == (4.0, 0.0)
    assert mean_ci([], 0.95) == (0.0, 0.0)
    assert sample_stddev([1.0]) == 0.0


def test_int_grid():
    assert int_grid((1, 5), 2) == [1, 3, 5]
    assert int_grid((1, 4), 2) == [1, 3, 4]


def test_sweep_finds_enough_stations():
    # 12/min with 15s service needs more than one lane (rho = 3 at c = 1)
    cfg = small_cfg(arrival_rate=12, mu1=15, sigma1=1, screen_prob=0.0)
    best, trace = sweep(cfg, target=30.0, max_stations=8, iterations=1)
    assert best is not None and best > 1
    assert trace[-1][0] == best
    assert trace[-1][1] <= 30.0
    assert all(wait > 30.0 for _, wait in trace[:-1])


def test_t_critical_matches_student_t():
    stats = pytest.importorskip("scipy.stats")
    assert t_critical(0.05, 4) == pytest.approx(float(stats.t.ppf(0.975, 4)))
    assert t_critical(0.05, 4) == pytest.approx(2.776, abs=1e-3)


def test_t_critical_falls_back_to_normal(monkeypatch):
    monkeypatch.setitem(sys.modules, "scipy.stats", None)
    assert t_critical(0.05, 4) == pytest.approx(1.95996, abs=1e-4)


def test_run_crn_reports_paired_difference(capsys):
    one = {"name": "one", "overrides": {}}
    two = {"name": "two", "overrides": {"params": {"num_stations": 2}}}
    mean_diff, half = run_crn(small_cfg(), one, two, 2, 0.95, 1)
    assert math.isfinite(mean_diff)
    assert half >= 0.0
    out = capsys.readouterr().out
    assert "CRN paired wait comparison (two - one)" in out
    assert "Mean difference" in out


def test_plots_written_to_output_dir(tmp_path, monkeypatch):
    pytest.importorskip("matplotlib")
    monkeypatch.setattr(harness, "OUT_DIR", str(tmp_path))
    result = replicate(small_cfg(), 1)[0]
    queue_png = plot_queue_lengths(result, "Small Run")
    hist_png = plot_wait_histogram(result, "Small Run")
    for path in (queue_png, hist_png):
        assert path is not None
        assert os.path.dirname(path) == str(tmp_path)
        assert os.path.getsize(path) > 0
    assert os.path.basename(queue_png) == "small_run_queue_lengths.png"


def test_out_of_range_notice_printed_once(capsys):
    cfg = small_cfg(sigma2=120)
    assert warn_out_of_range(cfg, "wide") == ["sigma2"]
    out = capsys.readouterr().out
    assert out.count("[warn]") == 1
    assert "sigma2=120" in out
    assert warn_out_of_range(small_cfg(), "narrow") == []
    assert capsys.readouterr().out == ""
