"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs multiple seeded replications, and reports KPIs with confidence intervals
next to the closed-form M/M/c reference. Plots of queue length over time and
the waiting-time histogram are written to experiments/output/.
"""

from __future__ import annotations
import logging, math, os, sys
from typing import Callable, Dict, List, Optional
from statistics import mean, stdev, NormalDist
try:
    # When executed as a module: python -m experiments.run_experiments
    from .scenarios import SCENARIOS  # type: ignore
except ImportError:  # pragma: no cover
    # When run as a script in VSCode/terminal
    ROOT = os.path.dirname(os.path.dirname(__file__))
    if ROOT not in sys.path:
        sys.path.insert(0, ROOT)
    from experiments.scenarios import SCENARIOS  # type: ignore

from checkpoint.config import load_cfg, apply_overrides, params_from_cfg, rng_from_cfg
from checkpoint.entities import SimulationResult, UnstableSystem
from checkpoint.simulation import run_simulation
from checkpoint.theory import calculate_theoretical

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
OUT_DIR = os.path.join(ROOT, "experiments", "output")


def t_critical(alpha: float, df: int) -> float:
    """Two-sided critical value; Student t when SciPy is available, else normal."""
    try:
        from scipy.stats import t  # type: ignore
        return float(t.ppf(1 - alpha / 2.0, df))
    except ImportError:
        # Normal quantile is slightly narrower than t for small df
        return NormalDist().inv_cdf(1 - alpha / 2.0)


def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a t-distribution critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    tcrit = t_critical(1.0 - level, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, half


def sample_stddev(values: List[float]) -> float:
    """Return sample standard deviation or 0 if insufficient data."""
    if len(values) < 2:
        return 0.0
    return stdev(values)


def series(results: List[SimulationResult], extractor: Callable[[SimulationResult], float]) -> List[float]:
    return [extractor(r) for r in results]


def replicate(cfg: Dict, replications: int) -> List[SimulationResult]:
    """Run `replications` seeded runs (seed, seed+1, ...) of one config."""
    params = params_from_cfg(cfg)
    return [run_simulation(params, rng=rng_from_cfg(cfg, rep)) for rep in range(replications)]


def run_crn(cfg: Dict, sc_a: Dict, sc_b: Dict, replications: int, confidence: float, C: float):
    """
    Common-random-number comparison of mean primary wait between two
    scenarios: both runs of a replication share the same seed, and the CI of
    the paired difference uses a Bonferroni-adjusted alpha (alpha / C).
    """
    cfg_a = apply_overrides(cfg, sc_a["overrides"])
    cfg_b = apply_overrides(cfg, sc_b["overrides"])
    params_a = params_from_cfg(cfg_a)
    params_b = params_from_cfg(cfg_b)
    results = []
    base_seed = cfg.get("sim", {}).get("seed", 0)
    for rep in range(replications):
        res_a = run_simulation(params_a, rng=rng_from_cfg(cfg, rep))
        res_b = run_simulation(params_b, rng=rng_from_cfg(cfg, rep))
        results.append((base_seed + rep, res_a.avg_waiting_time, res_b.avg_waiting_time))
    diffs = [b - a for (_, a, b) in results]
    mean_diff = mean(diffs)
    sd_diff = stdev(diffs) if len(diffs) > 1 else 0.0
    level = min(max(confidence, 0.0), 0.999999)
    alpha = (1.0 - level) / max(C, 1.0)
    df = max(1, len(diffs) - 1)
    half = t_critical(alpha, df) * (sd_diff / math.sqrt(len(diffs))) if len(diffs) > 1 else 0.0
    print(f"CRN paired wait comparison ({sc_b['name']} - {sc_a['name']}):")
    print("  Replication | Seed | Wait1 | Wait2 | Difference")
    for idx, (seed, w1, w2) in enumerate(results, 1):
        print(f"    {idx:2d}        | {seed:4d} | {w1:7.2f}s | {w2:7.2f}s | {w2 - w1:+7.2f}s")
    print(f"  Mean difference: {mean_diff:+.2f}s")
    print(f"  Std dev of differences: {sd_diff:.2f}s")
    print(f"  {level*100:.1f}% CI of mean diff: {mean_diff - half:+.2f}s to {mean_diff + half:+.2f}s")
    return mean_diff, half


def _pyplot():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError:
        return None
    return plt


def plot_queue_lengths(result: SimulationResult, scenario_name: str) -> Optional[str]:
    """Persist a PNG of total, per-lane and senior queue length over time."""
    if not result.time_series:
        return None
    plt = _pyplot()
    if plt is None:
        return None
    x = [pt.time for pt in result.time_series]
    plt.figure(figsize=(9, 5))
    plt.plot(x, [pt.total_queue_length for pt in result.time_series], label="Total queue", color="#0f766e")
    for i in range(len(result.per_station_utilization)):
        plt.plot(x, [pt.queue_lengths[i] for pt in result.time_series],
                 linewidth=0.8, alpha=0.6, label=f"Station {i + 1} queue")
    plt.plot(x, [pt.senior_queue_length for pt in result.time_series],
             label="Senior queue", color="#dc2626")
    plt.xlim(left=0, right=max(x))
    plt.xlabel("Time (seconds)")
    plt.ylabel("Travelers waiting")
    plt.title(f"{scenario_name}: queue length over time")
    plt.legend()
    plt.grid(True, linestyle="--", alpha=0.4)
    os.makedirs(OUT_DIR, exist_ok=True)
    out_path = os.path.join(OUT_DIR, f"{scenario_name.lower().replace(' ', '_')}_queue_lengths.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path


def plot_wait_histogram(result: SimulationResult, scenario_name: str) -> Optional[str]:
    """Persist a bar chart of the 20-bin waiting-time distribution."""
    dist = result.waiting_time_distribution
    if not any(dist.counts):
        return None
    plt = _pyplot()
    if plt is None:
        return None
    width = dist.bins[1] - dist.bins[0] if len(dist.bins) > 1 else 0.0
    plt.figure(figsize=(9, 5))
    plt.bar(dist.bins, dist.counts, width=width or 1.0, align="edge",
            color="#5eead4", edgecolor="#0f766e")
    plt.xlabel("Waiting time (seconds)")
    plt.ylabel("Travelers")
    plt.title(f"{scenario_name}: waiting time distribution")
    plt.grid(True, linestyle="--", alpha=0.4)
    os.makedirs(OUT_DIR, exist_ok=True)
    out_path = os.path.join(OUT_DIR, f"{scenario_name.lower().replace(' ', '_')}_wait_histogram.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path


def warn_out_of_range(cfg: Dict, scenario_name: str) -> List[str]:
    """Print one notice per scenario listing parameters outside the usual ranges."""
    params = params_from_cfg(cfg)
    names = params.out_of_range()
    if names:
        values = ", ".join(f"{n}={getattr(params, n)}" for n in names)
        print(f"  [warn] {scenario_name}: outside the usual range: {values}")
    return names


def report_theory(cfg: Dict):
    params = params_from_cfg(cfg)
    try:
        th = calculate_theoretical(params)
    except UnstableSystem as exc:
        print(f"  [warn] M/M/c reference unavailable: {exc}")
        return None
    print("  M/M/c reference (primary tier, mu = 1000/mu1):")
    print(f"    utilization {th.utilization * 100:.3f}% | Lq {th.avg_queue_length:.4f} | "
          f"Wq {th.avg_wait_time:.4f}s | Ws {th.avg_system_time:.4f}s")
    # 1000/mu1 reads mu1 as milliseconds; the simulation reads it as seconds
    print("    note: theory treats mu1 as milliseconds; compare utilization x1000")
    return th


def main():
    """Entry point: drive all scenarios, replications, and report KPIs."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_cfg()
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    level_pct = confidence * 100.0
    default_seed = cfg.get("sim", {}).get("seed", 0)

    for sc in SCENARIOS:
        sc_cfg = apply_overrides(cfg, sc["overrides"])
        seed = sc_cfg.get("sim", {}).get("seed", default_seed)
        results = replicate(sc_cfg, replications)

        wait = mean_ci(series(results, lambda r: r.avg_waiting_time), confidence)
        wait_sd = sample_stddev(series(results, lambda r: r.avg_waiting_time))
        system = mean_ci(series(results, lambda r: r.avg_system_time), confidence)
        queue = mean_ci(series(results, lambda r: r.avg_queue_length), confidence)
        max_queue = mean_ci(series(results, lambda r: float(r.max_queue_length)), confidence)
        util = mean_ci(series(results, lambda r: r.utilization * 100.0), confidence)
        senior = mean_ci(series(results, lambda r: r.senior_utilization * 100.0), confidence)
        arrivals = mean_ci(series(results, lambda r: float(r.arrivals)), confidence)
        per_station = [
            round(mean(r.per_station_utilization[i] for r in results) * 100.0, 1)
            for i in range(len(results[0].per_station_utilization))
        ]

        print(f"Scenario: {sc['name']} (replications={replications}, {level_pct:.1f}% CI, "
              f"seeds {seed}-{seed + replications - 1})")
        warn_out_of_range(sc_cfg, sc["name"])
        print(f"  Arrivals/run: {arrivals[0]:.1f} ± {arrivals[1]:.1f}")
        print(f"  Avg wait: {wait[0]:.2f} ± {wait[1]:.2f} s (sd {wait_sd:.2f})")
        print(f"  Avg system time: {system[0]:.2f} ± {system[1]:.2f} s")
        print(f"  Avg queue length: {queue[0]:.2f} ± {queue[1]:.2f}")
        print(f"  Max queue length: {max_queue[0]:.1f} ± {max_queue[1]:.1f}")
        print(f"  Primary utilization: {util[0]:.1f}% ± {util[1]:.1f}%  per station {per_station}")
        print(f"  Senior utilization: {senior[0]:.1f}% ± {senior[1]:.1f}%")
        report_theory(sc_cfg)
        for path in (plot_queue_lengths(results[0], sc["name"]), plot_wait_histogram(results[0], sc["name"])):
            if path:
                print(f"  Plot saved to: {path}")
        print("-")

    # Optional CRN comparison between named scenarios using common random numbers
    crn_pairs = exp_cfg.get("crn_compare")
    if crn_pairs:
        sc_index = {s["name"]: s for s in SCENARIOS}
        # Bonferroni: C = K(K-1)/2 comparisons among K alternatives
        K = len(crn_pairs)
        C = K * (K - 1) / 2
        for pair in crn_pairs:
            if len(pair) != 2:
                print(f"[warn] skipping CRN entry (needs 2 names): {pair}")
                continue
            sc_a = sc_index.get(pair[0])
            sc_b = sc_index.get(pair[1])
            if sc_a and sc_b:
                print(f"\nCRN & Bonferroni Comparison: {sc_a['name']} vs {sc_b['name']} "
                      f"(replications={replications}, seeds shared)")
                run_crn(cfg, sc_a, sc_b, replications, confidence, C)
            else:
                print(f"[warn] CRN pair not found: {pair}")


if __name__ == "__main__":
    main()
