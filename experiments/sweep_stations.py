"""
experiments/sweep_stations.py

Staffing sweep: for each selected scenario, walk the number of primary
stations upward over an integer grid, averaging the simulated primary wait
over a few seeds per candidate, and report the smallest station count whose
mean wait meets the configured target. The winning configuration is printed
as a scenario block that can be pasted into scenarios.py.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple
try:
    # When executed as a module: python -m experiments.sweep_stations
    from .run_experiments import replicate, warn_out_of_range  # type: ignore
    from .scenarios import SCENARIOS  # type: ignore
except ImportError:  # pragma: no cover - fallback for VSCode "python file.py"
    import os, sys
    ROOT = os.path.dirname(os.path.dirname(__file__))
    if ROOT not in sys.path:
        sys.path.insert(0, ROOT)
    from experiments.run_experiments import replicate, warn_out_of_range  # type: ignore
    from experiments.scenarios import SCENARIOS  # type: ignore

from checkpoint.config import load_cfg, apply_overrides

# Station counts to try (inclusive); the upper bound is capped by
# experiments.max_stations in the config.
STATION_CHOICES = (1, 10)
STATION_STEP = 1

# Which scenarios to sweep (match names in scenarios.py).
SELECTED_SCENARIOS = ["baseline", "peak_hour", "heightened_screening"]

# Monte Carlo controls: replications per candidate (seeds follow sim.seed).
SEARCH_ITERATIONS = 3


def int_grid(bounds: Tuple[int, int], step: int) -> List[int]:
    """Generate integer grid values within [lo, hi] inclusive with stride=step."""
    lo, hi = bounds
    stride = max(1, int(step))
    vals = list(range(int(lo), int(hi) + 1, stride))
    if vals and vals[-1] != hi:
        vals.append(hi)
    return vals


def evaluate(cfg: Dict, iterations: int) -> float:
    """Average primary wait (seconds) over `iterations` seeded replications."""
    results = replicate(cfg, max(1, iterations))
    return sum(r.avg_waiting_time for r in results) / len(results)


def sweep(base_cfg: Dict, target: float, max_stations: int, iterations: int) -> Tuple[Optional[int], List[Tuple[int, float]]]:
    """
    Try station counts in increasing order and stop at the first whose mean
    wait is <= target. Returns (best count or None, [(count, wait), ...]).
    """
    lo, hi = STATION_CHOICES
    trace: List[Tuple[int, float]] = []
    for n in int_grid((lo, min(hi, max_stations)), STATION_STEP):
        cand = apply_overrides(base_cfg, {"params": {"num_stations": n}})
        wait = evaluate(cand, iterations)
        trace.append((n, wait))
        if wait <= target:
            return n, trace
    return None, trace


def format_as_scenario(name: str, cfg: Dict):
    """Print the swept parameters as a scenarios.py entry."""
    print(f'{name.upper()} = {{')
    print(f'    "name": "{name}",')
    print('    "overrides": {')
    print('        "params": {')
    for k, v in cfg.get("params", {}).items():
        print(f'            "{k}": {v!r},')
    print("        },")
    print("    },")
    print("}")


def search(selected: List[str] = SELECTED_SCENARIOS, iterations: int = SEARCH_ITERATIONS):
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_cfg()
    exp_cfg = cfg.get("experiments", {})
    target = float(exp_cfg.get("wait_target_seconds", 60.0))
    max_stations = int(exp_cfg.get("max_stations", STATION_CHOICES[1]))
    sc_index = {s["name"]: s for s in SCENARIOS}
    for sc_name in selected:
        sc = sc_index.get(sc_name)
        if sc is None:
            print(f"[warn] scenario '{sc_name}' not found; skipping.")
            continue
        print(f"\n=== Sweeping scenario: {sc['name']} (target wait {target:.1f}s) ===")
        base = apply_overrides(cfg, sc["overrides"])
        warn_out_of_range(base, sc["name"])
        best, trace = sweep(base, target, max_stations, iterations)
        for n, wait in trace:
            print(f"  {n:2d} stations: avg wait {wait:8.2f}s")
        if best is None:
            print(f"  [warn] target not met with up to {max_stations} stations")
            continue
        print(f"  Smallest station count meeting target: {best}")
        format_as_scenario(f"{sc['name']}_staffed", apply_overrides(base, {"params": {"num_stations": best}}))


if __name__ == "__main__":
    search()
