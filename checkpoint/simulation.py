# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: validate parameters, build stations,
#   router and arrival process, advance the fixed-step loop, and return the
#   aggregated SimulationResult.
#
# Design notes:
#   - All mutable state for a run lives in one SimulationState built inside
#     run_simulation(); nothing survives the call.
#   - Randomness comes from the injected `rng`; pass random.Random(seed) for
#     reproducible runs. Without one every call draws fresh randomness.
#   - Step order per tick: arrivals, primary lanes, senior station, record.
#
# Usage:
#   from checkpoint.simulation import run_simulation
#   result = run_simulation(params, rng=random.Random(7))
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math, random
from dataclasses import dataclass
from typing import List
from .entities import SimulationParameters, SimulationResult
from .queues import Station
from .stations import make_stations
from .network import Router
from .metrics import Metrics
from .arrivals import ArrivalProcess

logger = logging.getLogger(__name__)

STEP_SIZE = 0.1  # seconds


@dataclass
class SimulationState:
    primary: List[Station]
    senior: Station
    arrivals: ArrivalProcess
    router: Router
    metrics: Metrics
    step_size: float = STEP_SIZE

    @classmethod
    def initial(cls, params: SimulationParameters, rng, step_size: float = STEP_SIZE) -> "SimulationState":
        primary, senior = make_stations(params, rng)
        M = Metrics(params)
        router = Router(primary, senior, M)
        # First inter-arrival gap is drawn before the loop starts
        arrivals = ArrivalProcess(params, rng)
        return cls(primary, senior, arrivals, router, M, step_size)


def advance(state: SimulationState, step: int) -> SimulationState:
    """Run one fixed step of the model and return the (mutated) state."""
    dt = state.step_size
    now = step * dt
    traveler = state.arrivals.step(now, dt)
    if traveler is not None:
        state.router.on_arrival(traveler)
    state.router.step_primary(now, dt)
    state.router.step_senior(now, dt)
    state.metrics.record(now, state.primary, state.senior)
    return state


def run_simulation(params: SimulationParameters, rng=None, step_size: float = STEP_SIZE) -> SimulationResult:
    params.validate()
    if rng is None:
        rng = random.Random()
    for name in params.out_of_range():
        logger.debug("%s=%s is outside the usual range", name, getattr(params, name))

    state = SimulationState.initial(params, rng, step_size)
    state.arrivals.warn_if_saturated(step_size)
    total_steps = math.ceil(params.simulation_time / step_size)
    logger.debug("running %d steps of %.2fs with %d primary stations",
                 total_steps, step_size, params.num_stations)
    for step in range(total_steps):
        state = advance(state, step)

    result = state.metrics.summary(state.primary, state.senior)
    logger.info("run finished: arrivals=%d avg_wait=%.2fs utilization=%.3f",
                result.arrivals, result.avg_waiting_time, result.utilization)
    return result
