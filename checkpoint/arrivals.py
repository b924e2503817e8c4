# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous traveler arrivals on the fixed time grid using an
#   exponential countdown (Poisson stream at `arrival_rate` per minute).
#
# Design notes:
#   - At most one arrival per step. Any extra arrivals the countdown would
#     imply inside the same step are dropped; the countdown is resampled
#     fresh, not carried over. This caps arrival resolution at the step size.
#   - The screening flag is drawn before the next gap so the RNG draw order
#     stays fixed (Bernoulli, then exponential).
#
# Usage:
#   arrivals = ArrivalProcess(params, rng)
#   traveler = arrivals.step(now, dt)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Optional
from .entities import SimulationParameters, Traveler
from .distributions import exponential, bernoulli

logger = logging.getLogger(__name__)

# Expected arrivals per step above which the one-per-step cap distorts the stream
SATURATION_WARNING = 0.5


class ArrivalProcess:
    def __init__(self, params: SimulationParameters, rng):
        self.rng = rng
        self.rate = params.arrival_rate / 60.0   # per minute -> per second
        self.screen_prob = params.screen_prob
        self.generated = 0
        self.time_to_next = exponential(rng, self.rate)

    def warn_if_saturated(self, dt: float):
        load = self.rate * dt
        if load >= SATURATION_WARNING:
            logger.warning(
                "arrival rate %.3f/s with step %.3fs gives %.2f expected arrivals per step; "
                "only one arrival per step is admitted", self.rate, dt, load)

    def step(self, now: float, dt: float) -> Optional[Traveler]:
        """Advance the countdown by dt; return a new Traveler if one arrives."""
        self.time_to_next -= dt
        if self.time_to_next > 0:
            return None
        traveler = Traveler(arrival_time=now, needs_screening=bernoulli(self.rng, self.screen_prob))
        self.time_to_next = exponential(self.rng, self.rate)
        self.generated += 1
        return traveler
