# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# distributions.py
# -----------------------------------------------------------------------------
# Purpose:
#   Random variate generation from an injected uniform source: exponential
#   inter-arrival gaps, Bernoulli screening flags, and non-negative
#   (truncated) normal service times via Box-Muller.
#
# Design notes:
#   - `rng` is anything with a random() -> [0, 1) method (random.Random or a
#     scripted stub in tests). Every helper consumes draws in a fixed order
#     so seeded runs are reproducible.
#   - The accept-reject truncation is bounded; when mu/sigma is very small it
#     falls back to an inverse-CDF draw on [0, inf).
#
# Usage:
#   from checkpoint.distributions import exponential, truncated_normal
# -----------------------------------------------------------------------------

from __future__ import annotations
import math, logging
from statistics import NormalDist

logger = logging.getLogger(__name__)

MAX_TRIES = 1000
_STD_NORMAL = NormalDist()


def uniform_open(rng) -> float:
    """Uniform draw on (0, 1); an exact 0 is redrawn so log(u) stays finite."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    return u


def exponential(rng, rate: float) -> float:
    """Exponential variate with the given rate (inverse transform)."""
    if rate <= 0:
        raise ValueError(f"rate must be positive, got {rate}")
    return -math.log(uniform_open(rng)) / rate


def bernoulli(rng, p: float) -> bool:
    return rng.random() < p


def box_muller(rng) -> float:
    """One standard normal variate from two uniforms (cosine branch only)."""
    u1 = uniform_open(rng)
    u2 = uniform_open(rng)
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def truncated_normal(rng, mu: float, sigma: float, max_tries: int = MAX_TRIES) -> float:
    """
    Normal(mu, sigma) conditioned on being >= 0.

    Draws are rejected and redrawn while negative. After `max_tries` rejected
    draws the value comes from the inverse CDF restricted to [0, inf), which
    always terminates. With sigma == 0 the result is mu.
    """
    for _ in range(max_tries):
        value = mu + sigma * box_muller(rng)
        if value >= 0:
            return value
    logger.debug("truncated_normal(mu=%s, sigma=%s): %d rejections, using inverse CDF",
                 mu, sigma, max_tries)
    return _truncated_normal_icdf(rng, mu, sigma)


def _truncated_normal_icdf(rng, mu: float, sigma: float) -> float:
    if sigma <= 0:
        return max(0.0, mu)
    # P(X < 0) for the untruncated normal; sample uniformly from the remaining mass
    lo = _STD_NORMAL.cdf(-mu / sigma)
    p = lo + (1.0 - lo) * uniform_open(rng)
    # inv_cdf needs p strictly inside (0, 1)
    p = min(p, math.nextafter(1.0, 0.0))
    return max(0.0, mu + sigma * _STD_NORMAL.inv_cdf(p))
