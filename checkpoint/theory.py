# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# theory.py
# -----------------------------------------------------------------------------
# Purpose:
#   Closed-form M/M/c (Erlang-C) metrics for the primary tier, used as a
#   reference against the simulated results.
#
# Design notes:
#   - Only arrival_rate, mu1 and num_stations are used; the senior station
#     and screening probability are not modelled.
#   - The service rate is 1000 / mu1, i.e. mu1 is read as milliseconds,
#     while the simulation reads mu1 as seconds. Theoretical and simulated
#     utilization therefore differ by a factor of 1000 for the same inputs.
#
# Usage:
#   from checkpoint.theory import calculate_theoretical
# -----------------------------------------------------------------------------

from __future__ import annotations
from .entities import SimulationParameters, TheoreticalResults, UnstableSystem


def erlang_c(c: int, rho: float) -> float:
    """
    Probability an arrival has to wait in an M/M/c queue with per-server
    utilization rho (< 1).
    """
    if c < 1:
        raise ValueError("c must be positive")
    a = c * rho
    # Erlang-B recursion B(k) = a B(k-1) / (k + a B(k-1)); stays in [0, 1]
    # for any c, unlike a^c / c! which overflows a float past c = 170.
    b = 1.0
    for k in range(1, c + 1):
        b = a * b / (k + a * b)
    return b / (1.0 - rho * (1.0 - b))


def calculate_theoretical(params: SimulationParameters) -> TheoreticalResults:
    params.validate()
    lam = params.arrival_rate / 60.0
    mu = 1000.0 / params.mu1
    c = params.num_stations
    rho = lam / (c * mu)
    if rho >= 1.0:
        raise UnstableSystem([f"rho = {rho:.4f} >= 1, queue has no steady state"])

    Lq = erlang_c(c, rho) * rho / (1.0 - rho)
    Wq = Lq / lam
    Ws = Wq + 1.0 / mu
    return TheoreticalResults(
        utilization=rho,
        avg_queue_length=Lq,
        avg_wait_time=Wq,
        avg_system_time=Ws,
    )
