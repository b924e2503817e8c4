"""
checkpoint package initializer.

This package contains the fixed-step simulation engine, station primitives,
routing policy, arrival process, metric collection, and the closed-form
M/M/c reference model for the two-tier security checkpoint.
"""
from .entities import (
    SimulationParameters, SimulationResult, TheoreticalResults,
    InvalidParameters, UnstableSystem,
)
from .simulation import run_simulation
from .theory import calculate_theoretical

__all__ = [
    "entities", "distributions", "queues", "stations", "network",
    "arrivals", "policies", "metrics", "simulation", "theory", "config",
    "SimulationParameters", "SimulationResult", "TheoreticalResults",
    "InvalidParameters", "UnstableSystem",
    "run_simulation", "calculate_theoretical",
]
