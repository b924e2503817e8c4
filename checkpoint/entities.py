# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity and record definitions for the checkpoint model: the input
#   parameter record, Traveler, per-step TimeSeriesPoint, and the two result
#   records handed back to callers (simulation and M/M/c theory).
#
# Design notes:
#   - Input and result records are frozen; only a Traveler's service
#     timestamps change, and each of those is set exactly once.
#   - Times are in seconds, arrival_rate is per minute.
#
# Usage:
#   from checkpoint.entities import SimulationParameters, Traveler
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass, asdict, fields
from typing import Dict, List, Optional, Tuple


class InvalidParameters(ValueError):
    """Raised when a parameter record is outside the model's contract."""
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("invalid parameters: " + "; ".join(self.problems))


class UnstableSystem(InvalidParameters):
    """Raised by the theoretical model when rho >= 1 (no steady state)."""


# Ranges the presentation layer offers on its sliders. Values outside them are
# still legal model inputs; the experiment scripts print a notice for them.
PARAMETER_RANGES: Dict[str, Tuple[float, float]] = {
    "num_stations": (1, 10),
    "arrival_rate": (1, 120),
    "mu1": (5, 120),
    "sigma1": (1, 30),
    "mu2": (10, 300),
    "sigma2": (1, 60),
    "screen_prob": (0.0, 0.5),
    "simulation_time": (60, 3600),
}


@dataclass(frozen=True)
class SimulationParameters:
    num_stations: int = 2          # parallel primary stations
    arrival_rate: float = 10.0     # travelers per minute
    mu1: float = 30.0              # primary service mean (s)
    sigma1: float = 10.0           # primary service stddev (s)
    mu2: float = 120.0             # senior service mean (s)
    sigma2: float = 120.0          # senior service stddev (s)
    screen_prob: float = 0.03      # P(traveler needs secondary screening)
    simulation_time: float = 3600.0  # horizon (s)

    def problems(self) -> List[str]:
        """Return a list of human readable contract violations (empty if valid)."""
        out: List[str] = []
        for name in ("arrival_rate", "mu1", "sigma1", "mu2", "sigma2", "screen_prob", "simulation_time"):
            if not math.isfinite(getattr(self, name)):
                out.append(f"{name} must be finite, got {getattr(self, name)}")
        if out:
            return out
        if isinstance(self.num_stations, bool) or not isinstance(self.num_stations, int):
            out.append(f"num_stations must be an integer, got {self.num_stations!r}")
        elif self.num_stations < 1:
            out.append(f"num_stations must be >= 1, got {self.num_stations}")
        if not self.arrival_rate > 0:
            out.append(f"arrival_rate must be > 0, got {self.arrival_rate}")
        if not self.mu1 > 0:
            out.append(f"mu1 must be > 0, got {self.mu1}")
        if not self.mu2 > 0:
            out.append(f"mu2 must be > 0, got {self.mu2}")
        if not self.sigma1 >= 0:
            out.append(f"sigma1 must be >= 0, got {self.sigma1}")
        if not self.sigma2 >= 0:
            out.append(f"sigma2 must be >= 0, got {self.sigma2}")
        if not 0.0 <= self.screen_prob <= 1.0:
            out.append(f"screen_prob must be in [0, 1], got {self.screen_prob}")
        if not self.simulation_time > 0:
            out.append(f"simulation_time must be > 0, got {self.simulation_time}")
        return out

    def validate(self) -> "SimulationParameters":
        problems = self.problems()
        if problems:
            raise InvalidParameters(problems)
        return self

    def out_of_range(self) -> List[str]:
        """Names of fields outside PARAMETER_RANGES."""
        names = []
        for name, (lo, hi) in PARAMETER_RANGES.items():
            val = getattr(self, name)
            if not lo <= val <= hi:
                names.append(name)
        return names

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]


@dataclass
class Traveler:
    arrival_time: float
    needs_screening: bool = False
    start_service_time: Optional[float] = None
    end_service_time: Optional[float] = None

    def begin_service(self, now: float):
        if self.start_service_time is not None:
            raise RuntimeError("traveler already started service")
        self.start_service_time = now

    def end_service(self, now: float):
        if self.end_service_time is not None:
            raise RuntimeError("traveler already finished service")
        self.end_service_time = now


@dataclass(frozen=True)
class TimeSeriesPoint:
    time: float
    queue_lengths: Tuple[int, ...]   # one per primary station
    senior_queue_length: int
    total_queue_length: int


@dataclass(frozen=True)
class WaitingTimeDistribution:
    bins: Tuple[float, ...]    # left bin edges in seconds
    counts: Tuple[int, ...]


@dataclass(frozen=True)
class SimulationResult:
    time_series: Tuple[TimeSeriesPoint, ...]
    avg_waiting_time: float
    max_queue_length: int
    utilization: float
    avg_queue_length: float
    avg_system_time: float
    waiting_time_distribution: WaitingTimeDistribution
    per_station_utilization: Tuple[float, ...]
    senior_utilization: float
    # Raw samples and counters behind the aggregates
    waiting_times: Tuple[float, ...] = ()
    primary_service_times: Tuple[float, ...] = ()
    senior_service_times: Tuple[float, ...] = ()
    arrivals: int = 0
    primary_completions: int = 0
    screened_completions: int = 0
    senior_completions: int = 0

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class TheoreticalResults:
    utilization: float
    avg_queue_length: float
    avg_wait_time: float
    avg_system_time: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)
