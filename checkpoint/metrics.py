# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize KPIs for one run: queue-length time series,
#   primary waiting times, service samples, utilizations, and the
#   waiting-time histogram.
#
# Design notes:
#   - Keep side-effect methods (note_*) for instrumentation from the router.
#   - summary() builds the immutable SimulationResult once, after the loop.
#   - avg_system_time adds mean wait to *mean* service times; it is not a
#     per-traveler sojourn measurement.
#
# Usage:
#   M = Metrics(params); ...; M.summary(primary, senior)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import List, Sequence
from .entities import (
    SimulationParameters, SimulationResult, TimeSeriesPoint, Traveler,
    WaitingTimeDistribution,
)

NUM_BINS = 20


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def waiting_time_distribution(waits: Sequence[float], num_bins: int = NUM_BINS) -> WaitingTimeDistribution:
    """
    Equal-width histogram over [0, max(waits)] with `num_bins` bins.

    Samples land in floor(w / width), clamped to the last bin. When every wait
    is 0 (or there are none) the width is 0 and all samples go to bin 0.
    """
    counts = [0] * num_bins
    top = max(waits) if waits else 0.0
    width = top / num_bins
    bins = tuple(i * width for i in range(num_bins))
    if width <= 0:
        counts[0] = len(waits)
        return WaitingTimeDistribution(bins=bins, counts=tuple(counts))
    for w in waits:
        idx = min(int(math.floor(w / width)), num_bins - 1)
        counts[idx] += 1
    return WaitingTimeDistribution(bins=bins, counts=tuple(counts))


class Metrics:
    def __init__(self, params: SimulationParameters):
        self.params = params
        self.time_series: List[TimeSeriesPoint] = []
        self.waiting_times: List[float] = []          # primary queue waits only
        self.primary_service_times: List[float] = []
        self.senior_service_times: List[float] = []
        self.arrivals = 0
        self.primary_completions = 0
        self.screened_completions = 0                 # flagged travelers sent to senior
        self.senior_completions = 0

    def note_arrival(self, traveler: Traveler):
        self.arrivals += 1

    def note_primary_start(self, traveler: Traveler, service_time: float, t: float):
        self.waiting_times.append(t - traveler.arrival_time)
        self.primary_service_times.append(service_time)

    def note_primary_completion(self, traveler: Traveler):
        self.primary_completions += 1
        if traveler.needs_screening:
            self.screened_completions += 1

    def note_senior_start(self, traveler: Traveler, service_time: float, t: float):
        self.senior_service_times.append(service_time)

    def note_senior_completion(self, traveler: Traveler):
        self.senior_completions += 1

    def record(self, t: float, primary, senior):
        """Append one TimeSeriesPoint from the current queue lengths."""
        lengths = tuple(st.queue_length for st in primary)
        senior_len = senior.queue_length
        self.time_series.append(TimeSeriesPoint(
            time=t,
            queue_lengths=lengths,
            senior_queue_length=senior_len,
            total_queue_length=sum(lengths) + senior_len,
        ))

    def summary(self, primary, senior) -> SimulationResult:
        horizon = self.params.simulation_time
        totals = [pt.total_queue_length for pt in self.time_series]
        per_station = tuple(st.busy_time / horizon for st in primary)
        avg_wait = _mean(self.waiting_times)
        avg_system = avg_wait + _mean(self.primary_service_times) + _mean(self.senior_service_times)
        return SimulationResult(
            time_series=tuple(self.time_series),
            avg_waiting_time=avg_wait,
            max_queue_length=max(totals) if totals else 0,
            utilization=_mean(per_station),
            avg_queue_length=_mean(totals),
            avg_system_time=avg_system,
            waiting_time_distribution=waiting_time_distribution(self.waiting_times),
            per_station_utilization=per_station,
            senior_utilization=senior.busy_time / horizon,
            waiting_times=tuple(self.waiting_times),
            primary_service_times=tuple(self.primary_service_times),
            senior_service_times=tuple(self.senior_service_times),
            arrivals=self.arrivals,
            primary_completions=self.primary_completions,
            screened_completions=self.screened_completions,
            senior_completions=self.senior_completions,
        )
