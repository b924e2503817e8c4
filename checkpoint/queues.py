# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Fixed-step server primitive: a single-server Station with a FIFO queue,
#   the traveler in service, remaining service time, and busy-time tracking.
#
# Design notes:
#   - The clock advances in fixed steps; tick() burns one step of service and
#     returns the traveler whose service just finished (or None).
#   - Service times come from a sampler callable so primary and senior
#     stations share this class with different (mu, sigma).
#   - What happens to a finished traveler is decided by the router.
#
# Usage:
#   from checkpoint.queues import Station
# -----------------------------------------------------------------------------

from __future__ import annotations
from collections import deque
from typing import Callable, Deque, Optional
from .entities import Traveler


class Station:
    """Single FIFO server advanced in fixed time steps.

    Parameters
    ----------
    name : str
        Station name for logging/metrics.
    sampler : callable
        Zero-argument callable returning a non-negative service duration (s).

    Notes
    -----
    - busy is True iff a traveler is in service.
    - remaining_time only decreases while busy; it is reset on each start.
    """
    def __init__(self, name: str, sampler: Callable[[], float]):
        self.name = name
        self.sampler = sampler
        self.queue: Deque[Traveler] = deque()
        self.traveler: Optional[Traveler] = None
        self.remaining_time: float = 0.0
        self.busy_time: float = 0.0

    @property
    def busy(self) -> bool:
        return self.traveler is not None

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    def enqueue(self, traveler: Traveler):
        self.queue.append(traveler)

    def tick(self, dt: float) -> Optional[Traveler]:
        """Advance the in-service traveler by dt; return it if service completed."""
        if not self.busy:
            return None
        self.remaining_time -= dt
        self.busy_time += dt
        if self.remaining_time > 0:
            return None
        done = self.traveler
        self.traveler = None
        self.remaining_time = 0.0
        return done

    def try_start_service(self) -> Optional[tuple]:
        """
        If idle with travelers waiting, start serving the head of the queue.

        Returns (traveler, service_time) when a service starts, else None.
        """
        if self.busy or not self.queue:
            return None
        traveler = self.queue.popleft()
        st = self.sampler()
        if st < 0:
            raise RuntimeError(f"{self.name}: negative service time {st}")
        self.traveler = traveler
        self.remaining_time = st
        return traveler, st
