# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Router and network wiring. Decides which primary lane an arrival joins
#   and where a traveler goes after each service completion.
#
# Design notes:
#   - Arrivals join the shortest primary queue (policies.shortest_queue).
#   - Primary completion: flagged travelers join the senior queue, the rest
#     leave. Senior completion: the traveler leaves.
#   - Only primary service stamps the traveler's start/end times; the senior
#     visit is recorded as a service sample only.
#
# Usage:
#   router = Router(primary, senior, metrics)
#   router.on_arrival(traveler)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List
from .entities import Traveler
from .queues import Station
from . import policies


class Router:
    def __init__(self, primary: List[Station], senior: Station, metrics):
        self.primary = primary
        self.senior = senior
        self.M = metrics

    # Incoming arrivals (already created by arrivals.py)
    def on_arrival(self, traveler: Traveler) -> int:
        idx = policies.shortest_queue([st.queue_length for st in self.primary])
        self.primary[idx].enqueue(traveler)
        self.M.note_arrival(traveler)
        return idx

    def step_primary(self, now: float, dt: float):
        for st in self.primary:
            done = st.tick(dt)
            if done is not None:
                done.end_service(now)
                self.M.note_primary_completion(done)
                if done.needs_screening:
                    self.senior.enqueue(done)
            started = st.try_start_service()
            if started is not None:
                traveler, service_time = started
                traveler.begin_service(now)
                self.M.note_primary_start(traveler, service_time, now)

    def step_senior(self, now: float, dt: float):
        st = self.senior
        done = st.tick(dt)
        if done is not None:
            self.M.note_senior_completion(done)
        started = st.try_start_service()
        if started is not None:
            traveler, service_time = started
            self.M.note_senior_start(traveler, service_time, now)
