# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Build the concrete stations for one run: `num_stations` primary screening
#   lanes and the single senior (secondary screening) officer.
#
# Design notes:
#   - Each station gets its own truncated-normal sampler bound to the shared
#     run RNG, so draw order follows station processing order.
#
# Usage:
#   from checkpoint.stations import make_stations
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List, Tuple
from .entities import SimulationParameters
from .distributions import truncated_normal
from .queues import Station


def make_stations(params: SimulationParameters, rng) -> Tuple[List[Station], Station]:
    """
    Create the primary lanes and the senior station.

    Parameters
    ----------
    params : SimulationParameters
        Service means/stddevs are in SECONDS.
    rng : object
        Uniform source with a random() method, shared by all stations.

    Returns
    -------
    (list[Station], Station)
        Primary stations in index order, and the senior station.
    """
    def primary_sampler() -> float:
        return truncated_normal(rng, params.mu1, params.sigma1)

    def senior_sampler() -> float:
        return truncated_normal(rng, params.mu2, params.sigma2)

    primary = [Station(f"primary_{i}", primary_sampler) for i in range(params.num_stations)]
    senior = Station("senior", senior_sampler)
    return primary, senior
