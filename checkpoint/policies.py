# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Queue selection policy for arriving travelers.
#
# Design notes:
#   - Keep pure functions to ease testing (queue lengths -> station index).
#
# Usage:
#   from checkpoint.policies import shortest_queue
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Sequence


def shortest_queue(lengths: Sequence[int]) -> int:
    """
    Index of the shortest queue. Ties go to the lowest index (strict < scan),
    so [2, 0, 3] -> 1 and [1, 1] -> 0.
    """
    if not lengths:
        raise ValueError("no queues to choose from")
    best = 0
    for i in range(1, len(lengths)):
        if lengths[i] < lengths[best]:
            best = i
    return best
