"""Ratio-based distribution of matured accounts.

This module splits the matured sequence across an ordered destination
list. Each destination except the last takes ``floor(remaining * ratio)``
accounts from the front of what is still unassigned; the last destination
takes the rest regardless of its ratio. The plan is computed up front as
slice indices over an immutable tuple.
"""

from __future__ import annotations

import math
from typing import Sequence

from core.errors import LevelupDistributionError
from core.types import Account, DestinationAssignment, DestinationShare


def compute_slice_bounds(
    shares: Sequence[DestinationShare],
    pool_size: int,
) -> list[tuple[int, int]]:
    """Compute ``[start, stop)`` bounds for every destination, in order.

    Args:
        shares: Ordered destinations with their ratios.
        pool_size: Number of matured accounts.

    Returns:
        One bound pair per destination; empty pairs have ``start == stop``.

    Raises:
        LevelupDistributionError: If a ratio is outside [0, 1] or the pool is negative.
    """
    if pool_size < 0:
        raise LevelupDistributionError(f"Pool size must be non-negative, got {pool_size}.")
    for share in shares:
        if not 0.0 <= share.ratio <= 1.0:
            raise LevelupDistributionError(
                f"Invalid ratio {share.ratio} for destination '{share.name}': "
                "expected a value between 0 and 1."
            )
    bounds: list[tuple[int, int]] = []
    start = 0
    for index, share in enumerate(shares):
        remaining = pool_size - start
        is_last = index == len(shares) - 1
        take = remaining if is_last else math.floor(remaining * share.ratio)
        bounds.append((start, start + take))
        start += take
    return bounds


def plan_distribution(
    shares: Sequence[DestinationShare],
    matured: Sequence[Account],
) -> tuple[DestinationAssignment, ...]:
    """Assign every matured account to exactly one destination.

    Args:
        shares: Ordered destinations with their ratios.
        matured: Matured accounts in the order the tracking store returned them.

    Returns:
        Non-empty assignments in destination order.
    """
    pool = tuple(matured)
    bounds = compute_slice_bounds(shares, len(pool))
    assignments: list[DestinationAssignment] = []
    for position, (share, (start, stop)) in enumerate(zip(shares, bounds)):
        if stop == start:
            continue
        assignments.append(
            DestinationAssignment(
                name=share.name,
                position=position,
                start=start,
                stop=stop,
                accounts=pool[start:stop],
            )
        )
    return tuple(assignments)
