"""
Greedy nearest-neighbour tour construction.

This module builds a visiting order over eligible collection points:
- Starts at the first point in input order
- Repeatedly extends the path to the closest unvisited point
- Breaks ties in favour of the point that appears earliest in the input

The greedy approach is O(n^2) distance evaluations and suboptimal, which is
fine for the few hundred bins of a single collection area. Next-stop
selection sits behind ``NextStopStrategy`` so stronger heuristics can be
plugged in without changing the ``build_tour`` contract.

Callers must pass eligible points only (finite latitude and longitude).
Use ``binroute.routing.eligibility.filter_eligible`` first.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Type

import numpy as np

from .distance import distances_from
from .models import Point


class NextStopStrategy:
    """Chooses which unvisited point to visit after ``current``."""

    name: str = "base"

    def select_next(self, current: Point, remaining: Sequence[Point]) -> int:
        """
        Return the index into ``remaining`` of the next stop.

        ``remaining`` is always non-empty and kept in original input order.
        """
        raise NotImplementedError


class NearestNeighborStrategy(NextStopStrategy):
    """Pick the closest remaining point; first minimum wins on ties."""

    name = "nearest_neighbor"

    def select_next(self, current: Point, remaining: Sequence[Point]) -> int:
        # np.argmin returns the first occurrence of the minimum
        return int(np.argmin(distances_from(current, remaining)))


STRATEGIES: Dict[str, Type[NextStopStrategy]] = {
    NearestNeighborStrategy.name: NearestNeighborStrategy,
}


def get_strategy(name: str) -> NextStopStrategy:
    """
    Instantiate a registered next-stop strategy by name.

    Raises:
        ValueError: If no strategy is registered under ``name``
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown routing strategy '{name}'. Available strategies: {', '.join(sorted(STRATEGIES))}"
        ) from None


def build_tour(
    points: Sequence[Point],
    strategy: Optional[NextStopStrategy] = None,
) -> List[Point]:
    """
    Order ``points`` into a short visiting sequence.

    Args:
        points: Eligible points; the first one is the starting stop
        strategy: Next-stop selection (default: nearest neighbour)

    Returns:
        A permutation of ``points``. Empty input gives an empty tour.

    Example:
        >>> a, b, c = Point("A", 0, 0), Point("B", 0, 3), Point("C", 4, 0)
        >>> [p.id for p in build_tour([a, b, c])]
        ['A', 'B', 'C']
    """
    if not points:
        return []

    strategy = strategy or NearestNeighborStrategy()

    unvisited = list(points)
    tour: List[Point] = [unvisited.pop(0)]

    while unvisited:
        index = strategy.select_next(tour[-1], unvisited)
        tour.append(unvisited.pop(index))

    return tour
