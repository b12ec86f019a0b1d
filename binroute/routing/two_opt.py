"""Optional 2-opt improvement pass over a constructed tour."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .distance import distance_matrix
from .models import Point

IMPROVEMENT_EPS = 1e-9
MAX_PASSES = 50


def improve_tour(tour: Sequence[Point], max_passes: int = MAX_PASSES) -> List[Point]:
    """
    Reverse segments of an open path while that shortens it.

    The first stop stays fixed; the end of the path is free. Each candidate
    reversal of ``order[i:j]`` is scored from the edges it replaces only:
    ``d(i-1, j-1) + d(i, j) - d(i-1, i) - d(j-1, j)``, or
    ``d(i-1, n-1) - d(i-1, i)`` when the segment runs to the end. For each
    ``i`` the best ``j`` is applied, so a pass is O(n^2) numpy work.

    Args:
        tour: Ordered points, typically the output of ``build_tour``
        max_passes: Upper bound on full improvement sweeps

    Returns:
        A permutation of ``tour`` that is never longer than the input
    """
    points = list(tour)
    n = len(points)
    if n < 4:
        return points

    dist = distance_matrix(points)
    order = np.arange(n)

    for _ in range(max_passes):
        improved = False
        for i in range(1, n - 1):
            before, first = order[i - 1], order[i]
            removed = dist[before, first]

            # Interior segments: j in [i + 2, n - 1]
            js = np.arange(i + 2, n)
            gains = np.empty(len(js) + 1, dtype=float)
            if len(js):
                last, after = order[js - 1], order[js]
                gains[:-1] = dist[before, last] + dist[first, after] - removed - dist[last, after]
            # Segment running to the end of the path: j == n
            gains[-1] = dist[before, order[n - 1]] - removed

            best = int(np.argmin(gains))
            if gains[best] < -IMPROVEMENT_EPS:
                j = int(js[best]) if best < len(js) else n
                order[i:j] = order[i:j][::-1].copy()
                improved = True
        if not improved:
            break

    return [points[k] for k in order]
