"""
Distance metric for nearest-neighbour routing.

Distances are plain Euclidean distances over raw latitude/longitude degrees,
treating the coordinates as a flat plane. This is good enough for relative
nearest-neighbour comparisons inside a city but is NOT metrically accurate
over large spans (no geodesic correction). Swapping in haversine would change
the resulting visiting order for some inputs, so the flat metric is kept.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .models import Point


def euclidean_distance(a: Point, b: Point) -> float:
    """
    Flat Euclidean distance between two points, in degrees.

    Symmetric, non-negative, and zero exactly when both coordinates match.

    Args:
        a: First point (eligible, finite coordinates)
        b: Second point (eligible, finite coordinates)

    Returns:
        sqrt((a.lat - b.lat)^2 + (a.lng - b.lng)^2)
    """
    lat_diff = a.latitude - b.latitude
    lng_diff = a.longitude - b.longitude
    return math.sqrt(lat_diff * lat_diff + lng_diff * lng_diff)


def distances_from(origin: Point, candidates: Sequence[Point]) -> np.ndarray:
    """Vectorised ``euclidean_distance`` from ``origin`` to every candidate."""
    if not candidates:
        return np.empty(0, dtype=float)
    lats = np.fromiter((p.latitude for p in candidates), dtype=float, count=len(candidates))
    lngs = np.fromiter((p.longitude for p in candidates), dtype=float, count=len(candidates))
    lat_diff = origin.latitude - lats
    lng_diff = origin.longitude - lngs
    return np.sqrt(lat_diff * lat_diff + lng_diff * lng_diff)


def distance_matrix(points: Sequence[Point]) -> np.ndarray:
    """(n, n) matrix of ``euclidean_distance`` between every pair of points."""
    lats = np.array([p.latitude for p in points], dtype=float)
    lngs = np.array([p.longitude for p in points], dtype=float)
    lat_diff = lats[:, None] - lats[None, :]
    lng_diff = lngs[:, None] - lngs[None, :]
    return np.sqrt(lat_diff * lat_diff + lng_diff * lng_diff)


def tour_length(points: Sequence[Point]) -> float:
    """Sum of distances between consecutive points (open path, no return leg)."""
    total = 0.0
    for a, b in zip(points[:-1], points[1:]):
        total += euclidean_distance(a, b)
    return total
