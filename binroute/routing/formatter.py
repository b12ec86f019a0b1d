"""Shape an ordered tour into numbered stops."""

from __future__ import annotations

from typing import List, Sequence

from .models import Point, Stop


def format_route(tour: Sequence[Point]) -> List[Stop]:
    """Number each point 1..n in tour order, carrying every attribute through."""
    return [Stop.from_point(point, order=index + 1) for index, point in enumerate(tour)]


def format_reason(stop: Stop, total: int) -> str:
    """Short human-readable label for a stop, e.g. ``"Stop 2/5; BIN-003 @ Town Hall"``."""
    parts = [f"Stop {stop.order}/{total}", stop.id]
    label = "; ".join(parts)
    if stop.location:
        label = f"{label} @ {stop.location}"
    return label
