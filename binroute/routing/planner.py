"""
Route planning pipeline: eligibility -> limits -> tour -> (2-opt) -> stops.

This is what request handlers call. It re-runs the eligibility filter as a
safety net, enforces the point-count limit, builds the tour with the
configured strategy and shapes the result with a per-route summary.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .distance import tour_length
from .eligibility import RawPoint, screen_points
from .formatter import format_route
from .greedy import build_tour, get_strategy
from .models import Stop
from .two_opt import improve_tour

logger = logging.getLogger(__name__)

# Nearest neighbour is O(n^2); beyond this a single area should be split.
DEFAULT_MAX_POINTS = 1000


class RoutePlanningError(ValueError):
    """Raised when a point set cannot be routed as requested."""


@dataclass
class RoutingSettings:
    """Routing options, usually read from the ``routing`` section of a profile."""

    strategy: str = "nearest_neighbor"
    """Registered next-stop strategy name."""

    improve_2opt: bool = False
    """Run a 2-opt pass after construction. Changes the visiting order."""

    max_points: int = DEFAULT_MAX_POINTS
    """Largest eligible point set accepted for one route."""

    @classmethod
    def from_profile(cls, profile: Optional[Mapping[str, Any]]) -> "RoutingSettings":
        section = dict((profile or {}).get("routing") or {})
        defaults = cls()
        settings = cls(
            strategy=str(section.get("strategy", defaults.strategy)),
            improve_2opt=bool(section.get("improve_2opt", defaults.improve_2opt)),
            max_points=int(section.get("max_points", defaults.max_points)),
        )
        # Fail on typos at load time rather than on the first request
        get_strategy(settings.strategy)
        if settings.max_points < 1:
            raise ValueError(f"routing.max_points must be positive, got {settings.max_points}")
        return settings


@dataclass
class RoutePlanResult:
    """Result of one route computation."""

    stops: List[Stop]
    total_distance: float
    num_points_in: int
    num_ineligible: int
    sequence_method: str
    solver_time_sec: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def num_stops(self) -> int:
        return len(self.stops)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["num_stops"] = self.num_stops
        return data


def validate_point_count(num_points: int, max_points: int) -> None:
    """
    Check an eligible point count against the configured limit.

    Raises:
        RoutePlanningError: If ``num_points`` exceeds ``max_points``
    """
    if num_points > max_points:
        raise RoutePlanningError(
            "\n".join(
                [
                    f"Route request exceeds the point limit: {num_points} points > {max_points}.",
                    "Suggestions to fix this:",
                    "  1. Filter the request to a single areaId",
                    "  2. Raise routing.max_points in the active profile",
                ]
            )
        )


def plan_route(
    records: Iterable[RawPoint],
    settings: Optional[RoutingSettings] = None,
) -> RoutePlanResult:
    """
    Compute a visiting order for ``records``.

    Args:
        records: Points or raw store records, possibly with bad coordinates
        settings: Routing options (default: greedy nearest neighbour, no 2-opt)

    Returns:
        RoutePlanResult with numbered stops; empty when nothing is eligible

    Raises:
        RoutePlanningError: If the eligible set exceeds ``settings.max_points``
    """
    settings = settings or RoutingSettings()
    records = list(records)
    started = time.perf_counter()

    eligible, report = screen_points(records)
    num_ineligible = report.num_skipped
    validate_point_count(len(eligible), settings.max_points)

    strategy = get_strategy(settings.strategy)
    tour = build_tour(eligible, strategy)
    method = strategy.name
    if settings.improve_2opt:
        tour = improve_tour(tour)
        method = f"{method}+2opt"

    stops = format_route(tour)
    result = RoutePlanResult(
        stops=stops,
        total_distance=tour_length(tour),
        num_points_in=len(records),
        num_ineligible=num_ineligible,
        sequence_method=method,
        solver_time_sec=time.perf_counter() - started,
    )
    result.warnings.extend(report.messages())

    logger.info(
        "Planned route: %d stops from %d points via %s",
        result.num_stops,
        result.num_points_in,
        result.sequence_method,
    )
    if logger.isEnabledFor(logging.DEBUG):
        summary = {
            "sequence_method": result.sequence_method,
            "num_stops": result.num_stops,
            "num_ineligible": result.num_ineligible,
            "total_distance": round(result.total_distance, 6),
            "stop_ids": [stop.id for stop in stops],
            "solver_time_sec": round(result.solver_time_sec, 6),
        }
        logger.debug(f"Route telemetry: {json.dumps(summary)}")

    return result
