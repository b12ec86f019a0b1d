"""Route construction: distance metric, greedy tour builder, formatting."""

from .models import (
    Point,
    Stop,
)

from .distance import (
    euclidean_distance,
    distances_from,
    distance_matrix,
    tour_length,
)

from .eligibility import (
    filter_eligible,
    is_eligible,
    screen_points,
    EligibilityReport,
)

from .greedy import (
    build_tour,
    get_strategy,
    NextStopStrategy,
    NearestNeighborStrategy,
    STRATEGIES,
)

from .two_opt import improve_tour

from .formatter import (
    format_route,
    format_reason,
)

from .planner import (
    plan_route,
    validate_point_count,
    RoutePlanResult,
    RoutePlanningError,
    RoutingSettings,
    DEFAULT_MAX_POINTS,
)

__all__ = [
    # Data models
    "Point",
    "Stop",

    # Distance metric
    "euclidean_distance",
    "distances_from",
    "distance_matrix",
    "tour_length",

    # Eligibility
    "filter_eligible",
    "is_eligible",
    "screen_points",
    "EligibilityReport",

    # Tour construction
    "build_tour",
    "get_strategy",
    "NextStopStrategy",
    "NearestNeighborStrategy",
    "STRATEGIES",
    "improve_tour",

    # Formatting
    "format_route",
    "format_reason",

    # Pipeline
    "plan_route",
    "validate_point_count",
    "RoutePlanResult",
    "RoutePlanningError",
    "RoutingSettings",
    "DEFAULT_MAX_POINTS",
]
