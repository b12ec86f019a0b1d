"""
Value types shared by the route-construction engine.

Points are supplied fresh on every call and are never mutated; Stops are
created once by the formatter at the end of a computation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Point:
    """A single collection point (bin) with raw lat/lng coordinates."""

    id: str
    latitude: float
    longitude: float
    location: Optional[str] = None
    category: Optional[str] = None
    group_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class Stop:
    """A point annotated with its 1-based position in a computed tour."""

    order: int
    id: str
    latitude: float
    longitude: float
    location: Optional[str] = None
    category: Optional[str] = None
    group_id: Optional[str] = None

    @classmethod
    def from_point(cls, point: Point, order: int) -> "Stop":
        return cls(order=order, **asdict(point))

    def to_point(self) -> Point:
        data = asdict(self)
        data.pop("order")
        return Point(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
