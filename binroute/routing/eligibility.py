"""
Eligibility filter run before tour construction.

A point is eligible only if both latitude and longitude are present and
finite. Raw store records may carry missing, ``None``, ``NaN``, infinite or
non-numeric coordinates; those records are dropped, never coerced to zero.
Records without an id are dropped as well and counted separately.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .models import Point

logger = logging.getLogger(__name__)

RawPoint = Union[Point, Mapping[str, Any]]

# Store field name -> Point attribute. The bins collection uses binId/areaId.
_ID_KEYS = ("id", "binId", "bin_id")
_GROUP_KEYS = ("groupId", "group_id", "areaId", "area_id")


@dataclass
class EligibilityReport:
    """Why records were left out of a route."""

    num_in: int = 0
    num_eligible: int = 0
    missing_id: int = 0
    bad_coordinates: int = 0

    @property
    def num_skipped(self) -> int:
        return self.missing_id + self.bad_coordinates

    def messages(self, noun: str = "point") -> List[str]:
        """One human-readable line per skip cause."""
        lines = []
        if self.bad_coordinates:
            lines.append(f"{self.bad_coordinates} {noun}(s) skipped: missing or non-finite coordinates")
        if self.missing_id:
            lines.append(f"{self.missing_id} {noun}(s) skipped: missing id")
        return lines


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return str(value)


def _point_id(value: Any) -> Optional[str]:
    text = _optional_str(value)
    if text is None or not text.strip():
        return None
    return text


def _coordinate(value: Any) -> Any:
    # Booleans are numeric to pandas; a flag is not a coordinate.
    return None if isinstance(value, bool) else value


def is_eligible(point: Point) -> bool:
    """True when ``point`` has an id and both coordinates are finite numbers."""
    if _point_id(point.id) is None:
        return False
    if isinstance(point.latitude, bool) or isinstance(point.longitude, bool):
        return False
    try:
        return bool(np.isfinite(point.latitude) and np.isfinite(point.longitude))
    except TypeError:
        return False


def screen_points(records: Iterable[RawPoint]) -> Tuple[List[Point], EligibilityReport]:
    """
    Split records into eligible Points and a report of what was skipped.

    Ids, locations, categories and areas are taken from the records as they
    are; only the coordinates go through ``pandas.to_numeric``.

    Args:
        records: ``Point`` instances or raw mappings from the point store

    Returns:
        (eligible points in input order, EligibilityReport)
    """
    records = list(records)
    report = EligibilityReport(num_in=len(records))
    if not records:
        return [], report

    raw_lats = [
        _coordinate(r.latitude if isinstance(r, Point) else r.get("latitude")) for r in records
    ]
    raw_lngs = [
        _coordinate(r.longitude if isinstance(r, Point) else r.get("longitude")) for r in records
    ]
    lats = pd.to_numeric(pd.Series(raw_lats, dtype=object), errors="coerce").astype(float).to_numpy()
    lngs = pd.to_numeric(pd.Series(raw_lngs, dtype=object), errors="coerce").astype(float).to_numpy()
    finite = np.isfinite(lats) & np.isfinite(lngs)

    eligible: List[Point] = []
    for idx, raw in enumerate(records):
        if isinstance(raw, Point):
            if is_eligible(raw):
                eligible.append(raw)
            elif _point_id(raw.id) is None:
                report.missing_id += 1
            else:
                report.bad_coordinates += 1
            continue

        point_id = _point_id(_first_present(raw, _ID_KEYS))
        if point_id is None:
            report.missing_id += 1
            continue
        if not finite[idx]:
            report.bad_coordinates += 1
            continue

        eligible.append(
            Point(
                id=point_id,
                latitude=float(lats[idx]),
                longitude=float(lngs[idx]),
                location=_optional_str(raw.get("location")),
                category=_optional_str(raw.get("category")),
                group_id=_optional_str(_first_present(raw, _GROUP_KEYS)),
            )
        )

    report.num_eligible = len(eligible)
    if report.num_skipped:
        logger.info(
            "Dropped %d of %d points (%d bad coordinates, %d missing id)",
            report.num_skipped,
            report.num_in,
            report.bad_coordinates,
            report.missing_id,
        )
    return eligible, report


def filter_eligible(records: Iterable[RawPoint]) -> List[Point]:
    """Keep only records with an id and finite coordinates, preserving order."""
    eligible, _ = screen_points(records)
    return eligible
