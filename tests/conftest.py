"""
Pytest configuration and shared fixtures for bin-route tests.

This file provides:
- Sample bin records (raw store shape and Point instances)
- Small hand-checked geometries for tour construction
- Point-store settings pointing at temporary seed files
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pytest
import yaml

from binroute.routing import Point


# ==============================================================================
# Sample Bin Records
# ==============================================================================

@pytest.fixture
def sample_bins() -> List[Dict[str, Any]]:
    """Raw bin records as returned by the collections store (Colombo area)."""
    return [
        {
            "binId": "BIN-001",
            "location": "Galle Face",
            "category": "general",
            "latitude": 6.9271,
            "longitude": 79.8612,
            "areaId": "COLOMBO-CENTRAL",
        },
        {
            "binId": "BIN-002",
            "location": "Independence Square",
            "category": "recyclable",
            "latitude": 6.9034,
            "longitude": 79.8685,
            "areaId": "COLOMBO-CENTRAL",
        },
        {
            "binId": "BIN-003",
            "location": "Viharamahadevi Park",
            "category": "organic",
            "latitude": 6.9147,
            "longitude": 79.8608,
            "areaId": "COLOMBO-CENTRAL",
        },
        {
            "binId": "BIN-004",
            "location": "Town Hall",
            "category": "general",
            "latitude": 6.9120,
            "longitude": 79.8653,
            "areaId": "COLOMBO-CENTRAL",
        },
        {
            "binId": "BIN-006",
            "location": "Dehiwala Zoo",
            "category": "organic",
            "latitude": 6.8566,
            "longitude": 79.8779,
            "areaId": "DEHIWALA",
        },
        {
            "binId": "BIN-007",
            "location": "Mount Lavinia Beach",
            "category": "general",
            "latitude": 6.8335,
            "longitude": 79.8630,
            "areaId": "DEHIWALA",
        },
    ]


@pytest.fixture
def bins_with_bad_coordinates(sample_bins) -> List[Dict[str, Any]]:
    """Sample bins interleaved with records the eligibility filter must drop."""
    return [
        {"binId": "BAD-NONE", "location": "Unknown", "latitude": None, "longitude": 79.86},
        sample_bins[0],
        {"binId": "BAD-NAN", "location": "Nowhere", "latitude": float("nan"), "longitude": 79.86},
        sample_bins[1],
        {"binId": "BAD-TEXT", "location": "Typo", "latitude": "six point nine", "longitude": 79.86},
        {"binId": "BAD-INF", "location": "Far away", "latitude": 6.9, "longitude": float("inf")},
        {"binId": "BAD-MISSING", "location": "No coords"},
        sample_bins[2],
    ]


# ==============================================================================
# Hand-checked Geometries
# ==============================================================================

@pytest.fixture
def abc_points() -> List[Point]:
    """A(0,0), B(0,3), C(4,0): nearest neighbour from A gives A, B, C."""
    return [
        Point(id="A", latitude=0.0, longitude=0.0),
        Point(id="B", latitude=0.0, longitude=3.0),
        Point(id="C", latitude=4.0, longitude=0.0),
    ]


@pytest.fixture
def tie_points() -> List[Point]:
    """A(0,0), B(1,0), C(-1,0): B and C are equidistant from A."""
    return [
        Point(id="A", latitude=0.0, longitude=0.0),
        Point(id="B", latitude=1.0, longitude=0.0),
        Point(id="C", latitude=-1.0, longitude=0.0),
    ]


@pytest.fixture
def random_points() -> List[Point]:
    """Fifty reproducible points scattered over a city-sized box."""
    rng = np.random.default_rng(42)
    lats = rng.uniform(6.80, 6.95, size=50)
    lngs = rng.uniform(79.83, 79.90, size=50)
    return [
        Point(id=f"bin_{i}", latitude=float(lat), longitude=float(lng), category="general")
        for i, (lat, lng) in enumerate(zip(lats, lngs))
    ]


# ==============================================================================
# Store Fixtures
# ==============================================================================

@pytest.fixture
def seed_file(tmp_path, sample_bins) -> Path:
    """Temporary YAML seed file holding ``sample_bins``."""
    path = tmp_path / "bins.yaml"
    with open(path, "w") as f:
        yaml.safe_dump({"bins": sample_bins}, f)
    return path


@pytest.fixture(autouse=True)
def _reset_point_cache():
    """Keep the point-store TTL cache from leaking between tests."""
    from apps.route_server.tools.points import clear_cache

    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def debug_logging(caplog):
    """Capture binroute DEBUG records."""
    caplog.set_level(logging.DEBUG, logger="binroute")
    return caplog
