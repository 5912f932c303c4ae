"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- GeoJSON feature collection builder
- Sample point sets (square, circle, two cases)
- FastAPI test client
"""
import pytest
import numpy as np
from typing import Any, Callable, Optional
from fastapi.testclient import TestClient

from sde.main import app
from sde.domain.models import InputFeatureCollection
from sde.infrastructure.feature_source import GeoJSONFeatureSource


# ============================================================
# Feature Collection Builders
# ============================================================

def _point_feature(x: float, y: float, properties: Optional[dict[str, Any]] = None) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [x, y]},
        "properties": properties or {},
    }


@pytest.fixture
def make_geojson() -> Callable[..., dict]:
    """Build a GeoJSON FeatureCollection mapping from points and optional properties."""

    def _make(
        points: list[tuple[float, float]],
        properties: Optional[list[dict[str, Any]]] = None,
    ) -> dict:
        properties = properties or [{} for _ in points]
        return {
            "type": "FeatureCollection",
            "features": [
                _point_feature(x, y, props)
                for (x, y), props in zip(points, properties)
            ],
        }

    return _make


@pytest.fixture
def make_source(make_geojson) -> Callable[..., GeoJSONFeatureSource]:
    """Build a GeoJSONFeatureSource from points and optional properties."""

    def _make(
        points: list[tuple[float, float]],
        properties: Optional[list[dict[str, Any]]] = None,
    ) -> GeoJSONFeatureSource:
        collection = InputFeatureCollection.model_validate(make_geojson(points, properties))
        return GeoJSONFeatureSource(collection)

    return _make


# ============================================================
# Sample Point Sets
# ============================================================

@pytest.fixture
def square_points() -> list[tuple[float, float]]:
    """Corners of a 2x2 square: centre (1, 1), unit variance on both axes."""
    return [(0.0, 0.0), (2.0, 0.0), (0.0, 2.0), (2.0, 2.0)]


@pytest.fixture
def circle_points() -> list[tuple[float, float]]:
    """36 points evenly spaced on a circle of radius 10 centred at (100, 50)."""
    angles = np.linspace(0.0, 2.0 * np.pi, 36, endpoint=False)
    return [(100.0 + 10.0 * np.cos(a), 50.0 + 10.0 * np.sin(a)) for a in angles]


@pytest.fixture
def elongated_points() -> list[tuple[float, float]]:
    """Points spread along a 30-degree line with some perpendicular scatter."""
    rng = np.random.default_rng(7)
    along = rng.normal(0.0, 10.0, 200)
    across = rng.normal(0.0, 2.0, 200)
    angle = np.radians(30.0)
    xs = 500.0 + along * np.cos(angle) - across * np.sin(angle)
    ys = 300.0 + along * np.sin(angle) + across * np.cos(angle)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


@pytest.fixture
def two_case_features() -> tuple[list[tuple[float, float]], list[dict[str, Any]]]:
    """Two disjoint cases 'A' and 'B', interleaved in input order, with weights."""
    points = [
        (0.0, 0.0), (100.0, 100.0),
        (4.0, 0.0), (110.0, 100.0),
        (0.0, 2.0), (100.0, 130.0),
        (4.0, 2.0), (105.0, 120.0),
    ]
    properties = [
        {"case": "A", "w": 1.0}, {"case": "B", "w": 2.0},
        {"case": "A", "w": 3.0}, {"case": "B", "w": 1.0},
        {"case": "A", "w": 1.0}, {"case": "B", "w": 1.0},
        {"case": "A", "w": 2.0}, {"case": "B", "w": 4.0},
    ]
    return points, properties


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
