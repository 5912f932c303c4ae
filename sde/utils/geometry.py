"""
Planar geometry helper functions.

Provides utilities for:
- Reading a representative (x, y) from any shapely geometry
- Angle normalization for undirected axes
- Ellipse boundary generation
"""
from typing import Optional
import numpy as np
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
import logging

logger = logging.getLogger(__name__)


def representative_xy(geometry: Optional[BaseGeometry]) -> Optional[tuple[float, float]]:
    """
    Get the planar location used for a feature geometry.

    Args:
        geometry: Any shapely geometry

    Returns:
        (x, y) of a point geometry, the centroid of any other geometry,
        or None when the geometry is missing, empty or non-finite
    """
    if geometry is None or geometry.is_empty:
        return None

    point = geometry if geometry.geom_type == "Point" else geometry.centroid
    if point.is_empty:
        return None

    x, y = float(point.x), float(point.y)
    if not (np.isfinite(x) and np.isfinite(y)):
        return None
    return (x, y)


def normalize_axis_angle(angle: float) -> float:
    """
    Normalize an axis orientation to [0, π).

    An axis has orientation but no direction, so angles π apart are equal.

    Args:
        angle: Angle in radians

    Returns:
        Equivalent angle in [0, π)
    """
    normalized = float(angle) % np.pi
    # Float rounding can land a tiny negative angle exactly on π
    if normalized >= np.pi:
        normalized = 0.0
    return normalized


def ellipse_ring(
    center: tuple[float, float],
    semi_major: float,
    semi_minor: float,
    theta: float,
    segments: int = 90,
) -> list[tuple[float, float]]:
    """
    Generate a closed ring of points on an ellipse boundary.

    Args:
        center: (x, y) ellipse centre
        semi_major: Semi-axis length along the rotated x-axis
        semi_minor: Semi-axis length along the rotated y-axis
        theta: Counter-clockwise rotation of the major axis from the x-axis, radians
        segments: Number of distinct boundary vertices

    Returns:
        List of segments + 1 (x, y) tuples; the last repeats the first
    """
    if segments < 4:
        raise ValueError(f"Ellipse needs at least 4 segments, got {segments}")

    t = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)
    local_x = semi_major * np.cos(t)
    local_y = semi_minor * np.sin(t)

    cos_t, sin_t = np.cos(theta), np.sin(theta)
    rotation = np.array([[cos_t, -sin_t], [sin_t, cos_t]])

    # Rotate then translate to centre
    points = np.column_stack((local_x, local_y)) @ rotation.T + np.asarray(center, dtype=float)

    ring = [(float(x), float(y)) for x, y in points]
    ring.append(ring[0])
    return ring


def ellipse_polygon(
    center: tuple[float, float],
    semi_major: float,
    semi_minor: float,
    theta: float,
    segments: int = 90,
) -> Polygon:
    """
    Build a shapely polygon approximating an ellipse.

    Args:
        center: (x, y) ellipse centre
        semi_major: Semi-major axis length
        semi_minor: Semi-minor axis length
        theta: Rotation of the major axis in radians
        segments: Number of boundary vertices

    Returns:
        Polygon whose exterior is the closed ellipse ring
    """
    ring = ellipse_ring(center, semi_major, semi_minor, theta, segments)
    logger.debug(f"Built ellipse ring with {len(ring)} vertices at ({center[0]:.3f}, {center[1]:.3f})")
    return Polygon(ring)
