"""
Domain service: attach summary attributes and collect ellipse features.
"""
import math
import logging
from typing import Any, Iterable

from shapely.geometry import Polygon

from sde.domain.ellipse import (
    NO_CASE,
    EllipseFeature,
    EllipseParams,
    EllipseResult,
    RunStatus,
)
from sde.domain.exceptions import EllipseError

logger = logging.getLogger(__name__)


def ellipse_attributes(params: EllipseParams) -> dict[str, Any]:
    """
    Summary attributes for one ellipse.

    ``rotation_deg`` is counter-clockwise from the x-axis, like ``rotation_rad``.
    ``azimuth_deg`` is the same axis measured clockwise from north (+y),
    in [0, 180).

    Args:
        params: Ellipse parameters

    Returns:
        Attribute name -> value mapping
    """
    rotation_deg = math.degrees(params.theta)
    azimuth_deg = (90.0 - rotation_deg) % 180.0

    return {
        "case_key": None if params.case_key is NO_CASE else params.case_key,
        "center_x": params.center_x,
        "center_y": params.center_y,
        "semi_major": params.semi_major,
        "semi_minor": params.semi_minor,
        "rotation_rad": params.theta,
        "rotation_deg": rotation_deg,
        "azimuth_deg": azimuth_deg,
        "area": math.pi * params.semi_major * params.semi_minor,
        "sigma_major": params.sigma_major,
        "sigma_minor": params.sigma_minor,
        "std_deviations": params.std_deviations,
        "point_count": params.point_count,
        "total_weight": params.total_weight,
        "degenerate": params.degenerate,
    }


def make_feature(params: EllipseParams, geometry: Polygon) -> EllipseFeature:
    """Wrap parameters and polygon into an output feature."""
    return EllipseFeature(
        case_key=params.case_key,
        params=params,
        geometry=geometry,
        attributes=ellipse_attributes(params),
    )


def assemble_result(
    features: Iterable[EllipseFeature],
    issues: Iterable[EllipseError] = (),
    status: RunStatus = RunStatus.COMPLETED,
) -> EllipseResult:
    """
    Collect features into the final result, preserving their order.

    Args:
        features: Ellipse features in group order
        issues: Non-fatal issues recorded during the run
        status: Completed or cancelled

    Returns:
        EllipseResult
    """
    result = EllipseResult(
        features=tuple(features),
        status=status,
        issues=tuple(issues),
    )
    logger.info(f"Assembled {len(result.features)} ellipses "
                f"(status={result.status.value}, issues={len(result.issues)})")
    return result
