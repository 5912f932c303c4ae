"""
Domain service: turn a moment matrix into a standard deviational ellipse.

The 2x2 symmetric matrix M = [[Sxx, Sxy], [Sxy, Syy]] is diagonalized in
closed form. Its eigenvalues are the variances along the principal axes,
the principal eigenvector gives the orientation, and the semi-axes are
those standard distances scaled by the deviation multiplier k.
"""
import math
import logging
from dataclasses import dataclass
from typing import Optional

from shapely.geometry import Polygon

from sde.config import settings
from sde.domain.ellipse import EllipseParams, MomentResult
from sde.utils.geometry import ellipse_polygon, normalize_axis_angle

logger = logging.getLogger(__name__)

ISOTROPY_RTOL = 1e-9
"""Relative eigenvalue gap under which dispersion is treated as circular"""

DEGENERATE_RTOL = 1e-12
"""Minor/major eigenvalue ratio under which the ellipse has zero area"""


def parse_ellipse_size(token: Optional[str] = None) -> float:
    """
    Select the deviation multiplier k from an ellipse size token.

    Selection is by substring: any token containing "2" selects 2, otherwise
    any token containing "3" selects 3, anything else selects 1. So
    "2_STANDARD_DEVIATION" and "2" both select k = 2.

    Args:
        token: Size token; None or blank uses the configured default

    Returns:
        Multiplier 1.0, 2.0 or 3.0
    """
    if token is None or not str(token).strip():
        token = settings.ellipse_default_size
    token = str(token)

    if "2" in token:
        return 2.0
    if "3" in token:
        return 3.0
    return 1.0


@dataclass(frozen=True)
class EigenDecomposition:
    """Eigen-solution of a symmetric 2x2 matrix, major axis first."""
    lambda1: float
    lambda2: float
    principal: tuple[float, float]
    minor: tuple[float, float]
    theta: float
    circular: bool
    degenerate: bool


def decompose(sxx: float, syy: float, sxy: float) -> EigenDecomposition:
    """
    Closed-form eigen-decomposition of [[sxx, sxy], [sxy, syy]].

    λ = (Sxx + Syy) / 2 ± sqrt(((Sxx - Syy) / 2)² + Sxy²)

    Circular dispersion (λ1 = λ2) has no defined orientation; θ = 0 is used.
    A vanishing λ2 is snapped to 0 and flagged degenerate.

    Args:
        sxx: Variance of x
        syy: Variance of y
        sxy: Covariance of x and y

    Returns:
        EigenDecomposition with λ1 >= λ2 >= 0 and θ in [0, π)
    """
    half_trace = (sxx + syy) / 2.0
    radius = math.hypot((sxx - syy) / 2.0, sxy)

    lambda1 = max(half_trace + radius, 0.0)
    lambda2 = max(half_trace - radius, 0.0)

    circular = radius <= ISOTROPY_RTOL * lambda1
    degenerate = lambda2 <= DEGENERATE_RTOL * lambda1
    if degenerate:
        lambda2 = 0.0

    if circular:
        vx, vy = 1.0, 0.0
    else:
        # Two equivalent forms of the null vector of (M - λ1 I); keep the better conditioned one
        ax, ay = lambda1 - syy, sxy
        bx, by = sxy, lambda1 - sxx
        vx, vy = (ax, ay) if math.hypot(ax, ay) >= math.hypot(bx, by) else (bx, by)
        norm = math.hypot(vx, vy)
        vx, vy = vx / norm, vy / norm

    theta = normalize_axis_angle(math.atan2(vy, vx))
    principal = (math.cos(theta), math.sin(theta))
    minor = (-principal[1], principal[0])

    return EigenDecomposition(
        lambda1=lambda1,
        lambda2=lambda2,
        principal=principal,
        minor=minor,
        theta=theta,
        circular=circular,
        degenerate=degenerate,
    )


class EllipseBuilder:
    """
    Builds ellipse parameters and polygons from group moments.

    Stateless apart from the number of boundary segments, so one builder
    can serve any number of groups, including from several threads.
    """

    def __init__(self, segments: Optional[int] = None):
        """
        Initialize the builder.

        Args:
            segments: Boundary vertices per ellipse (default from settings)
        """
        self.segments = segments if segments is not None else settings.ellipse_segments
        if self.segments < 4:
            raise ValueError(f"segments must be at least 4, got {self.segments}")

    def build_params(self, moments: MomentResult, std_deviations: float = 1.0) -> EllipseParams:
        """
        Diagonalize the moment matrix and scale the axes.

        Args:
            moments: Weighted moments of one group
            std_deviations: Deviation multiplier k

        Returns:
            EllipseParams centred on the weighted mean
        """
        eigen = decompose(moments.sxx, moments.syy, moments.sxy)

        semi_major = std_deviations * math.sqrt(eigen.lambda1)
        semi_minor = std_deviations * math.sqrt(eigen.lambda2)

        logger.debug(f"Group {moments.case_key!r}: λ1={eigen.lambda1:.4g}, λ2={eigen.lambda2:.4g}, "
                     f"θ={math.degrees(eigen.theta):.2f}°, a={semi_major:.4g}, b={semi_minor:.4g}")

        return EllipseParams(
            case_key=moments.case_key,
            center_x=moments.mean_x,
            center_y=moments.mean_y,
            theta=eigen.theta,
            semi_major=semi_major,
            semi_minor=semi_minor,
            std_deviations=std_deviations,
            eigenvalues=(eigen.lambda1, eigen.lambda2),
            eigenvectors=(eigen.principal, eigen.minor),
            total_weight=moments.total_weight,
            point_count=moments.point_count,
            degenerate=eigen.degenerate,
        )

    def materialize(self, params: EllipseParams) -> Polygon:
        """Ellipse boundary as a closed polygon of ``segments`` vertices."""
        return ellipse_polygon(
            center=(params.center_x, params.center_y),
            semi_major=params.semi_major,
            semi_minor=params.semi_minor,
            theta=params.theta,
            segments=self.segments,
        )
