"""
Domain service: weighted mean centre and second central moments of a group.
"""
import logging
import numpy as np

from sde.domain.ellipse import Group, MomentResult
from sde.domain.exceptions import InsufficientDataError

logger = logging.getLogger(__name__)

MIN_POINTS = 2


def estimate_moments(group: Group) -> MomentResult:
    """
    Compute the weighted centre and moment matrix of a group.

    Only points with positive weight contribute. The sums of squared and
    cross deviations are divided by the total weight W, i.e. the weighted
    population variance, so scaling every weight by a constant leaves the
    result unchanged.

    Args:
        group: Points of one case

    Returns:
        MomentResult with centre, Sxx, Syy, Sxy, W and N

    Raises:
        InsufficientDataError: If fewer than 2 points carry weight or W <= 0
    """
    if group.points:
        data = np.array([(p.x, p.y, p.weight) for p in group.points], dtype=float)
    else:
        data = np.empty((0, 3), dtype=float)

    data = data[data[:, 2] > 0]
    point_count = len(data)
    total_weight = float(data[:, 2].sum())

    if point_count < MIN_POINTS or total_weight <= 0:
        raise InsufficientDataError(
            f"Group {group.case_key!r} has {point_count} weighted points "
            f"(total weight {total_weight:g}); at least {MIN_POINTS} are required",
            case_key=group.case_key,
            point_count=point_count,
            total_weight=total_weight,
        )

    x, y, w = data[:, 0], data[:, 1], data[:, 2]

    mean_x = float(np.sum(w * x) / total_weight)
    mean_y = float(np.sum(w * y) / total_weight)

    dx = x - mean_x
    dy = y - mean_y

    sxx = float(np.sum(w * dx * dx) / total_weight)
    syy = float(np.sum(w * dy * dy) / total_weight)
    sxy = float(np.sum(w * dx * dy) / total_weight)

    logger.debug(f"Group {group.case_key!r}: N={point_count}, W={total_weight:g}, "
                 f"centre=({mean_x:.3f}, {mean_y:.3f}), "
                 f"Sxx={sxx:.4g}, Syy={syy:.4g}, Sxy={sxy:.4g}")

    return MomentResult(
        case_key=group.case_key,
        mean_x=mean_x,
        mean_y=mean_y,
        sxx=sxx,
        syy=syy,
        sxy=sxy,
        total_weight=total_weight,
        point_count=point_count,
    )
