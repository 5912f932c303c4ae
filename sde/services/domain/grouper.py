"""
Domain service: partition input features into independent case groups.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional
import logging

from sde.domain.ellipse import NO_CASE, Group, WeightedPoint
from sde.domain.exceptions import EllipseError, InvalidWeightError, UnreadableGeometryError
from sde.infrastructure.feature_source import FeatureSource

logger = logging.getLogger(__name__)


class MissingWeightPolicy(str, Enum):
    """Weight assigned when a feature's weight value is missing or invalid."""

    EXCLUDE = "exclude"
    """Weight 0: the point stays in its group but carries no mass"""

    DEFAULT = "default"
    """Weight 1.0: the point counts as if no weight field were configured"""

    @property
    def fallback_weight(self) -> float:
        return 0.0 if self is MissingWeightPolicy.EXCLUDE else 1.0


@dataclass(frozen=True)
class GroupingResult:
    """Groups in first-appearance order plus per-feature issues."""
    groups: tuple[Group, ...]
    issues: tuple[EllipseError, ...]
    point_count: int


def group_points(
    source: FeatureSource,
    weight_field: Optional[str] = None,
    case_field: Optional[str] = None,
    missing_weight_policy: MissingWeightPolicy = MissingWeightPolicy.EXCLUDE,
) -> GroupingResult:
    """
    Read weighted points from a feature source and group them by case key.

    Groups are emitted in the order each case key first appears. Without a
    case field every point lands in a single group keyed ``NO_CASE``.
    Features without a readable geometry are skipped; invalid weights fall
    back to the policy weight. Both are recorded as issues.

    Args:
        source: Feature collection to read
        weight_field: Optional attribute supplying each point's weight
        case_field: Optional attribute supplying each point's case key
        missing_weight_policy: Weight used for missing/non-numeric/negative values

    Returns:
        GroupingResult with groups, issues and the number of points read
    """
    # Keyed by (type, value) so that JSON true, 1 and 1.0 stay distinct cases
    buckets: dict[tuple[type, Hashable], tuple[Hashable, list[WeightedPoint]]] = {}
    issues: list[EllipseError] = []
    point_count = 0

    for feature in source:
        location = feature.location()
        case_key = feature.group_key_of(case_field) if case_field else NO_CASE

        if location is None:
            issue = UnreadableGeometryError(
                f"Feature {feature.feature_id} has no readable geometry; skipped",
                case_key=case_key,
                feature_id=feature.feature_id,
            )
            logger.warning(issue.message)
            issues.append(issue)
            continue

        weight = 1.0
        if weight_field:
            value = feature.numeric_value_of(weight_field)
            if value is None or value < 0:
                weight = missing_weight_policy.fallback_weight
                issue = InvalidWeightError(
                    f"Feature {feature.feature_id} has invalid weight in '{weight_field}'; "
                    f"using {weight}",
                    case_key=case_key,
                    feature_id=feature.feature_id,
                )
                logger.warning(issue.message)
                issues.append(issue)
            else:
                weight = value

        x, y = location
        _, points = buckets.setdefault((type(case_key), case_key), (case_key, []))
        points.append(WeightedPoint(x=x, y=y, weight=weight))
        point_count += 1

    groups = tuple(Group(case_key=key, points=tuple(points)) for key, points in buckets.values())

    logger.debug(f"Grouped {point_count} points into {len(groups)} groups "
                 f"({len(issues)} issues)")

    return GroupingResult(groups=groups, issues=tuple(issues), point_count=point_count)
