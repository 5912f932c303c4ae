"""
Application service: Orchestration layer for ellipse requests.
"""
import logging
from typing import Any, Callable, Optional, Union

from sde.config import settings
from sde.domain.ellipse import EllipseResult
from sde.domain.models import InputFeatureCollection
from sde.infrastructure.feature_source import FeatureSource, GeoJSONFeatureSource
from sde.services.domain.grouper import MissingWeightPolicy
from sde.services.domain.sde_computation import (
    EllipseComputation,
    LoggingProgressListener,
    ProgressListener,
    SDEInvocation,
)

logger = logging.getLogger(__name__)

FeatureInput = Union[FeatureSource, InputFeatureCollection, dict[str, Any], None]


def as_feature_source(features: FeatureInput) -> Optional[FeatureSource]:
    """
    Adapt supported input shapes to a FeatureSource.

    Args:
        features: A FeatureSource, a parsed GeoJSON collection, or a GeoJSON mapping

    Returns:
        FeatureSource, or None when no input was given
    """
    if features is None:
        return None
    if isinstance(features, InputFeatureCollection):
        return GeoJSONFeatureSource(features)
    if isinstance(features, dict):
        return GeoJSONFeatureSource.from_geojson(features)
    return features


class EllipseService:
    """
    Application service for standard deviational ellipse requests.

    Holds only defaults; every call captures its inputs in a fresh
    SDEInvocation and runs a fresh EllipseComputation, so one service
    instance can be shared between requests.
    """

    def __init__(
        self,
        segments: Optional[int] = None,
        missing_weight_policy: Union[MissingWeightPolicy, str, None] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the service with computation defaults.

        Args:
            segments: Boundary vertices per ellipse (default from settings)
            missing_weight_policy: Policy for invalid weights (default from settings)
            max_workers: Threads for independent groups (default from settings)
        """
        self.segments = segments if segments is not None else settings.ellipse_segments
        self.missing_weight_policy = MissingWeightPolicy(
            missing_weight_policy or settings.ellipse_missing_weight_policy
        )
        self.max_workers = max_workers if max_workers is not None else settings.ellipse_max_workers

    def compute(
        self,
        features: FeatureInput,
        ellipse_size: Optional[str] = None,
        weight_field: Optional[str] = None,
        case_field: Optional[str] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
        progress: Optional[ProgressListener] = None,
    ) -> EllipseResult:
        """
        Compute standard deviational ellipses for a feature collection.

        Args:
            features: Input features (FeatureSource or GeoJSON)
            ellipse_size: Size token selecting 1, 2 or 3 standard deviations
            weight_field: Optional attribute used as point weight
            case_field: Optional attribute used to group points
            is_cancelled: Optional cancellation check, polled between groups
            progress: Optional progress listener

        Returns:
            EllipseResult

        Raises:
            MissingInputError: If features are absent or unreadable
            InvalidFieldError: If a configured field does not exist
            InsufficientDataError: If no group can produce an ellipse
        """
        invocation = SDEInvocation(
            features=as_feature_source(features),
            ellipse_size=ellipse_size or settings.ellipse_default_size,
            weight_field=weight_field,
            case_field=case_field,
            missing_weight_policy=self.missing_weight_policy,
            segments=self.segments,
        )

        computation = EllipseComputation(
            invocation,
            is_cancelled=is_cancelled,
            progress=progress or LoggingProgressListener(logger),
            max_workers=self.max_workers,
        )
        return computation.run()


def standard_deviational_ellipses(
    features: FeatureInput,
    ellipse_size: Optional[str] = None,
    weight_field: Optional[str] = None,
    case_field: Optional[str] = None,
    **options: Any,
) -> EllipseResult:
    """
    Convenience wrapper: compute ellipses with a one-off EllipseService.

    Extra keyword options are passed to EllipseService.
    """
    service = EllipseService(**options)
    return service.compute(
        features,
        ellipse_size=ellipse_size,
        weight_field=weight_field,
        case_field=case_field,
    )
