"""
Domain service: standard deviational ellipse computation.

This module wires the pipeline stages together:
- Grouper: features -> case groups
- MomentEstimator: group -> weighted centre and moment matrix
- EllipseBuilder: moments -> orientation, scaled axes and polygon
- ResultAssembler: ellipses -> ordered result

Each run is described by an immutable ``SDEInvocation`` and executed by a
single-use ``EllipseComputation``.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol, Union

from sde.config import settings
from sde.domain.ellipse import EllipseFeature, EllipseResult, Group, RunStatus
from sde.domain.exceptions import (
    ComputationStateError,
    DegenerateGeometryError,
    EllipseError,
    InsufficientDataError,
    InvalidFieldError,
    MissingInputError,
)
from sde.infrastructure.feature_source import FeatureSource
from sde.services.domain.ellipse_builder import EllipseBuilder, parse_ellipse_size
from sde.services.domain.grouper import MissingWeightPolicy, group_points
from sde.services.domain.moment_estimator import estimate_moments
from sde.services.domain.result_assembler import assemble_result, make_feature

logger = logging.getLogger(__name__)

GroupOutcome = tuple[Optional[EllipseFeature], list[EllipseError]]


class ProgressListener(Protocol):
    """Receives coarse progress between pipeline steps."""

    def started(self) -> None:
        ...

    def set_task(self, task: str) -> None:
        ...

    def progress(self, percent: float) -> None:
        ...

    def complete(self) -> None:
        ...


class NullProgressListener:
    """Progress listener that ignores everything."""

    def started(self) -> None:
        pass

    def set_task(self, task: str) -> None:
        pass

    def progress(self, percent: float) -> None:
        pass

    def complete(self) -> None:
        pass


class LoggingProgressListener:
    """Progress listener that reports to a logger at DEBUG level."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.task = ""

    def started(self) -> None:
        self.log.debug("Ellipse computation started")

    def set_task(self, task: str) -> None:
        self.task = task
        self.log.debug(f"Task: {task}")

    def progress(self, percent: float) -> None:
        self.log.debug(f"{self.task or 'Progress'}: {percent:.0f}%")

    def complete(self) -> None:
        self.log.debug("Ellipse computation complete")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class SDEInvocation:
    """
    Inputs of one ellipse computation, captured at call time.

    Blank field names are normalized to None (not configured).
    """
    features: Optional[FeatureSource]
    ellipse_size: Optional[str] = None
    weight_field: Optional[str] = None
    case_field: Optional[str] = None
    missing_weight_policy: Union[MissingWeightPolicy, str] = MissingWeightPolicy.EXCLUDE
    segments: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "weight_field", _blank_to_none(self.weight_field))
        object.__setattr__(self, "case_field", _blank_to_none(self.case_field))
        object.__setattr__(
            self, "missing_weight_policy", MissingWeightPolicy(self.missing_weight_policy)
        )

    @property
    def std_deviations(self) -> float:
        return parse_ellipse_size(self.ellipse_size)


class ComputationState(str, Enum):
    """Lifecycle of an EllipseComputation."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EllipseComputation:
    """
    Single-use standard deviational ellipse computation.

    ``run()`` may be called exactly once; any further call, concurrent or
    after completion, raises ComputationStateError. Build a new computation
    (from the same or a new invocation) to compute again.
    """

    def __init__(
        self,
        invocation: SDEInvocation,
        is_cancelled: Optional[Callable[[], bool]] = None,
        progress: Optional[ProgressListener] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the computation.

        Args:
            invocation: Inputs of this run
            is_cancelled: Polled between groups; True stops the run early
            progress: Receives progress between pipeline steps
            max_workers: Threads used for independent groups (default from settings)
        """
        self.invocation = invocation
        self.is_cancelled = is_cancelled or (lambda: False)
        self.progress = progress or NullProgressListener()
        self.max_workers = max_workers if max_workers is not None else settings.ellipse_max_workers
        self.builder = EllipseBuilder(segments=invocation.segments)
        self._state = ComputationState.PENDING
        self._lock = threading.Lock()

    @property
    def state(self) -> ComputationState:
        return self._state

    def run(self) -> EllipseResult:
        """
        Compute one ellipse per valid case group.

        Returns:
            EllipseResult with features in first-appearance order of case keys,
            status ``cancelled`` if the cancellation check fired

        Raises:
            ComputationStateError: If this computation has already been run
            MissingInputError: If there is no input or no readable geometry
            InvalidFieldError: If a configured field is not in the input schema
            InsufficientDataError: If no group has enough data for an ellipse
        """
        with self._lock:
            if self._state is not ComputationState.PENDING:
                raise ComputationStateError(
                    f"Computation can only be run once (state: {self._state.value})"
                )
            self._state = ComputationState.RUNNING

        try:
            result = self._execute()
        except Exception:
            self._state = ComputationState.FAILED
            raise

        self._state = ComputationState.COMPLETED
        return result

    def _execute(self) -> EllipseResult:
        invocation = self.invocation
        self.progress.started()
        self.progress.set_task("Validating input")

        source = invocation.features
        if source is None or len(source) == 0:
            raise MissingInputError("Input features are required and must not be empty")

        self._validate_fields(source)
        std_deviations = invocation.std_deviations

        logger.info(f"Computing standard deviational ellipses for {len(source)} features "
                    f"(k={std_deviations:g}, weight_field={invocation.weight_field}, "
                    f"case_field={invocation.case_field})")

        self.progress.set_task("Grouping features")
        self.progress.progress(10.0)

        grouping = group_points(
            source,
            weight_field=invocation.weight_field,
            case_field=invocation.case_field,
            missing_weight_policy=invocation.missing_weight_policy,
        )
        issues: list[EllipseError] = list(grouping.issues)

        if grouping.point_count == 0:
            raise MissingInputError("No input feature has a readable geometry")

        self.progress.set_task("Computing ellipses")
        self.progress.progress(25.0)

        features: list[EllipseFeature] = []
        cancelled = False
        groups = grouping.groups
        outcomes = self._group_outcomes(groups, std_deviations)

        try:
            for index in range(len(groups)):
                if self.is_cancelled():
                    logger.info(f"Computation cancelled after {index}/{len(groups)} groups")
                    cancelled = True
                    break

                feature, group_issues = next(outcomes)
                issues.extend(group_issues)
                if feature is not None:
                    features.append(feature)

                self.progress.progress(25.0 + 65.0 * (index + 1) / len(groups))
        finally:
            outcomes.close()

        if not features and not cancelled:
            raise InsufficientDataError(
                f"All {len(groups)} groups have insufficient data for an ellipse",
                point_count=grouping.point_count,
            )

        self.progress.set_task("Assembling result")
        self.progress.progress(90.0)

        result = assemble_result(
            features,
            issues,
            RunStatus.CANCELLED if cancelled else RunStatus.COMPLETED,
        )
        self.progress.complete()
        return result

    def _validate_fields(self, source: FeatureSource) -> None:
        available = list(source.field_names)
        for role, name in (
            ("Weight", self.invocation.weight_field),
            ("Case", self.invocation.case_field),
        ):
            if name is not None and name not in available:
                raise InvalidFieldError(name, role, available)

    def _group_outcomes(self, groups: tuple[Group, ...], std_deviations: float) -> Iterator[GroupOutcome]:
        """Yield one outcome per group, in group order."""
        if self.max_workers <= 1 or len(groups) <= 1:
            for group in groups:
                yield self._compute_group(group, std_deviations)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._compute_group, group, std_deviations)
                for group in groups
            ]
            try:
                for future in futures:
                    yield future.result()
            finally:
                for future in futures:
                    future.cancel()

    def _compute_group(self, group: Group, std_deviations: float) -> GroupOutcome:
        try:
            moments = estimate_moments(group)
        except InsufficientDataError as e:
            logger.warning(f"Skipping group: {e.message}")
            return None, [e]

        params = self.builder.build_params(moments, std_deviations)
        geometry = self.builder.materialize(params)

        group_issues: list[EllipseError] = []
        if params.degenerate:
            issue = DegenerateGeometryError(
                f"Group {group.case_key!r} produced a zero-area ellipse "
                f"(a={params.semi_major:.4g}, b={params.semi_minor:.4g})",
                case_key=group.case_key,
            )
            logger.warning(issue.message)
            group_issues.append(issue)

        return make_feature(params, geometry), group_issues
