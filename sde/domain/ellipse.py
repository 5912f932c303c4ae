"""
Value objects passed between the stages of the ellipse pipeline.

Grouper -> MomentEstimator -> EllipseBuilder -> ResultAssembler
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable, Optional

from shapely.geometry import Polygon

from sde.domain.exceptions import EllipseError


class _NoCase:
    """Key of the single implicit group used when no case field is configured."""

    _instance: Optional["_NoCase"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_CASE"

    def __reduce__(self):
        return (_NoCase, ())


NO_CASE = _NoCase()


@dataclass(frozen=True)
class WeightedPoint:
    """A point read from a feature geometry, with its mass."""
    x: float
    y: float
    weight: float = 1.0


@dataclass(frozen=True)
class Group:
    """Points sharing one case key, in input order."""
    case_key: Hashable
    points: tuple[WeightedPoint, ...]

    @property
    def size(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class MomentResult:
    """Weighted centre and second central moments of a group (divided by W)."""
    case_key: Hashable
    mean_x: float
    mean_y: float
    sxx: float
    syy: float
    sxy: float
    total_weight: float
    point_count: int

    @property
    def matrix(self) -> tuple[tuple[float, float], tuple[float, float]]:
        return ((self.sxx, self.sxy), (self.sxy, self.syy))


@dataclass(frozen=True)
class EllipseParams:
    """Orientation and scaled axes of one standard deviational ellipse."""
    case_key: Hashable
    center_x: float
    center_y: float
    theta: float
    semi_major: float
    semi_minor: float
    std_deviations: float
    eigenvalues: tuple[float, float]
    eigenvectors: tuple[tuple[float, float], tuple[float, float]]
    total_weight: float
    point_count: int
    degenerate: bool = False

    @property
    def sigma_major(self) -> float:
        """Standard distance along the major axis (unscaled by k)."""
        return self.eigenvalues[0] ** 0.5

    @property
    def sigma_minor(self) -> float:
        return self.eigenvalues[1] ** 0.5


@dataclass(frozen=True)
class EllipseFeature:
    """Ellipse polygon plus its summary attributes, one per valid group."""
    case_key: Hashable
    params: EllipseParams
    geometry: Polygon
    attributes: dict[str, Any] = field(default_factory=dict)


class RunStatus(str, Enum):
    """Terminal status of a computation run."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class EllipseResult:
    """Ordered ellipse features produced by one run, with recorded issues."""
    features: tuple[EllipseFeature, ...]
    status: RunStatus = RunStatus.COMPLETED
    issues: tuple[EllipseError, ...] = ()

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)
