"""
Domain errors for standard deviational ellipse computation.

Fatal errors are raised out of a computation run. Non-fatal ones are
instantiated and recorded on the result's ``issues`` list instead.
"""
from typing import Any, Hashable, Optional


class EllipseError(Exception):
    """Base class for all ellipse computation errors."""

    def __init__(
        self,
        message: str,
        case_key: Optional[Hashable] = None,
        feature_id: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.case_key = case_key
        self.feature_id = feature_id


class MissingInputError(EllipseError):
    """Input feature collection is absent, empty or has no readable geometry."""
    pass


class InvalidFieldError(EllipseError):
    """A configured weight or case field does not exist on the input schema."""

    def __init__(self, field_name: str, role: str, available: list[str]):
        super().__init__(
            f"{role} field '{field_name}' not found in input schema "
            f"(available: {', '.join(available) or 'none'})"
        )
        self.field_name = field_name
        self.role = role


class InsufficientDataError(EllipseError):
    """A group has fewer than two weighted points or no positive total weight."""

    def __init__(
        self,
        message: str,
        case_key: Optional[Hashable] = None,
        point_count: int = 0,
        total_weight: float = 0.0,
    ):
        super().__init__(message, case_key=case_key)
        self.point_count = point_count
        self.total_weight = total_weight


class DegenerateGeometryError(EllipseError):
    """Recorded when a group yields a zero-area ellipse (collinear or identical points)."""
    pass


class UnreadableGeometryError(EllipseError):
    """Recorded when a feature has a null, empty or unparseable geometry."""
    pass


class InvalidWeightError(EllipseError):
    """Recorded when a feature's weight value is missing, non-numeric or negative."""
    pass


class ComputationStateError(EllipseError, RuntimeError):
    """A computation instance was run more than once."""
    pass
