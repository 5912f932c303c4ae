"""
API response models using Pydantic.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class EllipseProperties(BaseModel):
    """Summary attributes of one ellipse."""
    case_key: Optional[Any] = Field(
        default=None,
        description="Case field value of the group (null when no case field was given)"
    )
    center_x: float = Field(description="Weighted mean x")
    center_y: float = Field(description="Weighted mean y")
    semi_major: float = Field(description="Semi-major axis length")
    semi_minor: float = Field(description="Semi-minor axis length")
    rotation_rad: float = Field(description="Major axis angle from the x-axis, counter-clockwise, radians")
    rotation_deg: float = Field(description="Major axis angle from the x-axis, counter-clockwise, degrees")
    azimuth_deg: float = Field(description="Major axis angle from north, clockwise, degrees")
    area: float = Field(description="Ellipse area (π·a·b)")
    sigma_major: float = Field(description="Standard distance along the major axis")
    sigma_minor: float = Field(description="Standard distance along the minor axis")
    std_deviations: float = Field(description="Deviation multiplier used")
    point_count: int = Field(description="Number of weighted points in the group")
    total_weight: float = Field(description="Sum of point weights in the group")
    degenerate: bool = Field(description="True when the ellipse has zero area")


class EllipseFeatureModel(BaseModel):
    """GeoJSON feature for one ellipse."""
    type: Literal["Feature"] = "Feature"
    geometry: Dict[str, Any] = Field(description="GeoJSON Polygon of the ellipse boundary")
    properties: EllipseProperties


class EllipsesResponse(BaseModel):
    """Response model for the ellipse endpoint."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    status: str = Field(description="'completed' or 'cancelled'")
    ellipse_count: int = Field(description="Number of ellipses returned")
    features: List[EllipseFeatureModel] = Field(
        description="One ellipse per valid case group, in first-appearance order"
    )
    warnings: List[str] = Field(
        default_factory=list,
        description="Non-fatal issues (skipped features or groups, degenerate ellipses)"
    )
