"""
API request models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field

from sde.domain.models import InputFeatureCollection


class EllipseRequest(BaseModel):
    """Request body for the standard deviational ellipse endpoint."""
    features: InputFeatureCollection = Field(
        description="GeoJSON FeatureCollection of input features (planar coordinates)"
    )
    ellipse_size: Optional[str] = Field(
        default=None,
        description="Size token: contains '2' or '3' for 2 or 3 standard deviations, otherwise 1",
        examples=["1_STANDARD_DEVIATION", "2_STANDARD_DEVIATION", "3"],
    )
    weight_field: Optional[str] = Field(
        default=None,
        description="Optional property used as point weight"
    )
    case_field: Optional[str] = Field(
        default=None,
        description="Optional property used to compute one ellipse per distinct value"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "features": {
                    "type": "FeatureCollection",
                    "features": [
                        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0, 0]},
                         "properties": {"crime": "burglary", "count": 2}},
                        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [2, 0]},
                         "properties": {"crime": "burglary", "count": 1}},
                        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0, 2]},
                         "properties": {"crime": "burglary", "count": 1}},
                    ]
                },
                "ellipse_size": "1_STANDARD_DEVIATION",
                "weight_field": "count",
                "case_field": "crime",
            }
        }
