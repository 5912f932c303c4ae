"""
Domain models for input features.

These models represent GeoJSON-shaped point data and should be independent
of any infrastructure concerns (HTTP, storage, etc.).
"""
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator


class InputFeature(BaseModel):
    """A single GeoJSON feature with arbitrary attribute properties."""
    type: Literal["Feature"] = "Feature"
    id: Optional[Union[int, str]] = None
    geometry: Optional[Dict[str, Any]] = Field(
        default=None,
        description="GeoJSON geometry object; non-point geometries contribute their centroid"
    )
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        # GeoJSON allows "properties": null
        return {} if value is None else value


class InputFeatureCollection(BaseModel):
    """GeoJSON feature collection of input features."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[InputFeature] = Field(default_factory=list)
