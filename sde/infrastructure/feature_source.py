"""
Infrastructure layer: feature collection backends.

The ellipse pipeline only sees features through the ``AttributeSource``
capability (numeric values and group keys by field name) plus a planar
location. Each concrete feature representation provides an adapter.
"""
import math
import logging
from typing import Any, Hashable, Iterator, Optional, Protocol, Sequence, runtime_checkable

from shapely.geometry import shape
from shapely.errors import ShapelyError

from sde.domain.models import InputFeature, InputFeatureCollection
from sde.utils.geometry import representative_xy

logger = logging.getLogger(__name__)


@runtime_checkable
class AttributeSource(Protocol):
    """Read a named attribute either as a weight or as a grouping key."""

    def numeric_value_of(self, name: str) -> Optional[float]:
        ...

    def group_key_of(self, name: str) -> Optional[Hashable]:
        ...


@runtime_checkable
class SpatialFeature(AttributeSource, Protocol):
    """A feature with an identifier and a planar (x, y) location."""

    @property
    def feature_id(self) -> Any:
        ...

    def location(self) -> Optional[tuple[float, float]]:
        ...


@runtime_checkable
class FeatureSource(Protocol):
    """A sized, re-iterable collection of spatial features with a field schema."""

    @property
    def field_names(self) -> Sequence[str]:
        ...

    def __len__(self) -> int:
        ...

    def __iter__(self) -> Iterator[SpatialFeature]:
        ...


def coerce_numeric(value: Any) -> Optional[float]:
    """
    Convert an attribute value to a finite float.

    Numbers and numeric strings are accepted. Booleans, blanks, non-numeric
    strings, non-finite values and integers beyond float range yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_group_key(value: Any) -> Optional[Hashable]:
    """Return the value as a hashable key; unhashable values use their string form."""
    if value is None:
        return None
    try:
        hash(value)
    except TypeError:
        return str(value)
    return value


class GeoJSONFeature:
    """Adapter exposing an ``InputFeature`` as a ``SpatialFeature``."""

    def __init__(self, feature: InputFeature, index: int):
        self._feature = feature
        self._index = index

    @property
    def feature_id(self) -> Any:
        return self._feature.id if self._feature.id is not None else self._index

    def numeric_value_of(self, name: str) -> Optional[float]:
        return coerce_numeric(self._feature.properties.get(name))

    def group_key_of(self, name: str) -> Optional[Hashable]:
        return coerce_group_key(self._feature.properties.get(name))

    def location(self) -> Optional[tuple[float, float]]:
        """
        Planar location of the feature.

        Points give their own coordinate, other geometries their centroid.
        Returns None for null, empty or unparseable geometries.
        """
        if not self._feature.geometry:
            return None
        try:
            geometry = shape(self._feature.geometry)
        except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.debug(f"Feature {self.feature_id}: cannot parse geometry ({e})")
            return None
        return representative_xy(geometry)


class GeoJSONFeatureSource:
    """``FeatureSource`` backed by a GeoJSON ``InputFeatureCollection``."""

    def __init__(self, collection: InputFeatureCollection):
        self._collection = collection
        self._features = [
            GeoJSONFeature(feature, index)
            for index, feature in enumerate(collection.features)
        ]

    @classmethod
    def from_geojson(cls, data: dict[str, Any]) -> "GeoJSONFeatureSource":
        """Build a source from a GeoJSON FeatureCollection mapping."""
        return cls(InputFeatureCollection.model_validate(data))

    @property
    def field_names(self) -> list[str]:
        """Union of property names across all features, in first-seen order."""
        names: dict[str, None] = {}
        for feature in self._collection.features:
            for name in feature.properties:
                names.setdefault(name, None)
        return list(names)

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[GeoJSONFeature]:
        return iter(self._features)
