"""
Unit tests for the GeoJSON feature source backend.

Tests cover:
- Attribute access as weights and group keys
- Geometry locations (points, centroids, unreadable geometries)
- Field schema discovery
"""
import pytest

from sde.domain.models import InputFeature, InputFeatureCollection
from sde.infrastructure.feature_source import (
    AttributeSource,
    FeatureSource,
    GeoJSONFeature,
    GeoJSONFeatureSource,
    coerce_group_key,
    coerce_numeric,
)


def feature(geometry=None, **properties) -> GeoJSONFeature:
    return GeoJSONFeature(InputFeature(geometry=geometry, properties=properties), index=0)


# ============================================================
# Attribute Access Tests
# ============================================================

class TestAttributeAccess:
    """Tests for reading attributes through the AttributeSource capability."""

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        (2.5, 2.5),
        ("4.25", 4.25),
        (" 7 ", 7.0),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        ([1, 2], None),
        (10 ** 400, None),
    ])
    def test_coerce_numeric(self, value, expected):
        """Only finite numbers and numeric strings should be numeric."""
        assert coerce_numeric(value) == expected

    def test_coerce_group_key_unhashable(self):
        """Unhashable values should be keyed by their string form."""
        assert coerce_group_key([1, 2]) == "[1, 2]"
        assert coerce_group_key("A") == "A"
        assert coerce_group_key(None) is None

    def test_numeric_value_of(self):
        """numeric_value_of should read and coerce a property."""
        f = feature(weight="12", label="x")

        assert f.numeric_value_of("weight") == 12.0
        assert f.numeric_value_of("label") is None
        assert f.numeric_value_of("absent") is None

    def test_group_key_of(self):
        """group_key_of should return the raw hashable property value."""
        f = feature(district=7)

        assert f.group_key_of("district") == 7
        assert f.group_key_of("absent") is None

    def test_satisfies_protocols(self, make_source, square_points):
        """Backend classes should satisfy the capability protocols."""
        source = make_source(square_points)

        assert isinstance(source, FeatureSource)
        assert all(isinstance(f, AttributeSource) for f in source)


# ============================================================
# Geometry Location Tests
# ============================================================

class TestLocation:
    """Tests for feature locations."""

    def test_point_location(self):
        """Point geometries should give their own coordinate."""
        f = feature({"type": "Point", "coordinates": [3.5, -2.0]})

        assert f.location() == (3.5, -2.0)

    def test_polygon_centroid(self):
        """Polygon geometries should give their centroid."""
        f = feature({"type": "Polygon", "coordinates": [[[0, 0], [4, 0], [4, 2], [0, 2], [0, 0]]]})

        assert f.location() == pytest.approx((2.0, 1.0))

    def test_multipoint_centroid(self):
        """Multi-point geometries should give their centroid."""
        f = feature({"type": "MultiPoint", "coordinates": [[0, 0], [2, 4]]})

        assert f.location() == pytest.approx((1.0, 2.0))

    @pytest.mark.parametrize("geometry", [
        None,
        {},
        {"type": "Point", "coordinates": []},
        {"type": "Blob", "coordinates": [1, 2]},
        {"coordinates": [1, 2]},
    ])
    def test_unreadable_geometry(self, geometry):
        """Null, empty or unparseable geometries should give None."""
        assert feature(geometry).location() is None


# ============================================================
# Feature Source Tests
# ============================================================

class TestGeoJSONFeatureSource:
    """Tests for the collection-level backend."""

    def test_field_names_union_in_order(self):
        """field_names should be the union of properties in first-seen order."""
        source = GeoJSONFeatureSource.from_geojson({
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "geometry": None, "properties": {"b": 1, "a": 2}},
                {"type": "Feature", "geometry": None, "properties": {"c": 3, "a": 4}},
                {"type": "Feature", "geometry": None, "properties": None},
            ],
        })

        assert source.field_names == ["b", "a", "c"]
        assert len(source) == 3

    def test_feature_ids(self):
        """Features should use their GeoJSON id, or their index when absent."""
        collection = InputFeatureCollection(features=[
            InputFeature(id="first"),
            InputFeature(),
        ])

        ids = [f.feature_id for f in GeoJSONFeatureSource(collection)]

        assert ids == ["first", 1]

    def test_reiterable(self, make_source, square_points):
        """A source should be iterable more than once."""
        source = make_source(square_points)

        assert len(list(source)) == len(list(source)) == 4
