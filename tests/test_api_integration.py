"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle.
"""
import math
import pytest
from unittest.mock import MagicMock

from sde.main import app
from sde.services.application.ellipse_service import EllipseService


ELLIPSES_PATH = "/api/v1/ellipses"


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        """Root endpoint should return healthy status."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        """Health endpoint should return healthy status."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


# ============================================================
# Ellipse Endpoint Tests
# ============================================================

class TestEllipsesEndpoint:
    """Tests for the ellipse computation endpoint."""

    def test_square_reference(self, test_client, make_geojson, square_points):
        """Square corners should return one unit-circle ellipse."""
        response = test_client.post(ELLIPSES_PATH, json={"features": make_geojson(square_points)})

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "FeatureCollection"
        assert data["status"] == "completed"
        assert data["ellipse_count"] == 1

        feature = data["features"][0]
        assert feature["geometry"]["type"] == "Polygon"
        ring = feature["geometry"]["coordinates"][0]
        assert len(ring) == 91
        assert ring[0] == ring[-1]

        props = feature["properties"]
        assert props["case_key"] is None
        assert props["center_x"] == pytest.approx(1.0)
        assert props["center_y"] == pytest.approx(1.0)
        assert props["semi_major"] == pytest.approx(1.0)
        assert props["area"] == pytest.approx(math.pi)

    def test_cases_and_weights(self, test_client, make_geojson, two_case_features):
        """Case and weight fields should produce one ellipse per case."""
        points, properties = two_case_features

        response = test_client.post(ELLIPSES_PATH, json={
            "features": make_geojson(points, properties),
            "ellipse_size": "2_STANDARD_DEVIATION",
            "weight_field": "w",
            "case_field": "case",
        })

        assert response.status_code == 200
        data = response.json()
        assert [f["properties"]["case_key"] for f in data["features"]] == ["A", "B"]
        assert all(f["properties"]["std_deviations"] == 2.0 for f in data["features"])

    def test_skipped_group_reported_as_warning(self, test_client, make_geojson):
        """A single-point case should be skipped and listed in warnings."""
        points = [(0, 0), (1, 0), (0, 1), (50, 50)]
        properties = [{"c": "A"}, {"c": "A"}, {"c": "A"}, {"c": "B"}]

        response = test_client.post(ELLIPSES_PATH, json={
            "features": make_geojson(points, properties),
            "case_field": "c",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["ellipse_count"] == 1
        assert any("'B'" in warning for warning in data["warnings"])

    def test_oversized_weight_treated_as_invalid(self, test_client, make_geojson):
        """A weight beyond float range should be excluded, not crash the request."""
        points = [(0, 0), (2, 0), (1, 3)]
        properties = [{"w": 1}, {"w": 1}, {"w": 10 ** 400}]

        response = test_client.post(ELLIPSES_PATH, json={
            "features": make_geojson(points, properties),
            "weight_field": "w",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["features"][0]["properties"]["point_count"] == 2
        assert any("invalid weight" in warning for warning in data["warnings"])

    def test_empty_features_rejected(self, test_client):
        """An empty collection should return 400."""
        response = test_client.post(ELLIPSES_PATH, json={
            "features": {"type": "FeatureCollection", "features": []},
        })

        assert response.status_code == 400

    def test_unknown_field_rejected(self, test_client, make_geojson, square_points):
        """An unknown weight field should return 400."""
        response = test_client.post(ELLIPSES_PATH, json={
            "features": make_geojson(square_points),
            "weight_field": "population",
        })

        assert response.status_code == 400
        assert "population" in response.json()["detail"]

    def test_insufficient_data_rejected(self, test_client, make_geojson):
        """A single point should return 422."""
        response = test_client.post(ELLIPSES_PATH, json={
            "features": make_geojson([(0, 0)]),
        })

        assert response.status_code == 422

    def test_invalid_body_rejected(self, test_client):
        """A malformed body should fail request validation."""
        response = test_client.post(ELLIPSES_PATH, json={"features": "not geojson"})

        assert response.status_code == 422

    def test_uses_injected_service(self, test_client, make_geojson, square_points):
        """The endpoint should delegate to the injected EllipseService."""
        from sde.api.dependencies import get_ellipse_service

        mock_service = MagicMock(spec=EllipseService)
        mock_service.compute.side_effect = EllipseService().compute
        app.dependency_overrides[get_ellipse_service] = lambda: mock_service

        try:
            response = test_client.post(ELLIPSES_PATH, json={
                "features": make_geojson(square_points),
                "ellipse_size": "3",
            })

            assert response.status_code == 200
            mock_service.compute.assert_called_once()
            assert mock_service.compute.call_args.kwargs["ellipse_size"] == "3"
        finally:
            app.dependency_overrides.clear()


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        """OpenAPI schema should be available."""
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        data = response.json()
        assert "openapi" in data
        assert ELLIPSES_PATH in data["paths"]

    def test_docs_endpoint_available(self, test_client):
        """Swagger docs should be available."""
        response = test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower() or "html" in response.headers.get("content-type", "")

    def test_rate_limit_documented_in_openapi(self, test_client):
        """Rate limit response should be documented in OpenAPI."""
        data = test_client.get("/openapi.json").json()

        assert "429" in data["paths"][ELLIPSES_PATH]["post"]["responses"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
