"""Tests for the HTTP API (FastAPI TestClient, SQLite under tmp_path)."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from commute_impact.adapters.storage import SQLStorage
from commute_impact.api import create_app
from commute_impact.config import (
    ApiConfig,
    AppConfig,
    ReferenceDataConfig,
    StorageConfig,
)
from commute_impact.container import Container
from commute_impact.domain.errors import (
    ConfigurationError,
    PersistenceError,
    UpstreamUnavailableError,
)
from commute_impact.domain.models import (
    GeoLocation,
    LocationInfo,
    PlacePrediction,
    RouteInfo,
)
from commute_impact.ports.recorder import CalculationRecorderPort
from commute_impact.ports.routing import RoutingPort
from commute_impact.services import CalculationService

DATA_DIR = Path(__file__).resolve().parents[1] / "data"

HATCHBACK_BODY = {
    "transportMode": "car",
    "vehicleTypeId": 1,
    "occupancy": 1,
    "distanceKm": 15,
    "travelPattern": "daily-commute",
    "origin": "T Nagar",
    "destination": "Guindy",
}


@pytest.fixture
def routing():
    return MagicMock()


@pytest.fixture
def container(tmp_path, routing):
    config = AppConfig(
        data=ReferenceDataConfig(data_dir=DATA_DIR),
        storage=StorageConfig(url=f"sqlite:///{tmp_path / 'api.db'}"),
        api=ApiConfig(admin_key="secret"),
    )
    container = Container.create_default(config)
    container.register(RoutingPort, lambda: routing)
    yield container
    container.resolve(SQLStorage).dispose()


@pytest.fixture
def client(container):
    return TestClient(create_app(container))


class TestCalculateImpact:
    def test_scores_and_records(self, client):
        response = client.post(
            "/api/calculate-impact",
            json=HATCHBACK_BODY,
            headers={"X-Session-Id": "abc"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["score"] == 79
        assert body["scoreBand"] == "poor"
        assert body["breakdown"]["rawScore"] == pytest.approx(78.975)
        assert body["monthlyCost"] == 4290
        assert body["confidence"]["level"] == "A"
        assert body["calculationId"] is not None
        assert body["sessionId"] == "abc"
        assert len(body["alternatives"]) == 4

    def test_generates_session_when_header_missing(self, client):
        response = client.post("/api/calculate-impact", json=HATCHBACK_BODY)

        assert response.status_code == 200
        session_id = response.headers["X-Session-Id"]
        assert session_id
        assert response.json()["sessionId"] == session_id

    def test_zero_distance_is_bad_request(self, client):
        response = client.post(
            "/api/calculate-impact", json={**HATCHBACK_BODY, "distanceKm": 0}
        )

        assert response.status_code == 400
        assert response.json()["field"] == "distance_km"

    def test_unknown_pattern_is_bad_request(self, client):
        response = client.post(
            "/api/calculate-impact", json={**HATCHBACK_BODY, "travelPattern": "often"}
        )
        assert response.status_code == 400

    def test_unknown_vehicle_is_not_found(self, client):
        response = client.post(
            "/api/calculate-impact", json={**HATCHBACK_BODY, "vehicleTypeId": 999}
        )
        assert response.status_code == 404

    def test_malformed_body_is_unprocessable(self, client):
        response = client.post(
            "/api/calculate-impact", json={**HATCHBACK_BODY, "distanceKm": "far"}
        )
        assert response.status_code == 422

    def test_route_lookup_failure_is_bad_gateway(self, client, routing):
        routing.route_info.side_effect = UpstreamUnavailableError(
            "timeout", service="directions", is_timeout=True
        )
        body = {k: v for k, v in HATCHBACK_BODY.items() if k != "distanceKm"}

        response = client.post("/api/calculate-impact", json=body)

        assert response.status_code == 502
        assert "try again" in response.json()["message"]

    def test_walking(self, client):
        response = client.post(
            "/api/calculate-impact",
            json={"transportMode": "walking", "distanceKm": 2, "travelPattern": "rare-trips"},
        )

        assert response.status_code == 200
        assert response.json()["score"] == 5
        assert response.json()["monthlyEmissions"] == 0


class TestHistoryAndStats:
    def test_calculations_for_session(self, client):
        for _ in range(2):
            client.post(
                "/api/calculate-impact",
                json=HATCHBACK_BODY,
                headers={"X-Session-Id": "mine"},
            )
        client.post(
            "/api/calculate-impact",
            json=HATCHBACK_BODY,
            headers={"X-Session-Id": "other"},
        )

        response = client.get("/api/calculations", headers={"X-Session-Id": "mine"})

        assert response.status_code == 200
        records = response.json()
        assert len(records) == 2
        assert {r["sessionId"] for r in records} == {"mine"}

    def test_calculations_require_session_header(self, client):
        assert client.get("/api/calculations").status_code == 400

    def test_homepage_stats(self, client):
        client.post("/api/calculate-impact", json=HATCHBACK_BODY)

        body = client.get("/api/stats/homepage").json()

        assert body == {
            "totalCalculations": 1,
            "totalCO2SavedKg": 94 * 12,
            "totalMoneySaved": 4290 * 12,
        }

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_reports_storage_failure(self, container):
        recorder = MagicMock()
        recorder.usage_stats.side_effect = PersistenceError("down", operation="usage_stats")
        container.register(CalculationRecorderPort, lambda: recorder)
        container.clear_singletons()
        client = TestClient(create_app(container))

        response = client.get("/api/health")

        assert response.status_code == 500
        assert response.json()["status"] == "unhealthy"
        assert isinstance(container.resolve(CalculationService).recorder, MagicMock)


class TestReferenceEndpoints:
    def test_vehicle_types_by_category(self, client):
        response = client.get("/api/vehicle-types", params={"category": "bike"})

        assert response.status_code == 200
        assert len(response.json()) == 7
        assert response.json()[0]["baseImpactScore"] == 25

    def test_vehicle_types_unknown_category(self, client):
        response = client.get("/api/vehicle-types", params={"category": "boat"})
        assert response.status_code == 400

    def test_travel_patterns(self, client):
        patterns = client.get("/api/travel-patterns").json()

        assert patterns[0] == {
            "id": "daily-commute",
            "timing": "both-peaks",
            "frequency": "daily",
        }


class TestMappingEndpoints:
    def test_geocode(self, client, routing):
        routing.geocode.return_value = LocationInfo(
            formatted_address="Guindy, Chennai",
            location=GeoLocation(13.0, 80.2),
            place_id="g",
        )

        response = client.post("/api/geocode", json={"address": "Guindy"})

        assert response.status_code == 200
        assert response.json()["lat"] == 13.0

    def test_geocode_not_found(self, client, routing):
        routing.geocode.return_value = None

        response = client.post("/api/geocode", json={"address": "Atlantis"})
        assert response.status_code == 404

    def test_geocode_requires_address(self, client):
        assert client.post("/api/geocode", json={"address": ""}).status_code == 422

    def test_route_info(self, client, routing):
        routing.route_info.return_value = RouteInfo(distance_km=12.4, duration_minutes=35)

        response = client.post(
            "/api/route-info", json={"origin": "T Nagar", "destination": "Guindy"}
        )

        assert response.json()["distanceKm"] == 12.4

    def test_autocomplete(self, client, routing):
        routing.autocomplete.return_value = [PlacePrediction("Adyar, Chennai", "p1")]

        response = client.get("/api/places/autocomplete", params={"input": "Ady"})

        assert response.json() == {
            "predictions": [{"description": "Adyar, Chennai", "placeId": "p1"}]
        }
        routing.autocomplete.assert_called_once_with("Ady")

    def test_missing_api_key_is_service_unavailable(self, client, routing):
        routing.autocomplete.side_effect = ConfigurationError(
            "no key", setting_name="CIC_ROUTING_API_KEY"
        )

        response = client.get("/api/places/autocomplete", params={"input": "Adyar"})
        assert response.status_code == 503


class TestAdmin:
    def test_clear_cache_requires_key(self, client):
        assert client.post("/api/admin/clear-cache").status_code == 403
        assert (
            client.post("/api/admin/clear-cache", headers={"X-Admin-Key": "nope"}).status_code
            == 403
        )

    def test_clear_cache(self, client, container):
        container.caches["geocode"].set("k", "v")

        response = client.post("/api/admin/clear-cache", headers={"X-Admin-Key": "secret"})

        assert response.status_code == 200
        assert response.json()["cleared"] == 1
        assert container.caches["geocode"].size() == 0
