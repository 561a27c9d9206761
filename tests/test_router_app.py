"""HTTP surface of the service router."""

import pytest
from fastapi.testclient import TestClient
from conftest import COLLECTION_ID

from containers.router.router_app import app, get_router, parse_accept_header
from pipeline import DataServiceRouter


@pytest.fixture
def client(three_services):
    app.dependency_overrides[get_router] = lambda: DataServiceRouter(services=three_services)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health", headers={"X-Request-ID": "req_test"})
    assert response.status_code == 200
    assert response.json()["request_id"] == "req_test"
    assert response.json()["status"] == "healthy"


def test_lists_services_in_priority_order(client):
    response = client.get("/services")
    names = [service["name"] for service in response.json()["services"]]
    assert names == ["first-service", "second-service", "third-service"]


def test_match_with_explicit_format(client):
    response = client.post("/match", json={
        "sources": [{"collection": COLLECTION_ID}],
        "output_format": "image/png",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["service"] == "second-service"
    assert body["service_type"] == "http"
    assert body["output_format"] == "image/png"
    assert body["message"] is None


def test_match_uses_accept_header(client):
    response = client.post(
        "/match",
        json={"sources": [{"collection": COLLECTION_ID}]},
        headers={"Accept": "image/gif;q=0.5, image/png"},
    )
    assert response.json()["service"] == "second-service"


def test_best_effort_match_reports_warning(client):
    response = client.post("/match", json={
        "sources": [{"collection": COLLECTION_ID}],
        "bounding_rectangle": [0, 0, 10, 10],
        "output_format": "application/x-netcdf4",
    })
    body = response.json()
    assert body["service"] == "first-service"
    assert body["message"] == "Data in output files may extend outside the spatial bounds you requested."


def test_no_match_returns_download_link_message(client):
    response = client.post("/match", json={
        "sources": [{"collection": "C999-UNKNOWN"}],
    })
    body = response.json()
    assert body["service"] == "noOpService"
    assert body["message"] == "Returning direct download links because no operations can be performed on C999-UNKNOWN."


def test_invalid_bounding_rectangle_is_rejected(client):
    response = client.post("/match", json={
        "sources": [{"collection": COLLECTION_ID}],
        "bounding_rectangle": [0, 0, 10],
    })
    assert response.status_code == 422


def test_blank_collection_is_rejected(client):
    response = client.post("/match", json={"sources": [{"collection": "   "}]})
    assert response.status_code == 400


def test_parse_accept_header_orders_by_quality():
    assert parse_accept_header("image/gif;q=0.5, image/png, */*;q=0.1") == ["image/png", "image/gif", "*/*"]
    assert parse_accept_header("text/csv;q=0") == []
    assert parse_accept_header(None) == []
