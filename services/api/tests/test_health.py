"""Tests for health check and index endpoints."""

from fastapi import status


def test_health_check(client):
    """Test health check does not need the stores."""
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["status"] == "ok"
    assert data["timestamp"].endswith("Z")
    assert data["warehouse_url"].startswith("http")


def test_api_index(client):
    """Test API index lists the endpoints."""
    response = client.get("/api")

    assert response.status_code == status.HTTP_200_OK
    endpoints = response.json()["endpoints"]

    assert "GET /api/monthly" in endpoints
    assert "POST /api/sync-now" in endpoints
    assert "GET /api/diagnostics" in endpoints


def test_metrics_endpoint(client):
    """Test Prometheus metrics endpoint."""
    client.get("/api/monthly")
    response = client.get("/metrics")

    assert response.status_code == status.HTTP_200_OK
    assert "text/plain" in response.headers["content-type"]

    content = response.text
    assert "weather_api_requests_total" in content
    assert "weather_api_cache_reads_total" in content


def test_request_id_header(client):
    """Test middleware tags API responses."""
    response = client.get("/api")

    assert "X-Request-ID" in response.headers
    assert response.headers["X-Response-Time"].endswith("s")


def test_request_id_is_propagated(client):
    """Test a caller-supplied request ID is echoed back."""
    response = client.get("/api", headers={"X-Request-ID": "dag-run-42"})

    assert response.headers["X-Request-ID"] == "dag-run-42"


def test_metrics_label_by_route_template(client):
    """Test requests for different cities share one metrics series."""
    client.get("/api/monthly", params={"city": "Stockton"})
    client.get("/api/monthly", params={"city": "Lodi"})

    content = client.get("/metrics").text

    assert 'method="GET",endpoint="/api/monthly",status="200"' in content
    assert "city=" not in content


def test_unknown_path_uses_fixed_label(client):
    """Test unmatched paths do not create a series per path."""
    client.get("/api/no-such-endpoint-123")

    content = client.get("/metrics").text

    assert "no-such-endpoint-123" not in content
    assert 'endpoint="unmatched"' in content
