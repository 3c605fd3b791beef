"""
Tests for the health and metrics endpoints.
"""
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sfbridge.adapters.memory import InMemoryPublisher
from sfbridge.api import create_app
from sfbridge.health import HealthChecker
from sfbridge.metrics import Metrics


def _client(publisher=None, metrics=None):
    metrics = metrics or Metrics()
    return TestClient(create_app(metrics, HealthChecker(publisher or InMemoryPublisher())))


def test_health_liveness():
    """Test liveness health check."""
    r = _client().get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["service"] == "sfbridge"
    assert data["version"] == "0.1.0"
    assert data["timestamp"].endswith("Z")


def test_health_readiness():
    """Test readiness health check."""
    r = _client().get("/health/ready")
    # Should be 200 (ready) or 503 (not ready) depending on host resources
    assert r.status_code in [200, 503]
    data = r.json()
    assert data["service"] == "sfbridge"
    assert data["checks"]["broker"]["status"] == "ok"
    assert "disk_space" in data["checks"]
    assert "memory" in data["checks"]


def test_health_readiness_broker_down():
    """Test readiness fails when the broker is unreachable."""
    publisher = InMemoryPublisher()
    publisher.health_check = AsyncMock(return_value=False)

    r = _client(publisher).get("/health/ready")

    assert r.status_code == 503
    data = r.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["broker"]["status"] == "error"


def test_metrics_endpoint():
    """Test Prometheus metrics endpoint."""
    metrics = Metrics()
    metrics.record_received("/event/Monitoring_Event__e")
    metrics.record_forwarded("salesforce_events", 0.01)

    r = _client(metrics=metrics).get("/metrics")

    assert r.status_code == 200
    content = r.text
    assert "app_up" in content
    assert "sfbridge_events_received_total" in content
    assert "sfbridge_events_forwarded_total" in content
    assert "sfbridge_publish_duration_seconds" in content


@pytest.mark.asyncio
async def test_readiness_without_publisher():
    """Test readiness skips the broker check when nothing is attached."""
    checker = HealthChecker()
    result = await checker.readiness()
    assert result["checks"]["broker"]["status"] == "skipped"


@pytest.mark.asyncio
async def test_liveness_async_client():
    transport = ASGITransport(app=create_app(Metrics(), HealthChecker()))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
