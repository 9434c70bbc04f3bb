"""Tests for health endpoints."""

from fastapi.testclient import TestClient


def test_health_endpoint(test_client: TestClient) -> None:
    """Test the basic health endpoint."""
    response = test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data
    # Test settings select the stub, local and in-memory providers
    assert data["components"] == {
        "annotation": False,
        "llm": False,
        "storage": False,
        "job_store": False,
    }


def test_readiness_endpoint(test_client: TestClient) -> None:
    """Readiness reports each dependency of the analysis pipeline."""
    response = test_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["database"] is True
    assert set(data["components"]) == {"annotator", "llm", "blob_store"}
    assert all(data["components"].values())


def test_liveness_endpoint(test_client: TestClient) -> None:
    """Test the liveness check endpoint."""
    response = test_client.get("/health/live")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "alive"


def test_root_endpoint(test_client: TestClient) -> None:
    """Test the root endpoint."""
    response = test_client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Court Vision"
    assert "version" in data
    assert "docs" in data
