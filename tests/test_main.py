from fastapi.testclient import TestClient

from asms.main import app

client = TestClient(app)


def test_api_root():
    data = {"success": True, "service": "asms"}
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == data


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_unknown_route_returns_404():
    response = client.get("/api/v1/does-not-exist")
    assert response.status_code == 404
