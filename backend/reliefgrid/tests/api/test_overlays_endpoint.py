import pytest


def test_overlays_empty_by_default(api_client):
    response = api_client.get("/api/overlays")
    assert response.status_code == 200
    body = response.json()
    assert body == {"shelters": [], "medicalCamps": [], "depots": [], "blockedRoutes": [], "riskZones": []}


def test_put_then_get_overlays(api_client):
    payload = {
        "shelters": [{"name": "Govt School", "capacity": 120, "lat": 12.97, "lng": 77.59}],
        "riskZones": [{"name": "Flood plain", "level": "high", "lat": 12.9, "lng": 77.6, "radius": 1500}],
        "blockedRoutes": [{"name": "NH44", "points": [[12.9, 77.5], [12.95, 77.55]]}],
    }
    response = api_client.put("/api/overlays", json=payload)
    assert response.status_code == 200

    stored = api_client.get("/api/overlays").json()
    assert stored["shelters"][0]["name"] == "Govt School"
    assert stored["riskZones"][0]["radius"] == 1500
    assert stored["blockedRoutes"][0]["points"] == [[12.9, 77.5], [12.95, 77.55]]
    assert stored["depots"] == []


def test_put_overlays_rejects_unknown_fields(api_client):
    response = api_client.put("/api/overlays", json={"depots": [{"name": "D", "lat": 1, "lng": 2, "extra": 3}]})
    assert response.status_code == 422


def test_overlays_without_database_returns_500(api_client_no_db):
    response = api_client_no_db.get("/api/overlays")
    assert response.status_code == 500
    assert "Database engine not configured" in response.json()["detail"]


@pytest.mark.parametrize(
    "payload",
    [
        {"shelters": [{"name": "S", "capacity": 10, "lat": "abc", "lng": 77.5}]},
        {"blockedRoutes": [{"name": "NH44", "points": [[12.9, 77.5]]}]},
    ],
)
def test_put_overlays_rejects_invalid_items(api_client, payload):
    api_client.put("/api/overlays", json={"depots": [{"name": "D", "lat": 1, "lng": 2}]})

    response = api_client.put("/api/overlays", json=payload)
    assert response.status_code == 422

    stored = api_client.get("/api/overlays").json()
    assert stored["depots"] == [{"name": "D", "lat": 1.0, "lng": 2.0}]
    assert stored["shelters"] == []
    assert stored["blockedRoutes"] == []
