from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from reliefgrid.api.deps import get_engine
from reliefgrid.api.main import create_app
from reliefgrid.infra.db.tables import metadata


def _request(record_id: str, lng: float, lat: float, priority: str = "medium", sos: bool = False) -> dict:
    return {
        "_id": record_id,
        "priority": priority,
        "sosDetected": sos,
        "beneficiaries": {"total": 2},
        "location": {"type": "Point", "coordinates": [lng, lat]},
    }


def _ngo(record_id: str, lng: float, lat: float) -> dict:
    return {"_id": record_id, "location": {"type": "Point", "coordinates": [lng, lat]}, "coverageRadius": 50000}


@pytest.fixture()
def snapshot():
    requests = [
        _request("r1", 77.595, 12.971, priority="critical"),
        _request("r2", 77.595, 12.971, priority="high"),
        _request("r3", 77.595, 12.971, sos=True),
        _request("r4", 78.01, 13.52),
        {"_id": "r5", "priority": "low"},
    ]
    ngos = [
        _ngo("n1", 77.595, 12.971),
        _ngo("n2", 79.0, 14.0),
    ]
    return {"requests": requests, "ngos": ngos}


@pytest.fixture()
def api_client(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'api_tests.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    app = create_app(engine=engine)
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    metadata.drop_all(engine)


@pytest.fixture()
def api_client_no_db():
    app = create_app(engine=None)
    with TestClient(app) as client:
        yield client
