from __future__ import annotations

import pytest

from reliefgrid.domain.canonical import (
    cluster_from_payload,
    demand_from_payload,
    parse_clusters,
    parse_demands,
    parse_location,
    parse_supplies,
    supply_from_payload,
)
from reliefgrid.domain.models import GeoPoint


def test_parse_location_uses_geojson_order():
    point = parse_location({"type": "Point", "coordinates": [77.5946, 12.9716]})
    assert point == GeoPoint(lng=77.5946, lat=12.9716)


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"coordinates": []},
        {"coordinates": [77.5]},
        {"coordinates": ["east", "north"]},
        {"coordinates": [float("nan"), 12.0]},
        {"coordinates": [77.0, float("inf")]},
        {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0]]]},
        "12.9,77.5",
    ],
)
def test_parse_location_rejects_unusable_coordinates(payload):
    assert parse_location(payload) is None


def test_demand_from_backend_request():
    record = demand_from_payload(
        {
            "_id": "65f0c1",
            "priority": "HIGH",
            "sosDetected": True,
            "beneficiaries": {"adults": 2, "children": 1, "total": 3},
            "location": {"type": "Point", "coordinates": ["77.6", "12.9"]},
        }
    )
    assert record.id == "65f0c1"
    assert record.priority == "high"
    assert record.is_sos
    assert record.beneficiary_count == 3
    assert record.location == GeoPoint(lng=77.6, lat=12.9)


def test_demand_defaults_for_sparse_payload():
    record = demand_from_payload({"id": 7})
    assert record.id == "7"
    assert record.priority == "medium"
    assert not record.has_location
    assert record.beneficiary_count == 1


def test_supply_coverage_radius_default():
    ngo = supply_from_payload({"_id": "ngo-1", "location": {"coordinates": [77.6, 12.9]}})
    assert ngo.coverage_radius_m == 50000
    assert ngo.has_location
    custom = supply_from_payload({"_id": "ngo-2", "coverageRadius": "12000"})
    assert custom.coverage_radius_m == 12000
    assert not custom.has_location


def test_parse_lists_report_skips():
    demands, stats = parse_demands(
        [
            {"_id": "a", "location": {"coordinates": [77.6, 12.9]}},
            {"_id": "b"},
            "not-a-record",
        ]
    )
    assert [d.id for d in demands] == ["a", "b"]
    assert stats == {"received": 3, "mapped": 2, "skipped_invalid": 1, "without_location": 1}

    supplies, supply_stats = parse_supplies(None)
    assert supplies == []
    assert supply_stats["received"] == 0


def test_cluster_from_backend_payload():
    cluster = cluster_from_payload(
        {
            "_id": "c1",
            "centerLocation": {"type": "Point", "coordinates": [77.6, 12.97]},
            "requests": [{}, {}, {}],
            "totalBeneficiaries": {"total": 12},
        }
    )
    assert cluster.id == "c1"
    assert cluster.center == GeoPoint(lng=77.6, lat=12.97)
    assert cluster.request_count == 3
    assert cluster.total_beneficiaries == 12


def test_parse_clusters_tolerates_sparse_payloads():
    clusters, stats = parse_clusters([{"_id": "c2", "totalBeneficiaries": "7"}, 42])
    assert [c.id for c in clusters] == ["c2"]
    assert clusters[0].request_count == 0
    assert clusters[0].total_beneficiaries == 7
    assert stats == {"received": 2, "mapped": 1, "skipped_invalid": 1, "without_location": 1}
