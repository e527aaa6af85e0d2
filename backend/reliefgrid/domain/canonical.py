from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Optional, Tuple

from .models import DEFAULT_COVERAGE_RADIUS_M, ClusterRecord, DemandRecord, GeoPoint, SupplyRecord

logger = logging.getLogger(__name__)


def parse_location(payload: Any) -> Optional[GeoPoint]:
    """``{"type": "Point", "coordinates": [lng, lat]}`` -> GeoPoint, o None si no es usable."""
    if not isinstance(payload, dict):
        return None
    if payload.get("type", "Point") != "Point":
        return None
    coordinates = payload.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        return None
    try:
        lng, lat = (float(value) for value in coordinates)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    return GeoPoint(lng=lng, lat=lat)


def _record_id(payload: dict) -> str:
    return str(payload.get("_id") or payload.get("id") or "")


def _beneficiary_count(payload: dict) -> int:
    beneficiaries = payload.get("beneficiaries")
    raw = beneficiaries.get("total") if isinstance(beneficiaries, dict) else payload.get("beneficiaryCount")
    if raw is None:
        return 1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def demand_from_payload(payload: dict) -> DemandRecord:
    priority = payload.get("priority") or "medium"
    return DemandRecord(
        id=_record_id(payload),
        location=parse_location(payload.get("location")),
        priority=str(priority).lower(),
        sos_detected=bool(payload.get("sosDetected", False)),
        beneficiary_count=_beneficiary_count(payload),
    )


def supply_from_payload(payload: dict) -> SupplyRecord:
    radius = payload.get("coverageRadius")
    try:
        radius = float(radius) if radius is not None else DEFAULT_COVERAGE_RADIUS_M
    except (TypeError, ValueError):
        radius = DEFAULT_COVERAGE_RADIUS_M
    return SupplyRecord(
        id=_record_id(payload),
        location=parse_location(payload.get("location")),
        coverage_radius_m=radius,
    )


def cluster_from_payload(payload: dict) -> ClusterRecord:
    requests = payload.get("requests")
    beneficiaries = payload.get("totalBeneficiaries")
    total = beneficiaries.get("total") if isinstance(beneficiaries, dict) else beneficiaries
    try:
        total = int(total or 0)
    except (TypeError, ValueError):
        total = 0
    return ClusterRecord(
        id=_record_id(payload),
        center=parse_location(payload.get("centerLocation")),
        request_count=len(requests) if isinstance(requests, list) else 0,
        total_beneficiaries=total,
    )


def _parse_many(items: Iterable[Any], mapper, kind: str) -> Tuple[list, dict]:
    records: list = []
    stats = {"received": 0, "mapped": 0, "skipped_invalid": 0, "without_location": 0}
    for item in items or []:
        stats["received"] += 1
        if not isinstance(item, dict):
            logger.warning("skipping %s payload of type %s", kind, type(item).__name__)
            stats["skipped_invalid"] += 1
            continue
        record = mapper(item)
        if not record.has_location:
            stats["without_location"] += 1
        records.append(record)
    stats["mapped"] = len(records)
    logger.info(
        "parsed %d/%d %s records (%d without location)",
        stats["mapped"],
        stats["received"],
        kind,
        stats["without_location"],
    )
    return records, stats


def parse_demands(items: Iterable[Any]) -> Tuple[List[DemandRecord], dict]:
    return _parse_many(items, demand_from_payload, "demand")


def parse_supplies(items: Iterable[Any]) -> Tuple[List[SupplyRecord], dict]:
    return _parse_many(items, supply_from_payload, "supply")


def parse_clusters(items: Iterable[Any]) -> Tuple[List[ClusterRecord], dict]:
    return _parse_many(items, cluster_from_payload, "cluster")
