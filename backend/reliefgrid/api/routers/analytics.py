from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter

from reliefgrid.api.schemas import DemandSupplyRequest, HeatmapRequest
from reliefgrid.domain.aggregation import aggregate, classify_tier, recommendations
from reliefgrid.domain.canonical import parse_clusters, parse_demands, parse_supplies
from reliefgrid.domain.models import AggregationStats, Cell, GeoPoint
from reliefgrid.domain.projection import (
    build_intensity_map,
    cluster_offsets,
    heat_glyphs,
    marker_color,
    marker_offsets,
    max_intensity,
    view_center,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/demand-supply")
def demand_supply(body: DemandSupplyRequest):
    demands, _ = parse_demands(body.requests)
    supplies, _ = parse_supplies(body.ngos)
    cells, stats = aggregate(demands, supplies)
    return {
        "cells": [_serialize_cell(cell) for cell in cells],
        "stats": _serialize_stats(stats),
        "recommendations": recommendations(stats),
    }


@router.post("/heatmap")
def heatmap(body: HeatmapRequest):
    demands, _ = parse_demands(body.requests)
    if body.center is not None:
        center = GeoPoint(lng=body.center.lng, lat=body.center.lat)
    else:
        center = view_center(demands)
    payload = {
        "view": body.view,
        "center": {"lat": center.lat, "lng": center.lng},
        "zoom": body.zoom,
    }
    if body.view == "standard":
        payload["markers"] = [
            {
                "id": record.id,
                "priority": record.priority,
                "sos_detected": record.is_sos,
                "x": round(offset.x, 4),
                "y": round(offset.y, 4),
                "color": marker_color(record),
            }
            for record, offset in marker_offsets(demands, center, body.zoom)
        ]
        return payload
    if body.view == "clusters":
        clusters, _ = parse_clusters(body.clusters)
        payload["clusters"] = [
            {
                "id": cluster.id,
                "request_count": cluster.request_count,
                "total_beneficiaries": cluster.total_beneficiaries,
                "x": round(offset.x, 4),
                "y": round(offset.y, 4),
                "size_px": size_px,
            }
            for cluster, offset, size_px in cluster_offsets(clusters, center, body.zoom)
        ]
        return payload

    glyphs = heat_glyphs(demands, center, body.zoom)
    payload["max_intensity"] = max_intensity(build_intensity_map(demands))
    payload["glyphs"] = [
        {
            "lat": glyph.lat,
            "lng": glyph.lng,
            "intensity": glyph.intensity,
            "x": round(glyph.offset.x, 4),
            "y": round(glyph.offset.y, 4),
            "size_px": round(glyph.visual.size_px, 2),
            "opacity": round(glyph.visual.opacity, 3),
            "color": glyph.color,
        }
        for glyph in glyphs
    ]
    return payload


def _serialize_cell(cell: Cell) -> Dict[str, Any]:
    tier = classify_tier(cell.ratio)
    return {
        "lat": cell.lat,
        "lng": cell.lng,
        "demand_count": cell.demand_count,
        "supply_count": cell.supply_count,
        "ratio": round(cell.ratio, 4),
        "balance": cell.balance,
        "tier": tier.label,
        "color": tier.color,
        "request_priorities": [record.priority for record in cell.demand_records],
    }


def _serialize_stats(stats: Optional[AggregationStats]):
    if stats is None:
        return None
    return {
        "total_demand": stats.total_demand,
        "total_supply": stats.total_supply,
        "average_ratio": round(stats.average_ratio, 4),
        "surplus_cells": stats.surplus_cells,
        "deficit_cells": stats.deficit_cells,
        "balanced_cells": stats.balanced_cells,
    }
