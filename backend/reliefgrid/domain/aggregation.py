from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .models import AggregationStats, Cell, DemandRecord, GeoPoint, SeverityTier, SupplyRecord

logger = logging.getLogger(__name__)

# 0.1 grados ~= 11 km en el ecuador; en longitud la celda se estrecha con la latitud
REGION_CELL_PRECISION = 10
ZERO_SUPPLY_DIVISOR = 0.1

# (límite superior inclusivo del ratio, tier)
SEVERITY_TIERS = [
    (0.5, SeverityTier("Surplus", "green")),
    (1.0, SeverityTier("Balanced", "lime")),
    (2.0, SeverityTier("High Demand", "yellow")),
    (3.0, SeverityTier("Very High", "orange")),
]
CRITICAL_TIER = SeverityTier("Critical", "red")

CellKey = Tuple[float, float]


def _round_half_up(value: float, precision: int) -> float:
    return math.floor(value * precision + 0.5) / precision


def region_cell_key(point: GeoPoint) -> CellKey:
    """Clave ``(lat, lng)`` de la rejilla regional de 0.1 grados."""
    return (
        _round_half_up(point.lat, REGION_CELL_PRECISION),
        _round_half_up(point.lng, REGION_CELL_PRECISION),
    )


def aggregate(
    demands: Sequence[DemandRecord],
    supplies: Sequence[SupplyRecord],
) -> Tuple[List[Cell], Optional[AggregationStats]]:
    """Agrupa demanda (peticiones) y oferta (ONGs) en celdas ordenadas por ratio.

    Sin peticiones o sin ONGs no hay comparación posible y se devuelve
    ``([], None)``. Los registros sin ubicación no cuentan en ninguna celda.
    """
    if not demands or not supplies:
        return [], None

    cells: Dict[CellKey, Cell] = {}

    def cell_for(point: GeoPoint) -> Cell:
        key = region_cell_key(point)
        cell = cells.get(key)
        if cell is None:
            cell = cells[key] = Cell(lat=key[0], lng=key[1])
        return cell

    for demand in demands:
        if not demand.has_location:
            continue
        cell_for(demand.location).demand_records.append(demand)

    for supply in supplies:
        if not supply.has_location:
            continue
        cell_for(supply.location).supply_records.append(supply)

    # sorted() es estable también con reverse=True
    ranked = sorted(cells.values(), key=lambda c: c.ratio, reverse=True)
    stats = summarize(ranked)
    logger.debug(
        "aggregated %d demands and %d supplies into %d cells",
        stats.total_demand,
        stats.total_supply,
        len(ranked),
    )
    return ranked, stats


def summarize(cells: Sequence[Cell]) -> AggregationStats:
    total_demand = sum(cell.demand_count for cell in cells)
    total_supply = sum(cell.supply_count for cell in cells)
    return AggregationStats(
        total_demand=total_demand,
        total_supply=total_supply,
        average_ratio=total_demand / max(total_supply, 1),
        surplus_cells=sum(1 for cell in cells if cell.balance > 0),
        deficit_cells=sum(1 for cell in cells if cell.balance < 0),
        balanced_cells=sum(1 for cell in cells if cell.balance == 0),
    )


def classify_tier(ratio: float) -> SeverityTier:
    for upper, tier in SEVERITY_TIERS:
        if ratio <= upper:
            return tier
    return CRITICAL_TIER


def recommendations(stats: Optional[AggregationStats]) -> List[str]:
    if stats is None or stats.deficit_cells <= 0:
        return []
    return [
        f"{stats.deficit_cells} area(s) have more requests than available NGO teams",
        "Consider redirecting NGOs from surplus areas to deficit areas",
        "Prioritize SOS and critical requests in deficit areas",
        "Coordinate with neighboring areas for resource sharing",
    ]
