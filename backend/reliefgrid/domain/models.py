from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_COVERAGE_RADIUS_M = 50000.0


@dataclass(frozen=True)
class GeoPoint:
    """Coordenada en grados decimales, orden GeoJSON ``[lng, lat]``."""

    lng: float
    lat: float


@dataclass(frozen=True)
class DemandRecord:
    id: str
    location: Optional[GeoPoint] = None
    priority: str = "medium"
    sos_detected: bool = False
    beneficiary_count: int = 1

    @property
    def has_location(self) -> bool:
        return self.location is not None

    @property
    def is_sos(self) -> bool:
        return self.sos_detected or self.priority == "sos"


@dataclass(frozen=True)
class SupplyRecord:
    id: str
    location: Optional[GeoPoint] = None
    coverage_radius_m: float = DEFAULT_COVERAGE_RADIUS_M

    @property
    def has_location(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class ClusterRecord:
    """Agrupación de peticiones calculada por el backend."""

    id: str
    center: Optional[GeoPoint] = None
    request_count: int = 0
    total_beneficiaries: int = 0

    @property
    def has_location(self) -> bool:
        return self.center is not None


@dataclass
class Cell:
    lat: float
    lng: float
    demand_records: List[DemandRecord] = field(default_factory=list)
    supply_records: List[SupplyRecord] = field(default_factory=list)

    @property
    def demand_count(self) -> int:
        return len(self.demand_records)

    @property
    def supply_count(self) -> int:
        return len(self.supply_records)

    @property
    def ratio(self) -> float:
        # 0.1 en vez de 0: celdas sin oferta quedan arriba del ranking sin producir inf
        return self.demand_count / (self.supply_count if self.supply_count > 0 else 0.1)

    @property
    def balance(self) -> int:
        return self.supply_count - self.demand_count


@dataclass(frozen=True)
class AggregationStats:
    total_demand: int
    total_supply: int
    average_ratio: float
    surplus_cells: int
    deficit_cells: int
    balanced_cells: int


@dataclass(frozen=True)
class SeverityTier:
    label: str
    color: str


@dataclass(frozen=True)
class ScreenOffset:
    x: float
    y: float


@dataclass(frozen=True)
class GlyphVisual:
    size_px: float
    opacity: float


@dataclass(frozen=True)
class HeatGlyph:
    lat: float
    lng: float
    intensity: float
    offset: ScreenOffset
    visual: GlyphVisual
    color: str
