from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from reliefgrid.domain.projection import DEFAULT_ZOOM, MAX_ZOOM, MIN_ZOOM


class Coordinates(BaseModel):
    lat: float
    lng: float


# Las peticiones y ONGs llegan tal cual las sirve el backend; se normalizan en el dominio
class DemandSupplyRequest(BaseModel):
    requests: List[Dict[str, Any]] = Field(default_factory=list)
    ngos: List[Dict[str, Any]] = Field(default_factory=list)


class HeatmapRequest(BaseModel):
    requests: List[Dict[str, Any]] = Field(default_factory=list)
    clusters: List[Dict[str, Any]] = Field(default_factory=list)
    view: str = Field("heatmap", pattern="^(heatmap|standard|clusters)$")
    center: Optional[Coordinates] = None
    zoom: float = Field(DEFAULT_ZOOM, ge=MIN_ZOOM, le=MAX_ZOOM)


class OverlaysPayload(BaseModel):
    shelters: List[Dict[str, Any]] = Field(default_factory=list)
    medicalCamps: List[Dict[str, Any]] = Field(default_factory=list)
    depots: List[Dict[str, Any]] = Field(default_factory=list)
    blockedRoutes: List[Dict[str, Any]] = Field(default_factory=list)
    riskZones: List[Dict[str, Any]] = Field(default_factory=list)
