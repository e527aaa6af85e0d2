from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

OVERLAYS_KEY = "authorityOverlays"


class OverlayStore(Protocol):
    """Contrato del almacén clave/valor donde persisten los overlays."""

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def put(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError


class InMemoryOverlayStore:
    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._data.get(key)

    def put(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = value


@dataclass(frozen=True)
class Shelter:
    name: str
    capacity: int
    lat: float
    lng: float


@dataclass(frozen=True)
class MedicalCamp:
    name: str
    status: str
    lat: float
    lng: float


@dataclass(frozen=True)
class Depot:
    name: str
    lat: float
    lng: float


@dataclass(frozen=True)
class BlockedRoute:
    name: str
    points: List[List[float]]


@dataclass(frozen=True)
class RiskZone:
    name: str
    level: str
    lat: float
    lng: float
    radius: float


@dataclass
class Overlays:
    shelters: List[Shelter] = field(default_factory=list)
    medical_camps: List[MedicalCamp] = field(default_factory=list)
    depots: List[Depot] = field(default_factory=list)
    blocked_routes: List[BlockedRoute] = field(default_factory=list)
    risk_zones: List[RiskZone] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "shelters": [asdict(item) for item in self.shelters],
            "medicalCamps": [asdict(item) for item in self.medical_camps],
            "depots": [asdict(item) for item in self.depots],
            "blockedRoutes": [asdict(item) for item in self.blocked_routes],
            "riskZones": [asdict(item) for item in self.risk_zones],
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Overlays":
        return cls(
            shelters=[Shelter(**item) for item in payload.get("shelters") or []],
            medical_camps=[MedicalCamp(**item) for item in payload.get("medicalCamps") or []],
            depots=[Depot(**item) for item in payload.get("depots") or []],
            blocked_routes=[BlockedRoute(**item) for item in payload.get("blockedRoutes") or []],
            risk_zones=[RiskZone(**item) for item in payload.get("riskZones") or []],
        )


def _coordinate(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number") from exc
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite")
    return number


def make_shelter(*, lat, lng, name: Optional[str] = None, capacity=0) -> Shelter:
    return Shelter(
        name=name or "Shelter",
        capacity=int(capacity or 0),
        lat=_coordinate(lat, "lat"),
        lng=_coordinate(lng, "lng"),
    )


def make_medical_camp(*, lat, lng, name: Optional[str] = None, status: Optional[str] = None) -> MedicalCamp:
    return MedicalCamp(
        name=name or "Med Camp",
        status=status or "operational",
        lat=_coordinate(lat, "lat"),
        lng=_coordinate(lng, "lng"),
    )


def make_depot(*, lat, lng, name: Optional[str] = None) -> Depot:
    return Depot(name=name or "Depot", lat=_coordinate(lat, "lat"), lng=_coordinate(lng, "lng"))


def make_blocked_route(*, points: Sequence[Sequence[float]], name: Optional[str] = None) -> BlockedRoute:
    if not isinstance(points, (list, tuple)) or len(points) < 2:
        raise ValueError("a blocked route needs at least two points")
    normalized = []
    for point in points:
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            raise ValueError("route points must be [lat, lng] pairs")
        normalized.append([_coordinate(point[0], "lat"), _coordinate(point[1], "lng")])
    return BlockedRoute(name=name or "Blocked", points=normalized)


def make_risk_zone(*, lat, lng, name: Optional[str] = None, level: Optional[str] = None, radius=None) -> RiskZone:
    try:
        radius = float(radius or 1000)
    except (TypeError, ValueError) as exc:
        raise ValueError("radius must be a number") from exc
    return RiskZone(
        name=name or "Zone",
        level=level or "moderate",
        lat=_coordinate(lat, "lat"),
        lng=_coordinate(lng, "lng"),
        radius=radius,
    )


def _build_all(builder, items) -> list:
    built = []
    for item in items or []:
        if not isinstance(item, dict):
            raise ValueError("overlay items must be objects")
        try:
            built.append(builder(**item))
        except TypeError as exc:
            raise ValueError(f"invalid overlay item: {exc}") from exc
    return built


class OverlayService:
    """Carga, valida y guarda los overlays dibujados por la autoridad.

    Las alertas (advisories) viven en el backend y no forman parte de los overlays.
    """

    def __init__(self, store: OverlayStore, key: str = OVERLAYS_KEY):
        if store is None:
            raise ValueError("store is required")
        self.store = store
        self.key = key

    def load(self) -> Overlays:
        try:
            payload = self.store.get(self.key)
            if not payload:
                return Overlays()
            return Overlays.from_payload(payload)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("ignoring unreadable overlays under %r: %s", self.key, exc)
            return Overlays()

    def save(self, overlays: Overlays) -> None:
        self.store.put(self.key, overlays.to_payload())

    def replace(self, payload: Dict[str, Any]) -> Overlays:
        """Sustituye todos los overlays; valida cada elemento antes de guardar nada."""
        overlays = Overlays(
            shelters=_build_all(make_shelter, payload.get("shelters")),
            medical_camps=_build_all(make_medical_camp, payload.get("medicalCamps")),
            depots=_build_all(make_depot, payload.get("depots")),
            blocked_routes=_build_all(make_blocked_route, payload.get("blockedRoutes")),
            risk_zones=_build_all(make_risk_zone, payload.get("riskZones")),
        )
        self.save(overlays)
        return overlays

    def add_shelter(self, **fields) -> Shelter:
        return self._append("shelters", make_shelter(**fields))

    def add_medical_camp(self, **fields) -> MedicalCamp:
        return self._append("medical_camps", make_medical_camp(**fields))

    def add_depot(self, **fields) -> Depot:
        return self._append("depots", make_depot(**fields))

    def add_blocked_route(self, points: Sequence[Sequence[float]], name: Optional[str] = None) -> BlockedRoute:
        return self._append("blocked_routes", make_blocked_route(points=points, name=name))

    def add_risk_zone(self, **fields) -> RiskZone:
        return self._append("risk_zones", make_risk_zone(**fields))

    def _append(self, collection: str, item):
        overlays = self.load()
        getattr(overlays, collection).append(item)
        self.save(overlays)
        return item
