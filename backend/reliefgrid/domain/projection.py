from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import ClusterRecord, DemandRecord, GeoPoint, GlyphVisual, HeatGlyph, ScreenOffset

# Centro por defecto del mapa de operaciones (Bangalore)
DEFAULT_CENTER = GeoPoint(lng=77.5946, lat=12.9716)
DEFAULT_ZOOM = 12
MIN_ZOOM = 1
MAX_ZOOM = 18
PIXELS_PER_DEGREE = 1000

MIN_GLYPH_PX = 40.0
GLYPH_RANGE_PX = 60.0
MIN_OPACITY = 0.3
CLUSTER_PX_PER_REQUEST = 5

# Rejilla de 0.01 grados (~1.1 km), más fina que la rejilla regional de agregación
HEAT_CELL_STEP = Decimal("0.01")

HEAT_COLORS = [
    (0.7, "red"),
    (0.4, "orange"),
    (0.2, "yellow"),
]
HEAT_DEFAULT_COLOR = "blue"

HeatKey = Tuple[float, float]


def project(point: GeoPoint, center: GeoPoint, zoom: float) -> ScreenOffset:
    """Desplazamiento en pantalla respecto al centro de la vista.

    Proyección plana, sólo válida cerca de ``center``. El eje Y se invierte
    para que el norte quede arriba. No valida la entrada.
    """
    return ScreenOffset(
        x=(point.lng - center.lng) * PIXELS_PER_DEGREE * zoom,
        y=(center.lat - point.lat) * PIXELS_PER_DEGREE * zoom,
    )


def intensity_visual(intensity: float, max_intensity: float) -> GlyphVisual:
    if max_intensity <= 0:
        max_intensity = 1
    share = intensity / max_intensity
    return GlyphVisual(
        size_px=MIN_GLYPH_PX + share * GLYPH_RANGE_PX,
        opacity=max(MIN_OPACITY, share),
    )


def priority_weight(record: DemandRecord) -> int:
    if record.is_sos or record.priority == "critical":
        return 3
    if record.priority == "high":
        return 2
    return 1


def _round_heat(value: float) -> float:
    # Sobre el valor binario exacto; los empates se alejan de cero
    return float(Decimal(value).quantize(HEAT_CELL_STEP, rounding=ROUND_HALF_UP))


def heat_cell_key(point: GeoPoint) -> HeatKey:
    """Clave ``(lat, lng)`` de la rejilla de calor de 0.01 grados."""
    return _round_heat(point.lat), _round_heat(point.lng)


def build_intensity_map(demands: Iterable[DemandRecord]) -> Dict[HeatKey, float]:
    intensity: Dict[HeatKey, float] = {}
    for record in demands:
        if not record.has_location:
            continue
        key = heat_cell_key(record.location)
        intensity[key] = intensity.get(key, 0) + priority_weight(record)
    return intensity


def max_intensity(intensity_map: Dict[HeatKey, float]) -> float:
    return max([1, *intensity_map.values()])


def heat_color(intensity: float, max_intensity: float) -> str:
    share = intensity / max_intensity if max_intensity > 0 else 0.0
    for threshold, color in HEAT_COLORS:
        if share > threshold:
            return color
    return HEAT_DEFAULT_COLOR


def marker_color(record: DemandRecord) -> str:
    if record.is_sos:
        return "darkred"
    return {
        "critical": "red",
        "high": "orange",
        "medium": "yellow",
    }.get(record.priority, "green")


def view_center(demands: Sequence[DemandRecord], default: GeoPoint = DEFAULT_CENTER) -> GeoPoint:
    located = [record.location for record in demands if record.has_location]
    if not located:
        return default
    return GeoPoint(
        lng=sum(p.lng for p in located) / len(located),
        lat=sum(p.lat for p in located) / len(located),
    )


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def cluster_glyph_size(request_count: int) -> float:
    return MIN_GLYPH_PX + request_count * CLUSTER_PX_PER_REQUEST


def heat_glyphs(demands: Sequence[DemandRecord], center: GeoPoint, zoom: float) -> List[HeatGlyph]:
    intensity_map = build_intensity_map(demands)
    peak = max_intensity(intensity_map)
    glyphs: List[HeatGlyph] = []
    for (lat, lng), intensity in intensity_map.items():
        glyphs.append(
            HeatGlyph(
                lat=lat,
                lng=lng,
                intensity=intensity,
                offset=project(GeoPoint(lng=lng, lat=lat), center, zoom),
                visual=intensity_visual(intensity, peak),
                color=heat_color(intensity, peak),
            )
        )
    return glyphs


def marker_offsets(
    demands: Sequence[DemandRecord], center: GeoPoint, zoom: float
) -> List[Tuple[DemandRecord, ScreenOffset]]:
    return [(record, project(record.location, center, zoom)) for record in demands if record.has_location]


def cluster_offsets(
    clusters: Sequence[ClusterRecord], center: GeoPoint, zoom: float
) -> List[Tuple[ClusterRecord, ScreenOffset, float]]:
    return [
        (cluster, project(cluster.center, center, zoom), cluster_glyph_size(cluster.request_count))
        for cluster in clusters
        if cluster.has_location
    ]
