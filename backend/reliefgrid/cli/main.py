import json
import logging
from pathlib import Path
from typing import Optional

import typer

from reliefgrid.domain.aggregation import aggregate, classify_tier
from reliefgrid.domain.canonical import parse_demands, parse_supplies
from reliefgrid.domain.projection import DEFAULT_ZOOM, clamp_zoom, heat_glyphs, view_center
from reliefgrid.infra.relief_api_client import ReliefApiClient

app = typer.Typer(help="CLI para analizar demanda y oferta de ayuda por zonas")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log detallado")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s - %(message)s",
    )


def _read_list(path: Path, key: str) -> list:
    try:
        payload = json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"No se pudo leer {path}: {exc}") from exc
    # Acepta tanto la lista directa como la respuesta del backend ({"requests": [...]})
    if isinstance(payload, dict):
        payload = payload.get(key) or []
    if not isinstance(payload, list):
        raise typer.BadParameter(f"{path} no contiene una lista de '{key}'")
    return payload


def _load_snapshot(requests_file: Optional[Path], ngos_file: Optional[Path], api_url: Optional[str]):
    if api_url:
        client = ReliefApiClient(base_url=api_url)
        return client.fetch_requests(), client.fetch_ngos()
    if requests_file is None:
        raise typer.BadParameter("Indica --requests o --api-url")
    raw_requests = _read_list(requests_file, "requests")
    raw_ngos = _read_list(ngos_file, "ngos") if ngos_file else []
    return raw_requests, raw_ngos


@app.command("heatmap")
def cli_heatmap(
    requests_file: Optional[Path] = typer.Option(None, "--requests", help="JSON con peticiones"),
    ngos_file: Optional[Path] = typer.Option(None, "--ngos", help="JSON con ONGs"),
    api_url: Optional[str] = typer.Option(None, help="URL base del backend de coordinación"),
    top: int = typer.Option(10, help="Número de zonas a mostrar"),
):
    raw_requests, raw_ngos = _load_snapshot(requests_file, ngos_file, api_url)
    demands, _ = parse_demands(raw_requests)
    supplies, _ = parse_supplies(raw_ngos)
    cells, stats = aggregate(demands, supplies)
    if stats is None:
        typer.echo("Sin datos suficientes: hacen falta peticiones y ONGs")
        raise typer.Exit(code=0)
    typer.echo("lat\tlng\tdemand\tsupply\tratio\ttier")
    for cell in cells[:top]:
        tier = classify_tier(cell.ratio)
        typer.echo(
            f"{cell.lat:.1f}\t{cell.lng:.1f}\t{cell.demand_count}\t{cell.supply_count}\t{cell.ratio:.1f}\t{tier.label}"
        )
    typer.echo(
        f"total_demand={stats.total_demand} total_supply={stats.total_supply} "
        f"avg_ratio={stats.average_ratio:.2f} surplus={stats.surplus_cells} "
        f"deficit={stats.deficit_cells} balanced={stats.balanced_cells}"
    )


@app.command("glyphs")
def cli_glyphs(
    requests_file: Path = typer.Option(..., "--requests", help="JSON con peticiones"),
    zoom: float = typer.Option(DEFAULT_ZOOM, help="Zoom 1-18"),
):
    demands, _ = parse_demands(_read_list(requests_file, "requests"))
    center = view_center(demands)
    glyphs = heat_glyphs(demands, center, clamp_zoom(zoom))
    if not glyphs:
        typer.echo("No hay peticiones con ubicación")
        raise typer.Exit(code=0)
    typer.echo("lat\tlng\tintensity\tx\ty\tsize_px\topacity\tcolor")
    for glyph in glyphs:
        typer.echo(
            f"{glyph.lat:.2f}\t{glyph.lng:.2f}\t{glyph.intensity:g}\t{glyph.offset.x:.2f}\t"
            f"{glyph.offset.y:.2f}\t{glyph.visual.size_px:.1f}\t{glyph.visual.opacity:.2f}\t{glyph.color}"
        )


if __name__ == "__main__":
    app()
