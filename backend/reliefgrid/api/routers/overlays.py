from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from reliefgrid.api.deps import get_engine
from reliefgrid.api.schemas import OverlaysPayload
from reliefgrid.infra.db.overlays_repository import OverlaysRepository
from reliefgrid.services.overlays import OverlayService

router = APIRouter(tags=["overlays"])


@router.get("/overlays")
def get_overlays(engine: Engine = Depends(get_engine)):
    service = OverlayService(OverlaysRepository(engine))
    return service.load().to_payload()


@router.put("/overlays")
def put_overlays(body: OverlaysPayload, engine: Engine = Depends(get_engine)):
    service = OverlayService(OverlaysRepository(engine))
    try:
        overlays = service.replace(body.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return overlays.to_payload()
