from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import create_engine

from reliefgrid.api.routers import analytics, overlays
from reliefgrid.infra.db.tables import metadata


def create_app(engine=None) -> FastAPI:
    app = FastAPI(title="Relief Grid API", version="0.1.0")
    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        engine = create_engine(database_url, future=True) if database_url else None
    if engine is not None:
        metadata.create_all(engine)
    app.state.db_engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analytics.router, prefix="/api")
    app.include_router(overlays.router, prefix="/api")
    return app


app = create_app()
