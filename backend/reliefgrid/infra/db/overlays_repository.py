from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from .tables import overlays_table


class OverlaysRepository:
    """Almacén clave/valor de overlays operativos sobre SQL."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            raw = conn.execute(
                select(overlays_table.c.payload).where(overlays_table.c.key == key)
            ).scalar_one_or_none()
        if raw is None:
            return None
        return json.loads(raw)

    def put(self, key: str, value: Dict[str, Any]) -> None:
        now = datetime.now(timezone.utc)
        payload = json.dumps(value)
        with self.engine.begin() as conn:
            existing = conn.execute(
                select(overlays_table.c.key).where(overlays_table.c.key == key)
            ).scalar_one_or_none()
            if existing:
                conn.execute(
                    update(overlays_table)
                    .where(overlays_table.c.key == key)
                    .values(payload=payload, updated_at=now)
                )
            else:
                conn.execute(
                    insert(overlays_table).values(key=key, payload=payload, updated_at=now)
                )
