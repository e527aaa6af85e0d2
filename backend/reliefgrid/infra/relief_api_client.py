from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ReliefApiClient:
    """Lee instantáneas de peticiones y ONGs del backend de coordinación."""

    DEFAULT_LIMIT = 500

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or os.getenv("RELIEF_API_URL") or "").rstrip("/")
        if not self.base_url:
            raise RuntimeError("RELIEF_API_URL is required for ReliefApiClient")
        self.token = token if token is not None else os.getenv("RELIEF_API_TOKEN")
        self.timeout = timeout
        self.transport = transport

    def fetch_requests(self, limit: int = DEFAULT_LIMIT) -> List[dict]:
        data = self._get("/requests", params={"limit": limit})
        requests = data.get("requests") or []
        logger.info("fetched %d requests (total=%s)", len(requests), data.get("total"))
        return requests

    def fetch_ngos(self) -> List[dict]:
        data = self._get("/ngos")
        ngos = data.get("ngos") or []
        logger.info("fetched %d ngos", len(ngos))
        return ngos

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            resp = client.get(f"{self.base_url}{path}", params=params, headers=self._headers())
            resp.raise_for_status()
            return resp.json()
