"""Firebase Realtime Database backend over its REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from datastore.base import TreeStore, join_path
from models.errors import UpstreamError

logger = logging.getLogger(__name__)


class FirebaseRealtimeDatabase(TreeStore):
    """``GET``/``PUT``/``PATCH``/``POST`` on ``{database_url}/{path}.json``."""

    def __init__(
        self,
        database_url: str,
        secret: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.database_url = database_url.rstrip("/")
        self._secret = secret
        self._client = client or httpx.AsyncClient(base_url=self.database_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str) -> Optional[Any]:
        response = await self._request("GET", path)
        return response.json()

    async def set(self, path: str, value: Any, merge: bool = False) -> None:
        if merge:
            await self._request("PATCH", path, json=value)
        else:
            await self._request("PUT", path, json=value)

    async def append(self, prefix: str, value: Any) -> str:
        response = await self._request("POST", prefix, json=value)
        payload = response.json()
        key = payload.get("name") if isinstance(payload, dict) else None
        if not isinstance(key, str):
            raise UpstreamError(f"Unexpected append response for {prefix!r}: {payload!r}")
        return key

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        url = f"/{join_path(path)}.json"
        params: Dict[str, str] = {}
        if self._secret:
            params["auth"] = self._secret
        try:
            response = await self._client.request(method, url, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Realtime Database rejected request",
                extra={"path": path, "status": exc.response.status_code, "reason": exc.response.text},
            )
            raise UpstreamError(
                f"Realtime Database {method} {path!r} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Realtime Database unreachable",
                extra={"path": path, "reason": str(exc)},
            )
            raise UpstreamError(f"Realtime Database {method} {path!r} failed: {exc}") from exc
        return response
