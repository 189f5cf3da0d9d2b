from __future__ import annotations

from typing import Any, Dict, Mapping

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the telemetry service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._post("/api/v1/auth/login", {"email": email, "password": password})

    def register(self, email: str, password: str, name: str, device_id: str) -> Dict[str, Any]:
        return self._post(
            "/api/v1/auth/register",
            {"email": email, "password": password, "name": name, "accessToken": device_id},
        )

    def reset_password(self, email: str) -> Dict[str, Any]:
        return self._post("/api/v1/auth/reset-password", {"email": email})

    def send_telemetry(self, user_id: str, device_id: str, readings: Mapping[str, Any]) -> None:
        self._post(
            "/api/v1/realtime/data-receive",
            {"userId": user_id, "accessToken": device_id, **readings},
            expect_json=False,
        )

    def alerts(self, email: str, password: str) -> Dict[str, Any]:
        return self._post("/api/v1/realtime/alerts", {"email": email, "password": password})

    def _post(self, path: str, body: Dict[str, Any], expect_json: bool = True) -> Dict[str, Any]:
        try:
            response = self._client.post(path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            typer.secho(f"Request to {path} failed: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        if not expect_json:
            return {}
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("message") or data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
