"""Firebase Authentication over the Identity Toolkit REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from identity.base import IdentityAccount, IdentityProvider, ProviderRejection
from models.errors import UpstreamError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


def _rejection_code(response: httpx.Response) -> Optional[str]:
    # Error messages look like "WEAK_PASSWORD : Password should be ...".
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return None
    if not isinstance(message, str):
        return None
    return message.split(":", 1)[0].strip() or None


class FirebaseIdentityProvider(IdentityProvider):

    def __init__(
        self,
        api_key: str,
        service_token: Optional[str] = None,
        timeout: float = 10.0,
        base_url: str = IDENTITY_TOOLKIT_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._service_token = service_token
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def sign_in(self, email: str, password: str) -> IdentityAccount:
        payload = await self._call(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._account(payload)

    async def sign_up(self, email: str, password: str) -> IdentityAccount:
        payload = await self._call(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._account(payload)

    async def update_profile(self, account: IdentityAccount, display_name: str) -> None:
        if not account.id_token:
            raise UpstreamError("Cannot update a profile without an ID token.")
        await self._call(
            "accounts:update",
            {"idToken": account.id_token, "displayName": display_name, "returnSecureToken": False},
        )

    async def send_password_reset(self, email: str) -> None:
        await self._call("accounts:sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def lookup_by_email(self, email: str) -> Optional[IdentityAccount]:
        if not self._service_token:
            raise UpstreamError("Looking up accounts by e-mail requires FIREBASE_SERVICE_TOKEN.")
        payload = await self._call(
            "accounts:lookup",
            {"email": [email]},
            headers={"Authorization": f"Bearer {self._service_token}"},
        )
        users = payload.get("users") or []
        if not users:
            return None
        user = users[0]
        return IdentityAccount(
            uid=user["localId"],
            email=user.get("email", email),
            display_name=user.get("displayName"),
        )

    @staticmethod
    def _account(payload: Dict[str, Any]) -> IdentityAccount:
        return IdentityAccount(
            uid=payload["localId"],
            email=payload.get("email", ""),
            display_name=payload.get("displayName") or None,
            id_token=payload.get("idToken"),
        )

    async def _call(
        self,
        endpoint: str,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                f"/{endpoint}", params={"key": self._api_key}, json=body, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("Identity provider unreachable", extra={"reason": str(exc)})
            raise UpstreamError(f"Identity provider call {endpoint} failed: {exc}") from exc

        if response.status_code == 400:
            code = _rejection_code(response)
            if code:
                raise ProviderRejection(code, response.text)
        if response.is_error:
            logger.error(
                "Identity provider error",
                extra={"status": response.status_code, "reason": response.text},
            )
            raise UpstreamError(
                f"Identity provider call {endpoint} failed with status {response.status_code}"
            )
        return response.json()
