"""Auth gateway over the external identity provider."""

from __future__ import annotations

import logging
from typing import Dict, Type

from identity.base import (
    EMAIL_EXISTS,
    EMAIL_NOT_FOUND,
    INVALID_EMAIL,
    WEAK_PASSWORD,
    IdentityProvider,
    ProviderRejection,
)
from models.errors import (
    AuthError,
    EmailAlreadyInUse,
    InvalidCredentials,
    InvalidEmail,
    UpstreamError,
    UserNotFound,
    ValidationError,
    WeakPassword,
)
from models.records import User
from services.telemetry import TelemetryEngine
from services.users import UserDirectory

logger = logging.getLogger(__name__)

_REGISTRATION_ERRORS: Dict[str, Type[AuthError]] = {
    EMAIL_EXISTS: EmailAlreadyInUse,
    WEAK_PASSWORD: WeakPassword,
    INVALID_EMAIL: InvalidEmail,
}


class AuthGateway:
    """Turns provider accounts into owner ids and provisions new owners."""

    def __init__(
        self,
        identity: IdentityProvider,
        users: UserDirectory,
        telemetry: TelemetryEngine,
    ) -> None:
        self.identity = identity
        self.users = users
        self.telemetry = telemetry

    async def login(self, email: str, password: str) -> str:
        try:
            account = await self.identity.sign_in(email, password)
        except ProviderRejection as exc:
            # Wrong password, unknown or disabled account all look the same outside.
            logger.info("Login rejected", extra={"provider_code": exc.code})
            raise InvalidCredentials() from exc
        return account.uid

    async def register(self, email: str, password: str, name: str, device_id: str) -> User:
        if not device_id:
            raise ValidationError("device_id must not be empty.")
        try:
            account = await self.identity.sign_up(email, password)
        except ProviderRejection as exc:
            error_cls = _REGISTRATION_ERRORS.get(exc.code)
            logger.info("Registration rejected", extra={"provider_code": exc.code})
            if error_cls is None:
                raise UpstreamError(str(exc), provider_code=exc.code) from exc
            raise error_cls() from exc

        # The identity exists from here on; a failure below leaves it orphaned.
        try:
            await self.identity.update_profile(account, name)
            user = await self.users.create(account.uid, name, email)
            await self.telemetry.provision(account.uid, device_id)
        except (ProviderRejection, UpstreamError) as exc:
            logger.error(
                "Provisioning failed after identity creation; identity left orphaned",
                extra={"owner_id": account.uid, "device_id": device_id, "reason": str(exc)},
            )
            if isinstance(exc, UpstreamError):
                raise
            raise UpstreamError(str(exc), provider_code=exc.code) from exc

        logger.info("Owner registered", extra={"owner_id": user.id, "device_id": device_id})
        return user

    async def request_password_reset(self, email: str) -> None:
        try:
            await self.identity.send_password_reset(email)
        except ProviderRejection as exc:
            if exc.code == EMAIL_NOT_FOUND:
                # Same answer as for a known account.
                logger.info("Password reset for unknown e-mail ignored")
                return
            raise UpstreamError(str(exc), provider_code=exc.code) from exc

    async def resolve_owner(self, user_id: str) -> str:
        """Map the e-mail a device reports as ``userId`` to the owner id."""
        try:
            account = await self.identity.lookup_by_email(user_id)
        except ProviderRejection as exc:
            raise UpstreamError(str(exc), provider_code=exc.code) from exc
        if account is None:
            raise UserNotFound(f"No account registered for {user_id!r}.")
        return account.uid
