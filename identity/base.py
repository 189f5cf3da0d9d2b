"""Identity provider interface used by the auth gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

# Rejection codes, as reported by the Identity Toolkit API.
EMAIL_EXISTS = "EMAIL_EXISTS"
WEAK_PASSWORD = "WEAK_PASSWORD"
INVALID_EMAIL = "INVALID_EMAIL"
EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
INVALID_PASSWORD = "INVALID_PASSWORD"
INVALID_LOGIN_CREDENTIALS = "INVALID_LOGIN_CREDENTIALS"
USER_DISABLED = "USER_DISABLED"


@dataclass(frozen=True)
class IdentityAccount:
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None


class ProviderRejection(Exception):
    """The provider answered and refused the request."""

    def __init__(self, code: str, message: str = "") -> None:
        self.code = code
        super().__init__(message or code)


class IdentityProvider(ABC):

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> IdentityAccount:
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> IdentityAccount:
        ...

    @abstractmethod
    async def update_profile(self, account: IdentityAccount, display_name: str) -> None:
        ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        ...

    @abstractmethod
    async def lookup_by_email(self, email: str) -> Optional[IdentityAccount]:
        """Return the account registered with ``email`` or ``None``."""

    async def aclose(self) -> None:
        return None
