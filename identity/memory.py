from __future__ import annotations
import asyncio
import json
import logging
import re
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional
from uuid import uuid4

from passlib.context import CryptContext

from identity.base import (
    EMAIL_EXISTS,
    EMAIL_NOT_FOUND,
    INVALID_EMAIL,
    INVALID_LOGIN_CREDENTIALS,
    USER_DISABLED,
    WEAK_PASSWORD,
    IdentityAccount,
    IdentityProvider,
    ProviderRejection,
)
from settings import get_settings

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass
class _StoredAccount:
    uid: str
    email: str
    password_hash: str
    display_name: Optional[str] = None
    disabled: bool = False

    def to_account(self) -> IdentityAccount:
        return IdentityAccount(uid=self.uid, email=self.email, display_name=self.display_name)


class MockIdentityProvider(IdentityProvider):
    """E-mail/password accounts kept in process, optionally mirrored to JSON."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._accounts: Dict[str, _StoredAccount] = {}
        self.persistence_path = persistence_path
        self.password_resets: List[str] = []
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    async def sign_in(self, email: str, password: str) -> IdentityAccount:
        with self._lock:
            stored = self._accounts.get(self._key(email))
        if stored is None or not await asyncio.to_thread(
            pwd_context.verify, password, stored.password_hash
        ):
            raise ProviderRejection(INVALID_LOGIN_CREDENTIALS)
        if stored.disabled:
            raise ProviderRejection(USER_DISABLED)
        return stored.to_account()

    async def sign_up(self, email: str, password: str) -> IdentityAccount:
        if not _EMAIL_PATTERN.match(email):
            raise ProviderRejection(INVALID_EMAIL)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ProviderRejection(
                WEAK_PASSWORD,
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters",
            )
        # pbkdf2 is slow on purpose; keep it off the event loop.
        password_hash = await asyncio.to_thread(pwd_context.hash, password)
        stored = _StoredAccount(uid=uuid4().hex, email=email, password_hash=password_hash)
        with self._lock:
            if self._key(email) in self._accounts:
                raise ProviderRejection(EMAIL_EXISTS)
            self._accounts[self._key(email)] = stored
            self._persist()
        return stored.to_account()

    async def update_profile(self, account: IdentityAccount, display_name: str) -> None:
        with self._lock:
            stored = self._accounts.get(self._key(account.email))
            if stored is None:
                raise ProviderRejection(EMAIL_NOT_FOUND)
            stored.display_name = display_name
            self._persist()

    async def send_password_reset(self, email: str) -> None:
        with self._lock:
            if self._key(email) not in self._accounts:
                raise ProviderRejection(EMAIL_NOT_FOUND)
            self.password_resets.append(email)
        logger.info("Password reset e-mail queued")

    async def lookup_by_email(self, email: str) -> Optional[IdentityAccount]:
        with self._lock:
            stored = self._accounts.get(self._key(email))
        return stored.to_account() if stored else None

    def disable(self, email: str) -> None:
        with self._lock:
            self._accounts[self._key(email)].disabled = True
            self._persist()

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {key: asdict(account) for key, account in self._accounts.items()}
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for key, payload in data.items():
            self._accounts[key] = _StoredAccount(**payload)


@lru_cache
def build_default_identity(path: Optional[str] = None) -> MockIdentityProvider:
    settings = get_settings()
    identity_path = settings.identity_persistence_path if path is None else path
    persistence = Path(identity_path) if identity_path else None
    return MockIdentityProvider(persistence_path=persistence)
