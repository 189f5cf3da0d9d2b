"""User profile records stored at ``usuarios/{owner}``."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from datastore.base import TreeStore
from models.errors import NotFoundError
from models.records import User
from services.paths import user_path


class UserDirectory:

    def __init__(self, store: TreeStore) -> None:
        self.store = store

    async def create(
        self,
        owner_id: str,
        name: str,
        email: str,
        created_at: Optional[datetime] = None,
    ) -> User:
        moment = created_at or datetime.now(timezone.utc)
        user = User(
            id=owner_id,
            name=name,
            email=email,
            created_at=moment.isoformat().replace("+00:00", "Z"),
        )
        # Profile fields sit beside the device subtree, which must survive.
        await self.store.set(user_path(owner_id), user.to_record(), merge=True)
        return user

    async def get(self, owner_id: str) -> User:
        record = await self.store.get(user_path(owner_id))
        if not isinstance(record, dict) or "email" not in record:
            raise NotFoundError(f"No user record for owner {owner_id!r}.")
        return User(
            id=owner_id,
            name=str(record.get("name", "")),
            email=str(record["email"]),
            created_at=str(record.get("createdAt", "")),
        )
