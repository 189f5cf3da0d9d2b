"""Storage abstraction for the hierarchical key/value tree."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

logger = logging.getLogger(__name__)


def split_path(path: str) -> List[str]:
    return [segment for segment in path.strip("/").split("/") if segment]


def join_path(*segments: str) -> str:
    return "/".join(part for segment in segments for part in split_path(segment))


class TreeStore(ABC):
    """Minimal async interface over a hierarchical data store.

    Empty mappings and ``None`` written with :meth:`set` remove the node,
    mirroring how the Realtime Database treats empty objects.
    """

    @abstractmethod
    async def get(self, path: str) -> Optional[Any]:
        """Return the value at ``path`` or ``None`` when absent."""

    @abstractmethod
    async def set(self, path: str, value: Any, merge: bool = False) -> None:
        """Replace the node at ``path``; with ``merge`` replace only its given children."""

    @abstractmethod
    async def append(self, prefix: str, value: Any) -> str:
        """Store ``value`` under a new time-ordered child of ``prefix`` and return its key."""

    async def aclose(self) -> None:
        return None


class StateWriter:
    """The only write surface handed to telemetry ingestion and the alert log.

    Device state is always replaced as a whole and log entries are only
    ever appended; no field-level merge is reachable from here.
    """

    def __init__(self, store: TreeStore) -> None:
        self._store = store

    async def set_full_state(self, path: str, record: Mapping[str, Any]) -> None:
        await self._store.set(path, dict(record), merge=False)
        logger.debug("Replaced state record", extra={"path": path})

    async def append_log(self, prefix: str, record: Mapping[str, Any]) -> str:
        key = await self._store.append(prefix, dict(record))
        logger.debug("Appended log record", extra={"path": f"{prefix}/{key}"})
        return key
