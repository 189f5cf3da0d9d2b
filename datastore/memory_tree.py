from __future__ import annotations
import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from datastore.base import TreeStore, split_path
from datastore.push_ids import PushIdGenerator
from settings import get_settings

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, dict) and not value)


class MockRealtimeDatabase(TreeStore):
    """In-process JSON tree with Realtime Database write semantics."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._root: Dict[str, Any] = {}
        self.persistence_path = persistence_path
        self._ids = PushIdGenerator()
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    async def get(self, path: str) -> Optional[Any]:
        with self._lock:
            node: Any = self._root
            for segment in split_path(path):
                if not isinstance(node, dict) or segment not in node:
                    return None
                node = node[segment]
            if _is_empty(node):
                return None
            return copy.deepcopy(node)

    async def set(self, path: str, value: Any, merge: bool = False) -> None:
        segments = split_path(path)
        with self._lock:
            if merge and isinstance(value, dict):
                for key, child in value.items():
                    self._write(segments + split_path(key), copy.deepcopy(child))
            else:
                self._write(segments, copy.deepcopy(value))
            self._persist()

    async def append(self, prefix: str, value: Any) -> str:
        key = self._ids.generate()
        segments = split_path(prefix) + [key]
        with self._lock:
            self._write(segments, copy.deepcopy(value))
            self._persist()
        return key

    def _write(self, segments: List[str], value: Any) -> None:
        if not segments:
            self._root = value if isinstance(value, dict) else {}
            return

        parents: List[Dict[str, Any]] = []
        node = self._root
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            parents.append(node)
            node = child

        leaf = segments[-1]
        if _is_empty(value):
            node.pop(leaf, None)
        else:
            node[leaf] = value

        # Drop ancestors left without children.
        for parent, segment in zip(reversed(parents), reversed(segments[:-1])):
            if parent.get(segment):
                break
            parent.pop(segment, None)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_text(
            json.dumps(self._root, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text(encoding="utf-8") or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable tree snapshot",
                extra={"path": str(self.persistence_path)},
            )
            data = {}

        self._root = data if isinstance(data, dict) else {}


@lru_cache
def build_default_tree(path: Optional[str] = None) -> MockRealtimeDatabase:
    settings = get_settings()
    tree_path = settings.tree_persistence_path if path is None else path
    persistence = Path(tree_path) if tree_path else None
    return MockRealtimeDatabase(persistence_path=persistence)
