"""Key-value persistence for the registry tree."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Optional, Protocol

from oid_tree.tree import OidNode
from oid_tree.visualizer import node_from_dict, node_to_dict


LOGGER = logging.getLogger(__name__)

REGISTRY_KEY = "oid-registry"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the stored value for key, or None."""

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""


class InMemoryStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value


class JsonFileStore:
    """Keeps every key in one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            LOGGER.warning("Store file is not valid JSON, treating it as empty: %s", self.path)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Store file does not hold a JSON object, treating it as empty: %s", self.path)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        LOGGER.debug("Store key '%s' written to %s", key, self.path)


def load_registry_tree(store: KeyValueStore, key: str = REGISTRY_KEY) -> Optional[OidNode]:
    """Return the persisted tree, or None when nothing usable is stored."""
    payload = store.get(key)
    if payload is None:
        return None
    try:
        return node_from_dict(payload)
    except ValueError as exc:
        LOGGER.warning("Persisted registry under '%s' is unreadable: %s", key, exc)
        return None


def save_registry_tree(store: KeyValueStore, tree: OidNode, key: str = REGISTRY_KEY) -> None:
    store.set(key, node_to_dict(tree))
