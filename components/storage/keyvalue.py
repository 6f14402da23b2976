"""Synchronous string key-value areas used for browser-style local state."""

import json
import logging
import os
from typing import Dict, List, Optional, Protocol

from components.core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class KeyValueArea(Protocol):
    """Minimal string key-value contract, same shape as a browser localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemoryKeyValueArea:
    """Process local area, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class JsonFileKeyValueArea:
    """
    Area persisted as a single JSON object file.

    The file is created on first write. Every mutation rewrites the whole file
    through a temporary sibling and ``os.replace`` so readers never observe a
    half written document.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read key-value file %s: %s", self.path, exc, exc_info=True)
            raise StorageUnavailableError("Local storage file is unreadable") from exc
        if not isinstance(data, dict):
            raise StorageUnavailableError("Local storage file is corrupt")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Failed to write key-value file %s: %s", self.path, exc, exc_info=True)
            raise StorageUnavailableError("Local storage file is not writable") from exc

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def keys(self) -> List[str]:
        return list(self._load())
