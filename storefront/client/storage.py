import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """
    Named persistence slots ("cart-storage", "wishlist-store", ...).

    Each slot holds one JSON-compatible dict.
    """

    def load(self, name: str) -> dict[str, Any] | None: ...

    def save(self, name: str, data: dict[str, Any]) -> None: ...


class MemoryStorage:
    def __init__(self):
        self.slots: dict[str, dict[str, Any]] = {}

    def load(self, name: str) -> dict[str, Any] | None:
        data = self.slots.get(name)
        return json.loads(json.dumps(data)) if data is not None else None

    def save(self, name: str, data: dict[str, Any]) -> None:
        # Round-trip through JSON so callers see what a file would hold
        self.slots[name] = json.loads(json.dumps(data))


class JsonFileStorage:
    """
    One `<name>.json` file per slot under `directory`.

    A missing or unreadable file loads as None, so a corrupt cache only
    costs a refetch.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def load(self, name: str) -> dict[str, Any] | None:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable slot %s: %s", path, e)
            return None
        return data if isinstance(data, dict) else None

    def save(self, name: str, data: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(path)
