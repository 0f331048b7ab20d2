"""
Design (storage.py)
- Purpose: Key-value blob store the ledger persists into (get/set/clear by string key).
           MemoryStore keeps values in a dict; JsonFileStore keeps every key in one JSON file.
- Inputs: Path (from get_data_path()), string keys and string values.
- Outputs: str | None on get; None on set/clear.
- Side effects: JsonFileStore reads/writes its file. On read failure a key reads as absent;
                on write failure the error is logged and ignored (writes are fire-and-forget).
- Thread-safety: Call with the ledger lock held (TicketLedger does this).
"""

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .config import DATA_DIR_NAME, DATA_FILENAME

logger = logging.getLogger(__name__)


def get_data_path() -> Path:
    """
    Resolve path for the data file. Prefer the app data dir on Windows so it survives
    reinstalls; elsewhere use ~/.tixsuite.
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            base = Path(appdata) / DATA_DIR_NAME
            try:
                base.mkdir(parents=True, exist_ok=True)
                return base / DATA_FILENAME
            except OSError:
                pass
    return Path.home() / ".tixsuite" / DATA_FILENAME


class KeyValueStore(ABC):
    """String key -> string value persistence, the only storage contract the ledger relies on."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        ...


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Design (JsonFileStore)
    - State: path to a JSON object {key -> value string}.
    - Every set/clear rewrites the whole file (small data, one writer).
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        """
        Load the whole file. Returns empty dict on missing file or parse error.
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring %s: expected a JSON object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        """
        Save the whole file. Logs and ignores OSError (e.g. read-only location).
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as exc:
            logger.error("Could not write %s: %s", self.path, exc)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def clear(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
