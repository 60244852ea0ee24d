"""
Local Key-Value Store

Persists dashboard state between sessions as one JSON blob per key,
stored as <state_dir>/<key>.json. A missing or corrupt blob reads as
absent so a damaged file never blocks the dashboard from starting.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Shared by every store instance; Streamlit sessions each build their own
_WRITE_LOCK = threading.Lock()


class StoreKeys:
    """Keys used by the dashboard."""
    STATUS_LIGHTS = "statusLights"
    CHART_DATA = "chartData"
    FILTERS = "filters"
    DISPLAY_OPTIONS = "displayOptions"
    DISPLAY_MODES = "displayModes"
    START_DATE = "startDate"
    END_DATE = "endDate"

    ALL = (
        STATUS_LIGHTS,
        CHART_DATA,
        FILTERS,
        DISPLAY_OPTIONS,
        DISPLAY_MODES,
        START_DATE,
        END_DATE,
    )


class KeyValueStore:
    """
    JSON-file backed key-value store.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write leaves the previous blob intact.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode a blob; missing or corrupt blobs return default."""
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable store blob '{key}': {e}")
            return default

    def set(self, key: str, value: Any) -> None:
        """Encode and write a blob."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        with _WRITE_LOCK:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.directory,
                prefix=f".{key}.", suffix=".tmp", delete=False
            ) as f:
                tmp_path = Path(f.name)
                try:
                    json.dump(value, f)
                except (TypeError, ValueError):
                    f.close()
                    tmp_path.unlink()
                    raise
            try:
                os.replace(tmp_path, path)
            except OSError:
                tmp_path.unlink(missing_ok=True)
                raise

    def delete(self, key: str) -> None:
        """Remove a blob if present."""
        path = self._path(key)
        if path.exists():
            path.unlink()

    def contains(self, key: str) -> bool:
        return self._path(key).exists()

    def load_all(self) -> Dict[str, Any]:
        """Read every known dashboard key that is present."""
        blobs: Dict[str, Any] = {}
        for key in StoreKeys.ALL:
            value = self.get(key)
            if value is not None:
                blobs[key] = value
        return blobs

    def clear(self) -> None:
        """Remove every known dashboard key."""
        for key in StoreKeys.ALL:
            self.delete(key)


class MemoryStore(KeyValueStore):
    """In-process store with the same JSON round-trip semantics."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._blobs: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._blobs.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._blobs[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._blobs
