from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path

from servicehub.application.ports.key_value_store import KeyValueStorePort

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class JsonKeyValueStore(KeyValueStorePort):
    """One JSON file per key, written atomically through a temp file."""

    def __init__(self, data_dir: str = "./data/session") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_file_path(self, key: str) -> Path:
        return self._data_dir / f"{_UNSAFE.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # A corrupted entry reads as missing
            self._logger.warning("Unreadable session entry", extra={"reason": key, "error": str(e)})
            return None
        value = data.get("value") if isinstance(data, dict) else None
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        with self._lock:
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump({"key": key, "value": value}, f, ensure_ascii=False)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink(missing_ok=True)
                raise

    def remove(self, key: str) -> None:
        with self._lock:
            self._get_file_path(key).unlink(missing_ok=True)
