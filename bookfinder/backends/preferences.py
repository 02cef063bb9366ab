import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from bookfinder.interfaces.preferences import PreferenceStore

logger = logging.getLogger(__name__)


class InMemoryPreferences(PreferenceStore):
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    async def get_string_list(self, key: str) -> list[str] | None:
        value = self._values.get(key)
        return list(value) if isinstance(value, list) else None

    async def set_string_list(self, key: str, value: list[str]) -> bool:
        self._values[key] = list(value)
        return True

    async def get_string(self, key: str) -> str | None:
        value = self._values.get(key)
        return value if isinstance(value, str) else None

    async def set_string(self, key: str, value: str) -> bool:
        self._values[key] = value
        return True

    async def remove(self, key: str) -> bool:
        self._values.pop(key, None)
        return True


class JsonFilePreferences(PreferenceStore):
    """Preferences persisted as one JSON document on disk.

    Every write rewrites the whole document through a temporary file and
    ``os.replace`` so a crash mid-write leaves the previous version intact.
    A document that cannot be parsed is treated as empty.
    """

    def __init__(self, path: Path | str = "preferences.json") -> None:
        self.path = Path(path)

    async def get_string_list(self, key: str) -> list[str] | None:
        value = (await self._load()).get(key)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return value
        return None

    async def set_string_list(self, key: str, value: list[str]) -> bool:
        return await self._update(key, list(value))

    async def get_string(self, key: str) -> str | None:
        value = (await self._load()).get(key)
        return value if isinstance(value, str) else None

    async def set_string(self, key: str, value: str) -> bool:
        return await self._update(key, value)

    async def remove(self, key: str) -> bool:
        return await self._update(key, None)

    async def _load(self) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_document)

    async def _update(self, key: str, value: Any) -> bool:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, lambda: self._write_key(key, value))
        return True

    def _read_document(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable preferences file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_key(self, key: str, value: Any) -> None:
        data = self._read_document()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
