import json
import os
import tempfile
from collections.abc import Iterable
from contextlib import suppress
from logging import getLogger
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pagesmith.exceptions import ToolStoreError
from pagesmith.tools.models import AiPreset, Tool, first_run_tool


logger = getLogger(__name__)

TOOLS_KEY = "saved_shortcuts"
SANDBOX_MODE_KEY = "sandbox_mode"


class KeyValueStore(Protocol):
    def get_string(self, key: str) -> str | None: ...

    def put_string(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    def put_string(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileKeyValueStore:
    """
    Keeps every key in one JSON object on disk. Writes go to a temporary file in the same
    directory which then replaces the original.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except ValueError as e:
                raise ToolStoreError(f"{self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ToolStoreError(f"{self._path} does not hold a JSON object")
        return data

    def get_string(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def put_string(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self._path)
        except Exception:
            with suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise


def read_sandbox_mode(kv: KeyValueStore) -> bool:
    """Sandbox mode is on unless it was explicitly switched off"""
    return kv.get_string(SANDBOX_MODE_KEY) != "false"


def write_sandbox_mode(kv: KeyValueStore, enabled: bool) -> None:
    kv.put_string(SANDBOX_MODE_KEY, "true" if enabled else "false")


def serialize_tools(tools: Iterable[Tool]) -> str:
    return json.dumps(
        [tool.to_record() for tool in tools], ensure_ascii=False, separators=(",", ":")
    )


def deserialize_tools(payload: str) -> list[Tool]:
    try:
        records = json.loads(payload)
    except ValueError as e:
        raise ToolStoreError(f"Persisted tools are not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise ToolStoreError("Persisted tools are not a JSON array")

    tools: list[Tool] = []
    for idx, record in enumerate(records):
        try:
            tools.append(Tool.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping unreadable tool record %s: %s", idx, e)
    return tools


class ToolStore:
    """
    The ordered tool collection, persisted as a single JSON array under one key.
    """

    def __init__(self, kv: KeyValueStore, key: str = TOOLS_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> list[Tool]:
        payload = self._kv.get_string(self._key)
        if payload is None:
            logger.info("No saved tools, seeding the first-run tool")
            return [first_run_tool()]
        return deserialize_tools(payload)

    def save(self, tools: Iterable[Tool]) -> None:
        self._kv.put_string(self._key, serialize_tools(tools))

    def add(self, tool: Tool) -> list[Tool]:
        tools = self.load()
        tools.append(tool)
        self.save(tools)
        return tools

    def update(
        self,
        index: int,
        *,
        name: str | None = None,
        script: str | None = None,
        is_auto_run: bool | None = None,
    ) -> list[Tool]:
        tools = self.load()
        tool = tools[index]
        if name is not None:
            tool.name = name
        if script is not None:
            tool.script = script
        if is_auto_run is not None:
            tool.is_auto_run = is_auto_run
        self.save(tools)
        return tools

    def set_visible_on_main(self, index: int, visible: bool) -> list[Tool]:
        tools = self.load()
        tools[index].is_visible_on_main = visible
        self.save(tools)
        return tools

    def remove(self, index: int) -> list[Tool]:
        tools = self.load()
        del tools[index]
        self.save(tools)
        return tools

    def onboard(self, presets: Iterable[AiPreset]) -> list[Tool]:
        """Adds a trusted tool for every chosen preset"""
        tools = self.load()
        tools.extend(Tool.from_preset(preset) for preset in presets)
        self.save(tools)
        return tools
