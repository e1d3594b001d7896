from __future__ import annotations

import json
from pathlib import Path

import pytest

from pagesmith.exceptions import ToolStoreError
from pagesmith.generation.validator import (
    DraftValidity,
    GeneratedToolDraft,
    validate_and_normalize,
)
from pagesmith.tools.models import BUILTIN_PRESETS, PRESET_PLACEHOLDER_SCRIPT, Tool
from pagesmith.tools.store import (
    TOOLS_KEY,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    ToolStore,
    read_sandbox_mode,
    serialize_tools,
    write_sandbox_mode,
)


def _tools() -> list[Tool]:
    return [
        Tool(name="Hide Ads", script="document.querySelectorAll('.ad').forEach(e => e.remove())"),
        Tool(
            name="Dark Mode 🌙",
            script="document.body.style.filter = 'invert(1)';\n// done",
            is_auto_run=True,
            is_visible_on_main=True,
            icon="🌙",
            description="โหมดมืด",
            is_trusted=True,
        ),
        Tool(name="  padded  ", script=' alert("\\"quoted\\"") ', description=" "),
    ]


def test_first_run_seeds_trusted_visible_tool() -> None:
    tools = ToolStore(InMemoryKeyValueStore()).load()

    assert len(tools) == 1
    assert tools[0].name == "Dark Mode"
    assert tools[0].is_trusted
    assert tools[0].is_visible_on_main
    assert not tools[0].is_auto_run


def test_round_trip_reproduces_every_field() -> None:
    store = ToolStore(InMemoryKeyValueStore())
    tools = _tools()

    store.save(tools)

    assert store.load() == tools


def test_empty_list_round_trips_without_seeding() -> None:
    store = ToolStore(InMemoryKeyValueStore())
    store.save([])
    assert store.load() == []


def test_saved_format_uses_camel_case_keys() -> None:
    kv = InMemoryKeyValueStore()
    ToolStore(kv).save([Tool(name="T", script="s()")])

    payload = kv.get_string(TOOLS_KEY)
    assert payload is not None
    assert json.loads(payload) == [
        {
            "name": "T",
            "script": "s()",
            "isAutoRun": False,
            "isVisibleOnMain": False,
            "icon": "🔧",
            "description": "",
            "isTrusted": False,
        }
    ]


def test_save_of_load_is_a_no_op() -> None:
    payload = serialize_tools(_tools())
    kv = InMemoryKeyValueStore({TOOLS_KEY: payload})
    store = ToolStore(kv)

    store.save(store.load())

    assert kv.get_string(TOOLS_KEY) == payload


def test_older_records_get_defaults() -> None:
    kv = InMemoryKeyValueStore(
        {TOOLS_KEY: '[{"name":"Old","script":"old()","isAutoRun":true}]'}
    )

    (tool,) = ToolStore(kv).load()

    assert tool == Tool(name="Old", script="old()", is_auto_run=True)
    assert tool.icon == "🔧"
    assert tool.description == ""
    assert not tool.is_trusted
    assert not tool.is_visible_on_main


def test_unreadable_records_are_skipped() -> None:
    kv = InMemoryKeyValueStore(
        {TOOLS_KEY: '[{"name":"Good","script":"g()"},{"script":"no name"},"junk"]'}
    )
    assert [t.name for t in ToolStore(kv).load()] == ["Good"]


@pytest.mark.parametrize("payload", ["not json", '{"name":"x"}'])
def test_corrupt_payload_raises(payload: str) -> None:
    store = ToolStore(InMemoryKeyValueStore({TOOLS_KEY: payload}))
    with pytest.raises(ToolStoreError):
        store.load()


def test_add_update_toggle_remove() -> None:
    store = ToolStore(InMemoryKeyValueStore())
    store.save([])

    store.add(Tool(name="A", script="a()"))
    store.add(Tool(name="B", script="b()"))
    store.update(0, name="A2", is_auto_run=True)
    store.set_visible_on_main(1, True)

    tools = store.load()
    assert [t.name for t in tools] == ["A2", "B"]
    assert tools[0].script == "a()"
    assert tools[0].is_auto_run
    assert tools[1].is_visible_on_main

    assert [t.name for t in store.remove(0)] == ["B"]
    assert [t.name for t in store.load()] == ["B"]


def test_add_after_first_run_keeps_seed() -> None:
    store = ToolStore(InMemoryKeyValueStore())
    tools = store.add(Tool(name="Mine", script="m()"))
    assert [t.name for t in tools] == ["Dark Mode", "Mine"]


def test_onboarding_creates_trusted_preset_tools() -> None:
    store = ToolStore(InMemoryKeyValueStore())
    store.save([])

    tools = store.onboard(BUILTIN_PRESETS[:2])

    assert [t.name for t in tools] == [p.name for p in BUILTIN_PRESETS[:2]]
    for tool, preset in zip(tools, BUILTIN_PRESETS):
        assert tool.is_trusted
        assert tool.is_visible_on_main
        assert tool.icon == preset.icon
        assert tool.script == PRESET_PLACEHOLDER_SCRIPT


def test_accepted_draft_is_untrusted_by_default() -> None:
    draft = GeneratedToolDraft(
        name="N", script="s()", explanation="does things", validity=DraftValidity.FULLY_VALID
    )

    tool = Tool.from_draft(draft)
    assert not tool.is_trusted
    assert tool.description == "does things"
    assert tool.is_visible_on_main

    assert Tool.from_draft(draft, trusted=True).is_trusted


def test_file_store_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    ToolStore(JsonFileKeyValueStore(path)).save(_tools())

    assert ToolStore(JsonFileKeyValueStore(path)).load() == _tools()
    assert list(path.parent.iterdir()) == [path]


def test_file_store_round_trips_lone_surrogates(tmp_path: Path) -> None:
    draft = validate_and_normalize('{"name":"\\ud83d","script":"s()","explanation":"e"}')
    assert draft.validity is DraftValidity.FULLY_VALID

    path = tmp_path / "settings.json"
    tools = ToolStore(JsonFileKeyValueStore(path)).add(Tool.from_draft(draft))

    assert ToolStore(JsonFileKeyValueStore(path)).load() == tools
    assert tools[-1].name == "\ud83d"


def test_file_store_keeps_other_keys(tmp_path: Path) -> None:
    kv = JsonFileKeyValueStore(tmp_path / "settings.json")
    write_sandbox_mode(kv, False)
    ToolStore(kv).save([])

    assert read_sandbox_mode(kv) is False
    assert ToolStore(kv).load() == []


def test_file_store_rejects_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2", encoding="utf-8")

    with pytest.raises(ToolStoreError):
        JsonFileKeyValueStore(path).get_string(TOOLS_KEY)


def test_sandbox_mode_defaults_to_enabled() -> None:
    kv = InMemoryKeyValueStore()
    assert read_sandbox_mode(kv) is True

    write_sandbox_mode(kv, False)
    assert read_sandbox_mode(kv) is False

    write_sandbox_mode(kv, True)
    assert read_sandbox_mode(kv) is True
