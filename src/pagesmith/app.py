import asyncio
import sys
from logging import getLogger

from playwright.async_api import async_playwright

from pagesmith.browser.playwright_page import PlaywrightScriptEngine
from pagesmith.browser.session import AutoRunSession
from pagesmith.config import PageSmithConfig
from pagesmith.execution.gate import ExecutionGate, GateConfig
from pagesmith.execution.runner import ScriptRunner
from pagesmith.generation.generator import ToolGenerator, build_chat_model
from pagesmith.tools.models import Tool
from pagesmith.tools.store import JsonFileKeyValueStore, ToolStore, read_sandbox_mode
from pagesmith.utils.logging import create_stream_logging_handler


logger = getLogger(__name__)

USAGE = "usage: pagesmith <url> <idea>"


def main() -> None:
    if len(sys.argv) < 3:
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    url, idea = sys.argv[1], " ".join(sys.argv[2:])
    asyncio.run(run(url, idea))


async def run(url: str, idea: str) -> None:
    config = PageSmithConfig.from_env()
    create_stream_logging_handler(config.log_level)

    kv = JsonFileKeyValueStore(config.storage_path)
    store = ToolStore(kv)
    # either the persisted toggle or the environment can switch the sandbox off
    gate_config = GateConfig(sandbox_mode=read_sandbox_mode(kv) and config.sandbox_mode)

    generator = ToolGenerator(model=build_chat_model(config), locale=config.locale)
    draft = await generator.generate(idea)
    if draft is None:
        return

    print(f"{draft.name} ({draft.validity})\n\n{draft.explanation}\n\n{draft.script}\n")
    if not draft.is_valid:
        return

    tool = Tool.from_draft(draft)
    store.add(tool)
    logger.info("Saved untrusted tool %r", tool.name)

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        page = await browser.new_page()

        gate = ExecutionGate(ScriptRunner(PlaywrightScriptEngine(page=page)), gate_config)
        session = AutoRunSession(page=page, store=store, gate=gate)
        session.attach()

        await page.goto(url, wait_until="load")

        outcome = await gate.request(tool)
        if outcome is None:
            prompt = gate.reveal_script()
            answer = input(f"Run untrusted tool {prompt.tool_name!r}? [y/N] ")
            if answer.strip().lower() == "y":
                outcome = await gate.confirm()
            else:
                gate.cancel()

        if outcome is not None:
            print("Ran successfully" if outcome.ok else f"Script error: {outcome.detail}")

        session.detach()
        await browser.close()
