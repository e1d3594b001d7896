from logging import getLogger

from playwright.async_api import Page

from pagesmith.exceptions import ToolStoreError
from pagesmith.execution.gate import ExecutionGate
from pagesmith.execution.runner import ScriptOutcome
from pagesmith.tools.store import ToolStore


logger = getLogger(__name__)


class AutoRunSession:
    """
    Runs the stored auto-run tools every time the page finishes loading. Auto-run tools skip
    the confirmation step no matter how they are trusted or how sandbox mode is set.
    """

    def __init__(self, *, page: Page, store: ToolStore, gate: ExecutionGate) -> None:
        self._page = page
        self._store = store
        self._gate = gate
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        self._page.on("load", self._on_load)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        self._page.remove_listener("load", self._on_load)
        self._attached = False

    async def _on_load(self, page: Page) -> None:
        try:
            await self.run_auto_tools()
        except ToolStoreError:
            logger.exception("Skipping auto-run tools on %s", page.url)

    async def run_auto_tools(self) -> list[ScriptOutcome]:
        tools = self._store.load()
        outcomes = await self._gate.run_auto_tools(tools)
        failed = [o for o in outcomes if not o.ok]
        logger.info(
            "Ran %s auto-run tools on %s (%s failed)", len(outcomes), self._page.url, len(failed)
        )
        return outcomes
