from typing import Any

from playwright.async_api import BrowserContext, CDPSession, Page

from pagesmith.browser.base import ScriptEngine
from pagesmith.exceptions import ScriptEvaluationError


class AsyncCDPScriptEngine(ScriptEngine):
    def __init__(self, *, cdp_session: CDPSession) -> None:
        self._cdp_session = cdp_session

    async def init(self) -> None:
        await self.enable_domains()

    @classmethod
    async def create(cls, *, cdp_session: CDPSession) -> "AsyncCDPScriptEngine":
        """A factory method to create this class that should be used instead of the constructor"""
        engine = AsyncCDPScriptEngine(cdp_session=cdp_session)
        await engine.init()
        return engine

    @classmethod
    async def for_page(cls, *, page: Page, browser_context: BrowserContext) -> "AsyncCDPScriptEngine":
        cdp_session = await browser_context.new_cdp_session(page)
        return await cls.create(cdp_session=cdp_session)

    async def enable_domains(self) -> None:
        await self._cdp_session.send("Page.enable")
        await self._cdp_session.send("Runtime.enable")

    @property
    async def url(self) -> str:
        info = await self._cdp_session.send("Target.getTargetInfo")
        url: str = info["targetInfo"]["url"]
        return url

    async def evaluate(self, expression: str) -> Any:
        response = await self._cdp_session.send(
            "Runtime.evaluate",
            {
                "expression": expression,
                "returnByValue": True,
                "awaitPromise": True,
                "userGesture": True,
            },
        )

        details = response.get("exceptionDetails")
        if details:
            exception = details.get("exception", {})
            message = exception.get("description") or details.get("text", "Uncaught exception")
            raise ScriptEvaluationError(message)

        return response.get("result", {}).get("value")
