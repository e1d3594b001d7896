from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from pagesmith.browser.base import ScriptEngine
from pagesmith.exceptions import ScriptEvaluationError


class PlaywrightScriptEngine(ScriptEngine):
    def __init__(self, *, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    @property
    async def url(self) -> str:
        return self._page.url

    async def evaluate(self, expression: str) -> Any:
        try:
            return await self._page.evaluate(expression)
        except PlaywrightError as e:
            raise ScriptEvaluationError(e.message) from e
