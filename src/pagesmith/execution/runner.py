from logging import getLogger
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict

from pagesmith.browser.base import ScriptEngine


logger = getLogger(__name__)

SUCCESS_MARKER = "SUCCESS"
ERROR_MARKER = "ERROR:"

# The body sits on its own lines so a trailing `//` comment cannot swallow the epilogue
_WRAPPER_TEMPLATE = (
    "(function() {{ try {{\n"
    "{body}\n"
    "; return '" + SUCCESS_MARKER + "'; }} catch (e) {{ "
    "return '" + ERROR_MARKER + "' + ((e && e.stack) || String(e)); }} }})()"
)


class ScriptOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success", "error"]
    detail: str | None = None

    @classmethod
    def success(cls) -> Self:
        return cls(status="success")

    @classmethod
    def error(cls, detail: str) -> Self:
        return cls(status="error", detail=detail)

    @property
    def ok(self) -> bool:
        return self.status == "success"


def wrap_script(body: str) -> str:
    return _WRAPPER_TEMPLATE.format(body=body)


def interpret_result(result: object) -> ScriptOutcome:
    if isinstance(result, str) and result.startswith(ERROR_MARKER):
        return ScriptOutcome.error(result[len(ERROR_MARKER) :])
    return ScriptOutcome.success()


class ScriptRunner:
    """
    Runs tool scripts on a page. Faults thrown by the script, and faults the engine raises
    while evaluating it, both come back as an error outcome.
    """

    def __init__(self, engine: ScriptEngine) -> None:
        self._engine = engine

    async def run(self, script: str) -> ScriptOutcome:
        try:
            result = await self._engine.evaluate(wrap_script(script))
        except Exception as e:
            logger.exception("Script evaluation failed")
            return ScriptOutcome.error(str(e) or type(e).__name__)

        outcome = interpret_result(result)
        if not outcome.ok:
            logger.warning("Script raised: %s", outcome.detail)
        return outcome
