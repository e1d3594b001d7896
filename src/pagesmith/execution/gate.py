from collections.abc import Iterable
from enum import StrEnum
from logging import getLogger

from pydantic import BaseModel, ConfigDict

from pagesmith.exceptions import InvalidGateTransitionError
from pagesmith.execution.runner import ScriptOutcome, ScriptRunner
from pagesmith.tools.models import Tool


logger = getLogger(__name__)


class GateState(StrEnum):
    IDLE = "idle"
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    EXECUTED = "executed"


class GateConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sandbox_mode: bool = True


class ConfirmationPrompt(BaseModel):
    """What the user sees before running an untrusted tool in sandbox mode"""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    description: str
    # Only filled in once the user asks what the tool does
    script: str | None = None


def requires_confirmation(tool: Tool, config: GateConfig) -> bool:
    return config.sandbox_mode and not tool.is_trusted


class ExecutionGate:
    """
    Decides whether a tool runs straight away or waits for the user to confirm it.

    Trusted tools, and every tool while sandbox mode is off, go straight to the runner.
    Anything else waits in PENDING_CONFIRMATION until ``confirm`` or ``cancel``. Requesting
    another tool while one is pending replaces the pending one.
    """

    def __init__(self, runner: ScriptRunner, config: GateConfig | None = None) -> None:
        self._runner = runner
        self._config = config or GateConfig()
        self._state = GateState.IDLE
        self._pending: Tool | None = None
        self._script_revealed = False
        self._last_resolution: GateState | None = None

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def last_resolution(self) -> GateState | None:
        """How the most recent request ended: EXECUTED, CONFIRMED or CANCELLED"""
        return self._last_resolution

    @property
    def config(self) -> GateConfig:
        return self._config

    @config.setter
    def config(self, config: GateConfig) -> None:
        self._config = config

    @property
    def pending_tool(self) -> Tool | None:
        return self._pending

    @property
    def prompt(self) -> ConfirmationPrompt | None:
        if self._pending is None:
            return None
        return ConfirmationPrompt(
            tool_name=self._pending.name,
            description=self._pending.description,
            script=self._pending.script if self._script_revealed else None,
        )

    def _require_pending(self, action: str) -> Tool:
        if self._state is not GateState.PENDING_CONFIRMATION or self._pending is None:
            raise InvalidGateTransitionError(f"Cannot {action} while {self._state}")
        return self._pending

    async def request(self, tool: Tool) -> ScriptOutcome | None:
        """
        Runs the tool when no confirmation is needed and returns its outcome. Returns None
        when the tool is now waiting for confirmation.
        """
        if not requires_confirmation(tool, self._config):
            self._pending = None
            self._script_revealed = False
            self._state = GateState.EXECUTED
            self._last_resolution = GateState.EXECUTED
            return await self._runner.run(tool.script)

        if self._pending is not None:
            logger.info("Replacing pending tool %r with %r", self._pending.name, tool.name)
        self._pending = tool
        self._script_revealed = False
        self._state = GateState.PENDING_CONFIRMATION
        return None

    def reveal_script(self) -> ConfirmationPrompt:
        tool = self._require_pending("reveal a script")
        self._script_revealed = True
        return ConfirmationPrompt(
            tool_name=tool.name, description=tool.description, script=tool.script
        )

    async def confirm(self) -> ScriptOutcome:
        tool = self._require_pending("confirm")
        self._pending = None
        self._script_revealed = False
        self._state = GateState.CONFIRMED
        self._last_resolution = GateState.CONFIRMED
        return await self._runner.run(tool.script)

    def cancel(self) -> None:
        tool = self._require_pending("cancel")
        logger.info("Cancelled %r", tool.name)
        self._pending = None
        self._script_revealed = False
        self._last_resolution = GateState.CANCELLED
        self._state = GateState.IDLE

    async def run_auto_tools(self, tools: Iterable[Tool]) -> list[ScriptOutcome]:
        """Runs every auto-run tool directly. Confirmation and gate state are not involved."""
        outcomes = []
        for tool in tools:
            if tool.is_auto_run:
                outcomes.append(await self._runner.run(tool.script))
        return outcomes
