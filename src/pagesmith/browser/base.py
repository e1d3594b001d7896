from abc import ABC, abstractmethod
from typing import Any


class ScriptEngine(ABC):
    @property
    @abstractmethod
    async def url(self) -> str:
        """
        The url of the page scripts are evaluated against
        """

    @abstractmethod
    async def evaluate(self, expression: str) -> Any:
        """
        Evaluates a JS expression in the page's main world and returns its value.
        Raises ScriptEvaluationError when the page reports an uncaught exception.
        """
