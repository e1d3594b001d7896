import asyncio
import time
from logging import getLogger
from typing import Any

from langchain_aws.chat_models import ChatBedrock
from langchain_core.language_models.base import LanguageModelInput
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableConfig


logger = getLogger(__name__)


def build_messages(system_prompt: str, human_prompt: str) -> list[BaseMessage]:
    return [
        SystemMessage(content=system_prompt.strip()),
        HumanMessage(content=human_prompt.strip()),
    ]


def message_text(message: BaseMessage) -> str:
    """
    Flattens a chat message into plain text. Providers such as Bedrock may return a list of
    content blocks instead of a single string.
    """
    content = message.content
    if isinstance(content, str):
        return content

    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


class ThrottledChatBedrock(ChatBedrock):
    """A Langchain ChatBedrock client that pauses between model calls to avoid throttling"""

    def __init__(self, sleep_seconds: float = 0, **kwargs: Any):
        super().__init__(**kwargs)
        self._sleep_seconds = sleep_seconds

    def invoke(
        self,
        input: LanguageModelInput,
        config: RunnableConfig | None = None,
        **kwargs: Any,
    ) -> AIMessage:
        if self._sleep_seconds:
            logger.debug("Sleeping %ss before model call", self._sleep_seconds)
            time.sleep(self._sleep_seconds)

        return super().invoke(input, config=config, **kwargs)

    async def ainvoke(
        self,
        input: LanguageModelInput,
        config: RunnableConfig | None = None,
        **kwargs: Any,
    ) -> AIMessage:
        return await asyncio.to_thread(self.invoke, input, config=config, **kwargs)
