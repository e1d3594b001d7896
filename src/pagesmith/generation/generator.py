from logging import getLogger

import boto3
from langchain.chat_models import BaseChatModel

from pagesmith.config import PageSmithConfig
from pagesmith.exceptions import GenerationError
from pagesmith.generation.prompts import (
    LANGUAGE_NAMES,
    TOOL_GENERATION_PROMPT,
    TOOL_GENERATION_SYSTEM_PROMPT,
)
from pagesmith.generation.validator import GeneratedToolDraft, Locale, ResponseValidator
from pagesmith.utils.langchain import ThrottledChatBedrock, build_messages, message_text


logger = getLogger(__name__)

SAFETY_MARKER = "SAFETY"


def build_chat_model(config: PageSmithConfig) -> ThrottledChatBedrock:
    ses = boto3.Session()
    bedrock_client = ses.client("bedrock-runtime")
    return ThrottledChatBedrock(
        client=bedrock_client,
        sleep_seconds=config.throttle_seconds,
        model=config.model_id,
    )


class ToolGenerator:
    """
    Asks a chat model for a tool and normalizes whatever comes back into a draft.

    Only the newest call matters: when ``generate`` is called again before an earlier call
    has finished, the earlier call returns None instead of its draft.
    """

    def __init__(
        self,
        *,
        model: BaseChatModel,
        locale: Locale = Locale.EN,
        validator: ResponseValidator | None = None,
    ) -> None:
        self._model = model
        self._locale = locale
        self._validator = validator or ResponseValidator(locale)
        self._latest_request = 0

    def build_prompt(self, idea: str) -> str:
        return TOOL_GENERATION_PROMPT.format(idea=idea, language=LANGUAGE_NAMES[self._locale])

    async def generate(self, idea: str) -> GeneratedToolDraft | None:
        self._latest_request += 1
        request_id = self._latest_request

        messages = build_messages(TOOL_GENERATION_SYSTEM_PROMPT, self.build_prompt(idea))
        logger.info("Requesting tool generation %s", request_id)
        try:
            response = await self._model.ainvoke(messages)
        except Exception as e:
            logger.exception("Tool generation %s failed", request_id)
            raise GenerationError(
                f"Tool generation failed: {e}", blocked_by_safety=SAFETY_MARKER in str(e)
            ) from e

        if request_id != self._latest_request:
            logger.info("Discarding stale generation %s", request_id)
            return None

        raw_text = message_text(response)
        draft = self._validator.validate_and_normalize(raw_text)
        if not draft.is_valid:
            logger.warning("Could not parse AI response: %s", raw_text)
        return draft
