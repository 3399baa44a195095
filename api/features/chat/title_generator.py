"""Conversation title generation from the user's first message."""
import time

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from api.features.chat.exceptions import TitleGenerationError
from api.features.chat.messages import content_text
from api.features.chat.prompts import TITLE_SYSTEM_PROMPT, build_title_prompt

logger = structlog.get_logger("chat.title")


class TitleGenerator:
    """Asks the model for a short title; the 80 character limit is only an instruction."""

    def __init__(self, chat_model: BaseChatModel, model_name: str):
        self.chat_model = chat_model
        self.model_name = model_name

    async def generate(self, content: str) -> str:
        messages = [
            SystemMessage(content=TITLE_SYSTEM_PROMPT),
            HumanMessage(content=build_title_prompt(content)),
        ]
        start = time.time()
        try:
            result = await self.chat_model.ainvoke(messages)
        except Exception as e:
            logger.error("title_generation_failed", model=self.model_name, error=str(e))
            raise TitleGenerationError(str(e), model=self.model_name) from e

        title = content_text(result.content).strip()
        logger.info(
            "title_generated",
            model=self.model_name,
            latency_ms=int((time.time() - start) * 1000),
            length=len(title),
        )
        return title
