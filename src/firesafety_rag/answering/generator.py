"""Answer generation through the completion model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from firesafety_rag.answering.llm import get_llm
from firesafety_rag.errors import translate_openai_errors

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


class AnswerGenerator:
    """Send a composed prompt to the chat model and return its text.

    No retry or timeout handling beyond the client defaults.
    """

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self._llm = llm if llm is not None else get_llm()

    def generate(self, prompt: str) -> str:
        with translate_openai_errors("completion"):
            response = self._llm.invoke(prompt)
        answer = response.content if isinstance(response.content, str) else str(response.content)
        logger.debug("Answer: %s", answer)
        return answer
