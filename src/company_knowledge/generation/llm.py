"""Generation gateway — single place to swap chat providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``OPENAI_BASE_URL`` to any server
   exposing ``/v1/chat/completions`` (vLLM, Ollama, ...).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from langchain_openai import ChatOpenAI

from company_knowledge.errors import GenerationProviderError
from company_knowledge.generation.prompts import build_grounded_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from company_knowledge.config import Settings

logger = logging.getLogger(__name__)


class GeneratorBase(ABC):
    """Provider-agnostic grounded-answer interface."""

    @abstractmethod
    def generate(self, context: str, question: str) -> str:
        """Answer *question* from *context* only.

        Raises
        ------
        GenerationProviderError
            On any provider failure.
        """
        ...


class ChatModelGenerator(GeneratorBase):
    """Adapter over a LangChain chat model.

    The model's reply is returned as-is; citations are assembled by the
    caller from search hits, never by the model.
    """

    def __init__(self, llm: BaseChatModel, *, provider_name: str = "openai") -> None:
        self._llm = llm
        self.provider_name = provider_name

    def generate(self, context: str, question: str) -> str:
        messages = build_grounded_prompt(context, question)
        try:
            response = self._llm.invoke(messages)
        except Exception as exc:
            raise GenerationProviderError(f"Chat completion failed: {exc}", provider_name=self.provider_name) from exc
        return _message_text(response.content)


def _message_text(content: Any) -> str:
    """Flatten a chat message ``content`` (string or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


def get_llm(settings: Settings) -> ChatOpenAI:
    """Return the configured chat model.

    When ``settings.openai_base_url`` is set the client is pointed at that
    endpoint instead of the OpenAI cloud API.  A dummy API key (``"EMPTY"``)
    is used when none is configured because self-hosted servers usually do
    not check it.
    """
    kwargs: dict = {
        "model": settings.openai_model,
        "temperature": settings.llm_temperature,
        "timeout": settings.request_timeout,
        "max_retries": settings.provider_max_retries,
    }

    if settings.openai_base_url:
        logger.info("Using OpenAI-compatible chat endpoint: %s", settings.openai_base_url)
        kwargs["base_url"] = settings.openai_base_url
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)


def get_generator(settings: Settings) -> ChatModelGenerator:
    """Build the generation gateway described by *settings*."""
    return ChatModelGenerator(get_llm(settings))
