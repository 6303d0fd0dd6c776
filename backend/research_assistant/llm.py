"""Thin client over the LLM providers used for summarization."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from anthropic import Anthropic

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
PROVIDERS = ("anthropic", "openrouter")

Message = Dict[str, str]


@dataclass(frozen=True)
class LLMReply:
    text: str
    stop_reason: Optional[str]
    model: str


class LLMClient:
    """
    Sends chat prompts to Anthropic directly or to any model behind OpenRouter.

    The provider is fixed at construction from ``settings.llm_provider``.
    OpenRouter speaks the OpenAI chat format, so GPT or Gemini models can
    summarize papers without another SDK.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.provider = self.settings.llm_provider
        self.model = self.settings.llm_model
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {self.provider}")

        self.anthropic_client: Optional[Anthropic] = None
        self.http_client: Optional[httpx.Client] = None
        if self.provider == "anthropic":
            self.anthropic_client = Anthropic(api_key=self.settings.anthropic_api_key)
        else:
            if not self.settings.openrouter_api_key:
                raise ValueError("OPENROUTER_API_KEY is required when llm_provider is 'openrouter'")
            self.http_client = httpx.Client(timeout=self.settings.request_timeout_seconds)

    def complete(
        self,
        messages: List[Message],
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMReply:
        """
        Run one chat completion.

        Args:
            messages: Chat turns as ``{"role": ..., "content": ...}`` dicts
            system: Optional system prompt
            max_tokens: Reply budget, ``settings.llm_max_tokens`` when omitted

        Returns:
            LLMReply with the first text block of the answer
        """
        budget = max_tokens or self.settings.llm_max_tokens
        logger.debug(f"{self.provider} request: model={self.model}, max_tokens={budget}, turns={len(messages)}")

        if self.anthropic_client is not None:
            return self._call_anthropic(messages, system, budget)
        return self._call_openrouter(messages, system, budget)

    def prompt(self, text: str, system: Optional[str] = None, max_tokens: Optional[int] = None) -> str:
        """Ask a single question and return the trimmed answer text."""
        reply = self.complete([{"role": "user", "content": text}], system=system, max_tokens=max_tokens)
        return reply.text.strip()

    def _call_anthropic(self, messages: List[Message], system: Optional[str], max_tokens: int) -> LLMReply:
        request: Dict[str, Any] = {"model": self.model, "max_tokens": max_tokens, "messages": messages}
        if system:
            request["system"] = system

        response = self.anthropic_client.messages.create(**request)
        text = response.content[0].text if response.content else ""
        return LLMReply(text=text, stop_reason=response.stop_reason, model=response.model)

    def _call_openrouter(self, messages: List[Message], system: Optional[str], max_tokens: int) -> LLMReply:
        # OpenAI-style APIs take the system prompt as the first message
        turns = ([{"role": "system", "content": system}] if system else []) + list(messages)

        response = self.http_client.post(
            OPENROUTER_URL,
            headers={
                "Authorization": f"Bearer {self.settings.openrouter_api_key}",
                "X-Title": self.settings.app_name,
            },
            json={"model": self.model, "messages": turns, "max_tokens": max_tokens},
        )
        response.raise_for_status()
        body = response.json()

        choices = body.get("choices") or [{}]
        first = choices[0]
        return LLMReply(
            text=(first.get("message") or {}).get("content") or "",
            stop_reason=first.get("finish_reason"),
            model=body.get("model", self.model),
        )

    def close(self):
        if self.http_client is not None:
            self.http_client.close()
