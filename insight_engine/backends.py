"""LLM backends used by the inference client.

Each backend issues exactly one request per ``complete`` call and lets SDK and
transport errors propagate; retrying is the caller's job.
"""
from __future__ import annotations

import logging
from typing import Protocol

from .config import Settings
from .errors import ConfigurationError, TransientExternalFailure

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert market analyst. Respond only with valid JSON."


class InferenceBackend(Protocol):
    async def complete(self, prompt: str) -> str: ...


class OpenAIBackend:
    """OpenAI chat-completions backend."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", max_tokens: int = 4000, temperature: float = 0.3):
        import openai

        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        logger.info("OpenAI backend initialized (%s)", model)

    async def complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise TransientExternalFailure("OpenAI returned an empty completion")
        return content


class ClaudeBackend:
    """Anthropic messages backend."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 4000,
        temperature: float = 0.3,
    ):
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        logger.info("Claude backend initialized (%s)", model)

    async def complete(self, prompt: str) -> str:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(getattr(block, "text", "") for block in response.content)
        if not text:
            raise TransientExternalFailure("Claude returned an empty message")
        return text


def build_backend(settings: Settings) -> InferenceBackend:
    """Instantiate the backend selected by ``settings.inference_provider``."""
    api_key = settings.require_inference_key()
    if settings.inference_provider == "openai":
        return OpenAIBackend(api_key, model=settings.openai_model)
    if settings.inference_provider == "claude":
        return ClaudeBackend(api_key, model=settings.claude_model)
    raise ConfigurationError(f"Unknown inference provider {settings.inference_provider!r}")
