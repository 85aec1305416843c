"""Unified LLM client wrapping both Anthropic and OpenAI SDKs."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from daydigest.core.config import LLMConfig
from daydigest.core.errors import ConfigError, LLMError

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 5


@dataclass
class LLMResponse:
    """Response from an LLM completion call."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def _anthropic_text(response, desc: str) -> str:
    """Text of the first text block; anything else is an :class:`LLMError`."""
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            return text
    raise LLMError(f"Empty or non-text response on {desc}")


class LLMClient:
    """Dispatches completions to Anthropic or an OpenAI-compatible API.

    - "anthropic": the anthropic SDK
    - "openai": the openai SDK with OpenAI's default base URL
    - "openai-compatible": the openai SDK with a custom base_url
      (Ollama, vLLM, LM Studio, ...)

    Transient errors (rate limit, timeout, connection) are retried once.
    Anything else surfaces as :class:`LLMError`.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config
        self._client = self._create_client()

    def _create_client(self):
        api_key = self.config.resolve_api_key()
        kwargs = {}
        if api_key:
            kwargs["api_key"] = api_key
        if self.config.base_url:
            kwargs["base_url"] = self.config.base_url

        if self.config.provider == "anthropic":
            import anthropic

            return anthropic.Anthropic(**kwargs)

        if self.config.provider in ("openai", "openai-compatible"):
            import openai

            if self.config.provider == "openai-compatible" and not self.config.base_url:
                raise ConfigError("openai-compatible provider requires base_url to be set")
            return openai.OpenAI(**kwargs)

        raise ConfigError(
            f"Unknown LLM provider: {self.config.provider!r}. "
            f"Supported: 'anthropic', 'openai', 'openai-compatible'"
        )

    def complete(
        self,
        messages: list[dict],
        max_tokens: int | None = None,
        temperature: float | None = None,
        desc: str = "request",
    ) -> LLMResponse:
        """Send a completion request with one retry on transient errors.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            max_tokens: Override max_tokens from config.
            temperature: Override temperature from config.
            desc: Short label used in log and error messages.
        """
        resolved_max_tokens = max_tokens if max_tokens is not None else self.config.max_tokens
        resolved_temperature = temperature if temperature is not None else self.config.temperature

        if self.config.provider == "anthropic":
            return self._complete_anthropic(messages, resolved_max_tokens, resolved_temperature, desc)
        return self._complete_openai(messages, resolved_max_tokens, resolved_temperature, desc)

    def _complete_anthropic(
        self,
        messages: list[dict],
        max_tokens: int,
        temperature: float,
        desc: str,
    ) -> LLMResponse:
        import anthropic

        for attempt in range(2):
            try:
                response = self._client.messages.create(
                    model=self.config.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=messages,
                )
                return LLMResponse(
                    content=_anthropic_text(response, desc),
                    model=getattr(response, "model", None) or self.config.model,
                    input_tokens=getattr(response.usage, "input_tokens", 0),
                    output_tokens=getattr(response.usage, "output_tokens", 0),
                )
            except (
                anthropic.RateLimitError,
                anthropic.APIConnectionError,
                anthropic.APITimeoutError,
            ) as exc:
                if attempt == 0:
                    logger.warning(
                        "Transient error on %s, retrying in %ss: %s", desc, RETRY_DELAY_SECONDS, exc
                    )
                    time.sleep(RETRY_DELAY_SECONDS)
                else:
                    raise LLMError(f"Failed {desc} after 2 attempts: {exc}") from exc
            except anthropic.APIError as exc:
                raise LLMError(f"LLM API error on {desc}: {exc}") from exc

        raise LLMError(f"Failed {desc}")

    def _complete_openai(
        self,
        messages: list[dict],
        max_tokens: int,
        temperature: float,
        desc: str,
    ) -> LLMResponse:
        import openai

        for attempt in range(2):
            try:
                response = self._client.chat.completions.create(
                    model=self.config.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=messages,
                )
                if not response.choices:
                    raise LLMError(f"Empty response on {desc}")
                usage = response.usage
                return LLMResponse(
                    content=response.choices[0].message.content or "",
                    model=response.model or self.config.model,
                    input_tokens=usage.prompt_tokens if usage else 0,
                    output_tokens=usage.completion_tokens if usage else 0,
                )
            except (openai.RateLimitError, openai.APIConnectionError, openai.APITimeoutError) as exc:
                if attempt == 0:
                    logger.warning(
                        "Transient error on %s, retrying in %ss: %s", desc, RETRY_DELAY_SECONDS, exc
                    )
                    time.sleep(RETRY_DELAY_SECONDS)
                else:
                    raise LLMError(f"Failed {desc} after 2 attempts: {exc}") from exc
            except openai.APIError as exc:
                raise LLMError(f"LLM API error on {desc}: {exc}") from exc

        raise LLMError(f"Failed {desc}")
