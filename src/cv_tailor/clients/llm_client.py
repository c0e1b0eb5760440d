"""OpenAI-compatible gateway client: one completion request per call."""

from __future__ import annotations

import logging

import openai
from openai.types.chat import ChatCompletion

from cv_tailor.config import GatewayConfig, GenerationConfig
from cv_tailor.errors import GatewayError
from cv_tailor.pipeline.prompt_composer import ComposedPrompt

logger = logging.getLogger(__name__)


class LLMClient:
    """Single-shot transport to the LLM gateway.

    A fresh SDK client is built for every call from the credential passed in,
    so unrelated credentials never share client state. SDK-level retries are
    disabled; retrying is the caller's decision.
    """

    def __init__(
        self,
        gateway: GatewayConfig | None = None,
        generation: GenerationConfig | None = None,
    ):
        self.gateway = gateway or GatewayConfig()
        self.generation = generation or GenerationConfig()
        self._token_log: list[tuple[str, int, int]] = []  # (model, prompt_tokens, completion_tokens)

    def _make_client(self, api_key: str) -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(
            api_key=api_key,
            base_url=self.gateway.base_url,
            default_headers=self.gateway.default_headers,
            timeout=self.gateway.timeout,
            max_retries=0,
        )

    def build_payload(self, prompt: ComposedPrompt, model: str) -> dict:
        """Request body for the chat-completions endpoint."""
        payload: dict = {"model": model, "messages": prompt.messages}
        if prompt.tool is not None:
            payload["tools"] = [prompt.tool.as_tool()]
            payload["tool_choice"] = {
                "type": "function",
                "function": {"name": prompt.tool.name},
            }
            payload["temperature"] = self.generation.structured_temperature
            payload["max_completion_tokens"] = self.generation.structured_max_tokens
        else:
            payload["temperature"] = self.generation.prose_temperature
            payload["max_completion_tokens"] = self.generation.prose_max_tokens
        return payload

    async def complete(self, prompt: ComposedPrompt, *, api_key: str, model: str) -> ChatCompletion:
        """Send one completion request and return the raw reply."""
        payload = self.build_payload(prompt, model)
        client = self._make_client(api_key)
        logger.debug(
            "LLM call: model=%s tool=%s", model, prompt.tool.name if prompt.tool else None
        )
        try:
            response = await client.chat.completions.create(**payload)
        except openai.APIError as exc:
            logger.error("LLM call failed", exc_info=True)
            raise _to_gateway_error(exc, model) from exc
        finally:
            await client.close()

        usage = getattr(response, "usage", None)
        if usage is not None:
            prompt_tokens = usage.prompt_tokens or 0
            completion_tokens = usage.completion_tokens or 0
            logger.debug(
                "LLM response: %d prompt, %d completion tokens", prompt_tokens, completion_tokens
            )
            self._token_log.append((model, prompt_tokens, completion_tokens))
        return response

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "prompt": sum(t[1] for t in self._token_log),
            "completion": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def _to_gateway_error(exc: openai.APIError, model: str) -> GatewayError:
    """Normalize SDK exceptions into messages the classifier understands."""
    if isinstance(exc, openai.APITimeoutError):
        return GatewayError("Network timeout while contacting the LLM gateway. Please try again.")
    if isinstance(exc, openai.APIConnectionError):
        return GatewayError(f"Network error connecting to the LLM gateway: {exc}")
    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code
        if status in (401, 403):
            return GatewayError(
                "Invalid API key. Please check your OpenRouter API key in settings "
                "and ensure it's active on your account.",
                status_code=status,
            )
        if status == 402:
            return GatewayError(
                "Insufficient credits on your OpenRouter account.", status_code=status
            )
        if status == 429:
            return GatewayError(
                "Rate limit exceeded. Please wait a moment before trying again.",
                status_code=status,
            )
        if status == 404:
            return GatewayError(
                f'The selected model "{model}" is currently unavailable.', status_code=status
            )
        return GatewayError(f"LLM gateway error ({status}): {exc.message}", status_code=status)
    return GatewayError(f"LLM gateway error: {exc.message}")
