"""Chat-completions client used as the review model.

Talks to OpenAI or OpenRouter over httpx. One request per ``generate()``
call; every failure is reported as ``ModelCallError`` so the orchestrator can
switch to its scanner-only path.
"""

import os
from typing import Any, Literal

import httpx
from loguru import logger

from .exceptions import ModelCallError

LLMProvider = Literal["openai", "openrouter"]

# provider -> (API key env var, model env var, default model, endpoint)
PROVIDERS: dict[str, tuple[str, str, str, str]] = {
    "openai": (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "gpt-4o-mini",
        "https://api.openai.com/v1/chat/completions",
    ),
    "openrouter": (
        "OPENROUTER_API_KEY",
        "OPENROUTER_MODEL",
        "google/gemini-flash-1.5",
        "https://openrouter.ai/api/v1/chat/completions",
    ),
}


def describe_http_error(provider: str, status_code: int) -> str:
    """Human-readable reason for a failed chat-completions request."""
    name = provider.capitalize()
    if status_code == 401:
        return f"Invalid {name} API key; check {PROVIDERS[provider][0]}"
    if status_code == 429:
        return f"{name} API rate limit or quota exceeded"
    if status_code >= 500:
        return f"{name} API server error (HTTP {status_code})"
    return f"{name} API error (HTTP {status_code})"


class LLMClient:
    """Sends a review prompt to a text-generation model and returns its reply.

    Provider selection: an explicit ``provider`` wins; otherwise OpenAI when
    its key is available, then OpenRouter. Model selection: explicit
    ``model``, then the provider's model env var, then the provider default.

    Example:
        >>> client = LLMClient(provider="openrouter")
        >>> text = await client.generate("Review this diff ...")
    """

    TIMEOUT_SECONDS = 60.0

    def __init__(
        self,
        model: str | None = None,
        timeout: float = TIMEOUT_SECONDS,
        provider: LLMProvider | None = None,
        openai_api_key: str | None = None,
        openrouter_api_key: str | None = None,
        temperature: float = 0.2,
    ) -> None:
        """Initialize LLM client.

        Args:
            model: Model to use (defaults based on provider)
            timeout: Request timeout in seconds
            provider: Explicit provider ('openai' or 'openrouter')
            openai_api_key: OpenAI API key (or OPENAI_API_KEY env var)
            openrouter_api_key: OpenRouter API key (or OPENROUTER_API_KEY env var)
            temperature: Sampling temperature

        Raises:
            ValueError: If no API key is available for the selected provider
        """
        keys = {
            "openai": openai_api_key or os.environ.get("OPENAI_API_KEY"),
            "openrouter": openrouter_api_key or os.environ.get("OPENROUTER_API_KEY"),
        }

        if provider is None:
            provider = next((p for p in ("openai", "openrouter") if keys[p]), None)
            if provider is None:
                raise ValueError(
                    "No API key found: set OPENAI_API_KEY or OPENROUTER_API_KEY, "
                    "or pass openai_api_key / openrouter_api_key"
                )
        elif not keys[provider]:
            raise ValueError(
                f"{provider} provider selected but {PROVIDERS[provider][0]} is not set"
            )

        _, model_env, default_model, endpoint = PROVIDERS[provider]
        self.provider: LLMProvider = provider
        self.api_key = keys[provider]
        self.model = model or os.environ.get(model_env, default_model)
        self.api_endpoint = endpoint
        self.timeout = timeout
        self.temperature = temperature

        logger.debug(f"LLM client ready: provider={self.provider}, model={self.model}")

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the reply text.

        Raises:
            ModelCallError: On timeout, HTTP error, or a response without text
        """
        response = await self._chat_completion([{"role": "user", "content": prompt}])

        try:
            content = response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ModelCallError(
                "LLM response did not contain a message", {"response": response}
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise ModelCallError("LLM returned an empty response")

        logger.debug(f"LLM returned {len(content)} characters")
        return content

    async def _chat_completion(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        """POST one chat-completions request and return the decoded body.

        Raises:
            ModelCallError: If the request fails for any reason
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.provider == "openrouter":
            headers["X-Title"] = "Review Sentinel"

        body = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_endpoint, headers=headers, json=body)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"{self.provider} request timed out after {self.timeout}s")
            raise ModelCallError(
                f"LLM request timed out after {self.timeout} seconds"
            ) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = describe_http_error(self.provider, status_code)
            logger.error(message)
            raise ModelCallError(message, {"status_code": status_code}) from e
        except Exception as e:
            logger.error(f"{self.provider} request failed: {e}")
            raise ModelCallError(f"LLM request failed: {e}") from e
