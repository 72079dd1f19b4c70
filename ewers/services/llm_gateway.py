"""
LLM Gateway — Claude API integration.

Single provider (Anthropic). The core needs one thing from it: a system +
user prompt in, a JSON object string out. Failures raise LLMError; callers
never retry, they fall back.
"""

import httpx
import structlog

from ewers.config import settings

logger = structlog.get_logger(__name__)

# Anthropic API constants
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

# Prefilling the assistant turn with "{" keeps the model in JSON-object mode.
JSON_PREFILL = "{"


class LLMError(Exception):
    """The LLM call failed or returned nothing usable."""

    pass


class LLMGateway:
    """Non-streaming Claude client returning JSON-object text."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.timeout = timeout or settings.llm_timeout_seconds
        self._transport = transport
        if not self.api_key:
            logger.warning("anthropic_api_key_missing", msg="LLM scoring will be unavailable")

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one prompt pair and return the model's JSON object as text.

        Raises LLMError on transport errors, non-2xx responses and empty
        completions.
        """
        if not self.api_key:
            raise LLMError("LLM is not configured")

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0.3,
            "system": system_prompt,
            "messages": [
                {"role": "user", "content": user_prompt},
                {"role": "assistant", "content": JSON_PREFILL},
            ],
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(ANTHROPIC_API_URL, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error("llm_timeout", model=self.model)
            raise LLMError("LLM request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "llm_api_error",
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise LLMError(f"LLM returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("llm_generate_error", model=self.model, error=str(e))
            raise LLMError(str(e)) from e

        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        if not text.strip():
            raise LLMError("No response from AI")
        return JSON_PREFILL + text
