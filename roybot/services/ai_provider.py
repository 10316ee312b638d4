import logging
from typing import Optional, Protocol

import httpx

from roybot.core.config import Settings

logger = logging.getLogger(__name__)


class AIProviderError(Exception):
    """Raised when the completion service cannot produce a reply."""


class AIProvider(Protocol):
    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        ...


class AnthropicProvider:
    """Completion client for the Anthropic Messages API."""

    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-latest",
        base_url: str = "https://api.anthropic.com",
        timeout: float = 60.0,
        max_tokens: int = 500,
        temperature: float = 0.7,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {
            "x-api-key": api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["AnthropicProvider"]:
        if not settings.ANTHROPIC_API_KEY:
            logger.error("ANTHROPIC_API_KEY is not set, chat replies are disabled")
            return None
        logger.info("Anthropic client initialized successfully")
        return cls(
            settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            base_url=settings.ANTHROPIC_BASE_URL,
            timeout=settings.LLM_TIMEOUT,
        )

    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            payload["system"] = system

        try:
            response = await self._client.post("/v1/messages", headers=self._headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Anthropic API returned {e.response.status_code}: {e.response.text}")
            raise AIProviderError(f"Completion request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Anthropic API request failed: {e}")
            raise AIProviderError("Completion request failed") from e

        try:
            data = response.json()
            texts = [block["text"] for block in data["content"] if block.get("type") == "text"]
        except (ValueError, KeyError, TypeError) as e:
            raise AIProviderError("Malformed completion response") from e
        if not texts:
            raise AIProviderError("Completion response contained no text")
        return texts[0]

    async def aclose(self) -> None:
        await self._client.aclose()
