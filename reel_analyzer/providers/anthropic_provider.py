import os
from typing import Optional

from anthropic import AsyncAnthropic

from .base import LLMProvider
from ..errors import InvalidInputError


class AnthropicProvider(LLMProvider):
    name = "Anthropic"
    primary_model = "claude-3-5-sonnet-latest"
    fallback_model = "claude-3-5-haiku-latest"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise InvalidInputError("ANTHROPIC_API_KEY not configured", "anthropic")

        self.client = AsyncAnthropic(api_key=self.api_key)

    async def _call_model(
        self,
        model_name: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.4,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs = {
            "model": model_name,
            "max_tokens": max_tokens or (4096 if "sonnet" in model_name else 2048),
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        response = await self.client.messages.create(**kwargs)

        # Content comes back as a list of blocks
        return "".join(block.text for block in response.content if block.type == "text")
