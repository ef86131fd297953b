import os
from typing import Optional

from openai import AsyncOpenAI

from .base import LLMProvider
from ..errors import InvalidInputError


class OpenAIProvider(LLMProvider):
    name = "OpenAI"
    primary_model = "gpt-4o"
    fallback_model = "gpt-4o-mini"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise InvalidInputError("OPENAI_API_KEY not configured", "openai")

        self.client = AsyncOpenAI(api_key=self.api_key)

    async def _call_model(
        self,
        model_name: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.4,
        max_tokens: Optional[int] = None,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=model_name,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens or (4096 if model_name == self.primary_model else 2048),
        )

        return response.choices[0].message.content or ""
