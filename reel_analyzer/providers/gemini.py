import os
from typing import Optional

import google.generativeai as genai

from .base import LLMProvider
from ..errors import InvalidInputError


class GeminiProvider(LLMProvider):
    name = "Gemini"
    primary_model = "gemini-2.5-pro"
    fallback_model = "gemini-2.5-flash"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise InvalidInputError("GEMINI_API_KEY not configured", "gemini")

        genai.configure(api_key=self.api_key)

    async def _call_model(
        self,
        model_name: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.4,
        max_tokens: Optional[int] = None,
    ) -> str:
        # Pro is a thinking model and burns part of the budget before answering
        budget = 8192 if "pro" in model_name.lower() else 2048
        generation_config = genai.types.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max(max_tokens or 0, budget),
        )

        model = genai.GenerativeModel(
            model_name=model_name, system_instruction=system or None
        )
        response = await model.generate_content_async(
            prompt, generation_config=generation_config
        )

        if response.prompt_feedback and response.prompt_feedback.block_reason:
            raise RuntimeError(f"Prompt blocked: {response.prompt_feedback.block_reason}")

        return response.text
