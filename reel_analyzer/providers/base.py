from abc import ABC, abstractmethod
from typing import Optional


class LLMProvider(ABC):
    primary_model: str
    fallback_model: str
    name = "LLM"

    @abstractmethod
    async def _call_model(
        self,
        model_name: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.4,
        max_tokens: Optional[int] = None,
    ) -> str:
        pass

    async def generate(
        self,
        prompt: str,
        system: str = "",
        temperature: float = 0.4,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate text from the primary model, falling back to the cheaper
        model when the primary errors out or returns nothing.
        """
        try:
            result = await self._call_model(
                self.primary_model, prompt, system, temperature, max_tokens
            )
            if result and result.strip():
                return result
            raise RuntimeError("Empty response from primary model")
        except Exception as e:
            print(f"[LLM] WARNING: {self.name} {self.primary_model} failed ({e}), trying {self.fallback_model}")
            try:
                return await self._call_model(
                    self.fallback_model, prompt, system, temperature, max_tokens
                )
            except Exception as fallback_e:
                raise RuntimeError(
                    f"Both primary and fallback {self.name} models failed. "
                    f"Primary Error: {e}. Fallback Error: {fallback_e}"
                ) from fallback_e
