import asyncio
from typing import Optional

import pytest
from reel_analyzer.errors import InvalidInputError
from reel_analyzer.providers.base import LLMProvider
from reel_analyzer.providers.openai_provider import OpenAIProvider


class ScriptedProvider(LLMProvider):
    name = "Scripted"
    primary_model = "big"
    fallback_model = "small"

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def _call_model(self, model_name, prompt, system="", temperature=0.4, max_tokens: Optional[int] = None):
        self.calls.append(model_name)
        result = self.responses[model_name]
        if isinstance(result, Exception):
            raise result
        return result


def test_primary_model_answers():
    provider = ScriptedProvider({"big": "primary answer", "small": "fallback answer"})
    assert asyncio.run(provider.generate("hi")) == "primary answer"
    assert provider.calls == ["big"]


def test_falls_back_on_empty_response():
    provider = ScriptedProvider({"big": "   ", "small": "fallback answer"})
    assert asyncio.run(provider.generate("hi")) == "fallback answer"
    assert provider.calls == ["big", "small"]


def test_raises_when_both_fail():
    provider = ScriptedProvider({"big": RuntimeError("boom"), "small": RuntimeError("bust")})
    with pytest.raises(RuntimeError, match="Both primary and fallback Scripted models failed"):
        asyncio.run(provider.generate("hi"))


def test_openai_requires_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(InvalidInputError):
        OpenAIProvider()
