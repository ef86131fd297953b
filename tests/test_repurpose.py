import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from reel_analyzer.errors import InvalidInputError
from reel_analyzer.repurpose import (
    build_system_prompt,
    build_user_prompt,
    extract_json,
    get_provider,
    parse_generated_content,
    repurpose,
    translate,
)
from reel_analyzer.types import RepurposingRequest

MOCK_RESPONSE = """Here is your content:
```json
{"script": "New script", "caption": "Caption", "hashtags": ["#fit", "gym"],
 "duration": "30 seconds", "visualSuggestions": ["Slide 1", "Slide 2"]}
```"""


@pytest.fixture
def request_model():
    return RepurposingRequest(
        goal="repost-language",
        targetPlatform="linkedin",
        tone="educational",
        visualPreference="carousel-prompts",
        targetLanguage="es",
        originalTranscript="Three tips for better sleep",
        originalCaption="Sleep better",
        originalHashtags=["sleep", "health"],
    )


def mock_provider(response):
    provider = MagicMock()
    provider.generate = AsyncMock(return_value=response)
    return provider


def test_build_system_prompt(request_model):
    prompt = build_system_prompt(request_model)
    assert "Platform: LinkedIn" in prompt
    assert "Hashtag Limit: 5 hashtags" in prompt
    assert "Goal: Translate and adapt the content to Spanish." in prompt
    assert "Create 5-10 carousel slide prompts" in prompt
    assert "(max 5)" in prompt


def test_build_user_prompt(request_model):
    prompt = build_user_prompt(request_model)
    assert prompt.startswith("Original Content:\n\nTranscript:\nThree tips for better sleep")
    assert "Original Hashtags:\n#sleep #health" in prompt
    assert "Custom Instructions" not in prompt


def test_extract_json_skips_prose():
    assert extract_json('Sure! {"a": 1} done') == {"a": 1}
    with pytest.raises(ValueError):
        extract_json("no json here")


def test_parse_generated_content():
    content = parse_generated_content(MOCK_RESPONSE, "carousel-prompts")
    assert content.generatedScript == "New script"
    assert content.suggestedHashtags == ["fit", "gym"]
    assert content.carouselSlides == ["Slide 1", "Slide 2"]
    assert content.bRollSuggestions is None
    assert content.thumbnailIdeas is None


def test_parse_generated_content_falls_back_to_raw():
    content = parse_generated_content("Just a plain script", "text-only")
    assert content.generatedScript == "Just a plain script"
    assert content.suggestedHashtags == []


def test_repurpose_uses_provider(request_model):
    provider = mock_provider(MOCK_RESPONSE)
    content = asyncio.run(repurpose(request_model, provider=provider))

    assert content.generatedCaption == "Caption"
    kwargs = provider.generate.call_args.kwargs
    assert kwargs["temperature"] == 0.7
    assert "Platform: LinkedIn" in kwargs["system"]


def test_repurpose_without_provider(monkeypatch, request_model):
    for key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    assert get_provider() is None
    with pytest.raises(InvalidInputError):
        asyncio.run(repurpose(request_model))


def test_translate():
    provider = mock_provider("Hola mundo")
    result = asyncio.run(translate("Hello world", "es", provider=provider))

    assert result.translatedText == "Hola mundo"
    assert result.originalLength == 11
    assert result.translatedLength == 10
    assert "Spanish" in provider.generate.call_args.kwargs["system"]


def test_translate_requires_text():
    with pytest.raises(InvalidInputError):
        asyncio.run(translate("", "es", provider=mock_provider("")))
