import os
import json
import re
from typing import Any, Dict, List, Optional

from .errors import InvalidInputError
from .providers.base import LLMProvider
from .types import (
    PlatformConfig,
    RepurposingRequest,
    RepurposedContent,
    TranslationResult,
)

# ============================================================
# Platform / option catalog
# ============================================================

PLATFORM_CONFIGS: Dict[str, PlatformConfig] = {
    "instagram": PlatformConfig(
        name="Instagram",
        idealDuration="15-60 seconds",
        tone="Authentic + Visual-first",
        captionLimit=2200,
        hashtagLimit=30,
        description="Short, engaging videos with strong visual appeal. Focus on the first 3 seconds to hook viewers.",
    ),
    "youtube": PlatformConfig(
        name="YouTube",
        idealDuration="8-15 minutes (Shorts: 60 seconds)",
        tone="In-depth + Educational",
        captionLimit=5000,
        hashtagLimit=15,
        description="Longer-form content with detailed explanations. Optimize for search with keywords in title and description.",
    ),
    "tiktok": PlatformConfig(
        name="TikTok",
        idealDuration="15-60 seconds",
        tone="Energetic + Trend-focused",
        captionLimit=2200,
        hashtagLimit=30,
        description="Fast-paced, trending content with immediate hooks. Use popular sounds and challenges.",
    ),
    "linkedin": PlatformConfig(
        name="LinkedIn",
        idealDuration="30-90 seconds",
        tone="Professional + Storytelling",
        captionLimit=3000,
        hashtagLimit=5,
        description="Professional insights and thought leadership. Share lessons, experiences, and industry knowledge.",
    ),
    "twitter": PlatformConfig(
        name="Twitter (X)",
        idealDuration="30-45 seconds",
        tone="Concise + Conversational",
        captionLimit=280,
        hashtagLimit=2,
        description="Quick, punchy content. Get to the point immediately and spark conversation.",
    ),
}

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt": "Portuguese",
    "hi": "Hindi",
    "ar": "Arabic",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "kn": "Kannada",
    "te": "Telugu",
    "ta": "Tamil",
}

GOAL_INSTRUCTIONS = {
    "repost-language": """Goal: Translate and adapt the content to {language}.
- Maintain cultural relevance and idioms appropriate for the target language
- Adapt jokes, references, and examples to resonate with the target audience
- Keep the core message and value intact""",
    "create-version": """Goal: Create a {duration} version optimized for {platform}.
- Adapt the pacing to match platform expectations
- Restructure the hook and CTA for the platform
- Adjust content density based on ideal duration""",
    "extract-message": """Goal: Extract the key message and create a new script.
- Identify the core value proposition
- Create a fresh angle or perspective on the same topic
- Write a complete new script that conveys the same message differently""",
    "carousel-caption": """Goal: Transform into a carousel post or caption format.
- Break down content into digestible slides (if carousel)
- Create engaging slide headlines
- Structure information for static visual consumption""",
    "brand-voice": """Goal: Recreate in the user's brand voice.
- Adapt language, terminology, and style
- Maintain authenticity while covering the same topic
- Infuse personality and unique perspective""",
}

VISUAL_INSTRUCTIONS = {
    "text-only": "Visual: Provide text-only content with no visual suggestions.",
    "b-roll-ideas": "Visual: Suggest 5-7 B-roll shot ideas that would accompany each section of the script.",
    "carousel-prompts": "Visual: Create 5-10 carousel slide prompts with headlines and key points for each slide.",
    "thumbnail-suggestions": "Visual: Provide 3-5 AI-generated thumbnail concepts with detailed descriptions for DALL-E or Midjourney.",
}

REPURPOSE_TEMPERATURE = 0.7
TRANSLATE_TEMPERATURE = 0.3
MAX_OUTPUT_TOKENS = 2000


# ============================================================
# Provider selection / LLM output parsing
# ============================================================


def get_provider() -> LLMProvider | None:
    if os.environ.get("OPENAI_API_KEY"):
        from .providers.openai_provider import OpenAIProvider

        return OpenAIProvider()
    elif os.environ.get("ANTHROPIC_API_KEY"):
        from .providers.anthropic_provider import AnthropicProvider

        return AnthropicProvider()
    elif os.environ.get("GEMINI_API_KEY"):
        from .providers.gemini import GeminiProvider

        return GeminiProvider()
    return None


def require_provider(provider: Optional[LLMProvider]) -> LLMProvider:
    provider = provider or get_provider()
    if provider is None:
        raise InvalidInputError(
            "No LLM provider configured (set OPENAI_API_KEY, ANTHROPIC_API_KEY or GEMINI_API_KEY)"
        )
    return provider


def extract_json(raw: str) -> Any:
    """
    Returns the first valid JSON object or array in an LLM response,
    skipping any prose or code fences around it.
    """
    try:
        return json.loads(raw.strip())
    except json.JSONDecodeError:
        pass

    decoder = json.JSONDecoder()
    for match in re.finditer(r"[\[{]", raw):
        try:
            obj, _ = decoder.raw_decode(raw[match.start():])
            return obj
        except json.JSONDecodeError:
            continue

    raise ValueError("No valid JSON found in LLM response")


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) if not isinstance(v, dict) else json.dumps(v, ensure_ascii=False) for v in value]


# ============================================================
# Repurposing
# ============================================================


def build_system_prompt(request: RepurposingRequest) -> str:
    config = PLATFORM_CONFIGS[request.targetPlatform]
    language = LANGUAGE_NAMES.get(request.targetLanguage or "", request.targetLanguage) or "the target language"

    goal = GOAL_INSTRUCTIONS[request.goal].format(
        language=language,
        duration=config.idealDuration,
        platform=config.name,
    )

    return f"""You are an expert content repurposing strategist specializing in social media optimization.

Platform: {config.name}
Platform characteristics:
- Ideal Duration: {config.idealDuration}
- Platform Tone: {config.tone}
- Caption Limit: {config.captionLimit} characters
- Hashtag Limit: {config.hashtagLimit} hashtags
- Description: {config.description}

Desired Tone: {request.tone}
Visual Preference: {request.visualPreference}

{goal}

{VISUAL_INSTRUCTIONS[request.visualPreference]}

Format your response as a JSON object with the following structure:
{{
  "script": "The repurposed script/content",
  "caption": "Social media caption (within {config.captionLimit} chars)",
  "hashtags": ["hashtag1", "hashtag2", ...] (max {config.hashtagLimit}),
  "duration": "Estimated duration",
  "visualSuggestions": [] // Array of visual suggestions based on preference
}}"""


def build_user_prompt(request: RepurposingRequest) -> str:
    parts = [f"Original Content:\n\nTranscript:\n{request.originalTranscript}"]

    if request.originalCaption:
        parts.append(f"Original Caption:\n{request.originalCaption}")
    if request.originalHashtags:
        parts.append("Original Hashtags:\n" + " ".join(f"#{h}" for h in request.originalHashtags))
    if request.customInstructions:
        parts.append(f"Custom Instructions:\n{request.customInstructions}")

    parts.append(
        "Please repurpose this content according to the instructions above. Return a valid JSON object."
    )
    return "\n\n".join(parts)


def parse_generated_content(raw: str, visual_preference: str) -> RepurposedContent:
    try:
        data = extract_json(raw)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object")
    except ValueError as e:
        # Keep the raw text so the user still gets a script
        print(f"[Repurpose] WARNING: Could not parse LLM output as JSON: {e}")
        return RepurposedContent(generatedScript=raw)

    visuals = _string_list(data.get("visualSuggestions"))

    return RepurposedContent(
        generatedScript=str(data.get("script") or ""),
        generatedCaption=str(data.get("caption") or ""),
        suggestedHashtags=[h.lstrip("#") for h in _string_list(data.get("hashtags"))],
        duration=str(data.get("duration") or ""),
        visualSuggestions=visuals,
        thumbnailIdeas=visuals if visual_preference == "thumbnail-suggestions" else None,
        bRollSuggestions=visuals if visual_preference == "b-roll-ideas" else None,
        carouselSlides=visuals if visual_preference == "carousel-prompts" else None,
    )


async def repurpose(
    request: RepurposingRequest, provider: Optional[LLMProvider] = None
) -> RepurposedContent:
    if not request.originalTranscript.strip():
        raise InvalidInputError("originalTranscript must not be empty")

    provider = require_provider(provider)
    print(f"[Repurpose] {request.goal} for {request.targetPlatform} via {provider.__class__.__name__}")

    raw = await provider.generate(
        build_user_prompt(request),
        system=build_system_prompt(request),
        temperature=REPURPOSE_TEMPERATURE,
        max_tokens=MAX_OUTPUT_TOKENS,
    )
    if not raw or not raw.strip():
        raise RuntimeError("Failed to generate content from LLM")

    return parse_generated_content(raw, request.visualPreference)


# ============================================================
# Translation
# ============================================================


async def translate(
    text: str, target_language: str, provider: Optional[LLMProvider] = None
) -> TranslationResult:
    if not text or not target_language:
        raise InvalidInputError("Text and target language are required")

    provider = require_provider(provider)
    language = LANGUAGE_NAMES.get(target_language, target_language)

    translated = await provider.generate(
        text,
        system=(
            f"You are a professional translator. Translate the following text to {language}. "
            "Only return the translated text, nothing else. Maintain the same tone and style."
        ),
        temperature=TRANSLATE_TEMPERATURE,
        max_tokens=MAX_OUTPUT_TOKENS,
    )
    translated = translated or ""

    return TranslationResult(
        translatedText=translated,
        targetLanguage=target_language,
        originalLength=len(text),
        translatedLength=len(translated),
    )
