import math
import re
import time
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Dict, Any, Optional, Tuple

from .types import (
    ReelRecord,
    Transcript,
    HashtagAnalysis,
    CaptionAnalysis,
    TranscriptAnalysis,
    PostTimeAnalysis,
    EngagementMetrics,
    ProfileAnalytics,
)
from .insights import generate_insights

# ============================================================
# Helpers
# ============================================================

TWO_PLACES = Decimal("0.01")


def round_half_up(n: float) -> int:
    # 2.5 -> 3, not Python's banker's 2
    return int(math.floor(n + 0.5))


def round2(n: float) -> float:
    # Exact ties go away from zero: 0.125 -> 0.13, -0.125 -> -0.13
    return float(Decimal(n).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def engagement_score(reel: ReelRecord) -> int:
    return reel.likesCount + reel.viewsCount + reel.commentsCount


def split_words(text: str) -> List[str]:
    # Keeps empty leading/trailing pieces, so "hi " counts as 2 words
    return re.split(r"\s+", text)


def top_ranked(freq: Dict[str, int], limit: int) -> List[str]:
    # sorted() is stable: ties keep first-encounter order
    return [k for k, _ in sorted(freq.items(), key=lambda x: x[1], reverse=True)[:limit]]


def transcript_text(transcript: Optional[Transcript]) -> str:
    if transcript is None or transcript.content is None:
        return ""
    if isinstance(transcript.content, str):
        return transcript.content
    return " ".join(chunk.text for chunk in transcript.content)


def reel_timestamp(reel: ReelRecord) -> Any:
    return reel.posted_time or reel.timestamp


def to_local_datetime(value: Any) -> Optional[datetime]:
    """
    Decodes an ISO string or epoch number into a naive local datetime.
    Numbers above 1e11 are epoch millis, smaller ones epoch seconds.
    Naive ISO strings are taken as already local.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > 1e11 else float(value)
        try:
            return datetime.fromtimestamp(seconds)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is not None:
            dt = dt.astimezone().replace(tzinfo=None)
        return dt
    return None


# ============================================================
# 1. Hashtag Performance
# ============================================================

MAX_HASHTAGS = 20


def analyze_hashtags(reels: List[ReelRecord]) -> List[HashtagAnalysis]:
    buckets: Dict[str, Dict[str, int]] = {}

    for reel in reels:
        engagement = engagement_score(reel)
        for tag in reel.hashtags:
            if tag not in buckets:
                buckets[tag] = {
                    "count": 0,
                    "totalLikes": 0,
                    "totalViews": 0,
                    "totalComments": 0,
                    "totalEngagement": 0,
                }
            b = buckets[tag]
            b["count"] += 1
            b["totalLikes"] += reel.likesCount
            b["totalViews"] += reel.viewsCount
            b["totalComments"] += reel.commentsCount
            b["totalEngagement"] += engagement

    stats = []
    for tag, b in buckets.items():
        stats.append(
            HashtagAnalysis(
                hashtag=tag,
                frequency=b["count"],
                avgLikes=round_half_up(b["totalLikes"] / b["count"]),
                avgViews=round_half_up(b["totalViews"] / b["count"]),
                avgComments=round_half_up(b["totalComments"] / b["count"]),
                engagementRate=round_half_up(b["totalEngagement"] / b["count"]),
            )
        )

    return sorted(stats, key=lambda x: x.engagementRate, reverse=True)[:MAX_HASHTAGS]


# ============================================================
# 2. Caption Patterns
# ============================================================

STOPWORDS = {
    "the",
    "a",
    "an",
    "and",
    "or",
    "but",
    "in",
    "on",
    "at",
    "to",
    "for",
    "of",
    "with",
    "by",
    "from",
    "is",
    "are",
    "was",
    "were",
    "be",
    "been",
    "being",
    "have",
    "has",
    "had",
    "do",
    "does",
    "did",
    "will",
    "would",
    "could",
    "should",
    "may",
    "might",
    "can",
    "this",
    "that",
    "these",
    "those",
    "i",
    "you",
    "he",
    "she",
    "it",
    "we",
    "they",
    "my",
    "your",
    "his",
    "her",
    "its",
    "our",
    "their",
}

CTA_WORDS = [
    "link",
    "bio",
    "comment",
    "follow",
    "subscribe",
    "click",
    "check",
    "visit",
    "shop",
    "buy",
]

# ASCII word characters only, as hashtags are scraped
HASHTAG_TOKEN = re.compile(r"#[A-Za-z0-9_]+")
PUNCTUATION = re.compile(r"[^A-Za-z0-9_\s]")

EMOJI_REGEX = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F700-\U0001F77F"
    "\U0001F780-\U0001F7FF"
    "\U0001F800-\U0001F8FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA00-\U0001FA6F"
    "\U0001FA70-\U0001FAFF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "]"
)

MAX_KEYWORDS = 10
MEDIUM_CAPTION_CHARS = 150
LONG_CAPTION_CHARS = 500


def extract_keywords(captions: List[str], limit: int = MAX_KEYWORDS) -> List[str]:
    freq: Dict[str, int] = {}
    for caption in captions:
        text = HASHTAG_TOKEN.sub("", caption.lower())
        text = PUNCTUATION.sub("", text)
        for word in split_words(text):
            if len(word) > 3 and word not in STOPWORDS:
                freq[word] = freq.get(word, 0) + 1
    return top_ranked(freq, limit)


def classify_caption_style(avg_length: int) -> str:
    if avg_length > LONG_CAPTION_CHARS:
        return "long"
    if avg_length > MEDIUM_CAPTION_CHARS:
        return "medium"
    return "short"


def has_cta(caption: str) -> bool:
    lower = caption.lower()
    return any(w in lower for w in CTA_WORDS)


def analyze_captions(reels: List[ReelRecord]) -> CaptionAnalysis:
    captions = [r.caption for r in reels if r.caption]

    if not captions:
        return CaptionAnalysis(
            avgLength=0,
            avgWordCount=0,
            topKeywords=[],
            captionStyle="short",
            emojiUsage=0,
            questionUsage=0,
            callToActionUsage=0,
        )

    count = len(captions)
    avg_length = round_half_up(sum(len(c) for c in captions) / count)
    avg_word_count = round_half_up(sum(len(split_words(c)) for c in captions) / count)

    # Total emoji matches over caption count, so this can exceed 100
    emoji_matches = sum(len(EMOJI_REGEX.findall(c)) for c in captions)
    with_question = sum(1 for c in captions if "?" in c)
    with_cta = sum(1 for c in captions if has_cta(c))

    return CaptionAnalysis(
        avgLength=avg_length,
        avgWordCount=avg_word_count,
        topKeywords=extract_keywords(captions),
        captionStyle=classify_caption_style(avg_length),
        emojiUsage=round_half_up(emoji_matches / count * 100),
        questionUsage=round_half_up(with_question / count * 100),
        callToActionUsage=round_half_up(with_cta / count * 100),
    )


# ============================================================
# 3. Transcript Content
# ============================================================

POSITIVE_WORDS = [
    "good",
    "great",
    "awesome",
    "amazing",
    "love",
    "best",
    "happy",
    "excellent",
    "perfect",
    "wonderful",
]

NEGATIVE_WORDS = [
    "bad",
    "worst",
    "hate",
    "terrible",
    "awful",
    "poor",
    "sad",
    "angry",
    "frustrated",
    "disappointed",
]

MAX_PHRASES = 10
KEY_PHRASE_LIMIT = 8
TOPIC_LIMIT = 5
MIN_BIGRAM_CHARS = 5
ASSUMED_REEL_SECONDS = 45
FAST_WORDS_PER_SECOND = 3
SLOW_WORDS_PER_SECOND = 2


def rank_bigrams(transcripts: List[str], limit: int = MAX_PHRASES) -> List[str]:
    freq: Dict[str, int] = {}
    for t in transcripts:
        words = split_words(t.lower())
        for i in range(len(words) - 1):
            bigram = f"{words[i]} {words[i + 1]}"
            if len(bigram) > MIN_BIGRAM_CHARS:
                freq[bigram] = freq.get(bigram, 0) + 1
    return top_ranked(freq, limit)


def sentiment_score(transcripts: List[str]) -> float:
    # Unanchored substring counts: "sad" also matches "sadness"
    positive = 0
    negative = 0
    for t in transcripts:
        lower = t.lower()
        positive += sum(lower.count(w) for w in POSITIVE_WORDS)
        negative += sum(lower.count(w) for w in NEGATIVE_WORDS)

    if positive + negative == 0:
        return 0.0
    return round2((positive - negative) / (positive + negative))


def classify_pace(transcripts: List[str]) -> str:
    avg_words = sum(len(split_words(t)) for t in transcripts) / len(transcripts)
    words_per_second = avg_words / ASSUMED_REEL_SECONDS
    if words_per_second > FAST_WORDS_PER_SECOND:
        return "fast"
    if words_per_second < SLOW_WORDS_PER_SECOND:
        return "slow"
    return "medium"


def analyze_transcripts(reels: List[ReelRecord]) -> TranscriptAnalysis:
    transcripts = [t for t in (transcript_text(r.transcript) for r in reels) if t]

    if not transcripts:
        return TranscriptAnalysis(
            avgLength=0,
            topTopics=[],
            sentimentScore=0,
            paceStyle="medium",
            keyPhrases=[],
        )

    phrases = rank_bigrams(transcripts)

    return TranscriptAnalysis(
        avgLength=round_half_up(sum(len(t) for t in transcripts) / len(transcripts)),
        topTopics=phrases[:TOPIC_LIMIT],
        sentimentScore=sentiment_score(transcripts),
        paceStyle=classify_pace(transcripts),
        keyPhrases=phrases[:KEY_PHRASE_LIMIT],
    )


# ============================================================
# 4. Posting Times
# ============================================================

DEFAULT_BEST_HOUR = 12
DEFAULT_BEST_DAY = 3  # Wednesday


def _bucket_means(buckets: Dict[int, Dict[str, int]]) -> Dict[int, int]:
    return {
        key: round_half_up(buckets[key]["total"] / buckets[key]["count"])
        for key in sorted(buckets)
    }


def _best_bucket(means: Dict[int, int], default: int) -> int:
    if not means:
        return default
    # max() keeps the first maximum, and keys are ascending
    return max(sorted(means), key=lambda k: means[k])


def analyze_post_times(reels: List[ReelRecord]) -> PostTimeAnalysis:
    timed = [r for r in reels if reel_timestamp(r)]

    if not timed:
        return PostTimeAnalysis(
            bestHour=DEFAULT_BEST_HOUR,
            bestDayOfWeek=DEFAULT_BEST_DAY,
            avgEngagementByHour={},
            avgEngagementByDay={},
        )

    by_hour: Dict[int, Dict[str, int]] = {}
    by_day: Dict[int, Dict[str, int]] = {}

    for reel in timed:
        dt = to_local_datetime(reel_timestamp(reel))
        if dt is None:
            continue

        hour = dt.hour
        day = (dt.weekday() + 1) % 7  # Sunday = 0
        engagement = engagement_score(reel)

        if hour not in by_hour:
            by_hour[hour] = {"total": 0, "count": 0}
        by_hour[hour]["total"] += engagement
        by_hour[hour]["count"] += 1

        if day not in by_day:
            by_day[day] = {"total": 0, "count": 0}
        by_day[day]["total"] += engagement
        by_day[day]["count"] += 1

    hour_means = _bucket_means(by_hour)
    day_means = _bucket_means(by_day)

    return PostTimeAnalysis(
        bestHour=_best_bucket(hour_means, DEFAULT_BEST_HOUR),
        bestDayOfWeek=_best_bucket(day_means, DEFAULT_BEST_DAY),
        avgEngagementByHour=hour_means,
        avgEngagementByDay=day_means,
    )


# ============================================================
# 5. Engagement Metrics
# ============================================================


def rank_reels(reels: List[ReelRecord]) -> List[Tuple[str, int]]:
    scored = [(r.id, engagement_score(r)) for r in reels]
    return sorted(scored, key=lambda x: x[1], reverse=True)


def compute_engagement(reels: List[ReelRecord]) -> EngagementMetrics:
    if not reels:
        return EngagementMetrics(
            avgLikes=0,
            avgViews=0,
            avgComments=0,
            totalEngagement=0,
            engagementRate=0,
            bestPerformingReel="",
            worstPerformingReel="",
        )

    count = len(reels)
    total_likes = sum(r.likesCount for r in reels)
    total_views = sum(r.viewsCount for r in reels)
    total_comments = sum(r.commentsCount for r in reels)

    engagement_rate = (
        round2((total_likes + total_comments) / total_views * 100)
        if total_views > 0
        else 0.0
    )

    ranked = rank_reels(reels)

    return EngagementMetrics(
        avgLikes=round_half_up(total_likes / count),
        avgViews=round_half_up(total_views / count),
        avgComments=round_half_up(total_comments / count),
        totalEngagement=total_likes + total_views + total_comments,
        engagementRate=engagement_rate,
        bestPerformingReel=ranked[0][0],
        worstPerformingReel=ranked[-1][0],
    )


# ============================================================
# Full report
# ============================================================


def analyze(
    username: str,
    profile_url: str,
    user_id: str,
    reels: List[ReelRecord],
) -> ProfileAnalytics:
    hashtag_analysis = analyze_hashtags(reels)
    caption_analysis = analyze_captions(reels)
    transcript_analysis = analyze_transcripts(reels)
    post_time_analysis = analyze_post_times(reels)
    engagement_metrics = compute_engagement(reels)

    synthesized = generate_insights(
        hashtag_analysis,
        caption_analysis,
        transcript_analysis,
        post_time_analysis,
        engagement_metrics,
    )

    return ProfileAnalytics(
        userId=user_id,
        username=username,
        profileUrl=profile_url,
        totalReelsAnalyzed=len(reels),
        topReels=list(reels),
        hashtagAnalysis=hashtag_analysis,
        captionAnalysis=caption_analysis,
        transcriptAnalysis=transcript_analysis,
        postTimeAnalysis=post_time_analysis,
        engagementMetrics=engagement_metrics,
        lastAnalyzedAt=int(time.time() * 1000),
        insights=synthesized.insights,
        recommendations=synthesized.recommendations,
    )
