"""
Rule-based insight synthesis.
Turns the five deterministic sub-reports into plain-English insights and
recommendations. No LLM involved; thresholds are fixed.
"""

from typing import List

from .types import (
    HashtagAnalysis,
    CaptionAnalysis,
    TranscriptAnalysis,
    PostTimeAnalysis,
    EngagementMetrics,
    Insights,
)

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

LOW_CTA_USAGE = 30
LOW_QUESTION_USAGE = 20
TONE_THRESHOLD = 0.3
LOW_ENGAGEMENT_RATE = 3
HIGH_ENGAGEMENT_RATE = 5

PACE_EFFECTS = {
    "fast": "keeps viewers engaged",
    "slow": "allows for better comprehension",
    "medium": "maintains good balance",
}


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12AM"
    if hour == 12:
        return "12PM"
    if hour > 12:
        return f"{hour - 12}PM"
    return f"{hour}AM"


def format_number(value: float) -> str:
    # 15.0 -> "15", 3.25 -> "3.25"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def generate_insights(
    hashtag_analysis: List[HashtagAnalysis],
    caption_analysis: CaptionAnalysis,
    transcript_analysis: TranscriptAnalysis,
    post_time_analysis: PostTimeAnalysis,
    engagement_metrics: EngagementMetrics,
) -> Insights:
    insights: List[str] = []
    recommendations: List[str] = []

    # Hashtags
    if hashtag_analysis:
        top = hashtag_analysis[0]
        insights.append(
            f"Your best performing hashtag is #{top.hashtag} with an average of "
            f"{top.engagementRate:,} engagement per post"
        )
        if len(hashtag_analysis) >= 3:
            tags = ", ".join(f"#{h.hashtag}" for h in hashtag_analysis[:3])
            recommendations.append(f"Focus on these high-performing hashtags: {tags}")

    # Captions
    insights.append(
        f"Your captions average {caption_analysis.avgWordCount} words with "
        f"{caption_analysis.captionStyle} style"
    )
    if caption_analysis.callToActionUsage < LOW_CTA_USAGE:
        recommendations.append(
            "Consider adding more calls-to-action in your captions to drive engagement"
        )
    if caption_analysis.questionUsage < LOW_QUESTION_USAGE:
        recommendations.append(
            "Try asking more questions in your captions to boost comments"
        )

    # Transcripts
    if transcript_analysis.sentimentScore > TONE_THRESHOLD:
        insights.append(
            "Your content has a positive tone, which resonates well with audiences"
        )
    elif transcript_analysis.sentimentScore < -TONE_THRESHOLD:
        insights.append("Your content has a more serious or critical tone")

    pace = transcript_analysis.paceStyle
    insights.append(f"Your speaking pace is {pace}, which {PACE_EFFECTS[pace]}")

    # Posting time
    day = DAY_NAMES[post_time_analysis.bestDayOfWeek]
    hour = format_hour(post_time_analysis.bestHour)
    insights.append(f"Your best posting time is {day}s at {hour}")
    recommendations.append(
        f"Schedule your posts on {day}s around {hour} for maximum reach"
    )

    # Engagement
    rate = engagement_metrics.engagementRate
    insights.append(f"Your average engagement rate is {format_number(rate)}%")
    if rate < LOW_ENGAGEMENT_RATE:
        recommendations.append(
            "Try experimenting with trending audio and more dynamic hooks in the first 3 seconds"
        )
    elif rate > HIGH_ENGAGEMENT_RATE:
        insights.append("Your engagement rate is excellent! Keep up the great content")

    return Insights(insights=insights, recommendations=recommendations)
