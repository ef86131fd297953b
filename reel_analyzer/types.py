from typing import List, Dict, Optional, Literal, Union
from pydantic import BaseModel, ConfigDict

# ============================================================
# TRANSCRIPTS: what comes back from Supadata
# ============================================================


class TranscriptChunk(BaseModel):
    text: str
    offset: float = 0
    duration: float = 0


class Transcript(BaseModel):
    model_config = ConfigDict(extra="ignore")
    # Plain text, or timed chunks in playback order
    content: Union[str, List[TranscriptChunk], None] = None
    lang: Optional[str] = None
    availableLangs: Optional[List[str]] = None


class TranscriptJob(BaseModel):
    jobId: str


class TranscriptJobStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")
    status: Optional[str] = None  # queued, active, completed, failed
    content: Union[str, List[TranscriptChunk], None] = None
    lang: Optional[str] = None
    availableLangs: Optional[List[str]] = None
    error: Optional[str] = None


# ============================================================
# REELS: after the cleaner normalizes scraper / request payloads
# ============================================================


class ReelRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    url: str = ""
    caption: Optional[str] = None
    thumbnail: Optional[str] = None
    likesCount: int = 0
    viewsCount: int = 0
    commentsCount: int = 0
    # posted_time is canonical; timestamp is kept for echoing the source payload
    posted_time: Union[str, int, float, None] = None
    timestamp: Union[str, int, float, None] = None
    videoUrl: Optional[str] = None
    hashtags: List[str] = []
    music_title: Optional[str] = None
    transcript: Optional[Transcript] = None


class InstagramMetadata(BaseModel):
    # oEmbed only exposes preview fields, no counts
    url: str
    thumbnail: Optional[str] = None
    username: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


# ============================================================
# ANALYSIS RESULTS: output of the deterministic engine
# ============================================================


class HashtagAnalysis(BaseModel):
    hashtag: str
    frequency: int
    avgLikes: int
    avgViews: int
    avgComments: int
    engagementRate: int  # mean engagement per reel carrying the tag


class CaptionAnalysis(BaseModel):
    avgLength: int
    avgWordCount: int
    topKeywords: List[str]
    captionStyle: Literal["short", "medium", "long"]
    emojiUsage: int
    questionUsage: int
    callToActionUsage: int


class TranscriptAnalysis(BaseModel):
    avgLength: int
    topTopics: List[str]
    sentimentScore: float  # -1..1, two decimals
    paceStyle: Literal["fast", "medium", "slow"]
    keyPhrases: List[str]


class PostTimeAnalysis(BaseModel):
    bestHour: int  # 0-23, local time
    bestDayOfWeek: int  # 0 = Sunday
    avgEngagementByHour: Dict[int, int]
    avgEngagementByDay: Dict[int, int]


class EngagementMetrics(BaseModel):
    avgLikes: int
    avgViews: int
    avgComments: int
    totalEngagement: int
    engagementRate: float  # percentage, two decimals
    bestPerformingReel: str
    worstPerformingReel: str


class Insights(BaseModel):
    insights: List[str]
    recommendations: List[str]


class ProfileAnalytics(BaseModel):
    model_config = ConfigDict(extra="ignore")
    userId: str
    username: str
    profileUrl: str
    totalReelsAnalyzed: int
    topReels: List[ReelRecord]

    hashtagAnalysis: List[HashtagAnalysis]
    captionAnalysis: CaptionAnalysis
    transcriptAnalysis: TranscriptAnalysis
    postTimeAnalysis: PostTimeAnalysis
    engagementMetrics: EngagementMetrics

    lastAnalyzedAt: int  # epoch millis
    insights: List[str]
    recommendations: List[str]


class ProfileTopReels(BaseModel):
    username: str
    profileUrl: str
    topReels: List[ReelRecord]
    totalReelsAnalyzed: int


# ============================================================
# REPURPOSING: LLM rewrite for other platforms / tones
# ============================================================

RepurposingGoal = Literal[
    "repost-language",
    "create-version",
    "extract-message",
    "carousel-caption",
    "brand-voice",
]

TargetPlatform = Literal["instagram", "youtube", "tiktok", "linkedin", "twitter"]

ContentTone = Literal[
    "motivational",
    "educational",
    "conversational",
    "humorous",
    "inspirational",
    "persuasive",
    "calm",
    "empathetic",
]

VisualPreference = Literal[
    "text-only",
    "b-roll-ideas",
    "carousel-prompts",
    "thumbnail-suggestions",
]


class PlatformConfig(BaseModel):
    name: str
    idealDuration: str
    tone: str
    captionLimit: int
    hashtagLimit: int
    description: str


class RepurposingRequest(BaseModel):
    goal: RepurposingGoal
    targetPlatform: TargetPlatform
    tone: ContentTone
    visualPreference: VisualPreference
    originalTranscript: str
    targetLanguage: Optional[str] = None
    customInstructions: Optional[str] = None
    originalCaption: Optional[str] = None
    originalHashtags: Optional[List[str]] = None


class RepurposedContent(BaseModel):
    generatedScript: str
    generatedCaption: str = ""
    suggestedHashtags: List[str] = []
    duration: str = ""
    visualSuggestions: List[str] = []
    thumbnailIdeas: Optional[List[str]] = None
    bRollSuggestions: Optional[List[str]] = None
    carouselSlides: Optional[List[str]] = None


class TranslationResult(BaseModel):
    translatedText: str
    targetLanguage: str
    originalLength: int
    translatedLength: int
