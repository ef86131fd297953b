from reel_analyzer.cleaner import clean_reels, clean_transcript
from reel_analyzer.types import Transcript


def test_clean_reels_empty():
    assert clean_reels([]) == []


def test_clean_reels_basic():
    raw_data = [
        {
            "id": "abc",
            "url": "https://instagram.com/reel/abc",
            "caption": "Hello #world",
            "likesCount": None,
            "viewsCount": 250,
            "commentsCount": -1,
            "timestamp": "2024-01-03T15:00:00.000Z",
            "hashtags": ["world"],
            "transcript": {"content": [{"text": "hi", "offset": 0, "duration": 1.5}], "lang": "en"},
        }
    ]

    cleaned = clean_reels(raw_data)

    assert len(cleaned) == 1
    reel = cleaned[0]

    assert reel.id == "abc"
    assert reel.likesCount == 0  # null
    assert reel.viewsCount == 250
    assert reel.commentsCount == 0  # hidden counts come back as -1
    assert reel.posted_time == "2024-01-03T15:00:00.000Z"  # backfilled
    assert reel.timestamp == "2024-01-03T15:00:00.000Z"
    assert reel.hashtags == ["world"]
    assert reel.transcript.lang == "en"
    assert reel.transcript.content[0].text == "hi"


def test_clean_reels_prefers_posted_time():
    cleaned = clean_reels([{"id": "1", "posted_time": "2024-02-01", "timestamp": "2023-01-01"}])
    assert cleaned[0].posted_time == "2024-02-01"


def test_clean_reels_limit():
    raw_data = [{"id": str(i)} for i in range(100)]
    cleaned = clean_reels(raw_data, limit=5)
    assert [r.id for r in cleaned] == ["0", "1", "2", "3", "4"]


def test_clean_transcript_shapes():
    assert clean_transcript(None) is None
    assert clean_transcript("plain text").content == "plain text"
    assert clean_transcript({"chunks": [{"text": "a"}, {"text": "b"}]}).content[1].text == "b"
    assert clean_transcript([{"text": "x"}]).content[0].text == "x"
    assert clean_transcript({"content": 42}).content is None

    existing = Transcript(content="kept")
    assert clean_transcript(existing) is existing
