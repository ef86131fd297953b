import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from reel_analyzer.errors import InvalidInputError, NotFoundError, RateLimitedError
from reel_analyzer.pipeline import attach_transcripts, fetch_top_reels, run_profile
from reel_analyzer.transcripts import get_transcript
from reel_analyzer.types import ReelRecord, Transcript


@pytest.fixture
def reels():
    return [
        ReelRecord(id="1", url="https://instagram.com/reel/one", likesCount=10),
        ReelRecord(id="2", url="https://instagram.com/reel/two", likesCount=20),
        ReelRecord(id="3", url="https://instagram.com/reel/three", transcript=Transcript(content="already here")),
    ]


def test_attach_transcripts_degrades_on_failure(reels):
    requested = []

    async def fake_fetch(url):
        requested.append(url)
        if url.endswith("two"):
            raise RateLimitedError("Limit Exceeded", "supadata", 429)
        return Transcript(content=f"transcript for {url}")

    attached = asyncio.run(attach_transcripts(reels, fetch=fake_fetch))

    assert requested == ["https://instagram.com/reel/one", "https://instagram.com/reel/two"]
    assert attached[0].transcript.content == "transcript for https://instagram.com/reel/one"
    assert attached[1].transcript is None
    assert attached[2].transcript.content == "already here"
    # Input reels are left untouched
    assert reels[0].transcript is None


def test_fetch_top_reels():
    scraped = [{"id": str(i), "likesCount": 100 - i} for i in range(8)]
    with patch("reel_analyzer.pipeline.fetch_profile_reels", return_value=scraped) as fetch:
        top = fetch_top_reels("https://www.instagram.com/creator/")

    fetch.assert_called_once_with("creator")
    assert top.username == "creator"
    assert top.totalReelsAnalyzed == 8
    assert [r.id for r in top.topReels] == ["0", "1", "2", "3", "4"]


def test_fetch_top_reels_errors():
    with pytest.raises(InvalidInputError):
        fetch_top_reels("https://example.com/nothing")

    with patch("reel_analyzer.pipeline.fetch_profile_reels", return_value=[]):
        with pytest.raises(NotFoundError):
            fetch_top_reels("https://www.instagram.com/creator/")


def test_run_profile_from_local_file(tmp_path):
    path = tmp_path / "reels.json"
    path.write_text(
        json.dumps(
            {
                "username": "creator",
                "profileUrl": "https://www.instagram.com/creator/",
                "topReels": [
                    {"id": "a", "likesCount": 100, "viewsCount": 1000, "commentsCount": 50, "hashtags": ["x"]},
                    {"id": "b", "likesCount": None, "viewsCount": 10, "transcript": {"content": "good stuff"}},
                ],
            }
        ),
        encoding="utf-8",
    )

    report = asyncio.run(run_profile(local_file_json=str(path), user_id="user-1"))

    assert report.username == "creator"
    assert report.userId == "user-1"
    assert report.totalReelsAnalyzed == 2
    assert report.engagementMetrics.bestPerformingReel == "a"
    assert report.hashtagAnalysis[0].hashtag == "x"
    assert report.transcriptAnalysis.sentimentScore == 1.0


def test_run_profile_requires_source():
    with pytest.raises(ValueError):
        asyncio.run(run_profile())


def test_run_profile_fixture():
    path = Path(__file__).parent / "fixtures" / "sample_reels.json"
    report = asyncio.run(run_profile(local_file_json=str(path)))

    assert report.username == "fitwithmaya"
    assert report.totalReelsAnalyzed == 3
    # Null likes are cleaned to zero, timestamp backfills posted_time
    assert report.topReels[2].likesCount == 0
    assert report.topReels[1].posted_time == "2024-03-10T18:00:00"
    assert report.engagementMetrics.bestPerformingReel == "C1a2b3"
    assert report.engagementMetrics.worstPerformingReel == "C7f8g9"
    assert [h.hashtag for h in report.hashtagAnalysis] == ["morningroutine", "mobility"]
    assert report.transcriptAnalysis.avgLength > 0


def test_attach_transcripts_with_supadata_client():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["url"] == "https://instagram.com/reel/one"
        return httpx.Response(200, json={"content": "hello world", "lang": "en"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    reels = [ReelRecord(id="1", url="https://instagram.com/reel/one")]

    attached = asyncio.run(
        attach_transcripts(reels, fetch=lambda url: get_transcript(url, api_key="key", client=client))
    )

    assert attached[0].transcript.content == "hello world"
    assert attached[0].transcript.lang == "en"
