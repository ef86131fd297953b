import json

import httpx
import pytest
from reel_analyzer.errors import InvalidInputError, NotFoundError, RateLimitedError
from reel_analyzer.scraper import (
    extract_hashtags,
    extract_instagram_id,
    extract_username,
    fetch_post_metadata,
    fetch_profile_reels,
    fetch_single_reel,
    is_reel_url,
)

PROFILE_ITEMS = [
    {
        "username": "creator",
        "latestPosts": [
            {
                "id": "low",
                "type": "Video",
                "shortCode": "LOW1",
                "caption": "Quick tip #fitness #gym",
                "likesCount": 10,
                "videoViewCount": 100,
                "commentsCount": 1,
                "timestamp": "2024-01-03T15:00:00.000Z",
                "displayUrl": "https://cdn/low.jpg",
                "musicInfo": {"name": "Original audio"},
            },
            {"id": "photo", "type": "Image", "displayUrl": "https://cdn/photo.jpg", "likesCount": 9999},
            {
                "id": "high",
                "type": "Video",
                "url": "https://www.instagram.com/reel/HIGH1/",
                "text": "Big news",
                "likes": 500,
                "playsCount": 5000,
                "comments": 40,
            },
        ],
    }
]


def apify_client(items, start_status=201):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            assert request.url.params["token"] == "test-token"
            if start_status != 201:
                return httpx.Response(start_status, text="slow down")
            return httpx.Response(
                201,
                json={"data": {"id": "run1", "status": "RUNNING", "defaultDatasetId": "ds1"}},
            )
        if "/actor-runs/run1" in request.url.path:
            return httpx.Response(200, json={"data": {"status": "SUCCEEDED"}})
        if "/datasets/ds1/items" in request.url.path:
            return httpx.Response(200, content=json.dumps(items))
        return httpx.Response(404)

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_extract_hashtags():
    assert extract_hashtags("Love this #fitness #gym_life!") == ["fitness", "gym_life"]
    assert extract_hashtags(None) == []


def test_extract_username_and_id():
    assert extract_username("https://www.instagram.com/some.creator/") == "some.creator"
    assert extract_username("https://example.com") is None
    assert extract_instagram_id("https://www.instagram.com/reel/C1a2B3/") == "C1a2B3"
    assert is_reel_url("https://instagram.com/p/C1a2B3")
    assert not is_reel_url("https://instagram.com/creator")


def test_fetch_profile_reels_filters_and_sorts():
    reels = fetch_profile_reels("creator", api_key="test-token", client=apify_client(PROFILE_ITEMS), poll_interval=0)

    assert [r["id"] for r in reels] == ["high", "low"]

    high, low = reels
    assert high["url"] == "https://www.instagram.com/reel/HIGH1/"
    assert high["caption"] == "Big news"
    assert high["viewsCount"] == 5000
    assert low["url"] == "https://instagram.com/reel/LOW1"
    assert low["hashtags"] == ["fitness", "gym"]
    assert low["posted_time"] == low["timestamp"] == "2024-01-03T15:00:00.000Z"
    assert low["music_title"] == "Original audio"


def test_fetch_profile_reels_rate_limited():
    with pytest.raises(RateLimitedError):
        fetch_profile_reels("creator", api_key="test-token", client=apify_client([], start_status=429), poll_interval=0)


def test_fetch_profile_reels_requires_key(monkeypatch):
    monkeypatch.delenv("APIFY_API_KEY", raising=False)
    with pytest.raises(InvalidInputError):
        fetch_profile_reels("creator")


def test_fetch_single_reel():
    post = dict(PROFILE_ITEMS[0]["latestPosts"][0])
    url = "https://www.instagram.com/reel/LOW1/"
    reel = fetch_single_reel(url, api_key="test-token", client=apify_client([post]), poll_interval=0)
    assert reel["id"] == "low"
    assert reel["url"] == url


def test_fetch_single_reel_not_found():
    with pytest.raises(NotFoundError):
        fetch_single_reel(
            "https://www.instagram.com/reel/NONE/", api_key="test-token", client=apify_client([]), poll_interval=0
        )


def test_fetch_single_reel_bad_url():
    with pytest.raises(InvalidInputError):
        fetch_single_reel("https://example.com/video", api_key="test-token")


def oembed_client(status, body=None):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/oembed"
        assert request.url.params["url"] == "https://www.instagram.com/reel/C1a2B3/"
        return httpx.Response(status, json=body or {})

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_post_metadata_from_oembed():
    client = oembed_client(
        200, {"thumbnail_url": "https://cdn/thumb.jpg", "author_name": "creator", "title": "Leg day"}
    )
    metadata = fetch_post_metadata("https://www.instagram.com/reel/C1a2B3/", client=client)

    assert metadata.thumbnail == "https://cdn/thumb.jpg"
    assert metadata.username == "creator"
    assert metadata.title == "Leg day"
    assert metadata.description is None


def test_fetch_post_metadata_falls_back_to_media_url():
    metadata = fetch_post_metadata("https://www.instagram.com/reel/C1a2B3/", client=oembed_client(403))

    assert metadata.thumbnail == "https://instagram.com/p/C1a2B3/media/?size=l"
    assert metadata.username is None


def test_fetch_post_metadata_rejects_bad_url():
    with pytest.raises(InvalidInputError):
        fetch_post_metadata("https://www.instagram.com/creator/")
