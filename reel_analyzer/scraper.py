import os
import re
import time
from contextlib import nullcontext
from typing import Dict, Any, List, Optional

import httpx

from .errors import (
    InvalidInputError,
    NotFoundError,
    UpstreamUnavailableError,
    error_for_status,
)
from .types import InstagramMetadata


APIFY_BASE = "https://api.apify.com/v2"
PROFILE_ACTOR_ID = "apify~instagram-profile-scraper"
POST_ACTOR_ID = "apify~instagram-post-scraper"
OEMBED_URL = "https://api.instagram.com/oembed"

PROFILE_RESULTS_LIMIT = 50
MAX_WAIT_SECONDS = 180
POLL_INTERVAL_SECONDS = 5.0

HASHTAG_REGEX = re.compile(r"#\w+")
USERNAME_REGEX = re.compile(r"instagram\.com/([a-zA-Z0-9._]+)")
POST_ID_REGEX = re.compile(r"instagram\.com/(?:p|reel)/([A-Za-z0-9_-]+)")
REEL_URL_REGEX = re.compile(r"^https?://(www\.)?instagram\.com/(reel|p)/[A-Za-z0-9_-]+/?")


def extract_hashtags(caption: Optional[str]) -> List[str]:
    if not caption:
        return []
    return [tag[1:] for tag in HASHTAG_REGEX.findall(caption)]


def extract_username(url: str) -> Optional[str]:
    match = USERNAME_REGEX.search(url or "")
    return match.group(1) if match else None


def extract_instagram_id(url: str) -> Optional[str]:
    match = POST_ID_REGEX.search(url or "")
    return match.group(1) if match else None


def is_reel_url(url: str) -> bool:
    return bool(REEL_URL_REGEX.match(url or ""))


def _is_reel(post: Dict[str, Any]) -> bool:
    return post.get("type") in ("Video", "Reel") or "video" in (post.get("displayUrl") or "")


def ranking_score(reel: Dict[str, Any]) -> int:
    # Comments weigh double when picking the top reels
    return (
        (reel.get("likesCount") or 0)
        + (reel.get("viewsCount") or 0)
        + (reel.get("commentsCount") or 0) * 2
    )


def _normalize_reel(post: Dict[str, Any], url: Optional[str] = None) -> Dict[str, Any]:
    def pick(*keys: str) -> Any:
        for key in keys:
            if post.get(key):
                return post[key]
        return None

    caption = pick("caption", "text")
    posted_time = pick("timestamp", "takenAt", "created")
    music = post.get("musicInfo") if isinstance(post.get("musicInfo"), dict) else {}

    return {
        "id": str(pick("id", "shortCode") or ""),
        "url": url or pick("url") or f"https://instagram.com/reel/{post.get('shortCode', '')}",
        "caption": caption,
        "thumbnail": pick("displayUrl", "thumbnailUrl", "thumbnail"),
        "likesCount": pick("likesCount", "likes"),
        "viewsCount": pick("videoViewCount", "playsCount", "viewCount"),
        "commentsCount": pick("commentsCount", "comments"),
        "timestamp": posted_time,
        "posted_time": posted_time,
        "videoUrl": pick("videoUrl", "video"),
        "hashtags": extract_hashtags(caption),
        "music_title": music.get("name")
        or pick("audioName", "musicName", "originalAudioTitle"),
    }


def _token(api_key: Optional[str]) -> str:
    token = api_key or os.environ.get("APIFY_API_KEY")
    if not token:
        raise InvalidInputError("APIFY_API_KEY not configured or passed", "apify")
    return token


def run_actor(
    client: httpx.Client,
    actor_id: str,
    payload: Dict[str, Any],
    token: str,
    max_wait: float = MAX_WAIT_SECONDS,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> List[Dict[str, Any]]:
    """
    Starts an Apify actor run, polls it to completion and returns its dataset items.
    """
    try:
        # 1. Start the actor run
        run_res = client.post(
            f"{APIFY_BASE}/acts/{actor_id}/runs",
            params={"token": token},
            json=payload,
            timeout=30.0,
        )
        if run_res.status_code != 201:
            raise error_for_status(
                run_res.status_code,
                f"Failed to start Apify actor: {run_res.status_code} {run_res.text}",
                "apify",
            )

        run_data = run_res.json()["data"]
        run_id = run_data["id"]
        status = run_data["status"]

        # 2. Poll until completion
        start_time = time.time()
        while status in ("RUNNING", "READY"):
            if time.time() - start_time > max_wait:
                raise UpstreamUnavailableError("Scraping timed out", "apify")

            time.sleep(poll_interval)

            status_res = client.get(
                f"{APIFY_BASE}/actor-runs/{run_id}",
                params={"token": token},
                timeout=10.0,
            )
            status = status_res.json()["data"]["status"]

        if status != "SUCCEEDED":
            raise UpstreamUnavailableError(f"Scraping failed with status: {status}", "apify")

        # 3. Fetch dataset items
        items_res = client.get(
            f"{APIFY_BASE}/datasets/{run_data['defaultDatasetId']}/items",
            params={"token": token, "format": "json"},
            timeout=30.0,
        )
        if items_res.status_code != 200:
            raise error_for_status(
                items_res.status_code, "Failed to fetch dataset items", "apify"
            )

        return items_res.json()
    except httpx.HTTPError as e:
        raise UpstreamUnavailableError(f"Apify request failed: {e}", "apify") from e


def fetch_profile_reels(
    username: str,
    api_key: Optional[str] = None,
    results_limit: int = PROFILE_RESULTS_LIMIT,
    client: Optional[httpx.Client] = None,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> List[Dict[str, Any]]:
    """
    Scrapes a profile's latest posts via Apify and returns its reels,
    sorted by ranking_score (highest first).
    """
    token = _token(api_key)
    print(f"[Scraper] Fetching reels for @{username} via Apify...")

    with (nullcontext(client) if client else httpx.Client()) as http:
        items = run_actor(
            http,
            PROFILE_ACTOR_ID,
            {"usernames": [username], "resultsLimit": results_limit},
            token,
            poll_interval=poll_interval,
        )

    reels = []
    for item in items:
        for post in item.get("latestPosts") or []:
            if _is_reel(post):
                reels.append(_normalize_reel(post))

    print(f"[Scraper] Found {len(reels)} reels in {len(items)} profile items")
    return sorted(reels, key=ranking_score, reverse=True)


def fetch_single_reel(
    reel_url: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> Dict[str, Any]:
    if not extract_instagram_id(reel_url):
        raise InvalidInputError(f"Invalid Instagram reel URL: {reel_url}", "apify")

    token = _token(api_key)
    print(f"[Scraper] Fetching reel metadata for {reel_url}")

    with (nullcontext(client) if client else httpx.Client()) as http:
        items = run_actor(
            http,
            POST_ACTOR_ID,
            {"directUrls": [reel_url], "resultsLimit": 1},
            token,
            poll_interval=poll_interval,
        )

    if not items:
        raise NotFoundError(f"No reel data returned for URL: {reel_url}", "apify")

    return _normalize_reel(items[0], url=reel_url)


def fetch_post_metadata(
    post_url: str,
    client: Optional[httpx.Client] = None,
) -> InstagramMetadata:
    """
    Public oEmbed lookup: thumbnail, author and title only. Counts need
    the authenticated Graph API, so none come back here.
    Falls back to the /media/ thumbnail URL when oEmbed is unavailable.
    """
    post_id = extract_instagram_id(post_url)
    if not post_id:
        raise InvalidInputError(f"Invalid Instagram URL format: {post_url}", "instagram")

    try:
        with (nullcontext(client) if client else httpx.Client()) as http:
            res = http.get(OEMBED_URL, params={"url": post_url}, timeout=10.0)
        if res.status_code == 200:
            data = res.json()
            return InstagramMetadata(
                url=post_url,
                thumbnail=data.get("thumbnail_url"),
                username=data.get("author_name"),
                title=data.get("title"),
            )
        print(f"[Scraper] WARNING: oEmbed returned {res.status_code}, using fallback thumbnail")
    except (httpx.HTTPError, ValueError) as e:
        print(f"[Scraper] WARNING: oEmbed failed ({e}), using fallback thumbnail")

    return InstagramMetadata(
        url=post_url,
        thumbnail=f"https://instagram.com/p/{post_id}/media/?size=l",
    )
