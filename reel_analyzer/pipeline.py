import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .cleaner import clean_reels
from .errors import InvalidInputError, NotFoundError
from .metrics import analyze
from .scraper import extract_username, fetch_profile_reels
from .transcripts import get_transcript
from .types import ProfileAnalytics, ProfileTopReels, ReelRecord, Transcript

TOP_REELS = 5


def fetch_top_reels(profile_url: str, top_n: int = TOP_REELS) -> ProfileTopReels:
    """
    Scrapes a profile and keeps its `top_n` best reels.
    Transcripts are not fetched here; callers attach them on demand.
    """
    username = extract_username(profile_url)
    if not username:
        raise InvalidInputError(f"Invalid Instagram profile URL: {profile_url}")

    all_reels = fetch_profile_reels(username)
    if not all_reels:
        raise NotFoundError(f"No reels found for @{username}", "apify")

    return ProfileTopReels(
        username=username,
        profileUrl=profile_url,
        topReels=clean_reels(all_reels, top_n),
        totalReelsAnalyzed=len(all_reels),
    )


async def attach_transcripts(
    reels: List[ReelRecord],
    fetch: Callable[[str], Awaitable[Transcript]] = get_transcript,
) -> List[ReelRecord]:
    """
    Fetches transcripts concurrently for reels that lack one.
    A failed fetch leaves that reel without a transcript; the rest still go through.
    """
    pending = [i for i, r in enumerate(reels) if r.transcript is None and r.url]
    if not pending:
        return list(reels)

    print(f"[Analysis] Fetching {len(pending)} transcripts...")
    results = await asyncio.gather(
        *[fetch(reels[i].url) for i in pending], return_exceptions=True
    )

    attached = list(reels)
    for i, res in zip(pending, results):
        if isinstance(res, Exception):
            print(f"[Analysis] WARNING: Transcript failed for reel {reels[i].id}: {res}")
            continue
        attached[i] = reels[i].model_copy(update={"transcript": res})
    return attached


def _load_local(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return {"topReels": data}
    return data


async def run_profile(
    profile_url: str = "",
    user_id: str = "local",
    local_file_json: Optional[str] = None,
    top_n: int = TOP_REELS,
    with_transcripts: bool = False,
) -> ProfileAnalytics:
    """
    Orchestrates a profile analysis: scrape (or load) reels, keep the top
    ones, optionally attach transcripts, then run the analytics engine.
    """
    print(f"[Analysis] Starting run for {profile_url or local_file_json}")

    # 1. Scrape or Load
    if local_file_json:
        data = _load_local(local_file_json)
        reels = clean_reels(data.get("topReels") or data.get("reels") or [], top_n)
        profile_url = profile_url or data.get("profileUrl", "")
        username = data.get("username") or extract_username(profile_url) or "unknown"
    else:
        if not profile_url:
            raise ValueError("Must provide either profile_url or local_file_json")
        top = await asyncio.to_thread(fetch_top_reels, profile_url, top_n)
        reels = top.topReels
        username = top.username

    if not reels:
        print("[Analysis] WARNING: No reels to analyze, report will hold defaults")

    # 2. Transcripts
    if with_transcripts:
        reels = await attach_transcripts(reels)

    with_text = sum(1 for r in reels if r.transcript is not None)
    print(f"[Analysis] Analyzing {len(reels)} reels ({with_text} with transcripts)")

    # 3. Deterministic analytics
    return analyze(username, profile_url, user_id, reels)
