from typing import List, Dict, Any, Optional
from .types import ReelRecord, Transcript, TranscriptChunk


def _count(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def clean_transcript(raw: Any) -> Optional[Transcript]:
    """
    Accepts a Supadata response, a bare string or a bare chunk list.
    Chunk-only responses carry their text under "chunks" instead of "content".
    """
    if raw is None:
        return None
    if isinstance(raw, Transcript):
        return raw
    if isinstance(raw, str):
        return Transcript(content=raw)
    if isinstance(raw, list):
        return Transcript(content=_clean_chunks(raw))
    if not isinstance(raw, dict):
        return None

    content = raw.get("content")
    if content is None:
        content = raw.get("chunks")
    if isinstance(content, list):
        content = _clean_chunks(content)
    elif content is not None and not isinstance(content, str):
        content = None

    return Transcript(
        content=content,
        lang=raw.get("lang"),
        availableLangs=raw.get("availableLangs"),
    )


def _clean_chunks(items: List[Any]) -> List[TranscriptChunk]:
    chunks = []
    for c in items:
        if isinstance(c, TranscriptChunk):
            chunks.append(c)
        elif isinstance(c, dict):
            chunks.append(
                TranscriptChunk(
                    text=str(c.get("text") or ""),
                    offset=c.get("offset") or 0,
                    duration=c.get("duration") or 0,
                )
            )
        elif isinstance(c, str):
            chunks.append(TranscriptChunk(text=c))
    return chunks


def clean_reel(raw: Dict[str, Any]) -> ReelRecord:
    posted_time = raw.get("posted_time") or raw.get("timestamp") or None
    hashtags = raw.get("hashtags") or []

    return ReelRecord(
        id=str(raw.get("id") or raw.get("shortCode") or ""),
        url=raw.get("url") or "",
        caption=raw.get("caption"),
        thumbnail=raw.get("thumbnail"),
        likesCount=_count(raw.get("likesCount")),
        viewsCount=_count(raw.get("viewsCount")),
        commentsCount=_count(raw.get("commentsCount")),
        posted_time=posted_time,
        timestamp=raw.get("timestamp"),
        videoUrl=raw.get("videoUrl"),
        hashtags=[str(h) for h in hashtags],
        music_title=raw.get("music_title"),
        transcript=clean_transcript(raw.get("transcript")),
    )


def clean_reels(
    raw_reels: List[Dict[str, Any]], limit: Optional[int] = None
) -> List[ReelRecord]:
    """
    Normalizes raw reel dicts (scraper output, saved JSON or request bodies).
    Null counts become 0 and `timestamp` backfills `posted_time`.
    Order is preserved; `limit` keeps the first N.
    """
    sliced = raw_reels[:limit] if limit else raw_reels
    return [r if isinstance(r, ReelRecord) else clean_reel(r) for r in sliced]
