import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Union

import httpx

from .cleaner import clean_transcript
from .errors import (
    InvalidInputError,
    RateLimitedError,
    UpstreamUnavailableError,
    error_for_status,
)
from .types import Transcript, TranscriptJob, TranscriptJobStatus

SUPADATA_API_URL = "https://api.supadata.ai/v1/transcript"
MAX_WAIT_SECONDS = 90
POLL_INTERVAL_SECONDS = 2.0


def _api_key(api_key: Optional[str]) -> str:
    key = api_key or os.environ.get("SUPADATA_API_KEY")
    if not key:
        raise InvalidInputError("SUPADATA_API_KEY not configured or passed", "supadata")
    return key


@asynccontextmanager
async def _client(client: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=30.0) as owned:
        yield owned


def _raise_for_response(res: httpx.Response) -> None:
    if res.is_success:
        return

    message = f"HTTP {res.status_code}: {res.reason_phrase}"
    try:
        data = res.json()
        if isinstance(data, dict):
            message = data.get("message") or data.get("error") or message
    except ValueError:
        pass

    if res.status_code == 401:
        message = "Invalid Supadata API key. Check SUPADATA_API_KEY"
    elif res.status_code == 429 or "Limit Exceeded" in message:
        raise RateLimitedError(
            f"Supadata API rate limit exceeded: {message}", "supadata", res.status_code
        )

    raise error_for_status(res.status_code, message, "supadata")


async def _get(client: Optional[httpx.AsyncClient], endpoint: str, key: str, **params: Any) -> httpx.Response:
    try:
        async with _client(client) as http:
            res = await http.get(endpoint, params=params or None, headers={"x-api-key": key})
    except httpx.HTTPError as e:
        raise UpstreamUnavailableError(f"Supadata request failed: {e}", "supadata") from e
    _raise_for_response(res)
    return res


async def fetch_transcript(
    url: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Union[Transcript, TranscriptJob]:
    """
    Requests a transcript for a reel URL. Supadata answers either with the
    transcript itself or, for longer media, with a job id to poll (HTTP 202).
    """
    key = _api_key(api_key)
    res = await _get(client, SUPADATA_API_URL, key, url=url)
    data = res.json()

    if isinstance(data, dict) and data.get("jobId"):
        return TranscriptJob(jobId=str(data["jobId"]))

    transcript = clean_transcript(data)
    if transcript is None:
        raise UpstreamUnavailableError("Unexpected transcript response format", "supadata")
    return transcript


async def fetch_job_status(
    job_id: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> TranscriptJobStatus:
    key = _api_key(api_key)
    res = await _get(client, f"{SUPADATA_API_URL}/{job_id}", key)
    data = res.json()

    transcript = clean_transcript(data)
    return TranscriptJobStatus(
        status=data.get("status"),
        content=transcript.content if transcript else None,
        lang=data.get("lang"),
        availableLangs=data.get("availableLangs"),
        error=data.get("error") if isinstance(data.get("error"), str) else None,
    )


async def get_transcript(
    url: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    max_wait: float = MAX_WAIT_SECONDS,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> Transcript:
    """
    Fetches a transcript, polling the job endpoint until it completes,
    fails or `max_wait` seconds pass.
    """
    result = await fetch_transcript(url, api_key=api_key, client=client)
    if isinstance(result, Transcript):
        return result

    print(f"[Transcript] Job {result.jobId} queued for {url}, polling...")
    start_time = time.time()
    while True:
        status = await fetch_job_status(result.jobId, api_key=api_key, client=client)

        if status.status == "failed":
            raise UpstreamUnavailableError(
                f"Transcript job {result.jobId} failed: {status.error or 'unknown error'}",
                "supadata",
            )
        if status.status == "completed" or (status.status is None and status.content):
            return Transcript(
                content=status.content,
                lang=status.lang,
                availableLangs=status.availableLangs,
            )

        if time.time() - start_time > max_wait:
            raise UpstreamUnavailableError(
                f"Transcript job {result.jobId} timed out after {max_wait}s", "supadata"
            )
        await asyncio.sleep(poll_interval)
