"""FastAPI server exposing reel analytics, transcripts and repurposing."""
import asyncio

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from reel_analyzer.cleaner import clean_reel, clean_reels
from reel_analyzer.errors import InvalidInputError, ProviderError
from reel_analyzer.metrics import analyze
from reel_analyzer.pipeline import fetch_top_reels
from reel_analyzer.repurpose import repurpose, translate
from reel_analyzer.scraper import fetch_post_metadata, fetch_single_reel, is_reel_url
from reel_analyzer.transcripts import fetch_job_status, fetch_transcript
from reel_analyzer.types import RepurposingRequest, TranscriptJob

app = FastAPI(title="reel-analyzer API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Error label for unexpected failures, keyed by route path
FAILURE_LABELS = {
    "/api/profile-analytics": "Failed to analyze profile",
    "/api/profile-top-reels": "Failed to fetch profile top reels",
    "/api/reel-metadata": "Failed to fetch reel metadata",
    "/api/instagram-metadata": "Failed to fetch Instagram metadata",
    "/api/transcript": "Failed to fetch transcript",
    "/api/transcript/{job_id}": "Failed to fetch job status",
    "/api/repurpose": "Failed to repurpose content",
    "/api/translate": "Failed to translate text",
}


def _error(status: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(body, status_code=status)


@app.exception_handler(ProviderError)
async def _provider_error(request: Request, exc: ProviderError) -> JSONResponse:
    print(f"[API] {request.url.path} failed: {exc.message}")
    return _error(exc.status_code, exc.message)


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    label = FAILURE_LABELS.get(getattr(route, "path", ""), "Internal server error")
    print(f"[API] {request.url.path} error: {exc}")
    return _error(500, label, str(exc))


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidInputError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return body


# ── Analytics ────────────────────────────────────────────────────────────────


@app.post("/api/profile-analytics")
async def profile_analytics(request: Request):
    body = await _json_body(request)
    username = body.get("username")
    profile_url = body.get("profileUrl")
    top_reels = body.get("topReels")
    user_id = body.get("userId")

    if not username or not profile_url or top_reels is None or not user_id:
        return _error(400, "Missing required parameters")
    if not isinstance(top_reels, list):
        return _error(400, "topReels must be a list")

    try:
        reels = clean_reels(top_reels)
        report = analyze(username, profile_url, user_id, reels)
    except Exception as e:
        print(f"[API] Profile analytics error: {e}")
        return _error(500, "Failed to analyze profile", str(e))

    return JSONResponse(report.model_dump(mode="json"))


# ── Reels ────────────────────────────────────────────────────────────────────


@app.get("/api/profile-top-reels")
async def profile_top_reels(url: str = ""):
    if not url:
        return _error(400, "Profile URL parameter is required")
    top = await asyncio.to_thread(fetch_top_reels, url)
    return JSONResponse(top.model_dump(mode="json"))


@app.get("/api/reel-metadata")
async def reel_metadata(url: str = ""):
    if not url:
        return _error(400, "Reel URL parameter is required")
    raw = await asyncio.to_thread(fetch_single_reel, url)
    return JSONResponse(clean_reel(raw).model_dump(mode="json"))


@app.get("/api/instagram-metadata")
async def instagram_metadata(url: str = ""):
    if not url:
        return _error(400, "URL parameter is required")
    if not is_reel_url(url):
        return _error(400, "Invalid Instagram URL format")
    metadata = await asyncio.to_thread(fetch_post_metadata, url)
    return JSONResponse(metadata.model_dump(mode="json"))


# ── Transcripts ──────────────────────────────────────────────────────────────


@app.get("/api/transcript")
async def transcript(url: str = ""):
    if not url:
        return _error(400, "URL parameter is required")
    if not is_reel_url(url):
        return _error(
            400,
            "Invalid Instagram URL format. Please provide a valid Instagram reel or post URL.",
        )

    result = await fetch_transcript(url)
    if isinstance(result, TranscriptJob):
        return JSONResponse(result.model_dump(), status_code=202)
    return JSONResponse(result.model_dump(mode="json"))


@app.get("/api/transcript/{job_id}")
async def transcript_job(job_id: str):
    status = await fetch_job_status(job_id)
    return JSONResponse(status.model_dump(mode="json", exclude_none=True))


# ── Repurposing ──────────────────────────────────────────────────────────────


@app.post("/api/repurpose")
async def repurpose_content(request: Request):
    body = await _json_body(request)
    try:
        req = RepurposingRequest.model_validate(body)
    except ValidationError:
        return _error(400, "Missing required fields")

    content = await repurpose(req)
    return JSONResponse(content.model_dump(mode="json", exclude_none=True))


@app.post("/api/translate")
async def translate_text(request: Request):
    body = await _json_body(request)
    text = body.get("text")
    target_language = body.get("targetLanguage")
    if not text or not target_language:
        return _error(400, "Text and target language are required")

    result = await translate(text, target_language)
    return JSONResponse(result.model_dump(mode="json"))
