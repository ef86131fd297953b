import argparse
import os
import sys
import asyncio

from .pipeline import fetch_top_reels, run_profile
from .repurpose import PLATFORM_CONFIGS, GOAL_INSTRUCTIONS, VISUAL_INSTRUCTIONS, repurpose, translate
from .transcripts import get_transcript
from .types import RepurposingRequest


def _emit(output_json: str, path: str | None, label: str) -> None:
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(output_json)
        print(f"Saved {label} to {path}")
    else:
        print(output_json)


def _read_text(value: str | None, path: str | None) -> str:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    return value or ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Instagram Reel Analytics & Repurposing Toolkit"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: reels
    reels_parser = subparsers.add_parser(
        "reels", help="Fetch a profile's top reels via Apify (no analysis)"
    )
    reels_parser.add_argument("--url", type=str, required=True, help="Instagram profile URL")
    reels_parser.add_argument("--top", type=int, default=5, help="Number of top reels to keep")
    reels_parser.add_argument("--output", type=str, help="Path to save JSON output (optional)")

    # Command: profile
    profile_parser = subparsers.add_parser("profile", help="Run full profile analytics")
    profile_parser.add_argument("--url", type=str, help="Instagram profile URL to scrape first")
    profile_parser.add_argument(
        "--file", type=str, help="Path to local JSON file of reels (skips scraping)"
    )
    profile_parser.add_argument("--user-id", type=str, default="local", help="Owner id stamped on the report")
    profile_parser.add_argument("--top", type=int, default=5, help="Number of top reels to analyze")
    profile_parser.add_argument(
        "--with-transcripts",
        action="store_true",
        help="Fetch transcripts via Supadata before analyzing",
    )
    profile_parser.add_argument("--output", type=str, help="Path to save JSON analysis output (optional)")

    # Command: transcript
    transcript_parser = subparsers.add_parser("transcript", help="Fetch a single reel transcript")
    transcript_parser.add_argument("--url", type=str, required=True, help="Instagram reel or post URL")
    transcript_parser.add_argument("--output", type=str, help="Path to save JSON output (optional)")

    # Command: repurpose
    rep_parser = subparsers.add_parser("repurpose", help="Rewrite a transcript for another platform")
    rep_parser.add_argument("--transcript", type=str, help="Transcript text")
    rep_parser.add_argument("--transcript-file", type=str, help="Path to a transcript text file")
    rep_parser.add_argument("--goal", type=str, choices=list(GOAL_INSTRUCTIONS), default="create-version")
    rep_parser.add_argument("--platform", type=str, choices=list(PLATFORM_CONFIGS), default="tiktok")
    rep_parser.add_argument("--tone", type=str, default="conversational")
    rep_parser.add_argument("--visual", type=str, choices=list(VISUAL_INSTRUCTIONS), default="text-only")
    rep_parser.add_argument("--language", type=str, help="Target language code for repost-language")
    rep_parser.add_argument("--caption", type=str, help="Original caption")
    rep_parser.add_argument("--hashtag", type=str, action="append", help="Original hashtag (repeatable)")
    rep_parser.add_argument("--instructions", type=str, help="Custom instructions for the model")
    rep_parser.add_argument("--output", type=str, help="Path to save JSON output (optional)")

    # Command: translate
    tr_parser = subparsers.add_parser("translate", help="Translate text with the configured LLM")
    tr_parser.add_argument("--text", type=str, help="Text to translate")
    tr_parser.add_argument("--text-file", type=str, help="Path to a text file")
    tr_parser.add_argument("--language", type=str, required=True, help="Target language code, e.g. es")
    tr_parser.add_argument("--output", type=str, help="Path to save JSON output (optional)")

    # Command: serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1", help="Interface to bind")
    serve_parser.add_argument(
        "--port", type=int, default=int(os.environ.get("PORT", 8000)), help="Port to listen on"
    )

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "reels":
        try:
            top = fetch_top_reels(args.url, args.top)
            _emit(top.model_dump_json(indent=2), args.output, "reels")
        except Exception as e:
            print(f"Fetching reels failed: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == "profile":
        if not args.url and not args.file:
            print("Error: Must provide either --url or --file")
            sys.exit(1)

        try:
            analysis = asyncio.run(
                run_profile(
                    profile_url=args.url or "",
                    user_id=args.user_id,
                    local_file_json=args.file,
                    top_n=args.top,
                    with_transcripts=args.with_transcripts,
                )
            )
            _emit(analysis.model_dump_json(indent=2), args.output, "analysis")
        except Exception as e:
            print(f"Analysis failed: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == "transcript":
        try:
            result = asyncio.run(get_transcript(args.url))
            _emit(result.model_dump_json(indent=2), args.output, "transcript")
        except Exception as e:
            print(f"Transcript fetch failed: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == "repurpose":
        try:
            request = RepurposingRequest(
                goal=args.goal,
                targetPlatform=args.platform,
                tone=args.tone,
                visualPreference=args.visual,
                originalTranscript=_read_text(args.transcript, args.transcript_file),
                targetLanguage=args.language,
                customInstructions=args.instructions,
                originalCaption=args.caption,
                originalHashtags=args.hashtag,
            )
            content = asyncio.run(repurpose(request))
            _emit(content.model_dump_json(indent=2, exclude_none=True), args.output, "repurposed content")
        except Exception as e:
            print(f"Repurposing failed: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == "translate":
        try:
            result = asyncio.run(translate(_read_text(args.text, args.text_file), args.language))
            _emit(result.model_dump_json(indent=2), args.output, "translation")
        except Exception as e:
            print(f"Translation failed: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == "serve":
        import uvicorn

        uvicorn.run("reel_analyzer.server:app", host=args.host, port=args.port)

    else:
        parser.print_help()


if __name__ == "__main__":
    main()
