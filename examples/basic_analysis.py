import asyncio
from pathlib import Path

from reel_analyzer.pipeline import run_profile

FIXTURE = Path(__file__).resolve().parent.parent / "tests" / "fixtures" / "sample_reels.json"


async def main():
    # Local run against the test fixture: no Apify or Supadata calls
    print("Running deterministic analysis on local fixture...")
    analysis = await run_profile(local_file_json=str(FIXTURE), user_id="example")

    with open("example_output.json", "w", encoding="utf-8") as f:
        f.write(analysis.model_dump_json(indent=2))

    for line in analysis.insights:
        print(f"  - {line}")
    print("Saved example_output.json")


if __name__ == "__main__":
    asyncio.run(main())
