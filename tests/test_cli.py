import json
from pathlib import Path
from unittest.mock import patch

import pytest
from reel_analyzer.cli import build_parser, main

FIXTURE = Path(__file__).parent / "fixtures" / "sample_reels.json"


def test_profile_from_file(tmp_path):
    out = tmp_path / "analysis.json"
    main(["profile", "--file", str(FIXTURE), "--user-id", "cli-user", "--output", str(out)])

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["userId"] == "cli-user"
    assert data["totalReelsAnalyzed"] == 3


def test_profile_requires_source():
    with pytest.raises(SystemExit) as exc:
        main(["profile"])
    assert exc.value.code == 1


def test_translate_without_provider_fails(monkeypatch, capsys):
    for key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    with pytest.raises(SystemExit):
        main(["translate", "--text", "hello", "--language", "es"])
    assert "No LLM provider configured" in capsys.readouterr().err


def test_repurpose_rejects_unknown_platform():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["repurpose", "--platform", "myspace"])


def test_serve_runs_uvicorn():
    with patch("uvicorn.run") as run:
        main(["serve", "--port", "9000"])
    run.assert_called_once_with("reel_analyzer.server:app", host="127.0.0.1", port=9000)
