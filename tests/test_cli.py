"""Tests for the command-line entry point."""

import json
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

from webaudit import cli
from webaudit.core import audit
from webaudit.schemas.lighthouse import RawReport


def _run_cli(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["webaudit", *args])
    cli.main()


def test_validate_only(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]):
    _run_cli(monkeypatch, "example.com", "--validate-only")

    output = json.loads(capsys.readouterr().out)
    assert output == {
        "status": "success",
        "message": "Validation successful",
        "validated_url": "https://example.com/",
    }


def test_invalid_url_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        _run_cli(monkeypatch, "ftp://example.com")

    assert exc_info.value.code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "failed"
    assert output["error"].startswith("Validation error: url:")


def test_audit_without_ai(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    raw_report: RawReport,
):
    session = MagicMock()
    session.port = 9333
    session.kill = AsyncMock()
    monkeypatch.setattr(audit, "launch_browser", AsyncMock(return_value=session))
    monkeypatch.setattr(audit, "run_lighthouse", AsyncMock(return_value=raw_report))

    _run_cli(monkeypatch, "example.com", "--device", "mobile", "--no-ai")

    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "completed"
    assert output["overallScore"] == 3.3
    assert output["aiAnalysis"]["status"] == "completed"
    assert output["aiAnalysis"]["insights"] == []
    assert output["aiAnalysis"]["summary"] is None
    session.kill.assert_awaited_once()
