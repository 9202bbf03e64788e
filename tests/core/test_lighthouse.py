"""Tests for the Lighthouse runner."""

import json
import subprocess
import time
from typing import Any

import pytest

from webaudit.core import lighthouse
from webaudit.core.lighthouse import (
    AUDIT_CATEGORIES,
    DEFAULT_THROTTLING,
    build_lighthouse_config,
    check_lighthouse_available,
    parse_report,
    run_lighthouse,
)
from webaudit.errors.exceptions import AuditError, AuditTimeoutError, LighthouseNotFoundError
from webaudit.schemas.audit import AuditOptions
from webaudit.schemas.common import Device


def _output_path(command: list[str]) -> str:
    return next(arg.split("=", 1)[1] for arg in command if arg.startswith("--output-path="))


class TestBuildLighthouseConfig:
    def test_desktop_defaults(self):
        config = build_lighthouse_config(AuditOptions())
        settings = config["settings"]

        assert config["extends"] == "lighthouse:default"
        assert settings["formFactor"] == "desktop"
        assert settings["throttling"] == {}
        assert settings["screenEmulation"] == {
            "mobile": False,
            "width": 1350,
            "height": 940,
            "deviceScaleFactor": 1,
            "disabled": False,
        }
        assert settings["onlyCategories"] == AUDIT_CATEGORIES

    def test_mobile(self):
        settings = build_lighthouse_config(AuditOptions(device=Device.MOBILE))["settings"]

        assert settings["formFactor"] == "mobile"
        assert settings["screenEmulation"]["mobile"] is True
        assert settings["screenEmulation"]["width"] == 375
        assert settings["screenEmulation"]["height"] == 667

    def test_throttling_profile(self):
        settings = build_lighthouse_config(AuditOptions(throttling=True))["settings"]

        assert settings["throttling"] == DEFAULT_THROTTLING
        # The shared profile must not be handed out for mutation
        assert settings["throttling"] is not DEFAULT_THROTTLING


class TestCheckLighthouseAvailable:
    def test_missing_binary(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(lighthouse.shutil, "which", lambda name: None)
        with pytest.raises(LighthouseNotFoundError):
            check_lighthouse_available()

    def test_binary_on_path(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(lighthouse.shutil, "which", lambda name: "/usr/bin/lighthouse")
        check_lighthouse_available()


class TestParseReport:
    def test_fixture(self, lighthouse_json: dict[str, Any]):
        report = parse_report(lighthouse_json)
        assert set(report.categories) == {"performance", "accessibility", "best-practices", "seo"}
        assert report.categories["performance"].audit_refs[0].id == "first-contentful-paint"

    def test_missing_audits(self):
        with pytest.raises(AuditError):
            parse_report({"categories": {}})

    def test_score_out_of_range(self, lighthouse_json: dict[str, Any]):
        lighthouse_json["audits"]["speed-index"]["score"] = 80
        with pytest.raises(AuditError):
            parse_report(lighthouse_json)


class TestRunLighthouse:
    @pytest.mark.asyncio
    async def test_success(
        self,
        monkeypatch: pytest.MonkeyPatch,
        lighthouse_json: dict[str, Any],
    ):
        seen: dict[str, Any] = {}

        def fake_run(command: list[str], timeout: float) -> None:
            seen["command"] = command
            config_path = next(
                arg.split("=", 1)[1] for arg in command if arg.startswith("--config-path=")
            )
            with open(config_path) as f:
                seen["config"] = json.load(f)
            with open(_output_path(command), "w") as f:
                json.dump(lighthouse_json, f)

        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)
        config = build_lighthouse_config(AuditOptions(device=Device.MOBILE))

        report = await run_lighthouse("https://example.com/", 9222, config)

        assert "performance" in report.categories
        assert seen["command"][:3] == ["lighthouse", "https://example.com/", "--port=9222"]
        assert seen["config"] == config

    @pytest.mark.asyncio
    async def test_timeout(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(
            lighthouse, "_run_lighthouse_sync", lambda command, timeout: time.sleep(0.5)
        )

        with pytest.raises(AuditTimeoutError):
            await run_lighthouse("https://example.com/", 9222, {}, timeout=0.05)

    @pytest.mark.asyncio
    async def test_subprocess_timeout(self, monkeypatch: pytest.MonkeyPatch):
        def fake_run(command: list[str], timeout: float) -> None:
            raise subprocess.TimeoutExpired(command, timeout)

        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)

        with pytest.raises(AuditTimeoutError):
            await run_lighthouse("https://example.com/", 9222, {})

    @pytest.mark.asyncio
    async def test_process_failure(self, monkeypatch: pytest.MonkeyPatch):
        def fake_run(command: list[str], timeout: float) -> None:
            raise RuntimeError("Unable to connect to Chrome")

        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)

        with pytest.raises(AuditError, match="Unable to connect to Chrome"):
            await run_lighthouse("https://example.com/", 9222, {})

    @pytest.mark.asyncio
    async def test_no_output_file(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", lambda command, timeout: None)

        with pytest.raises(AuditError, match="output file not found"):
            await run_lighthouse("https://example.com/", 9222, {})

    @pytest.mark.asyncio
    async def test_invalid_output(self, monkeypatch: pytest.MonkeyPatch):
        def fake_run(command: list[str], timeout: float) -> None:
            with open(_output_path(command), "w") as f:
                f.write("{not json")

        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)

        with pytest.raises(AuditError, match="Failed to parse"):
            await run_lighthouse("https://example.com/", 9222, {})
