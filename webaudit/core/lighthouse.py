"""Lighthouse runner - runs one audit against an already launched browser."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from webaudit.errors.exceptions import AuditError, AuditTimeoutError, LighthouseNotFoundError
from webaudit.schemas.audit import AuditOptions
from webaudit.schemas.common import Device
from webaudit.schemas.lighthouse import RawReport

logger = logging.getLogger(__name__)

AUDIT_TIMEOUT_SECONDS = 120.0

AUDIT_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

DEFAULT_THROTTLING: dict[str, float] = {
    "rttMs": 40,
    "throughputKbps": 10240,
    "cpuSlowdownMultiplier": 1,
    "requestLatencyMs": 0,
    "downloadThroughputKbps": 0,
    "uploadThroughputKbps": 0,
}

# (width, height) per emulated device
SCREEN_SIZES: dict[Device, tuple[int, int]] = {
    Device.MOBILE: (375, 667),
    Device.DESKTOP: (1350, 940),
}


def check_lighthouse_available() -> None:
    """
    Check if Lighthouse CLI is available in PATH.

    Raises:
        LighthouseNotFoundError: If lighthouse is not installed or not in PATH.
    """
    if shutil.which("lighthouse") is None:
        raise LighthouseNotFoundError(
            "Lighthouse CLI not found in PATH. Install it with: npm install -g lighthouse"
        )


def build_lighthouse_config(options: AuditOptions | None = None) -> dict[str, Any]:
    """Build the Lighthouse config profile for the requested device and throttling."""
    options = options or AuditOptions()
    is_mobile = options.device == Device.MOBILE
    width, height = SCREEN_SIZES[options.device]

    return {
        "extends": "lighthouse:default",
        "settings": {
            "formFactor": options.device.value,
            "throttling": dict(DEFAULT_THROTTLING) if options.throttling else {},
            "screenEmulation": {
                "mobile": is_mobile,
                "width": width,
                "height": height,
                "deviceScaleFactor": 1,
                "disabled": False,
            },
            "onlyCategories": list(AUDIT_CATEGORIES),
        },
    }


def _build_lighthouse_command(
    url: str, port: int, config_path: Path, output_path: Path
) -> list[str]:
    """Build the Lighthouse CLI command, connecting to the browser on `port`."""
    return [
        "lighthouse",
        url,
        f"--port={port}",
        f"--config-path={config_path}",
        "--output=json",
        f"--output-path={output_path}",
        "--quiet",
    ]


def _run_lighthouse_sync(command: list[str], timeout: float) -> None:
    """
    Run the Lighthouse CLI synchronously.

    Raises:
        subprocess.TimeoutExpired: If the audit times out.
        RuntimeError: If lighthouse returns a non-zero exit code.
    """
    result = subprocess.run(
        command,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    if result.returncode != 0:
        raise RuntimeError(result.stderr.strip() or f"exit code {result.returncode}")


def parse_report(lh_json: Any) -> RawReport:
    """Validate raw Lighthouse JSON against the fields scoring depends on."""
    try:
        return RawReport.model_validate(lh_json)
    except PydanticValidationError as e:
        raise AuditError(f"Lighthouse report is missing expected fields: {e}") from e


async def run_lighthouse(
    url: str,
    port: int,
    config: dict[str, Any],
    timeout: float = AUDIT_TIMEOUT_SECONDS,
) -> RawReport:
    """
    Run a Lighthouse audit against the browser listening on `port`.

    The run is raced against `timeout`. Nothing cancels the Lighthouse
    process cooperatively; the caller kills the browser on every path.

    Raises:
        AuditTimeoutError: If the run exceeds the timeout.
        AuditError: If the run fails or its output cannot be read.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        config_path = tmpdir_path / "lighthouse-config.json"
        output_path = tmpdir_path / "lighthouse-report.json"
        config_path.write_text(json.dumps(config))

        command = _build_lighthouse_command(url, port, config_path, output_path)

        try:
            await asyncio.wait_for(
                asyncio.to_thread(_run_lighthouse_sync, command, timeout),
                timeout=timeout,
            )

            with open(output_path) as f:
                lh_json = json.load(f)

        except TimeoutError:
            raise AuditTimeoutError(f"Lighthouse audit timed out after {timeout:g}s")
        except subprocess.TimeoutExpired as e:
            raise AuditTimeoutError(f"Lighthouse audit timed out after {e.timeout:g}s")
        except RuntimeError as e:
            raise AuditError(f"Lighthouse process failed: {e}")
        except json.JSONDecodeError as e:
            raise AuditError(f"Failed to parse Lighthouse output: {e}")
        except FileNotFoundError:
            raise AuditError("Lighthouse output file not found")
        except OSError as e:
            raise AuditError(f"OS error running Lighthouse: {e}")

    logger.info(f"Lighthouse audit finished for {url}")
    return parse_report(lh_json)
