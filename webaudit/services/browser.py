"""Browser session management: one headless Chromium per audit, launched via Playwright."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import socket
import sys
from dataclasses import dataclass, field
from pathlib import Path

from playwright.async_api import Browser, Error as PlaywrightError, Playwright, async_playwright

from webaudit.errors.exceptions import LaunchError

logger = logging.getLogger(__name__)

BASELINE_FLAGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--disable-background-networking",
    "--single-process",
    "--no-zygote",
    "--mute-audio",
)

_DEBUG_PORT_FLAG = "--remote-debugging-port"

_MAC_CHROME_PATHS = (
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
)

_LINUX_CHROME_NAMES = (
    "google-chrome",
    "google-chrome-stable",
    "chromium",
    "chromium-browser",
)


@dataclass(frozen=True)
class LaunchConfig:
    """Options for launching a browser session."""

    chrome_path: str | None = None
    chrome_flags: tuple[str, ...] = ()
    launch_timeout: float = 30.0


def _is_executable(path: str) -> bool:
    candidate = Path(path)
    return candidate.is_file() and os.access(candidate, os.X_OK)


def _platform_candidates() -> list[str]:
    """Well-known Chrome install locations for the current platform."""
    if sys.platform == "darwin":
        return list(_MAC_CHROME_PATHS)

    if sys.platform == "win32":
        program_dirs = [
            os.environ.get("PROGRAMFILES", r"C:\Program Files"),
            os.environ.get("PROGRAMFILES(X86)", r"C:\Program Files (x86)"),
            os.environ.get("LOCALAPPDATA", ""),
        ]
        return [
            str(Path(base) / "Google" / "Chrome" / "Application" / "chrome.exe")
            for base in program_dirs
            if base
        ]

    # Linux/Unix: look up on PATH
    candidates: list[str] = []
    for name in _LINUX_CHROME_NAMES:
        found = shutil.which(name)
        if found:
            candidates.append(found)
    return candidates


def resolve_chrome_path(explicit: str | None = None, fallback: str | None = None) -> str:
    """
    Resolve the browser executable to launch.

    Order: explicit path, platform well-known paths, then the fallback
    (normally the Playwright-managed Chromium).

    Raises:
        LaunchError: If no candidate exists or is executable.
    """
    if explicit:
        if not _is_executable(explicit):
            raise LaunchError(f"Chrome executable not found or not executable: {explicit}")
        return explicit

    for candidate in _platform_candidates():
        if _is_executable(candidate):
            return candidate

    if fallback and _is_executable(fallback):
        return fallback

    raise LaunchError(
        "Chrome not found. Install Google Chrome, set CHROME_PATH, "
        "or run: playwright install chromium"
    )


def _flag_name(flag: str) -> str:
    return flag.split("=", 1)[0]


def merge_flags(port: int, extra_flags: tuple[str, ...] | list[str] = ()) -> list[str]:
    """
    Union the baseline flags with caller flags.

    Duplicates are dropped, and caller flags cannot override a baseline
    switch or the managed debugging port.
    """
    flags = [*BASELINE_FLAGS, f"{_DEBUG_PORT_FLAG}={port}"]
    reserved = {_flag_name(flag) for flag in flags}

    for flag in extra_flags:
        if flag in flags or _flag_name(flag) in reserved:
            continue
        flags.append(flag)
    return flags


def find_free_port() -> int:
    """Ask the OS for an unused local TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@dataclass
class BrowserSession:
    """A running browser process plus its remote-debugging port."""

    port: int
    executable_path: str
    browser: Browser | None = None
    playwright: Playwright | None = None
    _killed: bool = field(default=False, init=False)

    @property
    def killed(self) -> bool:
        return self._killed

    async def kill(self) -> None:
        """Terminate the browser and its driver. Safe to call more than once."""
        if self._killed:
            return
        self._killed = True

        if self.browser is not None:
            try:
                await self.browser.close()
            except PlaywrightError as e:
                logger.error(f"Error closing browser on port {self.port}: {e}")
            self.browser = None

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                logger.error(f"Error stopping Playwright driver: {e}")
            self.playwright = None

        logger.info(f"Browser session on CDP port {self.port} terminated")


async def launch_browser(config: LaunchConfig | None = None) -> BrowserSession:
    """
    Launch a headless Chromium with a remote-debugging port for Lighthouse.

    Raises:
        LaunchError: If no browser executable is found or the launch fails.
    """
    config = config or LaunchConfig()

    try:
        playwright = await async_playwright().start()
    except PlaywrightError as e:
        raise LaunchError(f"Failed to start Playwright: {e}") from e

    # Partially started sessions are torn down through the same kill path
    session = BrowserSession(port=find_free_port(), executable_path="", playwright=playwright)

    try:
        session.executable_path = resolve_chrome_path(
            config.chrome_path, fallback=playwright.chromium.executable_path
        )
        flags = merge_flags(session.port, config.chrome_flags)

        logger.info(f"Launching Chrome at {session.executable_path} with flags {flags}")
        session.browser = await asyncio.wait_for(
            playwright.chromium.launch(
                executable_path=session.executable_path,
                headless=True,
                args=flags,
            ),
            timeout=config.launch_timeout,
        )
    except LaunchError:
        await session.kill()
        raise
    except TimeoutError as e:
        await session.kill()
        raise LaunchError(f"Browser launch timed out after {config.launch_timeout}s") from e
    except PlaywrightError as e:
        await session.kill()
        raise LaunchError(f"Failed to launch Chrome: {e}") from e

    logger.info(f"Chrome launched on CDP port {session.port}")
    return session
