from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import stat
import tarfile
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import httpx
from playwright.async_api import Browser, Playwright

from reviewcircle.core.config import BrowserConfig, config
from reviewcircle.reports.errors import BrowserUnavailableError

logger = logging.getLogger(__name__)

LOCAL_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

SERVERLESS_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-features=HttpsFirstBalancedModeAutoEnable",
    "--single-process",
    "--no-zygote",
    "--disable-gpu",
]

CHROMIUM_BINARY_NAMES = ("chromium", "chrome", "headless_shell", "chrome-headless-shell")

_pack_lock = threading.Lock()


class BrowserLauncher(ABC):
    """Starts a headless browser on a running Playwright driver."""

    name: str = "browser"

    @abstractmethod
    async def launch(self, playwright: Playwright) -> Browser:
        ...


class LocalChromiumLauncher(BrowserLauncher):
    name = "local"

    async def launch(self, playwright: Playwright) -> Browser:
        logger.debug("Launching local Chromium (args=%s)", LOCAL_LAUNCH_ARGS)
        return await playwright.chromium.launch(headless=True, args=list(LOCAL_LAUNCH_ARGS))


class ServerlessChromiumLauncher(BrowserLauncher):
    name = "serverless"

    def __init__(self, settings: Optional[BrowserConfig] = None):
        self.settings = settings or config.browser

    def resolve_executable_path(self) -> Optional[str]:
        """Pick the Chromium binary for constrained environments.

        An explicitly configured executable wins, then a binary unpacked from
        the configured pack URL. ``None`` means Playwright's own Chromium.
        """
        if self.settings.chromium_executable:
            if not os.path.isfile(self.settings.chromium_executable):
                raise BrowserUnavailableError(
                    f"Configured Chromium executable not found: {self.settings.chromium_executable}"
                )
            return self.settings.chromium_executable
        if self.settings.chromium_pack_url:
            return ensure_chromium_pack(
                self.settings.chromium_pack_url,
                self.settings.chromium_cache_dir,
                timeout_s=self.settings.pack_download_timeout_s,
            )
        return None

    async def launch(self, playwright: Playwright) -> Browser:
        executable_path = await asyncio.to_thread(self.resolve_executable_path)
        launch_kwargs: dict[str, Any] = {"headless": True, "args": list(SERVERLESS_LAUNCH_ARGS)}
        if executable_path:
            launch_kwargs["executable_path"] = executable_path
        logger.info("Launching serverless Chromium (executable=%s)", executable_path or "playwright-managed")
        return await playwright.chromium.launch(**launch_kwargs)


def select_browser_launcher(settings: Optional[BrowserConfig] = None) -> BrowserLauncher:
    settings = settings or config.browser
    if settings.serverless:
        return ServerlessChromiumLauncher(settings)
    return LocalChromiumLauncher()


def _pack_dir(cache_dir: str, pack_url: str) -> str:
    digest = hashlib.sha256(pack_url.encode("utf-8")).hexdigest()[:16]
    return os.path.join(cache_dir, digest)


def find_chromium_binary(root: str) -> Optional[str]:
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in CHROMIUM_BINARY_NAMES:
            if name in filenames:
                return os.path.join(dirpath, name)
    return None


def find_brotli_members(root: str) -> List[str]:
    found = []
    for dirpath, _dirnames, filenames in os.walk(root):
        found.extend(os.path.relpath(os.path.join(dirpath, name), root) for name in filenames if name.endswith(".br"))
    return sorted(found)


def _safe_members(archive: tarfile.TarFile, target_dir: str) -> List[tarfile.TarInfo]:
    root = os.path.realpath(target_dir)
    members: List[tarfile.TarInfo] = []
    for member in archive.getmembers():
        if member.issym() or member.islnk():
            continue
        destination = os.path.realpath(os.path.join(root, member.name))
        if os.path.commonpath([root, destination]) != root:
            raise BrowserUnavailableError(f"Chromium pack member escapes target directory: {member.name}")
        members.append(member)
    return members


def extract_chromium_pack(archive_path: str, target_dir: str) -> None:
    os.makedirs(target_dir, exist_ok=True)
    with tarfile.open(archive_path, "r:*") as archive:
        members = _safe_members(archive, target_dir)
        if hasattr(tarfile, "data_filter"):
            archive.extractall(target_dir, members=members, filter="data")
        else:
            archive.extractall(target_dir, members=members)


def download_chromium_pack(pack_url: str, destination: str, *, timeout_s: float) -> None:
    logger.info("Downloading Chromium pack from %s", pack_url)
    tmp_path = f"{destination}.part"
    with httpx.stream("GET", pack_url, timeout=timeout_s, follow_redirects=True) as response:
        response.raise_for_status()
        with open(tmp_path, "wb") as fh:
            for chunk in response.iter_bytes():
                fh.write(chunk)
    os.replace(tmp_path, destination)


def ensure_chromium_pack(pack_url: str, cache_dir: str, *, timeout_s: float = 60.0) -> str:
    """Download and unpack a Chromium pack once, returning the binary path."""
    target_dir = _pack_dir(cache_dir, pack_url)
    with _pack_lock:
        binary = find_chromium_binary(target_dir) if os.path.isdir(target_dir) else None
        if binary is None:
            os.makedirs(cache_dir, exist_ok=True)
            archive_path = f"{target_dir}.tar"
            try:
                download_chromium_pack(pack_url, archive_path, timeout_s=timeout_s)
                extract_chromium_pack(archive_path, target_dir)
            except (httpx.HTTPError, tarfile.TarError, OSError) as exc:
                raise BrowserUnavailableError(f"Could not prepare Chromium pack from {pack_url}: {exc}") from exc
            finally:
                if os.path.exists(archive_path):
                    os.unlink(archive_path)
            binary = find_chromium_binary(target_dir)
        if binary is None:
            compressed = find_brotli_members(target_dir) if os.path.isdir(target_dir) else []
            if compressed:
                raise BrowserUnavailableError(
                    f"Chromium pack {pack_url} holds brotli-compressed members ({', '.join(compressed)}); "
                    "repack it as a plain tar archive with an uncompressed chromium binary"
                )
            raise BrowserUnavailableError(f"No Chromium binary found in pack {pack_url}")

        mode = os.stat(binary).st_mode
        if not mode & stat.S_IXUSR:
            os.chmod(binary, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return binary
