# reviewcircle/core/config.py

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel

SERVERLESS_MARKERS = ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME")


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _env_bool(name: str, default: bool) -> bool:
    return _env(name, "true" if default else "false").strip().lower() in {"1", "true", "yes", "on"}


def _serverless_from_env() -> bool:
    explicit = os.getenv("REVIEWCIRCLE_SERVERLESS")
    if explicit is not None:
        return explicit.strip().lower() in {"1", "true", "yes", "on"}
    return any(os.getenv(marker) for marker in SERVERLESS_MARKERS)


class ReportConfig(BaseModel):
    """Where report assets live and how the HTML is built."""
    base_dir: str = "."
    template_path: str = "report_template/templatedesign.html"
    escape_html: bool = True
    render_timeout_s: float = 60.0

    def resolved_template_path(self) -> str:
        if os.path.isabs(self.template_path):
            return self.template_path
        return os.path.join(self.base_dir, self.template_path)


class BrowserConfig(BaseModel):
    """Headless browser acquisition settings."""
    serverless: bool = False
    chromium_pack_url: Optional[str] = None
    chromium_executable: Optional[str] = None
    chromium_cache_dir: str = "/tmp/reviewcircle-chromium"
    pack_download_timeout_s: float = 60.0


class ReviewCircleConfig(BaseModel):
    """Main Review Circle configuration."""
    report: ReportConfig = ReportConfig()
    browser: BrowserConfig = BrowserConfig()
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "ReviewCircleConfig":
        """Load configuration from environment variables."""
        return cls(
            report=ReportConfig(
                base_dir=_env("REVIEWCIRCLE_REPORT_BASE_DIR", "."),
                template_path=_env("REVIEWCIRCLE_REPORT_TEMPLATE", "report_template/templatedesign.html"),
                escape_html=_env_bool("REVIEWCIRCLE_REPORT_ESCAPE_HTML", True),
                render_timeout_s=float(_env("REVIEWCIRCLE_RENDER_TIMEOUT_S", "60")),
            ),
            browser=BrowserConfig(
                serverless=_serverless_from_env(),
                chromium_pack_url=_env("REVIEWCIRCLE_CHROMIUM_PACK_URL", "").strip() or None,
                chromium_executable=_env("REVIEWCIRCLE_CHROMIUM_EXECUTABLE", "").strip() or None,
                chromium_cache_dir=_env("REVIEWCIRCLE_CHROMIUM_CACHE_DIR", "/tmp/reviewcircle-chromium"),
                pack_download_timeout_s=float(_env("REVIEWCIRCLE_CHROMIUM_DOWNLOAD_TIMEOUT_S", "60")),
            ),
            api_host=_env("REVIEWCIRCLE_API_HOST", "0.0.0.0"),
            api_port=int(_env("REVIEWCIRCLE_API_PORT", "8000")),
            debug=_env_bool("REVIEWCIRCLE_DEBUG", False),
        )

config = ReviewCircleConfig.from_env()
