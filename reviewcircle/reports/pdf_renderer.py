from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright

from reviewcircle.core.config import config
from reviewcircle.reports.browser import BrowserLauncher, select_browser_launcher
from reviewcircle.reports.errors import ReportRenderError
from reviewcircle.reports.html_builder import build_html_from_template
from reviewcircle.reports.milestone_data import ReportInput

logger = logging.getLogger(__name__)

PDF_PAGE_FORMAT = "A4"
PDF_MARGINS: Dict[str, str] = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}


async def _print_html(html: str, launcher: BrowserLauncher) -> bytes:
    async with async_playwright() as playwright:
        browser = await launcher.launch(playwright)
        try:
            page = await browser.new_page()
            await page.set_content(html, wait_until="networkidle")
            return await page.pdf(format=PDF_PAGE_FORMAT, print_background=True, margin=dict(PDF_MARGINS))
        finally:
            await browser.close()


async def render_html_to_pdf(
    data: ReportInput,
    *,
    launcher: Optional[BrowserLauncher] = None,
    template_path: Optional[str] = None,
    timeout_s: Optional[float] = None,
    **html_options: Any,
) -> bytes:
    """Render a milestone report to PDF bytes.

    The HTML is built first, so a missing template fails before any browser
    starts. The browser is always closed, including on timeout. Errors are not
    retried.
    """
    html = build_html_from_template(data, template_path=template_path, **html_options)
    launcher = launcher or select_browser_launcher()
    timeout = config.report.render_timeout_s if timeout_s is None else timeout_s

    try:
        pdf = await asyncio.wait_for(_print_html(html, launcher), timeout=timeout if timeout > 0 else None)
    except asyncio.TimeoutError as exc:
        raise ReportRenderError(f"PDF rendering timed out after {timeout:g}s") from exc

    logger.info("Rendered milestone report PDF (%d bytes, browser=%s)", len(pdf), launcher.name)
    return bytes(pdf)


def render_html_to_pdf_sync(data: ReportInput, **kwargs: Any) -> bytes:
    return asyncio.run(render_html_to_pdf(data, **kwargs))
