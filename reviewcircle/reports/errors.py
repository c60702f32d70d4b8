from __future__ import annotations


class ReportRenderError(RuntimeError):
    """A milestone report could not be rendered to PDF."""


class BrowserUnavailableError(ReportRenderError):
    """No headless browser executable could be resolved or launched."""
