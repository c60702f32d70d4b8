from __future__ import annotations

import io
import logging
import os
import re
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from reviewcircle.api.schemas import ErrorDetail, ErrorResponse, HealthResponse, ValidationResultResponse
from reviewcircle.api.security import (
    api_key_configured,
    install_openapi_api_key_security,
    require_api_key_if_configured,
)
from reviewcircle.core.config import config
from reviewcircle.core.version import __version__, is_valid_core_semver
from reviewcircle.reports.browser import select_browser_launcher
from reviewcircle.reports.html_builder import build_html_from_template
from reviewcircle.reports.milestone_data import MilestoneReportData
from reviewcircle.reports.pdf_renderer import render_html_to_pdf
from reviewcircle.reports.validation import validate_milestone_submission

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Review Circle Reports API",
    description="Milestone review report rendering for the Deep Funding Review Circle",
    version=__version__,
)

install_openapi_api_key_security(app)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 ._-]+")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Submission failed validation"},
    500: {"model": ErrorResponse, "description": "Report could not be rendered"},
}


def _report_filename(report: MilestoneReportData) -> str:
    title = f"Milestone Report - {report.proposal_id or 'UNKNOWN'} - {report.milestone_number}"
    return UNSAFE_FILENAME_CHARS.sub("_", title).strip() + ".pdf"


def _reject_invalid(report: MilestoneReportData) -> None:
    errors = validate_milestone_submission(report)
    if errors:
        detail = ErrorDetail(message=errors[0], errors=errors)
        raise HTTPException(status_code=400, detail=detail.model_dump())


def _health_diagnostics() -> dict[str, Any]:
    template_path = config.report.resolved_template_path()
    return {
        "browser": {
            "strategy": select_browser_launcher().name,
            "chromium_pack_url_configured": bool(config.browser.chromium_pack_url),
            "chromium_executable_configured": bool(config.browser.chromium_executable),
        },
        "report": {
            "template_path": template_path,
            "template_found": os.path.isfile(template_path),
            "escape_html": config.report.escape_html,
            "render_timeout_s": config.report.render_timeout_s,
        },
        "auth": {"api_key_configured": bool(api_key_configured())},
        "release": {"version": __version__, "semver_valid": is_valid_core_semver(__version__)},
    }


@app.get("/health", response_model=HealthResponse)
def health_check():
    return {"status": "healthy", "version": __version__, "diagnostics": _health_diagnostics()}


@app.post("/milestone-reports/validate", response_model=ValidationResultResponse)
def validate_report(report: MilestoneReportData, request: Request):
    require_api_key_if_configured(request)
    errors = validate_milestone_submission(report)
    return {"valid": not errors, "errors": errors}


@app.post("/milestone-reports/preview", response_class=HTMLResponse, responses=ERROR_RESPONSES)
def preview_report(report: MilestoneReportData, request: Request, strict: bool = False):
    require_api_key_if_configured(request)
    if strict:
        _reject_invalid(report)
    try:
        html = build_html_from_template(report)
    except FileNotFoundError as exc:
        logger.exception("Report template missing")
        raise HTTPException(status_code=500, detail=f"Report template missing: {exc.filename}") from exc
    return HTMLResponse(content=html)


@app.post("/milestone-reports/pdf", responses=ERROR_RESPONSES)
async def render_report_pdf(report: MilestoneReportData, request: Request):
    require_api_key_if_configured(request)
    _reject_invalid(report)

    try:
        pdf_bytes = await render_html_to_pdf(report)
    except Exception as exc:
        logger.exception(
            "Milestone report rendering failed (proposal_id=%s milestone=%s)",
            report.proposal_id,
            report.milestone_number,
        )
        raise HTTPException(status_code=500, detail=f"Failed to generate report: {exc}") from exc

    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{_report_filename(report)}"'},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.api_host, port=config.api_port, reload=config.debug)
