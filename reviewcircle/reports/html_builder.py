# reviewcircle/reports/html_builder.py

from __future__ import annotations

import html
import re
from typing import Callable, Optional

from reviewcircle.core.config import config
from reviewcircle.reports.logo import get_logo_data_url
from reviewcircle.reports.milestone_data import REJECTED, MilestoneReportData, ReportInput, coerce_report_data
from reviewcircle.reports.scoring import (
    DANGER_COLOR,
    RATING_LABELS,
    SUCCESS_COLOR,
    color_for_rating,
    criteria_score,
    format_criteria_score,
    format_date_dd_mmm_yyyy,
)

REVIEWER_LABEL = "Review Circle"
LINK_COLOR = "#2563EB"

STYLE_BLOCK_PATTERN = re.compile(r"<style>([\s\S]*?)</style>")

CRITERIA_TITLES = (
    "Deliverables Match Milestone Description",
    "Quality and Completeness of Milestone",
    "Accessibility of Supporting Evidence",
    "Budget Alignment (Value for Money)",
)

APPROVED_BANNER_STYLE = f"background: linear-gradient(90deg,#052e0d,#0b5d1a); border-color:{SUCCESS_COLOR};"
REJECTED_BANNER_STYLE = f"background: linear-gradient(90deg,#3b0b0b,#6b1818); border-color:{DANGER_COLOR};"

# Dark text tint per legend chip, keyed by rating.
LEGEND_TEXT_COLORS = {"1": "#052e0d", "2": "#3b3005", "3": "#3b0b0b"}

Escaper = Callable[[str], str]


def extract_template_css(raw: str) -> str:
    match = STYLE_BLOCK_PATTERN.search(raw or "")
    return match.group(1) if match else ""


def load_template_css(template_path: str) -> str:
    with open(template_path, "r", encoding="utf-8") as fh:
        return extract_template_css(fh.read())


def _escaper(enabled: bool) -> Escaper:
    if enabled:
        return lambda value: html.escape(value, quote=True)
    return lambda value: value


def _yes_no_color(value: str) -> str:
    return SUCCESS_COLOR if value == "Yes" else DANGER_COLOR


def _verdict_banner(data: MilestoneReportData, esc: Escaper) -> str:
    style = APPROVED_BANNER_STYLE if data.is_approved else REJECTED_BANNER_STYLE
    accent = SUCCESS_COLOR if data.is_approved else DANGER_COLOR
    return (
        f'<div class="verdict-box" style="{style}">\n'
        f"  Milestone Review Submitted by {REVIEWER_LABEL}!\n"
        f'  <span>Milestone Verdict: <b style="color:{accent};">{esc(data.final_recommendation)}</b></span>\n'
        "</div>"
    )


def _details_section(data: MilestoneReportData, date_text: str, esc: Escaper) -> str:
    items = [
        ("&#128100; Reviewer", REVIEWER_LABEL),
        ("&#128196; Milestone Title", esc(data.milestone_title)),
        ("#&#65039;&#8419; Milestone Number", esc(data.milestone_number)),
        ("&#128178; Milestone Budget Amount", esc(data.milestone_budget_amount)),
        ("&#128197; Date", date_text),
        ("&#127380; Proposal ID", esc(data.proposal_id)),
    ]
    rows = "\n".join(
        f'  <div class="detail-item"><div class="detail-label">{label}</div><div class="detail-value">{value}</div></div>'
        for label, value in items
    )
    return (
        '<h2 class="section-title">Project Details</h2>\n'
        f'<div class="details-grid">\n{rows}\n</div>\n'
        '<div class="proposal-title">\n'
        "  <b>Proposal Title</b><br>\n"
        f"  {esc(data.proposal_title)}\n"
        "</div>\n"
        f'<div class="view-proposal">&#128279; <a href="{esc(data.proposal_link)}" target="_blank" '
        f'style="color:{LINK_COLOR};">View Proposal</a></div>'
    )


def _rating_legend() -> str:
    chips = "\n".join(
        '    <div style="display:flex; gap:6px; align-items:center;">'
        f'<span style="background:{color_for_rating(num)}; color:{LEGEND_TEXT_COLORS[num]}; padding:4px 10px; '
        f'border-radius:9999px; font-weight:600;">{num}</span>'
        f'<span style="color:#FFFFFF; font-size:12px;">{label}</span></div>'
        for num, label in RATING_LABELS.items()
    )
    return (
        '<div class="rating-legend" style="margin:10px 0; padding:10px; border:1px solid #9D9FA9; '
        'border-radius:12px; background:#0C021E; color:#FFFFFF;">\n'
        '  <div style="margin-bottom:6px; font-family: Montserrat, sans-serif;">Rating Legend</div>\n'
        '  <div style="display:flex; gap:12px; align-items:center; flex-wrap:wrap;">\n'
        f"{chips}\n"
        "  </div>\n"
        "</div>"
    )


def _criteria_section(data: MilestoneReportData, esc: Escaper) -> str:
    cards = "\n".join(
        f'  <div class="criteria-card"><div class="criteria-title">{title}</div>'
        f'<div class="badge" style="background:{color_for_rating(rating)}; color:#000;">{esc(rating)}</div></div>'
        for title, rating in zip(CRITERIA_TITLES, data.ratings())
    )
    deliverable = esc(data.deliverable_link)
    return (
        '<h2 class="section-title">Review Criteria</h2>\n'
        f"{_rating_legend()}\n"
        '<div class="proposal-title" style="margin-bottom:8px;">\n'
        "  <b>Milestone Description From Proposal</b>\n"
        f'  <div style="margin-top:6px;">{esc(data.milestone_description_from_proposal)}</div>\n'
        "</div>\n"
        f'<div class="view-proposal">&#128279; Deliverable Link: <a href="{deliverable}" target="_blank" '
        f'style="color:{LINK_COLOR};">{deliverable}</a></div>\n'
        f'<div class="criteria-grid">\n{cards}\n</div>'
    )


def _justifications_section(data: MilestoneReportData, esc: Escaper) -> str:
    blocks = [
        f'<div class="justification-box"><div class="justification-number">{idx}</div>{esc(text)}</div>'
        for idx, text in enumerate(data.justifications(), start=1)
        if text
    ]
    return "\n".join(['<h2 class="section-title">Justifications</h2>', *blocks])


def _demo_section(data: MilestoneReportData, esc: Escaper) -> str:
    parts = [
        '<div class="demo-box">',
        '  <div class="demo-title">Did the team provide a demo, prototype, repository test run, '
        "or marketplace onboarding trial?</div>",
        f'  <div class="yes-badge" style="background:{_yes_no_color(data.demo_provided)}; color:#000;">'
        f"{esc(data.demo_provided)}</div>",
    ]
    if data.demo_was_provided and data.test_run_link:
        link = esc(data.test_run_link)
        parts.append(
            f'  <div class="test-run"><div>Test Run Link:</div>'
            f'<a href="{link}" target="_blank" style="color:{LINK_COLOR};">{link}</a></div>'
        )
    parts.append(
        '  <div style="margin-top:8px;">Reviewer was able to verify functionality: '
        f'<span style="background:{_yes_no_color(data.verification_status)}; color:#000; padding:4px 8px; '
        f'border-radius:9999px;">{esc(data.verification_status)}</span></div>'
    )
    parts.append("</div>")
    return "\n".join(parts)


def _final_section(data: MilestoneReportData, score_text: str, esc: Escaper) -> str:
    verdict = esc(data.final_recommendation)
    accent = SUCCESS_COLOR if data.is_approved else DANGER_COLOR
    rationale = data.approved_why if data.is_approved else data.rejected_why
    parts = [
        '<div class="final-box">',
        '  <div class="final-header">Final Recommendation</div>',
        f'  <div class="approved-badge" style="background:{accent}; color:#000;">{verdict}</div>',
        f'  <div class="final-rationale">{esc(rationale)}</div>',
    ]
    if data.final_recommendation == REJECTED and data.suggested_changes:
        parts.append(
            f'  <div class="suggested-changes" style="margin-top:6px;"><b>Suggested Changes:</b> '
            f"{esc(data.suggested_changes)}</div>"
        )
    stats = [
        ("Status", f"&#10003; {verdict}"),
        ("Criteria Met", score_text),
        ("Budget", esc(data.milestone_budget_amount)),
    ]
    parts.append('  <div class="final-stats">')
    parts.extend(
        f'    <div class="stat-card"><div class="stat-label">{label}</div><div class="stat-value">{value}</div></div>'
        for label, value in stats
    )
    parts.append("  </div>")
    parts.append("</div>")
    return "\n".join(parts)


def build_html_from_template(
    data: ReportInput,
    *,
    template_path: Optional[str] = None,
    logo_url: Optional[str] = None,
    escape: Optional[bool] = None,
) -> str:
    """Materialize the milestone review report as a standalone HTML document.

    CSS comes from the first ``<style>`` block of the report template; a
    missing template raises ``FileNotFoundError``. Free-text fields are
    HTML-escaped unless ``escape`` (or ``REVIEWCIRCLE_REPORT_ESCAPE_HTML``) is off.
    """
    report = coerce_report_data(data)
    css = load_template_css(template_path or config.report.resolved_template_path())
    esc = _escaper(config.report.escape_html if escape is None else escape)

    date_text = format_date_dd_mmm_yyyy(report.date)
    score_text = format_criteria_score(criteria_score(report.ratings()))
    logo = logo_url if logo_url is not None else get_logo_data_url()

    body = "\n".join(
        [
            '<div style="display:flex; align-items:center; gap:10px;">',
            f'  <img src="{logo}" alt="DEEP Logo" style="height:48px; width:auto;" />',
            '  <h1 class="header-title">RC Milestone Review Report</h1>',
            "</div>",
            f'<div class="date-row" style="margin-top:12px;">&#128197; <span>{date_text}</span></div>',
            _verdict_banner(report, esc),
            _details_section(report, date_text, esc),
            _criteria_section(report, esc),
            _justifications_section(report, esc),
            _demo_section(report, esc),
            _final_section(report, score_text, esc),
        ]
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8" />\n'
        "  <title>DEEP - RC Milestone Review Report</title>\n"
        f"  <style>{css}</style>\n"
        "</head>\n"
        "<body>\n"
        f'<div class="page-container">\n{body}\n</div>\n'
        "</body>\n"
        "</html>"
    )
