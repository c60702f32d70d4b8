from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urlparse

from reviewcircle.reports.milestone_data import APPROVED, REJECTED, YES, ReportInput, coerce_report_data

FORMULA_PREFIX_PATTERN = re.compile(r"^\s*[=+\-@|*^%&$#!~`]")

MAX_DESCRIPTION_LENGTH = 5000
MAX_LINK_LENGTH = 2000
MAX_RATIONALE_LENGTH = 3000
MAX_MILESTONE_NUMBER = 100

REQUIRED_TEXT_FIELDS = (
    ("proposal_title", "Proposal Title"),
    ("proposal_id", "Proposal ID"),
    ("milestone_title", "Milestone Title"),
    ("milestone_description_from_proposal", "Milestone Description From Proposal"),
)
URL_FIELDS = (
    ("proposal_link", "Proposal Link"),
    ("deliverable_link", "Deliverable Link"),
)


def validate_input(value: str, field_name: str = "Input") -> Optional[str]:
    """Reject values that a spreadsheet would evaluate as a formula."""
    if not value:
        return None
    if FORMULA_PREFIX_PATTERN.match(value):
        return f"{field_name} cannot start with formula characters (=, +, -, @, etc.)"
    return None


def sanitize_input(value: str) -> str:
    if value and FORMULA_PREFIX_PATTERN.match(value):
        return f"'{value}"
    return value


def validate_url(value: str) -> Optional[str]:
    if not value:
        return None
    try:
        parsed = urlparse(value)
    except ValueError:
        return "Please enter a valid URL"
    if not parsed.scheme or not (parsed.netloc or parsed.scheme in {"mailto", "data", "file"}):
        return "Please enter a valid URL"
    return validate_input(value, "URL")


def validate_required_text(value: str, field_name: str, min_length: int = 1, max_length: int = 1000) -> Optional[str]:
    if not value or not value.strip():
        return f"{field_name} is required"
    if len(value) < min_length:
        return f"{field_name} must be at least {min_length} characters long"
    if len(value) > max_length:
        return f"{field_name} must be no more than {max_length} characters long"
    return validate_input(value, field_name)


def _leading_number(value: str) -> Optional[float]:
    match = re.match(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", value or "")
    if not match:
        return None
    return float(match.group(0))


def validate_number(
    value: str,
    field_name: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> Optional[str]:
    number = _leading_number(str(value))
    if number is None:
        return f"{field_name} must be a valid number"
    if minimum is not None and number < minimum:
        return f"{field_name} must be at least {minimum:g}"
    if maximum is not None and number > maximum:
        return f"{field_name} must be no more than {maximum:g}"
    return None


def validate_milestone_submission(data: ReportInput) -> List[str]:
    """Run the submission checks and return every error message, in order."""
    report = coerce_report_data(data)
    errors: List[Optional[str]] = []

    for field, label in REQUIRED_TEXT_FIELDS:
        errors.append(validate_required_text(getattr(report, field), label, 1, MAX_DESCRIPTION_LENGTH))
    for field, _label in URL_FIELDS:
        errors.append(validate_url(getattr(report, field)))

    if report.demo_provided == YES:
        errors.append(validate_url(report.test_run_link))
        errors.append(validate_required_text(report.test_run_link, "Test Run Link", 1, MAX_LINK_LENGTH))

    errors.append(validate_number(report.milestone_number, "Milestone Number", 0, MAX_MILESTONE_NUMBER))
    errors.append(validate_number(report.milestone_budget_amount, "Milestone Budget Amount", 0))

    if report.final_recommendation == APPROVED:
        errors.append(validate_required_text(report.approved_why, "Approved Why", 1, MAX_RATIONALE_LENGTH))
    elif report.final_recommendation == REJECTED:
        errors.append(validate_required_text(report.rejected_why, "Rejected Why", 1, MAX_RATIONALE_LENGTH))
        errors.append(validate_required_text(report.suggested_changes, "Suggested Changes", 1, MAX_RATIONALE_LENGTH))

    return [error for error in errors if error]
