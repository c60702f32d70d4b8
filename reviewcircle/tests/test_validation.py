from __future__ import annotations

import pytest

from reviewcircle.reports.validation import (
    sanitize_input,
    validate_input,
    validate_milestone_submission,
    validate_number,
    validate_required_text,
    validate_url,
)


def test_valid_submission_has_no_errors(report_payload):
    assert validate_milestone_submission(report_payload) == []


@pytest.mark.parametrize("value", ["=SUM(A1:A2)", "  +1", "@user", "-cmd", "|pipe"])
def test_validate_input_rejects_formula_prefixes(value):
    assert "cannot start with formula characters" in validate_input(value, "Title")


def test_validate_input_allows_plain_text_and_empty():
    assert validate_input("Plain title") is None
    assert validate_input("") is None


def test_sanitize_input_prefixes_formulas():
    assert sanitize_input("=1+1") == "'=1+1"
    assert sanitize_input("fine") == "fine"


def test_validate_url():
    assert validate_url("") is None
    assert validate_url("https://deepfunding.ai/proposal/1") is None
    assert validate_url("not a url") == "Please enter a valid URL"
    assert validate_url("deepfunding.ai/proposal") == "Please enter a valid URL"


def test_validate_required_text_limits():
    assert validate_required_text("", "Proposal ID") == "Proposal ID is required"
    assert validate_required_text("   ", "Proposal ID") == "Proposal ID is required"
    assert validate_required_text("abc", "Proposal ID", 1, 2) == "Proposal ID must be no more than 2 characters long"
    assert validate_required_text("ab", "Proposal ID", 3, 10) == "Proposal ID must be at least 3 characters long"
    assert validate_required_text("ok", "Proposal ID") is None


def test_validate_number():
    assert validate_number("12", "Milestone Number", 0, 100) is None
    assert validate_number("12.5 USD", "Milestone Budget Amount", 0) is None
    assert validate_number("abc", "Milestone Number") == "Milestone Number must be a valid number"
    assert validate_number("", "Milestone Number") == "Milestone Number must be a valid number"
    assert validate_number("101", "Milestone Number", 0, 100) == "Milestone Number must be no more than 100"
    assert validate_number("-1", "Milestone Budget Amount", 0) == "Milestone Budget Amount must be at least 0"


def test_missing_required_fields_are_reported_in_order(report_payload):
    payload = {**report_payload, "proposalTitle": "", "milestoneTitle": "", "proposalLink": "nope"}
    errors = validate_milestone_submission(payload)
    assert errors == [
        "Proposal Title is required",
        "Milestone Title is required",
        "Please enter a valid URL",
    ]


def test_demo_requires_test_run_link(report_payload):
    errors = validate_milestone_submission({**report_payload, "testRunLink": ""})
    assert errors == ["Test Run Link is required"]
    assert validate_milestone_submission({**report_payload, "demoProvided": "No", "testRunLink": ""}) == []


def test_rejected_requires_reason_and_suggested_changes(report_payload):
    payload = {**report_payload, "finalRecommendation": "Rejected"}
    assert validate_milestone_submission(payload) == [
        "Rejected Why is required",
        "Suggested Changes is required",
    ]


def test_approved_requires_reason(report_payload):
    errors = validate_milestone_submission({**report_payload, "approvedWhy": ""})
    assert errors == ["Approved Why is required"]
