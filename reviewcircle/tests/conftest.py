from __future__ import annotations

from pathlib import Path

import pytest

from reviewcircle.core.config import config

REPO_ROOT = Path(__file__).resolve().parents[2]
TEMPLATE_PATH = REPO_ROOT / "report_template" / "templatedesign.html"


@pytest.fixture(autouse=True)
def _report_assets_from_repo(monkeypatch):
    monkeypatch.setattr(config.report, "base_dir", str(REPO_ROOT))
    monkeypatch.setattr(config.report, "template_path", "report_template/templatedesign.html")
    monkeypatch.setattr(config.report, "escape_html", True)
    monkeypatch.delenv("REVIEWCIRCLE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def template_path() -> str:
    return str(TEMPLATE_PATH)


@pytest.fixture
def report_payload() -> dict:
    return {
        "reviewerHandle": "@maria",
        "proposalLink": "https://deepfunding.ai/proposal/rc-042",
        "proposalTitle": "Decentralized Knowledge Graph Explorer",
        "proposalId": "RC-042",
        "milestoneTitle": "Public beta release",
        "milestoneNumber": 2,
        "milestoneBudgetAmount": 15000,
        "date": "2025-08-05",
        "demoProvided": "Yes",
        "testRunLink": "https://demo.example.org/run/17",
        "verificationStatus": "Yes",
        "milestoneDescriptionFromProposal": "Ship the beta with onboarding docs.",
        "deliverableLink": "https://github.com/example/kg-explorer/releases/tag/v0.2.0",
        "qDeliverablesMet": "1",
        "jDeliverablesMet": "All deliverables listed in the proposal are present.",
        "qQualityCompleteness": "1",
        "jQualityCompleteness": "Docs and code are complete.",
        "qEvidenceAccessibility": "1",
        "jEvidenceAccessibility": "Repository and demo are public.",
        "qBudgetAlignment": "1",
        "jBudgetAlignment": "Spending matches the milestone scope.",
        "finalRecommendation": "Approved",
        "approvedWhy": "Milestone fully delivered.",
        "rejectedWhy": "",
        "suggestedChanges": "",
    }
