from __future__ import annotations

import pytest

from reviewcircle.reports.html_builder import (
    APPROVED_BANNER_STYLE,
    REJECTED_BANNER_STYLE,
    build_html_from_template,
    extract_template_css,
)

LOGO = "data:image/png;base64,AAAA"


def _build(payload, template_path, **kwargs):
    return build_html_from_template(payload, template_path=template_path, logo_url=LOGO, **kwargs)


def test_extract_template_css_takes_first_style_block():
    raw = "<html><style>.a{color:red}</style><style>.b{}</style></html>"
    assert extract_template_css(raw) == ".a{color:red}"
    assert extract_template_css("<html><body>no css</body></html>") == ""


def test_document_is_complete_and_embeds_template_css(report_payload, template_path):
    html = _build(report_payload, template_path)
    assert html.startswith("<!DOCTYPE html>")
    assert html.endswith("</html>")
    assert ".justification-box" in html
    assert f'<img src="{LOGO}"' in html
    assert "05 Aug 2025" in html
    assert "Decentralized Knowledge Graph Explorer" in html
    assert "4/4" in html


def test_missing_template_raises(report_payload, tmp_path):
    with pytest.raises(FileNotFoundError):
        _build(report_payload, str(tmp_path / "missing.html"))


def test_template_without_style_block_gives_empty_css(report_payload, tmp_path):
    bare = tmp_path / "bare.html"
    bare.write_text("<html><body></body></html>", encoding="utf-8")
    html = _build(report_payload, str(bare))
    assert "<style></style>" in html


def test_demo_block_only_when_demo_provided(report_payload, template_path):
    html = _build(report_payload, template_path)
    assert "Test Run Link:" in html
    assert 'href="https://demo.example.org/run/17"' in html

    html = _build({**report_payload, "demoProvided": "No"}, template_path)
    assert "Test Run Link:" not in html
    assert "https://demo.example.org/run/17" not in html

    html = _build({**report_payload, "testRunLink": ""}, template_path)
    assert "Test Run Link:" not in html


def test_empty_justifications_are_omitted(report_payload, template_path):
    payload = {**report_payload, "jQualityCompleteness": "", "jBudgetAlignment": ""}
    html = _build(payload, template_path)
    assert html.count('class="justification-box"') == 2
    assert html.count("All deliverables listed in the proposal are present.") == 1
    assert html.count("Repository and demo are public.") == 1
    assert '<div class="justification-number">2</div>' not in html


def test_approved_verdict_styling(report_payload, template_path):
    html = _build(report_payload, template_path)
    assert APPROVED_BANNER_STYLE in html
    assert REJECTED_BANNER_STYLE not in html
    assert "Milestone fully delivered." in html
    assert "Suggested Changes:" not in html


def test_rejected_verdict_styling_and_suggested_changes(report_payload, template_path):
    payload = {
        **report_payload,
        "finalRecommendation": "Rejected",
        "approvedWhy": "should not appear",
        "rejectedWhy": "Demo could not be verified.",
        "suggestedChanges": "Publish the test dataset.",
        "qEvidenceAccessibility": "3",
        "qBudgetAlignment": "2",
    }
    html = _build(payload, template_path)
    assert REJECTED_BANNER_STYLE in html
    assert APPROVED_BANNER_STYLE not in html
    assert "Demo could not be verified." in html
    assert "Publish the test dataset." in html
    assert "should not appear" not in html
    assert "2.5/4" in html


def test_rejected_without_suggested_changes_omits_block(report_payload, template_path):
    payload = {**report_payload, "finalRecommendation": "Rejected", "rejectedWhy": "No."}
    html = _build(payload, template_path)
    assert "Suggested Changes:" not in html


def test_criteria_badges_use_rating_colors(report_payload, template_path):
    payload = {**report_payload, "qDeliverablesMet": "2", "qQualityCompleteness": "3", "qBudgetAlignment": ""}
    html = _build(payload, template_path)
    assert 'class="badge" style="background:#FACC15; color:#000;">2<' in html
    assert 'class="badge" style="background:#EF4444; color:#000;">3<' in html
    # Missing rating renders as Fully Met.
    assert html.count('class="badge" style="background:#22C55E; color:#000;">1<') == 2
    assert "2.5/4" in html


def test_free_text_is_escaped_by_default(report_payload, template_path):
    payload = {**report_payload, "proposalTitle": "<script>alert(1)</script>"}
    html = _build(payload, template_path)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_escaping_can_be_disabled(report_payload, template_path):
    payload = {**report_payload, "jDeliverablesMet": "<b>bold</b> claim"}
    html = _build(payload, template_path, escape=False)
    assert "<b>bold</b> claim" in html


def test_invalid_date_renders_empty(report_payload, template_path):
    html = _build({**report_payload, "date": "sometime soon"}, template_path)
    assert '<div class="date-row" style="margin-top:12px;">&#128197; <span></span></div>' in html
    assert "NaN" not in html


@pytest.mark.parametrize("verdict", ["", "Pending"])
def test_suggested_changes_only_shown_for_rejected_verdict(report_payload, template_path, verdict):
    payload = {
        **report_payload,
        "finalRecommendation": verdict,
        "rejectedWhy": "Needs another pass.",
        "suggestedChanges": "Add the missing benchmark results.",
    }
    html = _build(payload, template_path)
    assert "Suggested Changes:" not in html
    assert "Add the missing benchmark results." not in html
    assert REJECTED_BANNER_STYLE in html


def test_rating_legend_lists_every_rating_label(report_payload, template_path):
    html = _build(report_payload, template_path)
    for label in ("Fully Met", "Partially Met", "Not Met"):
        assert f'font-size:12px;">{label}</span>' in html
    assert "background:#FACC15; color:#3b3005;" in html
