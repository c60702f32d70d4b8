from __future__ import annotations

from typing import Any, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DEFAULT_RATING = "1"
APPROVED = "Approved"
REJECTED = "Rejected"
YES = "Yes"
NO = "No"

RATING_FIELDS = (
    "q_deliverables_met",
    "q_quality_completeness",
    "q_evidence_accessibility",
    "q_budget_alignment",
)
JUSTIFICATION_FIELDS = (
    "j_deliverables_met",
    "j_quality_completeness",
    "j_evidence_accessibility",
    "j_budget_alignment",
)


def stringify_field(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_numeric_zero(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


class MilestoneReportData(BaseModel):
    """One reviewer evaluation of a project milestone.

    Accepts the camelCase keys posted by the milestone-report form as well as
    the snake_case field names. Every value is kept as a string; nothing is
    rejected here, upstream validation lives in ``reports.validation``.
    """

    reviewer_handle: str = Field("", alias="reviewerHandle")
    proposal_link: str = Field("", alias="proposalLink")
    proposal_title: str = Field("", alias="proposalTitle")
    proposal_id: str = Field("", alias="proposalId")
    milestone_title: str = Field("", alias="milestoneTitle")
    milestone_number: str = Field("", alias="milestoneNumber")
    milestone_budget_amount: str = Field("", alias="milestoneBudgetAmount")
    date: str = ""
    demo_provided: str = Field("", alias="demoProvided")
    test_run_link: str = Field("", alias="testRunLink")
    verification_status: str = Field("", alias="verificationStatus")
    milestone_description_from_proposal: str = Field("", alias="milestoneDescriptionFromProposal")
    deliverable_link: str = Field("", alias="deliverableLink")
    q_deliverables_met: str = Field("", alias="qDeliverablesMet")
    j_deliverables_met: str = Field("", alias="jDeliverablesMet")
    q_quality_completeness: str = Field("", alias="qQualityCompleteness")
    j_quality_completeness: str = Field("", alias="jQualityCompleteness")
    q_evidence_accessibility: str = Field("", alias="qEvidenceAccessibility")
    j_evidence_accessibility: str = Field("", alias="jEvidenceAccessibility")
    q_budget_alignment: str = Field("", alias="qBudgetAlignment")
    j_budget_alignment: str = Field("", alias="jBudgetAlignment")
    final_recommendation: str = Field("", alias="finalRecommendation")
    approved_why: str = Field("", alias="approvedWhy")
    rejected_why: str = Field("", alias="rejectedWhy")
    suggested_changes: str = Field("", alias="suggestedChanges")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_string(cls, value: Any, info: ValidationInfo) -> str:
        # A numeric 0 rating counts as unanswered, like a missing one.
        if info.field_name in RATING_FIELDS and _is_numeric_zero(value):
            return ""
        return stringify_field(value)

    def ratings(self) -> Tuple[str, str, str, str]:
        """The four criterion ratings, missing ones defaulted to Fully Met."""
        return tuple(getattr(self, name) or DEFAULT_RATING for name in RATING_FIELDS)  # type: ignore[return-value]

    def justifications(self) -> Tuple[str, str, str, str]:
        return tuple(getattr(self, name) for name in JUSTIFICATION_FIELDS)  # type: ignore[return-value]

    @property
    def is_approved(self) -> bool:
        return self.final_recommendation == APPROVED

    @property
    def demo_was_provided(self) -> bool:
        return self.demo_provided == YES

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


ReportInput = Union[MilestoneReportData, Mapping[str, Any]]


def coerce_report_data(payload: ReportInput) -> MilestoneReportData:
    if isinstance(payload, MilestoneReportData):
        return payload
    return MilestoneReportData.model_validate(dict(payload or {}))
