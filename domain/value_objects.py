import math
from dataclasses import dataclass
from typing import Iterable

from pydantic import BaseModel, field_validator

from domain.models import (
    FieldType,
    IssueSeverity,
    RiskCategory,
    RiskFlag,
    RiskSeverity,
    ValidationIssue,
)


@dataclass(frozen=True)
class ValidationSnapshot:
    """Counts the scoring formulas need from one set of validation findings."""

    error_count: int = 0
    warning_count: int = 0
    high_risk_count: int = 0  # excludes the persona-authorization flag
    medium_risk_count: int = 0
    policy_risk: bool = False

    @classmethod
    def from_findings(
        cls, issues: Iterable[ValidationIssue], risk_flags: Iterable[RiskFlag] = ()
    ) -> "ValidationSnapshot":
        issues = list(issues)
        flags = list(risk_flags)
        policy = [r for r in flags if r.category == RiskCategory.POLICY]
        others = [r for r in flags if r.category != RiskCategory.POLICY]
        return cls(
            error_count=sum(1 for i in issues if i.severity == IssueSeverity.ERROR),
            warning_count=sum(1 for i in issues if i.severity == IssueSeverity.WARNING),
            high_risk_count=sum(1 for r in others if r.severity == RiskSeverity.HIGH),
            medium_risk_count=sum(1 for r in others if r.severity == RiskSeverity.MEDIUM),
            policy_risk=bool(policy),
        )


class ExtractedEntry(BaseModel):
    key: str
    value: str
    confidence: float

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        # models occasionally answer 92 or -1; one odd entry must not sink the rest
        if math.isnan(v):
            return 0.0
        return min(max(v, 0.0), 1.0)


class ExtractionResult(BaseModel):
    extracted_fields: list[ExtractedEntry] = []
    document_type: str | None = None
    summary: str | None = None


class FieldDescriptor(BaseModel):
    """What the conversational agent emits once it knows enough about the situation."""

    id: str
    name: str
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: list[str] | None = None
