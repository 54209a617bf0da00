from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from core.config import settings
from domain.models import (
    FieldType,
    FormField,
    IssueSeverity,
    PersonaType,
    Process,
    RiskCategory,
    RiskFlag,
    RiskSeverity,
    ValidationIssue,
)

# formats people actually type into a date box, beyond ISO-8601
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)
_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$|^0[xX][0-9a-fA-F]+$")


@dataclass
class ValidationOutcome:
    issues: list[ValidationIssue] = field(default_factory=list)
    risk_flags: list[RiskFlag] = field(default_factory=list)


def is_valid_date(raw: str) -> bool:
    text = raw.strip()
    try:
        date.fromisoformat(text)
        return True
    except ValueError:
        pass
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
        return True
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


def is_numeric(raw: str) -> bool:
    text = raw.strip()
    if text in {"Infinity", "+Infinity", "-Infinity"}:
        return True
    if not _NUMBER.match(text):
        return False
    if text.lower().startswith("0x"):
        return True
    return not math.isnan(float(text))


def _field_findings(f: FormField, out: ValidationOutcome) -> None:
    # R1: required fields must be filled
    if f.required and not f.is_filled():
        out.issues.append(
            ValidationIssue(
                id=f"{f.id}-required",
                field_id=f.id,
                severity=IssueSeverity.ERROR,
                message=f"{f.label} is required",
                suggestion="Please fill in this field",
                rule_source="Form validation rules",
                confidence=1.0,
            )
        )

    # R2: date fields must parse
    if f.type == FieldType.DATE and f.value and not is_valid_date(f.value):
        out.issues.append(
            ValidationIssue(
                id=f"{f.id}-invalid-date",
                field_id=f.id,
                severity=IssueSeverity.ERROR,
                message=f"{f.label} has invalid date format",
                suggestion="Please enter a valid date",
                rule_source="Date format validation",
                confidence=1.0,
            )
        )

    # R3: number fields must be numeric
    if f.type == FieldType.NUMBER and f.value and not is_numeric(f.value):
        out.issues.append(
            ValidationIssue(
                id=f"{f.id}-invalid-number",
                field_id=f.id,
                severity=IssueSeverity.ERROR,
                message=f"{f.label} must be a valid number",
                suggestion="Please enter a numeric value",
                rule_source="Number format validation",
                confidence=1.0,
            )
        )

    # R4: low-confidence AI values need a human look
    if f.confidence is not None and f.confidence < settings.LOW_CONFIDENCE_THRESHOLD:
        out.risk_flags.append(
            RiskFlag(
                id=f"{f.id}-low-confidence",
                category=RiskCategory.AI_CONFIDENCE,
                severity=RiskSeverity.MEDIUM,
                message=f'AI is less confident about "{f.label}"',
                explanation=(
                    f"The AI extracted this field with {round(f.confidence * 100)}% confidence. "
                    "Please verify the information."
                ),
                ai_confidence=f.confidence,
            )
        )


def evaluate_rules(process: Process) -> ValidationOutcome:
    """
    Deterministic findings for the current state of one process.
    Nothing from a previous run is consulted, so re-running on unchanged input
    yields the same issues and flags with the same ids.
    """
    out = ValidationOutcome()

    for f in process.fields:
        _field_findings(f, out)

    # R5: at least one supporting document
    if not process.documents:
        out.issues.append(
            ValidationIssue(
                id="no-documents",
                severity=IssueSeverity.WARNING,
                message="No documents uploaded",
                suggestion="Upload supporting documents to strengthen your application",
                rule_source="Document requirements",
                confidence=1.0,
            )
        )
        out.risk_flags.append(
            RiskFlag(
                id="no-documents-risk",
                category=RiskCategory.MISSING_DATA,
                severity=RiskSeverity.HIGH,
                message="Missing supporting documents",
                explanation="Without documents, the application may be incomplete or rejected.",
            )
        )

    # R6: acting for someone else needs authorization
    persona = process.persona
    if persona.type != PersonaType.SELF and not persona.authorized:
        out.risk_flags.append(
            RiskFlag(
                id="unauthorized-persona",
                category=RiskCategory.POLICY,
                severity=RiskSeverity.HIGH,
                message="Authorization may be required",
                explanation=(
                    f"Acting as {persona.type.value} may require legal authorization "
                    "or documentation."
                ),
            )
        )

    return out
