"""
Readiness scoring.

Two formulas are kept on purpose:

- ``full_score``: authoritative, computed by ``validate`` from freshly generated findings.
- ``lightweight_score``: cheap recompute after a single field edit. It reads the
  *stored* issue list, which may predate the edit, so it can disagree with the
  full score until the next validation pass. Run ``validate`` before trusting the
  score for a submission decision.
"""

from __future__ import annotations

import math

from domain.models import Process
from domain.value_objects import ValidationSnapshot
from services.workflow.graph import completion_ratio

GRAPH_WEIGHT = 30
FIELD_WEIGHT = 50
DOCUMENT_WEIGHT = 20
NO_DOCUMENT_FACTOR = 0.3

ERROR_PENALTY = 15
WARNING_PENALTY = 5
HIGH_RISK_PENALTY = 10
MEDIUM_RISK_PENALTY = 5
POLICY_RISK_PENALTY = 10

LIGHT_REQUIRED_WEIGHT = 20
LIGHT_OPTIONAL_WEIGHT = 10
LIGHT_ERROR_PENALTY = 10
LIGHT_WARNING_PENALTY = 5
LIGHT_DOCUMENTS_ONLY = 50


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp(score: float) -> int:
    return max(0, min(100, int(score)))


def field_completion(process: Process) -> float:
    required = [f for f in process.fields if f.required]
    if not required:
        return 0.0
    return sum(1 for f in required if f.is_filled()) / len(required)


def base_score(process: Process) -> float:
    document_score = 1.0 if process.documents else NO_DOCUMENT_FACTOR
    return (
        completion_ratio(process) * GRAPH_WEIGHT
        + field_completion(process) * FIELD_WEIGHT
        + document_score * DOCUMENT_WEIGHT
    )


def full_score(process: Process, snapshot: ValidationSnapshot) -> int:
    score = round_half_up(
        max(
            0.0,
            base_score(process)
            - snapshot.error_count * ERROR_PENALTY
            - snapshot.warning_count * WARNING_PENALTY,
        )
    )
    score -= snapshot.high_risk_count * HIGH_RISK_PENALTY
    score -= snapshot.medium_risk_count * MEDIUM_RISK_PENALTY
    if snapshot.policy_risk:
        score -= POLICY_RISK_PENALTY
    return _clamp(score)


def lightweight_score(process: Process, snapshot: ValidationSnapshot | None = None) -> int:
    """Field-weighted fill ratio minus penalties from ``snapshot`` (stored issues by default)."""
    if snapshot is None:
        snapshot = ValidationSnapshot.from_findings(process.validation_issues)

    total = filled = 0
    for f in process.fields:
        weight = LIGHT_REQUIRED_WEIGHT if f.required else LIGHT_OPTIONAL_WEIGHT
        total += weight
        if f.is_filled():
            filled += weight

    if total > 0:
        score = round_half_up(100 * filled / total)
    else:
        score = LIGHT_DOCUMENTS_ONLY if process.documents else 0

    score -= snapshot.error_count * LIGHT_ERROR_PENALTY + snapshot.warning_count * LIGHT_WARNING_PENALTY
    return _clamp(score)
