"""Tests for the full and lightweight readiness formulas."""

import pytest

from conftest import make_document, make_field
from domain.models import (
    IssueSeverity,
    Process,
    RiskCategory,
    RiskFlag,
    RiskSeverity,
    ValidationIssue,
)
from domain.value_objects import ValidationSnapshot
from services.scoring.readiness import (
    base_score,
    field_completion,
    full_score,
    lightweight_score,
    round_half_up,
)
from services.workflow.graph import default_workflow_graph


def _process(**kwargs) -> Process:
    return Process(type="Other", title="t", workflow_graph=default_workflow_graph(), **kwargs)


def _issue(severity: IssueSeverity) -> ValidationIssue:
    return ValidationIssue(id=f"x-{severity.value}", severity=severity, message="m")


class TestSnapshot:
    def test_counts(self):
        snap = ValidationSnapshot.from_findings(
            [_issue(IssueSeverity.ERROR), _issue(IssueSeverity.WARNING), _issue(IssueSeverity.INFO)],
            [
                RiskFlag(id="a", category=RiskCategory.MISSING_DATA, severity=RiskSeverity.HIGH, message="", explanation=""),
                RiskFlag(id="b", category=RiskCategory.AI_CONFIDENCE, severity=RiskSeverity.MEDIUM, message="", explanation=""),
                RiskFlag(id="c", category=RiskCategory.POLICY, severity=RiskSeverity.HIGH, message="", explanation=""),
            ],
        )
        assert snap == ValidationSnapshot(
            error_count=1, warning_count=1, high_risk_count=1, medium_risk_count=1, policy_risk=True
        )


class TestFullScore:
    def test_round_half_up(self):
        assert round_half_up(8.5) == 9
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_empty_process_base(self):
        p = _process()
        assert base_score(p) == pytest.approx(6.0)
        assert full_score(p, ValidationSnapshot()) == 6

    def test_empty_process_after_penalties(self):
        # 6 - 5 (no-documents warning) = 1, then -10 for the missing_data risk
        snap = ValidationSnapshot(warning_count=1, high_risk_count=1)
        assert full_score(_process(), snap) == 0

    def test_no_required_fields_contributes_nothing(self):
        p = _process(fields=[make_field("opt", required=False, value="x")])
        assert field_completion(p) == 0.0

    def test_graph_completion(self):
        p = _process(documents=[make_document()])
        p.workflow_graph[0].completed = True
        # 0.25 * 30 + 20 = 27.5
        assert full_score(p, ValidationSnapshot()) == 28

    def test_never_above_100(self):
        p = _process(documents=[make_document()], fields=[make_field("f", value="x")])
        for node in p.workflow_graph:
            node.completed = True
        assert full_score(p, ValidationSnapshot()) == 100

    def test_never_negative(self):
        snap = ValidationSnapshot(error_count=9, high_risk_count=3, medium_risk_count=3, policy_risk=True)
        assert full_score(_process(), snap) == 0

    def test_filling_required_fields_never_decreases(self, store, process):
        ids = ["a", "b", "c"]
        store.add_fields(process.id, [make_field(i) for i in ids])
        scores = [store.validate(process.id).readiness_score]
        for i in ids:
            store.update_field_value(process.id, i, "filled")
            scores.append(store.validate(process.id).readiness_score)
        assert scores == sorted(scores)
        assert scores[-1] == 41


class TestLightweightScore:
    def test_weighted_fill_ratio(self):
        p = _process(fields=[make_field("r", value="x"), make_field("o", required=False)])
        assert lightweight_score(p) == 67

    def test_no_fields(self):
        assert lightweight_score(_process()) == 0
        assert lightweight_score(_process(documents=[make_document()])) == 50

    def test_uses_stored_issues(self):
        p = _process(
            fields=[make_field("r", value="x")],
            validation_issues=[_issue(IssueSeverity.ERROR), _issue(IssueSeverity.WARNING)],
        )
        assert lightweight_score(p) == 100 - 10 - 5

    def test_explicit_snapshot(self):
        p = _process(fields=[make_field("r", value="x")])
        assert lightweight_score(p, ValidationSnapshot(error_count=20)) == 0
