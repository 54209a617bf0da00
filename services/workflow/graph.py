from __future__ import annotations

from domain.models import (
    ConditionOperator,
    NodeCondition,
    NodeType,
    Process,
    WorkflowNode,
)


def default_workflow_graph() -> list[WorkflowNode]:
    """
    Linear template every process starts with:
        node-1 (consultation) -> node-2 (documents) -> node-3 (form) -> node-4 (validation)
    """
    return [
        WorkflowNode(id="node-1", type=NodeType.QUESTION, label="Initial consultation"),
        WorkflowNode(
            id="node-2", type=NodeType.DOCUMENT, label="Document upload", depends_on=["node-1"]
        ),
        WorkflowNode(
            id="node-3", type=NodeType.FIELD, label="Form completion", depends_on=["node-2"]
        ),
        WorkflowNode(
            id="node-4", type=NodeType.VALIDATION, label="Final validation", depends_on=["node-3"]
        ),
    ]


def is_accessible(process: Process, node: WorkflowNode) -> bool:
    """
    A node opens once every dependency is completed. A dependency id that does not
    resolve counts as not completed. Graphs are assumed acyclic; no cycle check.
    """
    if not node.depends_on:
        return True
    for dep_id in node.depends_on:
        dep = process.node_by_id(dep_id)
        if dep is None or not dep.completed:
            return False
    return True


def completion_ratio(process: Process) -> float:
    total = len(process.workflow_graph)
    if total == 0:
        return 0.0
    return sum(1 for n in process.workflow_graph if n.completed) / total


def dependency_labels(process: Process, node: WorkflowNode) -> list[str]:
    """Labels of the node's dependencies; the raw id stands in for a stale reference."""
    labels: list[str] = []
    for dep_id in node.depends_on or []:
        dep = process.node_by_id(dep_id)
        labels.append(dep.label if dep else dep_id)
    return labels


def _as_number(raw: str) -> float | None:
    try:
        return float(raw.strip())
    except ValueError:
        return None


def _condition_holds(cond: NodeCondition, value: str | None) -> bool:
    if cond.operator == ConditionOperator.IS_FILLED:
        return bool(value and value.strip())
    if value is None:
        return False
    if cond.operator == ConditionOperator.EQUALS:
        return value.strip() == cond.value.strip()
    if cond.operator == ConditionOperator.NOT_EQUALS:
        return value.strip() != cond.value.strip()
    if cond.operator == ConditionOperator.CONTAINS:
        return cond.value.lower() in value.lower()

    left, right = _as_number(value), _as_number(cond.value)
    if left is None or right is None:
        return False
    if cond.operator == ConditionOperator.GREATER_THAN:
        return left > right
    return left < right


def unmet_conditions(process: Process, node: WorkflowNode) -> list[NodeCondition]:
    """
    Conditions compare a field (looked up by name) against a literal.
    A condition naming a field the process does not have is unmet.
    """
    values = {f.name: f.value for f in process.fields}
    return [c for c in node.conditions or [] if not _condition_holds(c, values.get(c.field))]
