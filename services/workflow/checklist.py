from __future__ import annotations

from domain.models import ChecklistItem

DESCRIBE_SITUATION = "1"
UPLOAD_DOCUMENTS = "2"
COMPLETE_FIELDS = "3"
REVIEW = "4"


def default_checklist() -> list[ChecklistItem]:
    return [
        ChecklistItem(id=DESCRIBE_SITUATION, title="Describe your situation"),
        ChecklistItem(id=UPLOAD_DOCUMENTS, title="Upload required documents"),
        ChecklistItem(id=COMPLETE_FIELDS, title="Complete form fields"),
        ChecklistItem(id=REVIEW, title="Review and validate"),
    ]


def complete_item(items: list[ChecklistItem], item_id: str) -> list[ChecklistItem]:
    # one-way: nothing here ever un-completes an item
    return [i.model_copy(update={"completed": True}) if i.id == item_id else i for i in items]
