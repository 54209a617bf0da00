import pytest

from domain.models import FieldType, FormField, ProcessDocument
from services.persistence.kv import InMemoryKeyValueStore
from services.persistence.writer import PersistenceWriter
from services.processes.store import ProcessStore


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return ProcessStore(kv, PersistenceWriter(kv))


@pytest.fixture
def process(store):
    return store.create("Visa Application", "Work visa", "Renewal for 2027")


def make_field(
    field_id: str,
    required: bool = True,
    value: str = "",
    type: FieldType = FieldType.TEXT,
    confidence: float | None = None,
) -> FormField:
    return FormField(
        id=field_id,
        name=field_id,
        label=f"Label {field_id}",
        value=value,
        type=type,
        required=required,
        confidence=confidence,
    )


def make_document(doc_id: str = "doc-1", mime_type: str = "image/png") -> ProcessDocument:
    return ProcessDocument(
        id=doc_id,
        name=f"{doc_id}.png",
        uri="data:image/png;base64,aGVsbG8=",
        mime_type=mime_type,
    )
