"""Tests for merging chat-generated and document-extracted fields."""

import json

import httpx
import pytest

from conftest import make_document
from domain.models import FieldType
from domain.value_objects import ExtractedEntry, ExtractionResult, FieldDescriptor
from services.ingestion.extractor import DocumentExtractor, ExtractionError, image_payload
from services.ingestion.intake import (
    accept_extraction,
    accept_generated_fields,
    field_name,
    fields_from_extraction,
)
from services.orchestration.graphs import build_intake_graph


def _result(*entries: tuple) -> ExtractionResult:
    return ExtractionResult(
        extracted_fields=[ExtractedEntry(key=k, value=v, confidence=c) for k, v, c in entries],
        document_type="passport",
        summary="Passport of J. Doe",
    )


class TestGeneratedFields:
    def test_descriptors_become_empty_fields(self, store, process):
        descriptors = [
            FieldDescriptor(id="name", name="full_name", label="Full name", required=True),
            FieldDescriptor(
                id="kind", name="visa_kind", label="Visa kind", type=FieldType.SELECT,
                options=["work", "study"],
            ),
        ]
        added = accept_generated_fields(store, process.id, descriptors)
        assert [f.id for f in added] == ["name", "kind"]
        stored = store.get(process.id)
        assert all(f.value == "" and not f.validated for f in stored.fields)
        assert stored.field_by_id("kind").options == ["work", "study"]
        assert stored.checklist_item_by_id("1").completed

    def test_repeated_generation_keeps_existing(self, store, process):
        first = FieldDescriptor(id="name", name="full_name", label="Full name")
        accept_generated_fields(store, process.id, [first])
        store.update_field_value(process.id, "name", "Jane")
        accept_generated_fields(store, process.id, [first.model_copy(update={"label": "Name"})])
        field = store.get(process.id).field_by_id("name")
        assert field.value == "Jane"
        assert field.label == "Full name"


class TestExtraction:
    def test_field_name(self):
        assert field_name("Date of  Birth") == "date_of_birth"

    def test_threshold_is_strict(self):
        doc = make_document("d1")
        fields = fields_from_extraction(
            doc,
            _result(("Full Name", "Jane Doe", 0.95), ("Nationality", "DE", 0.7), ("Date of Birth", "1990-01-01", 0.8)),
        )
        assert [f.id for f in fields] == ["extracted-d1-0", "extracted-d1-1"]
        assert [f.name for f in fields] == ["full_name", "date_of_birth"]
        assert fields[0].label == "Full Name"
        assert fields[0].extracted_from == "d1.png"
        assert fields[0].confidence == 0.95
        assert not any(f.required for f in fields)

    def test_accept_extraction(self, store, process):
        store.add_document(process.id, make_document("d1"))
        added = accept_extraction(
            store, process.id, "d1", _result(("Full Name", "Jane", 0.9), ("City", "Bonn", 0.8))
        )
        assert len(added) == 2
        stored = store.get(process.id)
        doc = stored.document_by_id("d1")
        assert doc.parsed
        assert doc.confidence == pytest.approx(0.85)
        assert doc.extracted_data["document_type"] == "passport"
        assert stored.checklist_item_by_id("2").completed

    def test_nothing_confident_still_completes_upload(self, store, process):
        store.add_document(process.id, make_document("d1"))
        added = accept_extraction(store, process.id, "d1", _result(("Blurry", "??", 0.2)))
        stored = store.get(process.id)
        assert added == []
        assert stored.fields == []
        assert stored.document_by_id("d1").confidence is None
        assert stored.checklist_item_by_id("2").completed

    def test_unknown_document(self, store, process):
        assert accept_extraction(store, process.id, "nope", _result()) == []
        assert not store.get(process.id).checklist_item_by_id("2").completed


class TestIntakeGraph:
    def test_successful_run(self, store, process):
        store.add_document(process.id, make_document("d1"))
        run = build_intake_graph(store, lambda doc: _result(("Full Name", "Jane", 0.9)))
        state = run(process.id, "d1")
        assert state["status"] == "ok"
        assert state["added_field_ids"] == ["extracted-d1-0"]
        assert state["steps"][0].startswith("plan:")
        assert store.get(process.id).field_by_id("extracted-d1-0").value == "Jane"

    def test_failed_extraction_adds_nothing(self, store, process):
        store.add_document(process.id, make_document("d1"))

        def broken(doc):
            raise ExtractionError("model unavailable")

        state = build_intake_graph(store, broken)(process.id, "d1")
        stored = store.get(process.id)
        assert state["status"] == "error"
        assert "model unavailable" in state["error"]
        assert stored.fields == []
        assert not stored.checklist_item_by_id("2").completed
        assert not stored.document_by_id("d1").parsed

    def test_missing_document_is_skipped(self, store, process):
        state = build_intake_graph(store, lambda doc: _result())(process.id, "ghost")
        assert state["status"] == "skipped"


class TestDocumentExtractor:
    def _client(self, handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_extracts_from_data_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            body = {"extracted_fields": [{"key": "Name", "value": "Jane", "confidence": 0.9}]}
            return httpx.Response(200, json={"response": json.dumps(body)})

        result = DocumentExtractor(client=self._client(handler))(make_document())
        assert result.extracted_fields[0].value == "Jane"
        assert seen["images"] == ["aGVsbG8="]
        assert seen["format"] == "json"
        assert seen["stream"] is False

    def test_out_of_range_confidence_keeps_other_entries(self, store, process):
        def handler(request: httpx.Request) -> httpx.Response:
            body = {
                "extracted_fields": [
                    {"key": "Name", "value": "Jane", "confidence": 0.9},
                    {"key": "Passport Number", "value": "X123", "confidence": 92},
                    {"key": "Stamp", "value": "?", "confidence": -0.3},
                ]
            }
            return httpx.Response(200, json={"response": json.dumps(body)})

        result = DocumentExtractor(client=self._client(handler))(make_document())
        assert [e.confidence for e in result.extracted_fields] == [0.9, 1.0, 0.0]

        store.add_document(process.id, make_document())
        added = accept_extraction(store, process.id, "doc-1", result)
        assert [f.label for f in added] == ["Name", "Passport Number"]

    def test_non_image_rejected(self):
        extractor = DocumentExtractor(client=self._client(lambda r: httpx.Response(500)))
        with pytest.raises(ExtractionError):
            extractor(make_document(mime_type="application/pdf"))

    def test_server_error_wrapped(self):
        extractor = DocumentExtractor(client=self._client(lambda r: httpx.Response(500)))
        with pytest.raises(ExtractionError):
            extractor(make_document())

    def test_malformed_json_wrapped(self):
        handler = lambda r: httpx.Response(200, json={"response": "not json"})  # noqa: E731
        with pytest.raises(ExtractionError):
            DocumentExtractor(client=self._client(handler))(make_document())

    def test_file_payload(self, tmp_path):
        path = tmp_path / "id.png"
        path.write_bytes(b"hello")
        doc = make_document().model_copy(update={"uri": path.as_uri()})
        assert image_payload(doc) == "aGVsbG8="

    def test_missing_file(self, tmp_path):
        doc = make_document().model_copy(update={"uri": str(tmp_path / "gone.png")})
        with pytest.raises(ExtractionError):
            image_payload(doc)


class TestExtractedEntry:
    @pytest.mark.parametrize(
        "raw, clamped", [(0.5, 0.5), (1.0, 1.0), (92, 1.0), (-1, 0.0), (float("nan"), 0.0)]
    )
    def test_confidence_is_clamped(self, raw, clamped):
        assert ExtractedEntry(key="k", value="v", confidence=raw).confidence == clamped
