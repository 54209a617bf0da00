from __future__ import annotations

import base64
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
from pydantic import ValidationError

from domain.models import ProcessDocument
from domain.value_objects import ExtractionResult
from services.llm.ollama_client import LLMError, generate
from services.llm.prompts import EXTRACTION_PROMPT


class ExtractionError(Exception):
    pass


def image_payload(document: ProcessDocument) -> str:
    """Base64 body of the document, from a data: URL or a local file."""
    uri = document.uri
    if uri.startswith("data:"):
        header, _, body = uri.partition(",")
        if not header.endswith(";base64") or not body:
            raise ExtractionError(f"unsupported data URL for {document.name}")
        return body
    parsed = urlparse(uri)
    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(uri)
    if not path.exists():
        raise ExtractionError(f"file not found: {path}")
    return base64.b64encode(path.read_bytes()).decode("ascii")


class DocumentExtractor:
    """Asks a vision model for key/value/confidence triples from an image document."""

    def __init__(self, model: str | None = None, client: httpx.Client | None = None):
        self.model = model
        self.client = client

    def supports(self, document: ProcessDocument) -> bool:
        return document.mime_type.startswith("image/")

    def __call__(self, document: ProcessDocument) -> ExtractionResult:
        if not self.supports(document):
            raise ExtractionError(f"cannot extract from {document.mime_type}")
        try:
            text = generate(
                EXTRACTION_PROMPT,
                model=self.model,
                images=[image_payload(document)],
                json_mode=True,
                client=self.client,
            )
            return ExtractionResult.model_validate_json(text)
        except (LLMError, ValidationError) as e:
            raise ExtractionError(str(e)) from e
