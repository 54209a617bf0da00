from __future__ import annotations

from typing import Any

import httpx

from core.config import settings

DEFAULT_MODEL = settings.OLLAMA_MODEL


class LLMError(Exception): ...


def generate(
    prompt: str,
    model: str | None = None,
    temperature: float = 0.2,
    timeout_s: int | None = None,
    images: list[str] | None = None,
    json_mode: bool = False,
    client: httpx.Client | None = None,
) -> str:
    """Call Ollama /api/generate (non-streaming). ``images`` are base64 payloads."""
    url = f"{settings.OLLAMA_HOST.rstrip('/')}/api/generate"
    payload: dict[str, Any] = {
        "model": model or DEFAULT_MODEL,
        "prompt": prompt,
        "options": {"temperature": temperature},
        "stream": False,
    }
    if images:
        payload["images"] = images
    if json_mode:
        payload["format"] = "json"
    try:
        if client is None:
            with httpx.Client(timeout=timeout_s or settings.LLM_TIMEOUT_S) as c:
                r = c.post(url, json=payload)
        else:
            r = client.post(url, json=payload)
        r.raise_for_status()
        data = r.json()
        text = (data or {}).get("response", "")
        if not text:
            raise LLMError("empty response from LLM")
        return text.strip()
    except LLMError:
        raise
    except Exception as e:  # noqa: BLE001
        raise LLMError(str(e)) from e
