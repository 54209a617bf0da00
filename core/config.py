from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    STORAGE_KEY: str = os.getenv("STORAGE_KEY", "processes_data")
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "file")  # memory | file | mongo
    STORE_PATH: str = os.getenv("STORE_PATH", "/data/store")
    PERSIST_IN_BACKGROUND: bool = os.getenv("PERSIST_IN_BACKGROUND", "1") not in {"0", "false"}

    MONGO_URL: str = os.getenv("MONGO_URL", "mongodb://mongo:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "clarity")
    MONGO_COLLECTION: str = os.getenv("MONGO_COLLECTION", "kv_store")

    EXTRACTION_MIN_CONFIDENCE: float = float(os.getenv("EXTRACTION_MIN_CONFIDENCE", "0.7"))
    LOW_CONFIDENCE_THRESHOLD: float = float(os.getenv("LOW_CONFIDENCE_THRESHOLD", "0.7"))
    DATA_EXPIRY_DAYS: int = int(os.getenv("DATA_EXPIRY_DAYS", "30"))

    OLLAMA_HOST: str = os.getenv("OLLAMA_HOST", "http://ollama:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2-vision:11b")
    LLM_TIMEOUT_S: int = int(os.getenv("LLM_TIMEOUT_S", "60"))

    ALLOWED_MIME: set[str] = {
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/heic",
    }
    CORS_ALLOW_ORIGINS: list[str] = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:8081").split(
        ","
    )


settings = Settings()
