# apps/api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.deps import get_store
from apps.api.routers import documents, processes, workflow
from core.config import settings
from core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    yield
    if get_store.cache_info().currsize:
        # drain queued writes before the worker thread goes away
        get_store().writer.close()
        logger.info("store flushed on shutdown")


app = FastAPI(title="Clarity API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(processes.router)
app.include_router(documents.router)
app.include_router(workflow.router)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
