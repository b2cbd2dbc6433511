### app/main.py

"""
FastAPI application entry point.

Run with: uvicorn app.main:app
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.exports.router import router as exports_router
from app.utils.logger import configure_logging, get_logger

# Registers the Celery app so export tasks dispatched from the API use its broker
from app.worker.app import app as celery_app  # noqa: F401

configure_logging(level=settings.log_level, json_logs=settings.log_json)

logger = get_logger(__name__)

app = FastAPI(
    title="Youth Program Reports API",
    description="Asynchronous youth profile exports",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(exports_router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


logger.info(
    "Application ready",
    environment=settings.environment,
    export_task_backend=settings.export_task_backend,
)
