from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from editorial.config import settings
from editorial.db import close_db
from editorial.logging_config import configure_logging
from editorial.middleware.logging import StructuredLoggingMiddleware
from editorial.routers import admin, content
from editorial.validate_env import validate_env

configure_logging(service="editorial-api", environment=settings.environment)


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_env()
    yield
    await close_db()


app = FastAPI(title="editorial-content-pipeline", version="1.0.0", lifespan=lifespan)

app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin.router)
app.include_router(content.router)


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
