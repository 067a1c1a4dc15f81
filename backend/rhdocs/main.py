from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rhdocs.api.v1.router import api_router
from rhdocs.core.config import settings
from rhdocs.services.backend_client import BackendClient
from rhdocs.services.workspaces import WorkspaceRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    backend = BackendClient()
    await backend.initialize(settings)
    application.state.backend = backend
    application.state.workspaces = WorkspaceRegistry(backend, settings)
    try:
        yield
    finally:
        application.state.workspaces.close()
        await backend.close()
        logger.info("Backend client closed")


app = FastAPI(
    title="RH-DOCS API",
    description="Internal HR records: sign-in, employee directory, registration",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "RH-DOCS API"}
