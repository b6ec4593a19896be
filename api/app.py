from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docmate.logging_config import setup_logging

from api.dependencies import get_config, get_enrichment
from api.routes.documents import router as documents_router
from api.routes.enrichment import router as enrichment_router
from api.routes.notes import router as notes_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Only close the shared HTTP client if a request ever created it.
    if get_enrichment.cache_info().currsize:
        await get_enrichment().aclose()
        get_enrichment.cache_clear()
        logger.info("Closed enrichment HTTP client")


def create_app() -> FastAPI:
    config = get_config()
    setup_logging(config.log_level, config.log_file)

    app = FastAPI(title="Docmate API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents_router)
    app.include_router(enrichment_router)
    app.include_router(notes_router)

    @app.get("/healthz")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
