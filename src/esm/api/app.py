"""
FastAPI application for ESM Map Tasks.

Read-only HTTP surface over the Entu CMS: map locations, visit progress and
marker state for a task.
"""

from dotenv import load_dotenv

# Load .env file before any other imports that might need env vars
load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from esm import __version__
from esm.api.routes import router
from esm.settings import get_settings

logger = logging.getLogger(__name__)


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="ESM Map Tasks API",
        description="Location-based learning tasks: progress and map state from Entu",
        version=__version__,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    logger.info(
        "ESM API configured for Entu account %s at %s (env=%s)",
        settings.entu_account,
        settings.entu_url,
        settings.env,
    )
    return app
