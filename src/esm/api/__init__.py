"""
FastAPI application for ESM Map Tasks.

Create the app with `get_app()`, e.g. `uvicorn --factory esm.api:get_app`.
"""

from esm.api.app import get_app

__all__ = ["get_app"]
