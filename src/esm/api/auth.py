"""
Request-scoped Entu access for the HTTP API.

A bearer token on the incoming request is forwarded to Entu, so each user
only sees what the CMS lets them see. Without one, the server falls back to
its configured key or token.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Request

from esm.entu.client import EntuClient
from esm.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from an `Authorization: Bearer ...` header, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_entu_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[EntuClient, None]:
    """FastAPI dependency yielding an open EntuClient for the request."""
    token = extract_bearer_token(request)
    async with EntuClient.from_settings(settings, token=token) as client:
        yield client
