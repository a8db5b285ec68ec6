"""
HTTP client for the Entu CMS API.

Read-only: fetches tasks, map locations and responses and hands them to the
normalizers. Entity creation, file uploads and OAuth redirects are handled
elsewhere.

Usage:
    async with EntuClient(account="esmuuseum", key="...") as client:
        task = await client.get_task("686917231749f351b9c82f4c")
        locations = await client.get_map_locations(task.map_id)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from esm.models import Entity, EntityType, Location, Response, Task, parse_entities
from esm.services.locations import normalize_locations
from esm.services.responses import normalize_responses
from esm.services.tasks import normalize_task
from esm.settings import Settings
from esm.utils.ids import validate_entity_id

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://entu.app"
DEFAULT_ACCOUNT = "esmuuseum"
DEFAULT_SEARCH_LIMIT = 1000

LOCATION_PROPS = "name,kirjeldus,lat,long"


# ============================================================================
# Errors
# ============================================================================


class EntuError(Exception):
    """Base class for Entu API failures."""

    pass


class EntuAuthError(EntuError):
    """Raised when the token exchange fails or the API rejects the token."""

    pass


class EntityNotFoundError(EntuError):
    """Raised when an entity does not exist or is not visible to the user."""

    pass


class EntuAPIError(EntuError):
    """Raised for any other failed API call."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _user_id_from_auth(data: dict[str, Any]) -> str | None:
    accounts = data.get("accounts") or []
    if accounts and isinstance(accounts[0], dict):
        user = accounts[0].get("user") or {}
        if user.get("_id"):
            return user["_id"]
    user = data.get("user") or {}
    return user.get("_id") or None


def _json_or_raise(response: httpx.Response) -> Any:
    """Decode a JSON body; a non-JSON reply (e.g. a proxy error page) is an EntuAPIError."""
    try:
        return response.json()
    except ValueError as e:
        logger.warning(
            "Entu API returned a non-JSON body: %s %s", response.status_code, response.url
        )
        raise EntuAPIError(
            f"Invalid JSON from Entu API: {e}",
            status_code=response.status_code,
            body=response.text,
        ) from e


# ============================================================================
# Client
# ============================================================================


class EntuClient:
    """
    Async client for one Entu account.

    Authenticates lazily: the first request exchanges `key` for a JWT unless
    a `token` was given. A 401 on a key-authenticated client triggers one
    re-authentication and retry.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        account: str = DEFAULT_ACCOUNT,
        token: str | None = None,
        key: str | None = None,
        timeout: float = 30.0,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.account = account
        self.token = token or None
        self.key = key or None
        self.timeout = timeout
        self.search_limit = search_limit
        self.user_id: str | None = None
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> EntuClient:
        """Build a client from settings; an explicit `token` overrides the configured one."""
        return cls(
            base_url=settings.entu_url,
            account=settings.entu_account,
            token=token or settings.entu_token,
            key=settings.entu_key,
            timeout=settings.request_timeout,
            search_limit=settings.search_limit,
            transport=transport,
        )

    async def __aenter__(self) -> EntuClient:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with EntuClient() as client:'")
        return self._client

    @property
    def api_base(self) -> str:
        return f"/api/{self.account}"

    # ------------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------------

    async def authenticate(self) -> str:
        """
        Exchange the API key for a JWT.

        Returns:
            The new token (also stored on the client)

        Raises:
            EntuAuthError: If no key is configured or the exchange fails
        """
        if not self.key:
            raise EntuAuthError("No Entu API key configured")

        try:
            response = await self.client.get(
                "/api/auth",
                params={"account": self.account},
                headers={"Authorization": f"Bearer {self.key}"},
            )
        except httpx.HTTPError as e:
            raise EntuAPIError(f"Entu auth request failed: {e}") from e

        if response.is_error:
            raise EntuAuthError(
                f"Authentication failed: {response.status_code} {response.reason_phrase}"
            )

        data = _json_or_raise(response)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise EntuAuthError("Authentication response did not contain a token")

        self.token = token
        self.user_id = _user_id_from_auth(data)
        logger.info("Authenticated with Entu account %s (user %s)", self.account, self.user_id)
        return token

    async def _ensure_token(self) -> str:
        if self.token:
            return self.token
        if self.key:
            return await self.authenticate()
        raise EntuAuthError("Not authenticated: configure an Entu key or token")

    # ------------------------------------------------------------------------
    # Raw API
    # ------------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        token = await self._ensure_token()
        response = await self._request(path, params, token)

        if response.status_code == 401 and self.key:
            logger.info("Entu token rejected, re-authenticating")
            token = await self.authenticate()
            response = await self._request(path, params, token)

        if response.status_code in (401, 403):
            raise EntuAuthError(f"Entu API rejected the token for {path}: {response.status_code}")
        if response.status_code == 404:
            raise EntityNotFoundError(f"Not found: {path}")
        if response.is_error:
            logger.warning(
                "Entu API call failed: %s %s -> %s", "GET", path, response.status_code
            )
            raise EntuAPIError(
                f"Entu API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        return _json_or_raise(response)

    async def _request(
        self, path: str, params: dict[str, Any] | None, token: str
    ) -> httpx.Response:
        url = f"{self.api_base}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            return await self.client.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept-Encoding": "deflate",
                },
            )
        except httpx.HTTPError as e:
            raise EntuAPIError(f"Failed to communicate with Entu API: {e}") from e

    async def get_entity(self, entity_id: str, props: str | None = None) -> Entity:
        """Fetch one entity by id."""
        validate_entity_id(entity_id)
        data = await self._get(f"/entity/{entity_id}", {"props": props} if props else None)

        raw = data.get("entity", data) if isinstance(data, dict) else None
        if not isinstance(raw, dict) or not raw.get("_id"):
            raise EntityNotFoundError(f"Entity {entity_id} not found")
        return Entity.from_api(raw)

    async def search_entities(
        self,
        query: dict[str, Any],
        limit: int | None = None,
        props: str | None = None,
    ) -> list[Entity]:
        """
        Search entities with Entu query parameters.

        Args:
            query: Filters such as {"_type.string": "asukoht", "_parent.reference": id}
            limit: Maximum entities to return (defaults to the client's search limit)
            props: Comma-separated property names to include

        Returns:
            Parsed entities; malformed records are skipped
        """
        params = dict(query)
        params["limit"] = limit or self.search_limit
        if props:
            params["props"] = props

        data = await self._get("/entity", params)
        raws = data.get("entities", []) if isinstance(data, dict) else []
        entities = parse_entities(raws)
        logger.debug("Search %s returned %d entities", query, len(entities))
        return entities

    # ------------------------------------------------------------------------
    # Domain fetchers
    # ------------------------------------------------------------------------

    async def get_task(self, task_id: str) -> Task:
        validate_entity_id(task_id, "task")
        return normalize_task(await self.get_entity(task_id))

    async def get_map_locations(self, map_id: str) -> list[Location]:
        """Coordinate-valid locations of a map, in CMS order."""
        validate_entity_id(map_id, "map")
        entities = await self.search_entities(
            {
                "_type.string": EntityType.LOCATION.value,
                "_parent.reference": map_id,
            },
            props=LOCATION_PROPS,
        )
        locations = normalize_locations(entities)
        if len(locations) < len(entities):
            logger.info(
                "Map %s: dropped %d location(s) without valid coordinates",
                map_id,
                len(entities) - len(locations),
            )
        return locations

    async def get_user_responses(self, user_id: str) -> list[Response]:
        """All responses owned by a user, across tasks."""
        validate_entity_id(user_id, "user")
        entities = await self.search_entities(
            {
                "_type.string": EntityType.RESPONSE.value,
                "_owner.reference": user_id,
            }
        )
        return normalize_responses(entities)

    async def get_task_responses(self, task_id: str) -> list[Response]:
        """Responses under a task that the current token can see."""
        validate_entity_id(task_id, "task")
        entities = await self.search_entities(
            {
                "_type.string": EntityType.RESPONSE.value,
                "_parent.reference": task_id,
            }
        )
        return normalize_responses(entities)
