"""Authorized HTTP client for the users service.

Attaches the bearer token to every request and exposes the count
endpoint as a typed call. Transport failures and unexpected payloads are
raised as UsersApiError subclasses; callers decide whether to capture them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from userdash.config import Settings
from userdash.models.domain import CountQuery
from userdash.models.types import CountResponse

logger = logging.getLogger(__name__)

COUNT_PATH = "/api/v1/users/count"
USERS_PATH = "/api/v1/users"


class UsersApiError(RuntimeError):
    """Base error for users service calls."""


class ServiceRequestError(UsersApiError):
    """Request failed in transport or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(UsersApiError):
    """Response body was not valid JSON or did not have the expected shape."""


class UsersApiClient:
    """Async client for the users service.

    The underlying httpx.AsyncClient is created lazily and shared by all
    concurrent requests issued from the same event loop.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> UsersApiClient:
        return cls(
            base_url=settings.api_domain,
            token=settings.api_token,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def users_endpoint(self) -> str:
        return f"{self.base_url}{USERS_PATH}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def fetch(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        """Issue an authorized GET.

        Args:
            url: Path relative to the base URL, or an absolute URL.
            params: Query-string parameters.

        Returns:
            The successful response.

        Raises:
            ServiceRequestError: On transport failure or a non-2xx status.
        """
        try:
            response = await self._get_client().get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise ServiceRequestError(
                f"GET {url} returned {e.response.status_code}: {body}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ServiceRequestError(f"GET {url} failed: {e}") from e
        return response

    async def fetch_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        """Authorized GET returning the decoded JSON body."""
        response = await self.fetch(url, params)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"GET {url} returned invalid JSON") from e

    async def count(self, query: CountQuery) -> int:
        """Count users matching the query.

        Raises:
            ServiceRequestError: Request failed.
            MalformedResponseError: Body is not ``{"count": <int>}``.
        """
        params = query.to_params()
        payload = await self.fetch_json(COUNT_PATH, params)
        try:
            count = CountResponse.model_validate(payload).count
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected count payload: {payload!r}") from e
        logger.debug(f"users count {params} -> {count}")
        return count

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> UsersApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
