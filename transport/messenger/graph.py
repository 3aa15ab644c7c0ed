"""
Facebook Graph API Client

Thin async wrapper over the three Graph calls the relay needs:
user profile lookup, page metadata lookup and the Send API.
No retries. Every failure surfaces as GraphAPIError.
"""

import logging
from typing import Any, Optional

import httpx

from infra.config import DEFAULT_GRAPH_API_VERSION, DEFAULT_GRAPH_BASE_URL

logger = logging.getLogger(__name__)


class GraphAPIError(Exception):
    """A Graph API call failed (network, auth or platform rejection)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class GraphClient:
    """Async Graph API client sharing one httpx connection pool."""

    def __init__(
        self,
        base_url: str = DEFAULT_GRAPH_BASE_URL,
        api_version: str = DEFAULT_GRAPH_API_VERSION,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{self.api_version}/{path}"

    async def get_user_profile(self, user_id: str, access_token: str) -> dict[str, Any]:
        """Fetch `name` and `profile_pic` of a page-scoped user id."""
        return await self._request(
            "GET",
            self._url(user_id),
            params={"fields": "name,profile_pic", "access_token": access_token},
        )

    async def get_page_info(self, page_id: str, access_token: str) -> dict[str, Any]:
        """Fetch `name` and `picture{url}` of a page."""
        return await self._request(
            "GET",
            self._url(page_id),
            params={"fields": "name,picture{url}", "access_token": access_token},
        )

    async def send_message(self, payload: dict[str, Any], access_token: str) -> dict[str, Any]:
        """Post a message through the Send API."""
        return await self._request(
            "POST",
            self._url("me/messages"),
            params={"access_token": access_token},
            json=payload,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise GraphAPIError(f"HTTP request failed: {e}") from e

        if response.is_error:
            raise _error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise GraphAPIError(
                "Graph API returned a non-JSON body",
                status_code=response.status_code,
                detail=response.text,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_from_response(response: httpx.Response) -> GraphAPIError:
    """Build a GraphAPIError, preferring the platform's own error message."""
    try:
        body = response.json()
    except ValueError:
        return GraphAPIError(
            f"Graph API returned {response.status_code}",
            status_code=response.status_code,
            detail=response.text,
        )

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        message = error["message"]
    else:
        message = f"Graph API returned {response.status_code}"

    return GraphAPIError(message, status_code=response.status_code, detail=body)
