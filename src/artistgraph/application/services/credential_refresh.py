"""One-shot credential refresh around authenticated Spotify calls.

Hey future me - this is the ONLY place that recovers from errors! Flow:

    call(op) -> op(access_token)
        2xx            -> done
        401            -> refresh token stored?
                            no  -> clear access token, AuthRequired
                            yes -> exchange it
                                     fails -> clear both tokens, AuthExpired
                                     ok    -> store new token, op(new_token) ONCE
                                                401   -> clear both, AuthExpired
                                                other -> as below
        other non-2xx  -> RemoteApiError(status, Spotify's message)

A store with NO access token but a refresh token skips the first attempt and
goes straight to the refresh, that refresh is still the only one. There is
never a second refresh per call, whatever Spotify answers.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from artistgraph.domain.exceptions import (
    AuthExpired,
    AuthRequired,
    ExternalServiceError,
    RemoteApiError,
    TokenRefreshException,
)
from artistgraph.domain.ports import ITokenStore
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)

Operation = Callable[[str], Awaitable[httpx.Response]]


@dataclass
class TokenResult:
    """Parsed refresh response.

    Hey future me - refresh_token is usually None! Spotify only sends one when
    it rotates the refresh token, otherwise keep the old one.
    """

    access_token: str
    refresh_token: str | None
    expires_in: int | None


def remote_error_message(response: httpx.Response) -> str | None:
    """Pull Spotify's error message out of an error body.

    Web API errors look like ``{"error": {"status": 404, "message": "..."}}``,
    token endpoint errors like ``{"error": "...", "error_description": "..."}``.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message") or error.get("reason")
    if isinstance(error, str):
        return body.get("error_description") or error
    return None


def decode_json(response: httpx.Response) -> Any:
    """Decode a 2xx body, ``{}`` for 204 or an empty body."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise ExternalServiceError("Spotify returned a malformed JSON body") from e


class AuthenticatedCaller:
    """Runs Spotify operations with the stored user token and refreshes once."""

    def __init__(self, client: SpotifyClient, token_store: ITokenStore) -> None:
        self._client = client
        self._token_store = token_store

    async def call(self, operation: Operation) -> httpx.Response:
        """Run ``operation(access_token)`` with at most one token refresh.

        Args:
            operation: Coroutine function taking a bearer token and returning
                the raw response

        Returns:
            A 2xx response

        Raises:
            AuthRequired: 401 and no refresh token stored
            AuthExpired: Refresh failed, or the retry answered 401 again
            RemoteApiError: Any other non-2xx answer
            ExternalServiceError: Transport failure (timeout, DNS, ...)
        """
        access_token = await self._token_store.get_access_token()
        if access_token:
            response = await self._invoke(operation, access_token)
            if response.status_code != 401:
                return self._ensure_success(response)
            logger.info("Spotify answered 401, attempting token refresh")
        else:
            logger.debug("No access token stored, attempting token refresh")

        refresh_token = await self._token_store.get_refresh_token()
        if not refresh_token:
            await self._token_store.clear_access_token()
            raise AuthRequired()

        new_token = await self._refresh(refresh_token)
        response = await self._invoke(operation, new_token)
        if response.status_code == 401:
            logger.warning("Spotify still answered 401 after token refresh")
            await self._token_store.clear_all()
            raise AuthExpired()
        return self._ensure_success(response)

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and return the decoded body."""

        async def operation(token: str) -> httpx.Response:
            return await self._client.request("GET", url, token, params=params)

        return decode_json(await self.call(operation))

    async def send_json(self, method: str, url: str, body: Any) -> Any:
        """Send a JSON body and return the decoded response (``{}`` if empty)."""

        async def operation(token: str) -> httpx.Response:
            return await self._client.request(method, url, token, json=body)

        return decode_json(await self.call(operation))

    async def _invoke(self, operation: Operation, token: str) -> httpx.Response:
        try:
            return await operation(token)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Spotify request failed: {e}") from e

    async def _refresh(self, refresh_token: str) -> str:
        try:
            data = await self._client.refresh_token(refresh_token)
        except (TokenRefreshException, httpx.HTTPError) as e:
            logger.warning("Token refresh failed: %s", e)
            await self._token_store.clear_all()
            raise AuthExpired() from e

        if not data.get("access_token"):
            logger.warning("Token refresh response carried no access token")
            await self._token_store.clear_all()
            raise AuthExpired()

        result = TokenResult(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
        )
        await self._token_store.set_access_token(result.access_token, result.expires_in)
        if result.refresh_token:
            await self._token_store.set_refresh_token(result.refresh_token)
        logger.info("Token refreshed, retrying request once")
        return result.access_token

    @staticmethod
    def _ensure_success(response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        error = RemoteApiError(response.status_code, remote_error_message(response))
        if error.is_rate_limited:
            logger.warning(
                "Spotify rate limit hit, not retrying (Retry-After: %s)",
                response.headers.get("Retry-After", "unknown"),
            )
        raise error
