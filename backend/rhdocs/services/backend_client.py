"""HTTP client for the hosted backend (GoTrue-style auth + PostgREST-style rows)."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp
from pydantic import ValidationError

from rhdocs.core.config import Settings
from rhdocs.models.auth import AuthEvent, AuthSession

logger = logging.getLogger(__name__)

AuthCallback = Callable[[AuthEvent, AuthSession | None], None]


class BackendError(Exception):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def _error_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = data.get(key)
            if value:
                return str(value)
    if isinstance(data, str) and data.strip():
        return data.strip()
    return fallback


def _parse_session(data: Any) -> AuthSession:
    if not isinstance(data, dict) or "access_token" not in data or "user" not in data:
        raise BackendError("Malformed session payload from auth provider")
    expires_at = data.get("expires_at")
    if expires_at is None and data.get("expires_in") is not None:
        expires_at = int(time.time()) + int(data["expires_in"])
    try:
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            user=data["user"],
        )
    except ValidationError as e:
        raise BackendError(f"Malformed session payload from auth provider: {e}") from e


class BackendClient:
    def __init__(self) -> None:
        self.session: aiohttp.ClientSession | None = None
        self.base_url = ""
        self.api_key = ""
        self.initialized = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        self.base_url = settings.BACKEND_URL.rstrip("/")
        self.api_key = settings.BACKEND_ANON_KEY
        timeout = aiohttp.ClientTimeout(total=settings.BACKEND_TIMEOUT_SECONDS)
        self.session = aiohttp.ClientSession(timeout=timeout)
        self.initialized = True
        logger.info("BackendClient initialized (url=%s)", self.base_url)

    async def close(self) -> None:
        if self.session:
            await self.session.close()
        self.session = None
        self.initialized = False

    def scope(self) -> BackendScope:
        return BackendScope(self)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: Any = None,
        access_token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        if not self.initialized or self.session is None:
            raise RuntimeError("BackendClient not initialized")

        url = f"{self.base_url}{path}"
        request_headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        try:
            async with self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=request_headers,
            ) as response:
                text = await response.text()
                try:
                    data = json.loads(text) if text else None
                except ValueError:
                    data = text

                if 200 <= response.status < 300:
                    return data

                message = _error_message(data, f"Backend request failed: {response.status}")
                logger.debug("%s %s -> %d: %s", method, path, response.status, message)
                raise BackendError(message, status=response.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Backend request %s %s failed: %s", method, path, e)
            raise BackendError(f"Backend unreachable: {e}") from e

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            await self.request("GET", "/auth/v1/health")
            return True
        except Exception:
            logger.exception("Backend connection check failed")
            return False


class Subscription:
    def __init__(self, listeners: dict[int, AuthCallback], key: int) -> None:
        self._listeners = listeners
        self._key = key

    def unsubscribe(self) -> None:
        self._listeners.pop(self._key, None)


class AuthClient:
    """Password auth against the provider, holding one cached session."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._session: AuthSession | None = None
        self._listeners: dict[int, AuthCallback] = {}
        self._ids = itertools.count()
        self._refresh_lock = asyncio.Lock()

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        key = next(self._ids)
        self._listeners[key] = callback
        return Subscription(self._listeners, key)

    async def get_session(self) -> AuthSession | None:
        """Return the cached session, refreshing it first when it has expired.

        Concurrent callers share one refresh; the provider rotates refresh tokens.
        """
        if self._session is None or not self._session.expired:
            return self._session
        async with self._refresh_lock:
            if self._session is not None and self._session.expired:
                if self._session.refresh_token:
                    try:
                        await self._refresh(self._session.refresh_token)
                    except BackendError as e:
                        logger.warning("Session refresh failed: %s", e.message)
                        self._set_session(None, AuthEvent.SIGNED_OUT)
                else:
                    self._set_session(None, AuthEvent.SIGNED_OUT)
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = await self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            payload={"email": email, "password": password},
        )
        session = _parse_session(data)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        if self._session is not None:
            await self._client.request(
                "POST",
                "/auth/v1/logout",
                access_token=self._session.access_token,
            )
        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def _refresh(self, refresh_token: str) -> None:
        data = await self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            payload={"refresh_token": refresh_token},
        )
        self._set_session(_parse_session(data), AuthEvent.TOKEN_REFRESHED)

    def _set_session(self, session: AuthSession | None, event: AuthEvent) -> None:
        self._session = session
        for callback in list(self._listeners.values()):
            try:
                callback(event, session)
            except Exception:
                logger.exception("Auth state listener failed for %s", event.value)


class BackendScope:
    """Per-workspace view of the backend: its own auth state, shared HTTP session."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client
        self.auth = AuthClient(client)

    async def _access_token(self) -> str | None:
        signed_in = self.auth.access_token is not None
        session = await self.auth.get_session()
        if session is None:
            if signed_in:
                raise BackendError("Session expired", status=401)
            return None
        return session.access_token

    async def select(self, table: str, order: str | None = None) -> list[dict[str, Any]]:
        params = {"select": "*"}
        if order:
            params["order"] = f"{order}.asc"
        rows = await self.client.request(
            "GET",
            f"/rest/v1/{table}",
            params=params,
            access_token=await self._access_token(),
        )
        return rows or []

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = await self.client.request(
            "POST",
            f"/rest/v1/{table}",
            payload=[row],
            access_token=await self._access_token(),
            headers={"Prefer": "return=representation"},
        )
        if not isinstance(rows, list) or len(rows) != 1:
            raise BackendError(f"Insert into {table} returned {len(rows or [])} rows")
        return rows[0]
