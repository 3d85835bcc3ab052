"""Salesforce OAuth session provider with a single-flight token refresh."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx

from salesforce_proxy.config import Settings, get_settings
from salesforce_proxy.core.exceptions import AuthError, ConfigurationError
from salesforce_proxy.core.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SalesforceSession:
    """Bearer credential for one Salesforce org."""

    access_token: str
    instance_url: str
    owner_id: str | None
    expires_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        return self.expires_at > (now or _utcnow())


def parse_owner_id(identity_url: str | None) -> str | None:
    """Extract the user id from an identity URL.

    The token endpoint returns ``id`` as
    ``https://login.salesforce.com/id/<org id>/<user id>``.
    """
    if not identity_url:
        return None
    return identity_url.rstrip("/").rsplit("/", 1)[-1] or None


class SessionProvider:
    """Obtains and caches a Salesforce session.

    Tries the refresh-token grant first and falls back to the password
    grant. Concurrent callers share one refresh: the cache is re-checked
    after the lock is acquired.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._settings = settings or get_settings()
        self._transport = transport
        self._clock = clock
        self._session: SalesforceSession | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @property
    def cached_session(self) -> SalesforceSession | None:
        return self._session

    async def get_valid_session(self) -> SalesforceSession:
        """Return a non-expired session, authenticating if needed.

        Raises:
            ConfigurationError: If no credential set is complete
            AuthError: If Salesforce rejects the grant
        """
        session = self._session
        if session and session.is_valid(self._clock()):
            return session

        async with self._refresh_lock():
            session = self._session
            if session and session.is_valid(self._clock()):
                return session

            self._session = await self._authenticate()
            return self._session

    def _refresh_lock(self) -> asyncio.Lock:
        """Lock bound to the running event loop, recreated if the loop changes."""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def invalidate(self) -> None:
        """Drop the cached session so the next call re-authenticates."""
        if self._session is not None:
            logger.info("Invalidating cached Salesforce session")
        self._session = None

    async def _authenticate(self) -> SalesforceSession:
        settings = self._settings
        refresh_error: AuthError | None = None

        if settings.has_refresh_credentials:
            try:
                logger.info("Authenticating via refresh token")
                session = await self._request_token(
                    {
                        "grant_type": "refresh_token",
                        "client_id": settings.salesforce_client_id,
                        "client_secret": settings.salesforce_client_secret,
                        "refresh_token": settings.salesforce_refresh_token,
                    }
                )
                logger.info("Authenticated with Salesforce", flow="refresh_token")
                return session
            except AuthError as e:
                logger.warning(
                    "Refresh token authentication failed, falling back to password flow",
                    error=e.message,
                )
                refresh_error = e

        missing = settings.missing_password_credentials()
        if missing:
            if refresh_error is not None:
                raise refresh_error
            raise ConfigurationError(
                f"Salesforce credentials not configured. Missing: {', '.join(missing)}",
                {"missing": missing},
            )

        logger.info("Authenticating via password flow")
        session = await self._request_token(
            {
                "grant_type": "password",
                "client_id": settings.salesforce_client_id,
                "client_secret": settings.salesforce_client_secret,
                "username": settings.salesforce_username,
                "password": settings.salesforce_password
                + settings.salesforce_security_token,
            }
        )
        logger.info("Authenticated with Salesforce", flow="password")
        return session

    async def _request_token(self, form: dict[str, str]) -> SalesforceSession:
        """POST a grant to the token endpoint and build a session from it."""
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._settings.salesforce_timeout_seconds,
            ) as client:
                response = await client.post(self._settings.token_url, data=form)
        except httpx.HTTPError as e:
            raise AuthError(f"Salesforce authentication request failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"Salesforce authentication failed: {response.text}",
                {"status_code": response.status_code, "grant_type": form["grant_type"]},
            )

        ttl = timedelta(minutes=self._settings.salesforce_session_ttl_minutes)
        try:
            data: dict[str, Any] = response.json()
            return SalesforceSession(
                access_token=data["access_token"],
                instance_url=data["instance_url"].rstrip("/"),
                owner_id=parse_owner_id(data.get("id")),
                expires_at=self._clock() + ttl,
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AuthError(
                "Salesforce authentication returned an invalid token response",
                {"grant_type": form["grant_type"], "error": repr(e)},
            ) from e
