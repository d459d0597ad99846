"""
Client-credentials authentication for the Spotify Web API

This module owns the bearer token used by every catalog call. Only the
client-credentials grant is supported: the application's client id and secret
are exchanged for an access token, no user login is involved.

Token lifecycle:
1. acquire() POSTs grant_type=client_credentials with HTTP Basic auth
2. The returned access_token is stored as an immutable Credential
3. The token is assumed valid until a catalog call answers HTTP 401
4. The caller that saw the 401 calls acquire() again (at most once per request)

There is no expiry timer and no retry loop here. Several acquisitions may run
at the same time (for instance two 401s observed concurrently); each successful
exchange simply overwrites the stored credential, so the last success wins.
A failed exchange raises AuthError and leaves the previous credential usable.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import asyncio
import aiohttp

from .settings import get_settings
from ..exceptions import AuthError
from ..utils.logger import get_logger


@dataclass(frozen=True)
class Credential:
    """
    Bearer token plus the moment it was obtained

    Never mutated; a refresh produces a new instance.
    """
    token: str
    obtained_at: datetime


class CredentialBroker:
    """
    Acquires and stores the client-credentials bearer token

    Attributes:
        client_id: Spotify application client ID
        client_secret: Spotify application client secret
        token_url: Token endpoint
        acquisitions: Number of exchange attempts made (successful or not)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = "https://accounts.spotify.com/api/token",
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 30,
    ):
        """
        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            token_url: Token endpoint URL
            session: Shared aiohttp session; one is created lazily when omitted
            timeout: Total request timeout in seconds for a lazily created session
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.timeout = timeout
        self.logger = get_logger(__name__)

        self._session = session
        self._owns_session = session is None
        self._credential: Optional[Credential] = None
        self.acquisitions = 0

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def token(self) -> Optional[str]:
        return self._credential.token if self._credential else None

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    async def _get_session(self) -> aiohttp.ClientSession:
        # Created lazily so the session binds to the running event loop
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this broker created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def acquire(self) -> Credential:
        """
        Exchange the client credentials for a new bearer token

        Returns:
            The new Credential, which also replaces the stored one

        Raises:
            AuthError: If credentials are missing, the endpoint is unreachable,
                       answers with an error status or omits access_token.
                       The previously stored credential is left untouched.
        """
        self.acquisitions += 1

        if not self.client_id or not self.client_secret:
            raise AuthError("Spotify client_id and client_secret are not configured")

        session = await self._get_session()

        try:
            async with session.post(
                self.token_url,
                data={'grant_type': 'client_credentials'},
                auth=aiohttp.BasicAuth(self.client_id, self.client_secret),
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
            ) as response:
                if response.status != 200:
                    raise AuthError(
                        f"token endpoint returned HTTP {response.status}",
                        details={'status': response.status, 'url': self.token_url}
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Token request failed: {e}")
            raise AuthError(f"network error: {e}", details={'url': self.token_url}) from e
        except ValueError as e:
            raise AuthError("token response is not valid JSON") from e

        token = payload.get('access_token') if isinstance(payload, dict) else None
        if not token:
            raise AuthError("token response did not contain access_token")

        # Plain overwrite: concurrent acquisitions resolve to the last success
        self._credential = Credential(token=token, obtained_at=datetime.now())
        self.logger.info("Obtained Spotify access token")
        return self._credential


# Global broker instance management
# Singleton pattern ensures all components share the same token
_broker_instance: Optional[CredentialBroker] = None


def get_broker() -> CredentialBroker:
    """
    Get the global credential broker (singleton pattern)

    Built from the current settings on first access.

    Returns:
        Global CredentialBroker instance
    """
    global _broker_instance
    if not _broker_instance:
        settings = get_settings()
        _broker_instance = CredentialBroker(
            client_id=settings.spotify.client_id,
            client_secret=settings.spotify.client_secret,
            token_url=settings.spotify.token_url,
            timeout=settings.network.request_timeout,
        )
    return _broker_instance


def reset_broker() -> None:
    """
    Reset the global broker instance

    Forces a new broker (and a new token exchange) on next access. Useful
    after the credentials in the settings have changed.
    """
    global _broker_instance
    _broker_instance = None
