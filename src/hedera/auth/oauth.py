"""OAuth2 client-credentials exchange for the HEDERA API.

One POST to the identity endpoint, no retry: a failure here is fatal to
client construction. The bearer token has no locally tracked expiry; when it
stops working a new client must log in again.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field

import aiohttp

from hedera.config import DEFAULT_HTTP_TIMEOUT, TOKEN_SCOPE, TOKEN_URL
from hedera.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Opaque bearer token."""

    token: str = field(repr=False)

    @property
    def authorization(self) -> str:
        """Value of the Authorization header."""
        return f"Bearer {self.token}"

    def __repr__(self) -> str:
        return f"Credential(token='{self.token[:4]}…')"


class CredentialProvider:
    """Exchanges client credentials for a bearer token.

    Args:
        token_url: OAuth2 v2 token endpoint.
        scope: Requested scope (``api://.../.default``).
        timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        token_url: str = TOKEN_URL,
        scope: str = TOKEN_SCOPE,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.token_url = token_url
        self.scope = scope
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def obtain(self, client_id: str, client_secret: str) -> Credential:
        """POST client credentials → Credential.

        Raises:
            AuthError: non-2xx status, network failure, unparsable body or
                missing ``access_token``.
        """
        form = {
            "client_id": client_id,
            "grant_type": "client_credentials",
            "scope": self.scope,
            "client_secret": client_secret,
        }
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.token_url, data=form) as resp:
                    status = resp.status
                    body = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise AuthError(f"Token request to {self.token_url} failed: {exc}") from exc

        logger.debug("Token endpoint answered with http status %d", status)
        if status // 100 != 2:
            raise AuthError(
                f"Token endpoint returned {status}: {body[:200]}",
                status=status,
                body=body,
            )

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise AuthError(
                f"Unparsable token response: {body[:200]}", status=status, body=body,
            ) from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Token response has no access_token", status=status, body=body)

        credential = Credential(token=str(token).strip('"'))
        logger.info("Logged in to identity provider using oauth")
        logger.debug("Got bearer token %s", credential.token)
        return credential
