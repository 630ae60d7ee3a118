"""HEDERA schedule API client: create, read, delete, list.

Each operation is one request/response exchange. Nothing here retries:
failures are reported immediately as TransportError / ProtocolError and
the caller decides what to do about them.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Optional, Union

import aiohttp

from hedera.auth.oauth import Credential, CredentialProvider
from hedera.config import API_BASE_URL, DEFAULT_HTTP_TIMEOUT, MEDIA_TYPE, HederaConfig
from hedera.errors import ProtocolError, TransportError
from hedera.models.schedule import MinimalSchedule, RemoteSchedule, ScheduleRequest

logger = logging.getLogger(__name__)

# Integer.MAX_VALUE: the API has no "everything" flag, so ask for one huge page.
DEFAULT_PAGE_SIZE = 2_147_483_647


class ScheduleClient:
    """Async client for the HEDERA schedule endpoints.

    The client owns its credential and HTTP session from construction until
    :meth:`close`.

    Usage:
        async with await ScheduleClient.login(config) as client:
            mrid = await client.create(request)
            schedule = await client.read(mrid)
    """

    def __init__(
        self,
        credential: Credential,
        base_url: str = API_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    async def login(cls, config: HederaConfig) -> ScheduleClient:
        """Obtain a bearer token and return an opened client.

        Raises:
            AuthError: the identity exchange failed.
        """
        provider = CredentialProvider(
            token_url=config.token_url,
            scope=config.scope,
            timeout=config.http_timeout,
        )
        credential = await provider.obtain(config.client_id, config.client_secret)
        client = cls(credential, base_url=config.base_url, timeout=config.http_timeout)
        await client.open()
        return client

    async def open(self) -> None:
        """Open aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self) -> None:
        """Close aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> ScheduleClient:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(self, request: ScheduleRequest) -> uuid.UUID:
        """POST /schedule → mRID of the created schedule.

        Raises:
            TransportError: non-2xx status or network failure.
            ProtocolError: non-JSON success body or one without ``scheduleReference.mRID``.
        """
        body = request.to_wire()
        logger.debug("JSON body sent to create schedule: %s", body)
        logger.debug("Trying to create a schedule at HEDERA...")
        data = await self._request("POST", "/schedule", body=body)

        reference = data.get("scheduleReference") if isinstance(data, dict) else None
        raw_mrid = reference.get("mRID") if isinstance(reference, dict) else None
        if not raw_mrid:
            raise ProtocolError(f"No schedule mRID in create response: {data!r}")
        try:
            mrid = uuid.UUID(str(raw_mrid))
        except ValueError as exc:
            raise ProtocolError(f"Malformed schedule mRID {raw_mrid!r}") from exc

        logger.info("Successfully created a schedule at HEDERA.")
        return mrid

    async def read(self, mrid: uuid.UUID) -> RemoteSchedule:
        """GET /schedule/{mrid} → current RemoteSchedule."""
        logger.debug("Trying to read schedule %s at HEDERA...", mrid)
        data = await self._request("GET", f"/schedule/{mrid}")
        schedule = RemoteSchedule.from_wire(data)
        logger.debug("Successfully read the schedule at HEDERA, got %s", schedule)
        return schedule

    async def delete(self, target: Union[uuid.UUID, RemoteSchedule]) -> None:
        """DELETE /schedule/{mrid}. Accepts an mRID or a RemoteSchedule."""
        mrid = target.mrid if isinstance(target, RemoteSchedule) else target
        logger.debug("Trying to delete schedule %s at HEDERA...", mrid)
        await self._request("DELETE", f"/schedule/{mrid}", expect_body=False)
        logger.debug("Successfully deleted schedule %s at HEDERA", mrid)

    async def list_all(self, page_size: int = DEFAULT_PAGE_SIZE) -> list[MinimalSchedule]:
        """GET /schedule?pageSize=N → summaries of every existing schedule."""
        data = await self._request("GET", "/schedule", params={"pageSize": str(page_size)})
        raw = data.get("schedules") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise ProtocolError(f"Listing response has no schedules array: {data!r}")
        schedules = [MinimalSchedule.from_wire(item) for item in raw]
        logger.debug("Got %d existing schedules", len(schedules))
        return schedules

    # ------------------------------------------------------------------
    # HTTP helper
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.credential.authorization,
            "Accept": MEDIA_TYPE,
            "Content-Type": MEDIA_TYPE,
        }

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
        expect_body: bool = True,
    ) -> object:
        """Single request → decoded JSON (None when no body is expected)."""
        await self.open()
        url = f"{self.base_url}{path}"
        data = json.dumps(body) if body is not None else None
        try:
            async with self._session.request(
                method, url, data=data, params=params, headers=self._headers(),
            ) as resp:
                status = resp.status
                text = await resp.text()
                sunset = resp.headers.get("Sunset")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"{method} {path} failed: {exc!r}") from exc

        if sunset:
            logger.warning("HEDERA API version %s is deprecated, sunset: %s", MEDIA_TYPE, sunset)

        if status // 100 != 2:
            logger.warning("HEDERA API %s %s returned %d: %s", method, path, status, text[:200])
            raise TransportError(
                f"{method} {path} returned {status}: {text[:200]}", status=status, body=text,
            )
        if not expect_body:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProtocolError(f"{method} {path} returned malformed JSON: {text[:200]}") from exc
