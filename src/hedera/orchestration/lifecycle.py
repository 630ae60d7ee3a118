"""Schedule lifecycle orchestrator: create → poll → accept | compensate.

1. Create the schedule. Failure here leaves nothing behind to clean up.
2. Read it immediately, then every ``poll_interval`` seconds, until HEDERA
   reports a terminal status or the deadline passes.
   - Declined → abort at once, no need to wait for the deadline.
   - Accepted → return the schedule as last read.
   - Pending / Unknown → keep polling while time remains.
3. On rejection, timeout, error or cancellation: delete the schedule
   (best effort) so no orphaned pending schedules pile up at HEDERA, then
   report the original cause.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Iterable, Optional, Protocol

from hedera.config import HederaConfig
from hedera.errors import (
    CreationFailed,
    OrchestrationError,
    ScheduleRejected,
    TimedOut,
    TransportFailure,
    format_duration,
)
from hedera.models.schedule import (
    Direction,
    MinimalSchedule,
    RemoteSchedule,
    ScheduleInterval,
    ScheduleRequest,
    ScheduleStatus,
)

logger = logging.getLogger(__name__)


class ScheduleTransport(Protocol):
    """The remote operations the orchestrator drives (see ScheduleClient)."""

    async def create(self, request: ScheduleRequest) -> Optional[uuid.UUID]: ...

    async def read(self, mrid: uuid.UUID) -> RemoteSchedule: ...

    async def delete(self, target: uuid.UUID) -> None: ...

    async def list_all(self) -> list[MinimalSchedule]: ...


class ScheduleOrchestrator:
    """Drives one schedule lifecycle per :meth:`request_and_await` call.

    Args:
        transport: ScheduleClient or any object with the same operations.
        config: Supplies per-direction mRIDs and the default polling policy.
        poll_interval: Seconds between reads (overrides config).
        deadline: Seconds until the lifecycle gives up (overrides config).
    """

    def __init__(
        self,
        transport: ScheduleTransport,
        config: Optional[HederaConfig] = None,
        poll_interval: Optional[float] = None,
        deadline: Optional[float] = None,
    ):
        self.transport = transport
        self.config = config or HederaConfig()
        self.poll_interval = (
            poll_interval if poll_interval is not None else self.config.poll_interval
        )
        self.deadline = deadline if deadline is not None else self.config.deadline

    async def request_and_await(
        self,
        start: datetime,
        interval: ScheduleInterval,
        values: Iterable[float],
        direction: Direction,
        deadline: Optional[float] = None,
        mrid: Optional[uuid.UUID] = None,
    ) -> RemoteSchedule:
        """Request a schedule (values in W) and wait for HEDERA's verdict.

        Args:
            start: Aware start instant of the first value.
            interval: Resolution; one value per interval step.
            values: Requested power per step, in W.
            direction: Import or export.
            deadline: Seconds to wait for a terminal status (default: config).
            mrid: Registered inter tie (default: configured for ``direction``).

        Returns:
            The Accepted RemoteSchedule exactly as last read (values in kW).

        Raises:
            CreationFailed: request invalid or schedule not created.
            ScheduleRejected: HEDERA declined the schedule.
            TimedOut: no terminal status before the deadline.
            TransportFailure: a read failed while polling.
        """
        wait_for = deadline if deadline is not None else self.deadline
        schedule_mrid = await self._create(start, interval, values, direction, mrid)

        try:
            schedule = await self._await_calculation(schedule_mrid, wait_for)
        except asyncio.CancelledError:
            logger.info("Schedule %s lifecycle cancelled", schedule_mrid)
            await self._compensate(schedule_mrid)
            raise
        except OrchestrationError:
            await self._compensate(schedule_mrid)
            raise
        except Exception as exc:
            await self._compensate(schedule_mrid)
            raise TransportFailure(
                f"HEDERA was unable to calculate schedule {schedule_mrid}", cause=exc,
            ) from exc

        logger.info("Result schedule in %s: %s", schedule.quantity, list(schedule.values))
        return schedule

    async def purge(
        self,
        statuses: Iterable[ScheduleStatus] = (ScheduleStatus.PENDING, ScheduleStatus.UNKNOWN),
    ) -> int:
        """Delete every listed schedule in ``statuses``. Returns how many went.

        Individual delete failures are logged and skipped.
        """
        wanted = set(statuses)
        existing = await self.transport.list_all()
        deleted = 0
        for summary in existing:
            if summary.status not in wanted:
                continue
            try:
                await self.transport.delete(summary.mrid)
                deleted += 1
                logger.info("Purged %s", summary)
            except Exception as exc:
                logger.warning("Unable to purge %s: %s", summary, exc)
        logger.info("Purged %d of %d existing schedules", deleted, len(existing))
        return deleted

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _create(
        self,
        start: datetime,
        interval: ScheduleInterval,
        values: Iterable[float],
        direction: Direction,
        mrid: Optional[uuid.UUID],
    ) -> uuid.UUID:
        values = tuple(values)
        params = (
            f"start={start.isoformat()}, interval={interval.value}, "
            f"values={list(values)}, direction={direction.value}"
        )
        try:
            request = ScheduleRequest(
                mrid=mrid or direction.resolve_mrid(self.config),
                start=start,
                interval=interval,
                values=values,
                direction=direction,
            )
        except ValueError as exc:
            raise CreationFailed(f"Invalid schedule request ({params})", cause=exc) from exc

        logger.info("Requesting schedule in %s: %s", request.quantity, list(request.values))
        try:
            schedule_mrid = await self.transport.create(request)
        except Exception as exc:
            raise CreationFailed(f"Unable to create schedule ({params})", cause=exc) from exc

        if schedule_mrid is None:
            raise CreationFailed(
                f"No schedule mRID returned by HEDERA after creation ({params})"
            )
        logger.info("Created new schedule with mrid=%s", schedule_mrid)
        return schedule_mrid

    async def _await_calculation(self, mrid: uuid.UUID, deadline: float) -> RemoteSchedule:
        started = time.monotonic()
        ends_at = started + deadline
        reads = 0

        logger.info(
            "Polling HEDERA every %ss for up to %s until calculation is completed.",
            self.poll_interval, format_duration(deadline),
        )
        while True:
            if reads:
                # give HEDERA time to calculate
                await asyncio.sleep(self.poll_interval)

            schedule = await self.transport.read(mrid)
            reads += 1
            logger.info(
                "Read HEDERA API %d times. Schedule is in state '%s'",
                reads, schedule.status.value,
            )
            logger.debug("Status message: %s", schedule.status_message)

            if schedule.status is ScheduleStatus.DECLINED:
                raise ScheduleRejected(schedule.status_message)
            if schedule.status is ScheduleStatus.ACCEPTED:
                logger.info(
                    "Calculation at HEDERA finished. Took %.1fs", time.monotonic() - started,
                )
                return schedule
            if schedule.status is ScheduleStatus.UNKNOWN:
                logger.warning(
                    "Schedule %s reported unrecognised status %r, still polling",
                    mrid, schedule.raw_status,
                )

            if time.monotonic() >= ends_at:
                raise TimedOut(deadline)

    async def _compensate(self, mrid: uuid.UUID) -> None:
        """Best-effort delete. Never raises: the original failure wins."""
        logger.info("Deleting corrupt schedule with mrid=%s", mrid)
        try:
            await self.transport.delete(mrid)
        except Exception as exc:
            logger.warning(
                "Unable to delete corrupt schedule with mrid=%s. Reason %s: %s",
                mrid, type(exc).__name__, exc,
            )
