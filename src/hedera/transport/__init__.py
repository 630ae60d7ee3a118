"""HTTP transport for the HEDERA schedule API."""

from hedera.transport.schedule_client import ScheduleClient

__all__ = ["ScheduleClient"]
