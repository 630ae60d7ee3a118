"""Schedule lifecycle orchestration."""

from hedera.orchestration.lifecycle import ScheduleOrchestrator, ScheduleTransport

__all__ = ["ScheduleOrchestrator", "ScheduleTransport"]
