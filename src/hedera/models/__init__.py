"""Data models for hedera."""

from hedera.models.schedule import (
    KILOWATT,
    WATT,
    Direction,
    MinimalSchedule,
    Quantity,
    RemoteSchedule,
    ScheduleInterval,
    ScheduleRequest,
    ScheduleStatus,
    UnitMultiplier,
    UnitSymbol,
    to_wire_timestamp,
)

__all__ = [
    "KILOWATT",
    "WATT",
    "Direction",
    "MinimalSchedule",
    "Quantity",
    "RemoteSchedule",
    "ScheduleInterval",
    "ScheduleRequest",
    "ScheduleStatus",
    "UnitMultiplier",
    "UnitSymbol",
    "to_wire_timestamp",
]
