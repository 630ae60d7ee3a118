"""Schedule data models: request, remote state, listing summary, units."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Sequence

from hedera.config import HederaConfig
from hedera.errors import ProtocolError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ScheduleStatus(Enum):
    """Lifecycle status of a schedule at HEDERA. Transitions are server-driven."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    UNKNOWN = "Unknown"

    @classmethod
    def from_wire(cls, value: object) -> ScheduleStatus:
        """Decode a status string. Unrecognised or missing values → UNKNOWN."""
        if isinstance(value, str):
            wanted = value.strip().lower()
            for status in cls:
                if status.value.lower() == wanted:
                    return status
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """ACCEPTED/DECLINED → polling stops."""
        return self in (ScheduleStatus.ACCEPTED, ScheduleStatus.DECLINED)


class ScheduleInterval(Enum):
    """Period resolution of a schedule time series (ISO-8601 duration)."""

    PT5M = "PT5M"
    PT15M = "PT15M"
    PT30M = "PT30M"
    PT60M = "PT60M"

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=int(self.value[2:-1]))

    @classmethod
    def parse(cls, text: str) -> ScheduleInterval:
        """Accept 'PT15M', '15m' or '15' (minutes)."""
        cleaned = text.strip().upper()
        if not cleaned.startswith("PT"):
            cleaned = f"PT{cleaned.rstrip('M')}M"
        try:
            return cls(cleaned)
        except ValueError:
            allowed = ", ".join(i.value for i in cls)
            raise ValueError(f"Unsupported interval {text!r} (allowed: {allowed})") from None


class Direction(Enum):
    """Power flow direction of the requested capacity."""

    IMPORT = "Import"
    EXPORT = "Export"

    @classmethod
    def parse(cls, text: str) -> Direction:
        return cls(text.strip().capitalize())

    def resolve_mrid(self, config: HederaConfig) -> uuid.UUID:
        """Registered inter tie mRID configured for this direction."""
        raw = config.import_mrid if self is Direction.IMPORT else config.export_mrid
        if not raw:
            raise ValueError(
                f"No mRID configured for direction {self.value} "
                f"(set HEDERA_{self.name}_MRID)"
            )
        return uuid.UUID(raw)


class UnitMultiplier(Enum):
    """CIM unit multiplier. ``factor`` is the fixed scale to base units."""

    MILLI = "m"
    NONE = "none"
    KILO = "k"
    MEGA = "M"

    @property
    def factor(self) -> float:
        return _MULTIPLIER_FACTORS[self]


_MULTIPLIER_FACTORS = {
    UnitMultiplier.MILLI: 1e-3,
    UnitMultiplier.NONE: 1.0,
    UnitMultiplier.KILO: 1e3,
    UnitMultiplier.MEGA: 1e6,
}


class UnitSymbol(Enum):
    W = "W"
    WH = "Wh"


@dataclass(frozen=True)
class Quantity:
    """Unit declaration of a time series: multiplier + symbol."""

    multiplier: UnitMultiplier = UnitMultiplier.NONE
    symbol: UnitSymbol = UnitSymbol.W

    def to_wire(self) -> dict:
        return {"unitMultiplier": self.multiplier.value, "unitSymbol": self.symbol.value}

    @classmethod
    def from_wire(cls, raw: Optional[dict]) -> Quantity:
        if not raw:
            return cls()
        if not isinstance(raw, dict):
            raise ProtocolError(f"Unsupported quantity {raw!r}")
        try:
            return cls(
                multiplier=UnitMultiplier(raw.get("unitMultiplier", "none")),
                symbol=UnitSymbol(raw.get("unitSymbol", "W")),
            )
        except ValueError as exc:
            raise ProtocolError(f"Unsupported quantity {raw!r}: {exc}") from exc

    def convert(self, values: Sequence[float], target: UnitMultiplier) -> tuple[float, ...]:
        """Rescale ``values`` from this multiplier to ``target``."""
        scale = self.multiplier.factor / target.factor
        return tuple(v * scale for v in values)

    def __str__(self) -> str:
        prefix = "" if self.multiplier is UnitMultiplier.NONE else self.multiplier.value
        return f"{prefix}{self.symbol.value}"


WATT = Quantity(UnitMultiplier.NONE, UnitSymbol.W)
KILOWATT = Quantity(UnitMultiplier.KILO, UnitSymbol.W)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def to_wire_timestamp(moment: datetime) -> str:
    """Aware datetime → UTC ISO-8601 string truncated to milliseconds."""
    if moment.tzinfo is None:
        raise ValueError(f"Timestamp must be timezone-aware, got {moment!r}")
    utc = moment.astimezone(timezone.utc)
    utc = utc.replace(microsecond=(utc.microsecond // 1000) * 1000)
    text = utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    logger.debug("Converted %s into %s", moment, text)
    return text


def _parse_mrid(raw: object, what: str) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    if not raw:
        raise ProtocolError(f"{what} has no mRID")
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise ProtocolError(f"{what} has malformed mRID {raw!r}") from exc


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduleRequest:
    """A schedule submission. Values are in ``quantity`` units (W by default)."""

    mrid: uuid.UUID
    start: datetime
    interval: ScheduleInterval
    values: tuple[float, ...]
    direction: Direction
    quantity: Quantity = WATT

    def __post_init__(self):
        if not self.values:
            raise ValueError("A schedule needs at least one value")
        if self.start.tzinfo is None:
            raise ValueError(f"start must be timezone-aware, got {self.start!r}")
        # Accept any sequence; store as tuple of floats.
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @property
    def end(self) -> datetime:
        """start + interval × len(values)."""
        return self.start + self.interval.duration * len(self.values)

    def to_wire(self) -> dict:
        """POST /schedule body (one registered inter tie)."""
        mrid = str(self.mrid)
        return {
            "registeredInterTies": [
                {
                    "mRID": mrid,
                    "direction": self.direction.value,
                    "isAggregatedRes": False,
                    "aggregatedNodes": None,
                    "timeSeries": {
                        "mRID": mrid,
                        "period": {
                            "resolution": self.interval.value,
                            "timeInterval": {
                                "start": to_wire_timestamp(self.start),
                                "end": to_wire_timestamp(self.end),
                            },
                        },
                        "points": [
                            {"position": position, "quantity": value}
                            for position, value in enumerate(self.values)
                        ],
                        "quantity": self.quantity.to_wire(),
                    },
                }
            ]
        }


@dataclass(frozen=True)
class RemoteSchedule:
    """Server-side state of a created schedule.

    ``values`` are in the server's unit (``quantity``, kW in practice);
    use :meth:`values_in` for an explicit conversion.
    """

    mrid: uuid.UUID
    status: ScheduleStatus
    status_message: Optional[str] = None
    values: tuple[float, ...] = ()
    quantity: Quantity = KILOWATT
    raw_status: Optional[str] = field(default=None, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def values_in(self, multiplier: UnitMultiplier) -> tuple[float, ...]:
        return self.quantity.convert(self.values, multiplier)

    @staticmethod
    def from_wire(raw: dict) -> RemoteSchedule:
        """GET /schedule/{id} body → RemoteSchedule.

        Accepts the schedule either wrapped in ``{"schedule": {...}}`` or
        at top level. Points are ordered by position.

        Raises:
            ProtocolError: body is not an object or lacks the mRID.
        """
        if not isinstance(raw, dict):
            raise ProtocolError(f"Schedule response is not an object: {raw!r}")
        body = raw.get("schedule", raw)
        if not isinstance(body, dict):
            raise ProtocolError(f"Schedule response is not an object: {body!r}")

        raw_status = body.get("status", body.get("@type"))
        status = ScheduleStatus.from_wire(raw_status)

        values: tuple[float, ...] = ()
        quantity = KILOWATT
        ties = body.get("registeredInterTies") or []
        if ties:
            if not isinstance(ties, list) or not isinstance(ties[0], dict):
                raise ProtocolError(f"Malformed registeredInterTies: {ties!r}")
            series = ties[0].get("timeSeries") or {}
            if not isinstance(series, dict):
                raise ProtocolError(f"Malformed timeSeries: {series!r}")
            if series.get("quantity"):
                quantity = Quantity.from_wire(series["quantity"])
            try:
                points = sorted(series.get("points") or [], key=lambda p: p.get("position", 0))
                values = tuple(float(p["quantity"]) for p in points)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise ProtocolError(f"Malformed schedule points: {exc}") from exc

        return RemoteSchedule(
            mrid=_parse_mrid(body.get("mRID"), "Schedule"),
            status=status,
            status_message=body.get("statusMessage"),
            values=values,
            quantity=quantity,
            raw_status=raw_status if isinstance(raw_status, str) else None,
        )


@dataclass(frozen=True)
class MinimalSchedule:
    """Listing summary: mRID + status only."""

    mrid: uuid.UUID
    status: ScheduleStatus

    def __str__(self) -> str:
        return f"Schedule mRID={self.mrid} ({self.status.value})"

    @staticmethod
    def from_wire(raw: dict) -> MinimalSchedule:
        if not isinstance(raw, dict):
            raise ProtocolError(f"Listed schedule is not an object: {raw!r}")
        return MinimalSchedule(
            mrid=_parse_mrid(raw.get("mRID"), "Listed schedule"),
            status=ScheduleStatus.from_wire(raw.get("status")),
        )
