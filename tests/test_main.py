"""Tests for the command line entry point."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

import pytest
from aioresponses import aioresponses

from hedera.config import TOKEN_URL
from hedera.main import (
    cli_main,
    format_listing,
    format_schedule,
    parse_args,
    run_command,
)
from hedera.models.schedule import (
    KILOWATT,
    Direction,
    MinimalSchedule,
    RemoteSchedule,
    ScheduleInterval,
    ScheduleStatus,
)

SCHEDULE_MRID = uuid.UUID("33333333-3333-4333-8333-333333333333")
SCHEDULE_URL = "https://api.hedera.alliander.com/schedule"
ITEM_URL = f"{SCHEDULE_URL}/{SCHEDULE_MRID}"
LIST_PATTERN = re.compile(r"^https://api\.hedera\.alliander\.com/schedule\?pageSize=\d+$")


# ---------------------------------------------------------------------------
# parse_args
# ---------------------------------------------------------------------------


class TestParseArgs:
    def test_request(self):
        args = parse_args([
            "request", "--start", "2024-01-01T00:00:00Z",
            "--interval", "PT15M", "--values", "100,200", "--direction", "export",
        ])
        assert args.command == "request"
        assert args.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert args.interval is ScheduleInterval.PT15M
        assert args.values == [100.0, 200.0]
        assert args.direction is Direction.EXPORT
        assert args.deadline is None

    def test_request_defaults(self):
        args = parse_args(["request", "--start", "2024-01-01T00:00:00+01:00", "--values", "5"])
        assert args.interval is ScheduleInterval.PT15M
        assert args.direction is Direction.IMPORT

    def test_naive_start_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["request", "--start", "2024-01-01T00:00:00", "--values", "5"])

    def test_bad_interval_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["request", "--start", "2024-01-01T00:00:00Z",
                        "--values", "5", "--interval", "PT7M"])

    def test_delete(self):
        args = parse_args(["delete", str(SCHEDULE_MRID)])
        assert args.mrid == SCHEDULE_MRID

    def test_purge_statuses(self):
        args = parse_args(["purge", "--status", "pending", "--status", "declined"])
        assert args.status == [ScheduleStatus.PENDING, ScheduleStatus.DECLINED]

    def test_purge_status_typo_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["purge", "--status", "Acepted"])

    def test_purge_unknown_status_explicit(self):
        args = parse_args(["purge", "--status", "Unknown"])
        assert args.status == [ScheduleStatus.UNKNOWN]

    def test_verbose(self):
        assert parse_args(["-v", "list"]).verbose is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_format_schedule(self):
        schedule = RemoteSchedule(
            mrid=SCHEDULE_MRID,
            status=ScheduleStatus.ACCEPTED,
            values=(95.0, 190.0),
            quantity=KILOWATT,
        )
        line = format_schedule(schedule)
        assert "Accepted" in line
        assert str(SCHEDULE_MRID) in line
        assert "kW" in line
        assert "[95, 190]" in line

    def test_format_listing_empty(self):
        assert format_listing([]) == "No schedules at HEDERA."

    def test_format_listing(self):
        text = format_listing([MinimalSchedule(SCHEDULE_MRID, ScheduleStatus.PENDING)])
        assert text.startswith("1 schedule(s)")
        assert "(Pending)" in text


# ---------------------------------------------------------------------------
# run_command / cli_main
# ---------------------------------------------------------------------------


class TestRunCommand:
    async def test_request_end_to_end(self, config):
        accepted = {
            "schedule": {
                "mRID": str(SCHEDULE_MRID),
                "status": "Accepted",
                "registeredInterTies": [{"timeSeries": {
                    "quantity": {"unitMultiplier": "k", "unitSymbol": "W"},
                    "points": [{"position": 0, "quantity": 95.0}, {"position": 1, "quantity": 190.0}],
                }}],
            }
        }
        args = parse_args([
            "request", "--start", "2024-01-01T00:00:00Z", "--values", "100,200",
        ])
        with aioresponses() as m:
            m.post(TOKEN_URL, payload={"access_token": "tok"})
            m.post(SCHEDULE_URL, payload={"scheduleReference": {"mRID": str(SCHEDULE_MRID)}})
            m.get(ITEM_URL, payload=accepted)
            text = await run_command(args, config)
        assert "Accepted" in text
        assert "[95, 190]" in text

    async def test_list(self, config):
        args = parse_args(["list"])
        with aioresponses() as m:
            m.post(TOKEN_URL, payload={"access_token": "tok"})
            m.get(LIST_PATTERN, payload={"schedules": [
                {"mRID": str(SCHEDULE_MRID), "status": "Pending"},
            ]})
            text = await run_command(args, config)
        assert "1 schedule(s)" in text

    async def test_delete(self, config):
        args = parse_args(["delete", str(SCHEDULE_MRID)])
        with aioresponses() as m:
            m.post(TOKEN_URL, payload={"access_token": "tok"})
            m.delete(ITEM_URL, status=204)
            text = await run_command(args, config)
        assert text == f"Deleted schedule {SCHEDULE_MRID}"

    async def test_purge(self, config):
        args = parse_args(["purge"])
        with aioresponses() as m:
            m.post(TOKEN_URL, payload={"access_token": "tok"})
            m.get(LIST_PATTERN, payload={"schedules": [
                {"mRID": str(SCHEDULE_MRID), "status": "Pending"},
                {"mRID": str(uuid.uuid4()), "status": "Accepted"},
            ]})
            m.delete(ITEM_URL, status=204)
            text = await run_command(args, config)
        assert text == "Purged 1 schedule(s)"


class TestCliMain:
    def test_missing_credentials(self, monkeypatch, capsys):
        monkeypatch.delenv("HEDERA_CLIENT_ID", raising=False)
        monkeypatch.delenv("HEDERA_CLIENT_SECRET", raising=False)
        assert cli_main(["list"]) == 2
        assert "HEDERA_CLIENT_ID" in capsys.readouterr().err

    def test_auth_failure_exit_code(self, monkeypatch, capsys):
        monkeypatch.setenv("HEDERA_CLIENT_ID", "cid")
        monkeypatch.setenv("HEDERA_CLIENT_SECRET", "bad")
        monkeypatch.delenv("HEDERA_TOKEN_URL", raising=False)
        with aioresponses() as m:
            m.post(TOKEN_URL, status=401, body="unauthorized")
            assert cli_main(["list"]) == 1
        assert "401" in capsys.readouterr().err
