"""Shared test fixtures for hedera."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hedera.auth.oauth import Credential
from hedera.config import HederaConfig


@pytest.fixture
def config() -> HederaConfig:
    """Config with credentials and both direction mRIDs set."""
    return HederaConfig(
        client_id="client-123",
        client_secret="s3cret",
        import_mrid="11111111-1111-4111-8111-111111111111",
        export_mrid="22222222-2222-4222-8222-222222222222",
    )


@pytest.fixture
def credential() -> Credential:
    return Credential(token="tok_abc123")


@pytest.fixture
def start() -> datetime:
    """2024-01-01T00:00:00Z"""
    return datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_schedule_body() -> dict:
    """Raw GET /schedule/{id} body as returned by HEDERA (points out of order)."""
    return {
        "schedule": {
            "mRID": "33333333-3333-4333-8333-333333333333",
            "status": "Accepted",
            "statusMessage": "ok",
            "registeredInterTies": [
                {
                    "mRID": "11111111-1111-4111-8111-111111111111",
                    "direction": "Import",
                    "timeSeries": {
                        "mRID": "11111111-1111-4111-8111-111111111111",
                        "quantity": {"unitMultiplier": "k", "unitSymbol": "W"},
                        "points": [
                            {"position": 1, "quantity": 190.0},
                            {"position": 0, "quantity": 95.0},
                        ],
                    },
                }
            ],
        }
    }
