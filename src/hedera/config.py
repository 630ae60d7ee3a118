"""Client configuration: endpoints, credentials, polling policy and env loading."""

from __future__ import annotations

import os
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# HEDERA endpoints
# ---------------------------------------------------------------------------

TOKEN_URL = (
    "https://login.microsoftonline.com/"
    "697f104b-d7cb-48c8-ac9f-bd87105bafdc/oauth2/v2.0/token"
)
TOKEN_SCOPE = "api://api.hedera.alliander.com/.default"
API_BASE_URL = "https://api.hedera.alliander.com"

# MediaType-based API versioning: sent as both Accept and Content-Type.
MEDIA_TYPE = "application/vnd.hedera.v1+json"

# ---------------------------------------------------------------------------
# Polling policy
# ---------------------------------------------------------------------------

DEFAULT_POLL_INTERVAL = 5.0  # seconds between reads
DEFAULT_DEADLINE = 300.0  # 5 minutes until the lifecycle gives up
DEFAULT_HTTP_TIMEOUT = 30.0  # seconds per request


# ---------------------------------------------------------------------------
# HederaConfig: environment-driven settings
# ---------------------------------------------------------------------------


@dataclass
class HederaConfig:
    """HEDERA client settings. Environment variables or defaults."""

    client_id: str = ""
    client_secret: str = ""
    token_url: str = TOKEN_URL
    scope: str = TOKEN_SCOPE
    base_url: str = API_BASE_URL
    import_mrid: str = ""
    export_mrid: str = ""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    deadline: float = DEFAULT_DEADLINE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.deadline < 0:
            raise ValueError(f"deadline must not be negative, got {self.deadline}")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> HederaConfig:
        """Load settings from HEDERA_* environment variables."""
        return cls(
            client_id=os.environ.get("HEDERA_CLIENT_ID", ""),
            client_secret=os.environ.get("HEDERA_CLIENT_SECRET", ""),
            token_url=os.environ.get("HEDERA_TOKEN_URL", TOKEN_URL),
            scope=os.environ.get("HEDERA_SCOPE", TOKEN_SCOPE),
            base_url=os.environ.get("HEDERA_BASE_URL", API_BASE_URL),
            import_mrid=os.environ.get("HEDERA_IMPORT_MRID", ""),
            export_mrid=os.environ.get("HEDERA_EXPORT_MRID", ""),
            poll_interval=float(
                os.environ.get("HEDERA_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
            ),
            deadline=float(os.environ.get("HEDERA_DEADLINE", str(DEFAULT_DEADLINE))),
            http_timeout=float(
                os.environ.get("HEDERA_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
            ),
        )

    @property
    def has_credentials(self) -> bool:
        """True only when both client_id and client_secret are set."""
        return bool(self.client_id and self.client_secret)
