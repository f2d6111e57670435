"""Endpoint configuration model."""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

PROXY_ID_ALPHABET = string.ascii_letters + string.digits
PROXY_ID_LENGTH = 10
ENDPOINT_ID_LENGTH = 21


class ApiType(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    COHERE = "cohere"
    GOOGLE_AI = "google-ai"
    AZURE_OPENAI = "azure-openai"
    HUGGINGFACE = "huggingface"
    CUSTOM = "custom"

    @property
    def uses_target_url(self) -> bool:
        """Providers whose upstream URL comes from the stored config."""
        return self in TARGET_URL_TYPES

    @property
    def requires_api_key(self) -> bool:
        return self is not ApiType.CUSTOM


TARGET_URL_TYPES = frozenset({
    ApiType.GOOGLE_AI,
    ApiType.AZURE_OPENAI,
    ApiType.HUGGINGFACE,
    ApiType.CUSTOM,
})


class EndpointStatus(str, Enum):
    NOT_TESTED = "not_tested"
    OPERATIONAL = "operational"
    ERROR = "error"


def generate_proxy_id(length: int = PROXY_ID_LENGTH) -> str:
    """Random URL-safe identifier (62-symbol alphabet, ~59.5 bits at length 10)."""
    return "".join(secrets.choice(PROXY_ID_ALPHABET) for _ in range(length))


def is_valid_proxy_id(value: str) -> bool:
    return len(value) >= PROXY_ID_LENGTH and all(c in PROXY_ID_ALPHABET for c in value)


def generate_endpoint_id() -> str:
    return secrets.token_urlsafe(16)[:ENDPOINT_ID_LENGTH]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    # SQLite drops tzinfo; every timestamp here is UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class EndpointConfig:
    id: str
    api_type: str  # ApiType value; unknown tags are rejected at dispatch
    name: str
    proxy_id: str
    target_url: str = ""
    api_key: str = ""  # upstream credential, never rendered by read paths
    description: str = ""
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    status: str = EndpointStatus.NOT_TESTED.value
    last_tested: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    def origin_allowed(self, origin: str | None) -> bool:
        """Check a browser Origin header against allowed_origins.

        Requests without an Origin header are not browser-initiated and
        are never restricted. An empty list or "*" allows everything.
        """
        if not origin or not self.allowed_origins or "*" in self.allowed_origins:
            return True
        return origin.rstrip("/") in {o.rstrip("/") for o in self.allowed_origins}

    def to_record(self) -> dict:
        """Flatten to a JSON-serializable dict for persistence."""
        return {
            "id": self.id,
            "api_type": self.api_type,
            "name": self.name,
            "proxy_id": self.proxy_id,
            "target_url": self.target_url,
            "api_key": self.api_key,
            "description": self.description,
            "allowed_origins": list(self.allowed_origins),
            "status": self.status,
            "last_tested": self.last_tested.isoformat() if self.last_tested else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict) -> "EndpointConfig":
        return cls(
            id=record["id"],
            api_type=record["api_type"],
            name=record.get("name", ""),
            proxy_id=record["proxy_id"],
            target_url=record.get("target_url", "") or "",
            api_key=record.get("api_key", "") or "",
            description=record.get("description", "") or "",
            allowed_origins=list(record.get("allowed_origins") or []),
            status=record.get("status", EndpointStatus.NOT_TESTED.value),
            last_tested=_parse_datetime(record.get("last_tested")),
            created_at=_parse_datetime(record.get("created_at")) or utcnow(),
        )
