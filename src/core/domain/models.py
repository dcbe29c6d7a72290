"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- The backend payloads are loosely shaped; models pin the few fields the
  client relies on and keep the rest.

Note:
- These models describe *what* the data is, not *how* it is fetched.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class EndpointConfig(BaseModel):
    """Resolved backend location. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ...,
        min_length=1,
        description="Base URL every endpoint path is appended to (no trailing slash).",
    )


class UserSnapshot(BaseModel):
    """Last-known user profile cached next to the token.

    Only the fields used for role checks are typed; everything else the
    backend sends is preserved as-is.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(
        default=None,
        alias="_id",
        description="Backend identifier.",
    )
    name: str | None = Field(
        default=None,
        description="Display name.",
    )
    email: str | None = Field(
        default=None,
        description="Login e-mail.",
    )
    user_type: str | None = Field(
        default=None,
        alias="userType",
        description="Role: jobseeker, company, consultancy, admin, superadmin...",
    )


class RequestAttempt(BaseModel):
    """One network round-trip belonging to a logical call."""

    endpoint: str = Field(..., description="Endpoint path as requested by the caller.")
    method: str = Field(..., description="HTTP method.")
    request_id: str = Field(..., min_length=1, description="Shared by every attempt of the call.")
    attempt_number: int = Field(..., ge=1, description="1-indexed attempt counter.")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Attempt start (UTC).",
    )

    def elapsed_ms(self) -> int:
        return int((datetime.now(timezone.utc) - self.started_at).total_seconds() * 1000)


def snapshot_from_payload(payload: Any) -> UserSnapshot | None:
    if not isinstance(payload, dict):
        return None
    return UserSnapshot.model_validate(payload)
