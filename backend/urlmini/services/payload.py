"""Token payload: the claim set sealed inside every access and refresh token."""

import uuid
from datetime import UTC, datetime, timedelta
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict


class IdentityGenerationError(Exception):
    """Raised when the OS entropy source cannot produce a token id.

    Treated as fatal; callers surface it as an internal error and never retry.
    """


class Payload(BaseModel):
    """Immutable claim set.

    `id` is a random 128-bit identifier. For refresh tokens it is also the
    primary key of the backing session row.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    subject_id: int
    issued_at: AwareDatetime
    expires_at: AwareDatetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at


def new_payload(subject_id: int, duration: timedelta) -> Payload:
    """Build a fresh payload for `subject_id` valid for `duration`.

    The sign of `duration` is not checked: zero or negative durations give a
    payload that is already expired.
    """
    try:
        token_id = uuid.uuid4()
    except OSError as e:
        raise IdentityGenerationError("Could not generate token id") from e

    now = datetime.now(UTC)
    return Payload(
        id=token_id,
        subject_id=subject_id,
        issued_at=now,
        expires_at=now + duration,
    )
