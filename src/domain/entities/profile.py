"""Profile domain entity and onboarding state."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidTimezoneError

_UTC_OFFSET_RE = re.compile(r"^UTC(?:([+-])(\d{1,2})(?::(00|30|45))?)?$")


class OnboardingState(StrEnum):
    """Derived from the profile on every request; never stored."""

    AWAITING_TIMEZONE = "awaiting_timezone"
    READY = "ready"


@dataclass
class Profile:
    """Durable record for one Telegram user, keyed by service_id."""

    service_id: int
    auth_user_id: UUID
    id: UUID = field(default_factory=uuid4)
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    timezone: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


def onboarding_state(profile: Profile) -> OnboardingState:
    """A profile without a timezone is still onboarding."""
    if profile.timezone:
        return OnboardingState.READY
    return OnboardingState.AWAITING_TIMEZONE


def normalize_utc_offset(value: str) -> str:
    """Normalise a UTC offset such as ``utc +5:30`` to ``UTC+5:30``.

    Accepts ``UTC``, ``UTC±H``, ``UTC±HH`` and ``UTC±H:MM`` with minutes
    00/30/45 and hours up to 14. Leading zeros on the hour and a ``:00``
    suffix are dropped, so ``UTC-05:00`` becomes ``UTC-5``.

    Raises:
        InvalidTimezoneError: If the value is not a UTC offset
    """
    compact = re.sub(r"\s+", "", value).upper()
    if compact.startswith("GMT"):
        compact = "UTC" + compact[3:]

    match = _UTC_OFFSET_RE.match(compact)
    if not match:
        raise InvalidTimezoneError(value)

    sign, hours, minutes = match.groups()
    if sign is None:
        return "UTC"

    hour_value = int(hours)
    if hour_value > 14:
        raise InvalidTimezoneError(value)
    if hour_value == 0 and minutes in (None, "00"):
        return "UTC+0"

    offset = f"UTC{sign}{hour_value}"
    if minutes and minutes != "00":
        offset += f":{minutes}"
    return offset
