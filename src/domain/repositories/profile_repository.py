"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get_by_service_id(self, service_id: int) -> Profile | None:
        """Get a profile by its Telegram user id."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        ...

    async def update_auth_user(self, profile_id: UUID, auth_user_id: UUID) -> None:
        """Point a profile at a newly minted auth identity."""
        ...

    async def update_timezone(self, profile_id: UUID, timezone: str) -> Profile | None:
        """Set the profile timezone. Returns None if the profile is gone."""
        ...
