"""SQLAlchemy implementation of Profile repository."""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_service_id(self, service_id: int) -> Profile | None:
        """Get a profile by its Telegram user id."""
        stmt = select(ProfileModel).where(ProfileModel.service_id == service_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_auth_user(self, profile_id: UUID, auth_user_id: UUID) -> None:
        """Point a profile at a newly minted auth identity."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(auth_user_id=auth_user_id)
        )
        await self._session.execute(stmt)

    async def update_timezone(self, profile_id: UUID, timezone: str) -> Profile | None:
        """Set the profile timezone."""
        stmt = select(ProfileModel).where(ProfileModel.id == profile_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return None

        model.timezone = timezone
        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            service_id=model.service_id,
            auth_user_id=model.auth_user_id,
            username=model.username,
            first_name=model.first_name,
            last_name=model.last_name,
            timezone=model.timezone,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            service_id=entity.service_id,
            auth_user_id=entity.auth_user_id,
            username=entity.username,
            first_name=entity.first_name,
            last_name=entity.last_name,
            timezone=entity.timezone,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
