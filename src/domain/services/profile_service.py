"""Profile resolution and timezone commits (privileged store access)."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AppException,
    ProfileProvisioningError,
    TimezoneUpdateError,
)
from domain.entities.inbound import ExternalUser
from domain.entities.profile import Profile, normalize_utc_offset
from domain.repositories.unit_of_work import IPrivilegedUnitOfWork

logger = structlog.get_logger()


class ProfileService:
    """Service layer for Profile business logic.

    Runs on the privileged unit of work: a profile must be found or created
    before any scoped credential is tied to it.
    """

    def __init__(self, uow_factory: Callable[[], IPrivilegedUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def resolve(self, user: ExternalUser, auth_user_id: UUID) -> Profile:
        """Find or create the profile for a Telegram user.

        An existing profile is re-pointed at ``auth_user_id`` when it still
        references the identity minted for an earlier request.

        Raises:
            ProfileProvisioningError: If any lookup or write fails
        """
        try:
            async with self._uow_factory() as uow:
                profile = await uow.profiles.get_by_service_id(user.id)

                if profile is None:
                    profile = await uow.profiles.create(
                        Profile(
                            service_id=user.id,
                            auth_user_id=auth_user_id,
                            username=user.username,
                            first_name=user.first_name,
                            last_name=user.last_name,
                            timezone=None,
                        )
                    )
                    await uow.commit()
                    logger.info(
                        "profile_created",
                        profile_id=str(profile.id),
                        service_id=user.id,
                    )
                    return profile

                if profile.auth_user_id != auth_user_id:
                    await uow.profiles.update_auth_user(profile.id, auth_user_id)
                    await uow.commit()
                    logger.debug(
                        "profile_auth_user_relinked",
                        profile_id=str(profile.id),
                    )
                    profile.auth_user_id = auth_user_id

                return profile
        except Exception as e:
            logger.error(
                "profile_resolution_failed",
                service_id=user.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ProfileProvisioningError() from e

    async def set_timezone(self, profile_id: UUID, timezone: str) -> Profile:
        """Normalise and store a UTC offset on the profile.

        Raises:
            InvalidTimezoneError: If ``timezone`` is not a UTC offset
            TimezoneUpdateError: If the profile could not be updated
        """
        normalized = normalize_utc_offset(timezone)

        try:
            async with self._uow_factory() as uow:
                profile = await uow.profiles.update_timezone(profile_id, normalized)
                if profile is None:
                    raise TimezoneUpdateError(str(profile_id))
                await uow.commit()
        except AppException:
            raise
        except Exception as e:
            logger.error(
                "timezone_update_failed",
                profile_id=str(profile_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TimezoneUpdateError(str(profile_id)) from e

        logger.info("timezone_set", profile_id=str(profile_id), timezone=normalized)
        return profile
