"""
Back-Office Backend: Business Profile Service
===============================================

The caller's own company details (at most one row per account). Profiles
are never visible across accounts, admins included.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import NotFoundError, ValidationError
from backoffice.models.user import UserProfile
from backoffice.schemas.profile import ProfileFields, ProfileResponse
from backoffice.services.access import Principal

logger = logging.getLogger(__name__)


class ProfileService:

    async def _load(self, db: AsyncSession, principal: Principal) -> Optional[UserProfile]:
        result = await db.execute(
            select(UserProfile).where(UserProfile.user_id == principal.user_id)
        )
        return result.scalar_one_or_none()

    async def get_profile(
        self, db: AsyncSession, principal: Principal
    ) -> Optional[ProfileResponse]:
        """The caller's profile, or None if the settings page was never saved."""
        profile = await self._load(db, principal)
        if profile is None:
            return None
        return ProfileResponse.model_validate(profile)

    async def create_profile(
        self, db: AsyncSession, principal: Principal, data: ProfileFields
    ) -> ProfileResponse:
        if await self._load(db, principal) is not None:
            raise ValidationError(message="A profile already exists for this account")
        profile = UserProfile(user_id=principal.user_id, **data.model_dump())
        db.add(profile)
        await db.flush()
        await db.refresh(profile)
        logger.info("Profile created for %s", principal.user_id)
        return ProfileResponse.model_validate(profile)

    async def update_profile(
        self, db: AsyncSession, principal: Principal, data: ProfileFields
    ) -> ProfileResponse:
        profile = await self._load(db, principal)
        if profile is None:
            raise NotFoundError(resource="profile")
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, key, value)
        await db.flush()
        await db.refresh(profile)
        return ProfileResponse.model_validate(profile)


profile_service = ProfileService()
