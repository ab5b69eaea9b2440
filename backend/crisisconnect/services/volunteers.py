"""Volunteer profiles: application, review and skills."""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.errors import AuthorizationError, ConflictError, NotFoundError
from crisisconnect.models import VolunteerProfile
from crisisconnect.models.enums import ApplicationStatus, Role, VolunteerTaskStatus
from crisisconnect.schemas.volunteer_profile import (
    VolunteerApplicationIn,
    VolunteerProfileUpdateIn,
)
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)


def normalize_skills(skills: Iterable[str]) -> list[str]:
    """Trim tags, drop blanks and duplicates, keep first-seen order."""
    seen: set[str] = set()
    normalized = []
    for skill in skills:
        tag = (skill or "").strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            normalized.append(tag)
    return normalized


class VolunteerProfileService:
    """Profiles are owned by their volunteer; application review is admin-only."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)

    async def apply(self, caller: Caller, data: VolunteerApplicationIn) -> VolunteerProfile:
        caller.require_role(Role.VOLUNTEER, action="apply as volunteers")

        existing = await self.store.find(VolunteerProfile, VolunteerProfile.user_id == caller.id)
        if existing:
            raise ConflictError("A volunteer profile already exists for this user")

        profile = VolunteerProfile(
            user_id=caller.id,
            skills=normalize_skills(data.skills),
            id_proof=data.id_proof,
            experience_certificate=data.experience_certificate,
            bio=data.bio,
            availability=data.availability,
            application_status=ApplicationStatus.PENDING,
            task_status=VolunteerTaskStatus.AVAILABLE,
        )
        self.store.add(profile)
        await self.store.commit()
        logger.info(f"Volunteer profile {profile.id} submitted by {caller.id}")
        return await self.store.reload(VolunteerProfile, profile.id)

    async def get(self, caller: Caller, profile_id: str) -> VolunteerProfile:
        profile = await self.store.get_or_raise(VolunteerProfile, profile_id, "Volunteer")
        self._check_owner(caller, profile)
        return profile

    async def by_user(self, caller: Caller, user_id: str) -> VolunteerProfile:
        if not (caller.is_admin or caller.owns(user_id)):
            raise AuthorizationError()
        profiles = await self.store.find(VolunteerProfile, VolunteerProfile.user_id == user_id)
        if not profiles:
            raise NotFoundError("Volunteer profile", user_id)
        return profiles[0]

    async def list_visible(
        self, caller: Caller, application_status: int | None = None
    ) -> list[VolunteerProfile]:
        """Admins see every profile; volunteers only their own."""
        if caller.role == Role.CIVILIAN:
            raise AuthorizationError()
        criteria = []
        if caller.role == Role.VOLUNTEER:
            criteria.append(VolunteerProfile.user_id == caller.id)
        if application_status is not None:
            criteria.append(VolunteerProfile.application_status == application_status)
        return await self.store.find(
            VolunteerProfile, *criteria, order_by=(VolunteerProfile.created_at.desc(),)
        )

    async def set_application_status(
        self, caller: Caller, profile_id: str, status: ApplicationStatus
    ) -> VolunteerProfile:
        caller.require_role(Role.ADMIN, action="review volunteer applications")
        profile = await self.store.get_or_raise(VolunteerProfile, profile_id, "Volunteer")
        profile.application_status = status
        await self.store.commit()
        logger.info(f"Volunteer {profile_id} application set to {status.name.lower()}")
        return await self.store.reload(VolunteerProfile, profile_id)

    async def update_skills(
        self, caller: Caller, profile_id: str, skills: list[str]
    ) -> VolunteerProfile:
        caller.require_role(Role.ADMIN, action="edit volunteer skills")
        profile = await self.store.get_or_raise(VolunteerProfile, profile_id, "Volunteer")
        profile.skills = normalize_skills(skills)
        await self.store.commit()
        return await self.store.reload(VolunteerProfile, profile_id)

    async def update_profile(
        self, caller: Caller, profile_id: str, patch: VolunteerProfileUpdateIn
    ) -> VolunteerProfile:
        profile = await self.store.get_or_raise(VolunteerProfile, profile_id, "Volunteer")
        self._check_owner(caller, profile)

        if patch.skills is not None:
            profile.skills = normalize_skills(patch.skills)
        if patch.bio is not None:
            profile.bio = patch.bio
        if patch.availability is not None:
            profile.availability = patch.availability
        await self.store.commit()
        return await self.store.reload(VolunteerProfile, profile_id)

    def _check_owner(self, caller: Caller, profile: VolunteerProfile) -> None:
        if not (caller.is_admin or caller.owns(profile.user_id)):
            raise AuthorizationError()
