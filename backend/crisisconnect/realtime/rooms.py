"""
Room join policy.

``volunteers`` is open to volunteers and admins. ``volunteer-<profileId>``
is open to admins and to the volunteer who owns that profile. With
enforcement off any session may join any room.
"""

import logging
from collections.abc import Awaitable, Callable

from crisisconnect.database import async_session_maker
from crisisconnect.models import VolunteerProfile
from crisisconnect.models.enums import Role
from crisisconnect.services.fanout import VOLUNTEERS_ROOM

logger = logging.getLogger(__name__)

VOLUNTEER_ROOM_PREFIX = "volunteer-"

ProfileOwnerLookup = Callable[[str], Awaitable[str | None]]


async def lookup_profile_owner(profile_id: str) -> str | None:
    """User id owning a volunteer profile, or None if there is no such profile."""
    async with async_session_maker() as session:
        profile = await session.get(VolunteerProfile, profile_id)
        return profile.user_id if profile else None


class RoomPolicy:
    def __init__(self, enforce: bool = True, profile_owner: ProfileOwnerLookup | None = None):
        self.enforce = enforce
        self.profile_owner = profile_owner or lookup_profile_owner

    async def may_join(self, user_id: str | None, role: Role | None, room: str) -> bool:
        if not self.enforce:
            return True
        if role == Role.ADMIN:
            return room == VOLUNTEERS_ROOM or room.startswith(VOLUNTEER_ROOM_PREFIX)

        if room == VOLUNTEERS_ROOM:
            return role == Role.VOLUNTEER

        if room.startswith(VOLUNTEER_ROOM_PREFIX) and role == Role.VOLUNTEER and user_id:
            profile_id = room[len(VOLUNTEER_ROOM_PREFIX):]
            owner = await self.profile_owner(profile_id)
            return owner is not None and owner == user_id

        return False
