"""
Task / VolunteerProfile consistency pass.

VolunteerProfile.task_status is a projection of the volunteer's most recent
Task. Writes keep both in one transaction; this pass detects and repairs any
profile that drifted anyway (manual edits, partial restores).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.models import Task, VolunteerProfile
from crisisconnect.models.enums import VolunteerTaskStatus
from crisisconnect.services.state_machine import project_task_status

logger = logging.getLogger(__name__)


MOST_RECENT_FIRST = (Task.assigned_at.desc(), Task.created_at.desc())


def expected_task_status(latest: int | None) -> VolunteerTaskStatus:
    """task_status implied by a volunteer's most recent Task status, if any."""
    if latest is None:
        return VolunteerTaskStatus.AVAILABLE
    return project_task_status(latest)


async def latest_task_statuses(db: AsyncSession) -> dict[str, int]:
    """Map volunteer profile id to the status of its most recent Task."""
    result = await db.execute(
        select(Task.volunteer_id, Task.status).order_by(Task.volunteer_id, *MOST_RECENT_FIRST)
    )
    latest: dict[str, int] = {}
    for volunteer_id, status in result.all():
        latest.setdefault(volunteer_id, status)
    return latest


async def latest_task_status(db: AsyncSession, volunteer_id: str) -> int | None:
    """Status of one volunteer's most recent Task as seen by this transaction."""
    result = await db.execute(
        select(Task.status)
        .where(Task.volunteer_id == volunteer_id)
        .order_by(*MOST_RECENT_FIRST)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def reconcile_volunteer_task_status(db: AsyncSession) -> int:
    """
    Recompute every profile's task_status and repair drift.

    Returns:
        Number of profiles repaired.
    """
    latest = await latest_task_statuses(db)
    result = await db.execute(select(VolunteerProfile))

    repaired = 0
    for profile in result.scalars().all():
        expected = expected_task_status(latest.get(profile.id))
        if profile.task_status != expected:
            logger.warning(
                f"Volunteer {profile.id} task_status drifted: "
                f"{profile.task_status} != {int(expected)}, repairing"
            )
            profile.task_status = expected
            repaired += 1

    if repaired:
        await db.commit()
    return repaired
