"""Tests for the task status reconciliation pass."""

from datetime import UTC, datetime, timedelta

import pytest

from crisisconnect.models import Task, VolunteerProfile
from crisisconnect.models.enums import TaskStatus, VolunteerTaskStatus
from crisisconnect.services.consistency import (
    latest_task_statuses,
    reconcile_volunteer_task_status,
)


def _task(profile: VolunteerProfile, admin_id: str, status: TaskStatus, age_minutes: int) -> Task:
    return Task(
        task_type="Supply run",
        description="Water to Block C",
        volunteer_id=profile.id,
        status=status,
        assigned_by_id=admin_id,
        assigned_at=datetime.now(UTC) - timedelta(minutes=age_minutes),
    )


class TestReconcile:
    """Tests for reconcile_volunteer_task_status."""

    @pytest.mark.asyncio
    async def test_latest_task_wins(self, db_session, users, profiles):
        profile = profiles["volunteer"]
        db_session.add_all(
            [
                _task(profile, users["admin"].id, TaskStatus.COMPLETED, age_minutes=60),
                _task(profile, users["admin"].id, TaskStatus.ACCEPTED, age_minutes=5),
            ]
        )
        await db_session.commit()

        latest = await latest_task_statuses(db_session)

        assert latest == {profile.id: TaskStatus.ACCEPTED}

    @pytest.mark.asyncio
    async def test_repairs_drift(self, db_session, users, profiles, caplog):
        profile = profiles["volunteer"]
        db_session.add(_task(profile, users["admin"].id, TaskStatus.ACCEPTED, age_minutes=1))
        profile.task_status = VolunteerTaskStatus.AVAILABLE
        await db_session.commit()

        repaired = await reconcile_volunteer_task_status(db_session)

        assert repaired == 1
        refreshed = await db_session.get(VolunteerProfile, profile.id, populate_existing=True)
        assert refreshed.task_status == VolunteerTaskStatus.ACCEPTED
        assert "drifted" in caplog.text

    @pytest.mark.asyncio
    async def test_profile_without_tasks_is_available(self, db_session, profiles):
        profile = profiles["volunteer2"]
        profile.task_status = VolunteerTaskStatus.ASSIGNED
        await db_session.commit()

        assert await reconcile_volunteer_task_status(db_session) == 1
        assert profile.task_status == VolunteerTaskStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_consistent_profiles_untouched(self, db_session, profiles):
        assert await reconcile_volunteer_task_status(db_session) == 0

    @pytest.mark.asyncio
    async def test_rejection_projects_to_available(self, db_session, users, profiles):
        profile = profiles["volunteer"]
        db_session.add(_task(profile, users["admin"].id, TaskStatus.REJECTED, age_minutes=1))
        await db_session.commit()

        assert await reconcile_volunteer_task_status(db_session) == 0
