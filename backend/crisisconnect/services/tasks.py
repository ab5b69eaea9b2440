"""Task assignment and response, with the volunteer task_status projection."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.database import utcnow
from crisisconnect.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from crisisconnect.models import Incident, Task, VolunteerProfile
from crisisconnect.models.enums import ApplicationStatus, IncidentStatus, Role, TaskStatus
from crisisconnect.schemas.task import TaskAssignIn
from crisisconnect.services import fanout
from crisisconnect.services.consistency import expected_task_status, latest_task_status
from crisisconnect.services.fanout import EventDispatcher
from crisisconnect.services.state_machine import (
    TASK_DECISIONS,
    TASK_TRANSITIONS,
    TransitionResult,
    require_transition,
    status_label,
)
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)


class TaskService:
    """
    Service for admin-assigned tasks.

    A Task status change and the matching VolunteerProfile.task_status write
    share one database transaction, so readers never see one without the
    other. services.consistency repairs any drift that slips through.
    """

    def __init__(self, db: AsyncSession, dispatcher: EventDispatcher):
        self.db = db
        self.store = EntityStore(db)
        self.dispatcher = dispatcher

    async def assign(self, caller: Caller, data: TaskAssignIn) -> TransitionResult[Task]:
        caller.require_role(Role.ADMIN, action="assign tasks")

        if data.incident_id:
            incident = await self.store.get_or_raise(Incident, data.incident_id)
            if incident.status != IncidentStatus.VERIFIED:
                raise InvalidStateError("Tasks can only be assigned for verified incidents")

        profile = await self.store.get_or_raise(VolunteerProfile, data.volunteer_id, "Volunteer")

        task = Task(
            task_type=data.task_type,
            description=data.description,
            incident_id=data.incident_id,
            volunteer_id=profile.id,
            status=TaskStatus.ASSIGNED,
            assigned_by_id=caller.id,
            assigned_at=utcnow(),
            extra_details=dict(data.extra_details),
            notes=[],
        )
        self.store.add(task)
        await self._project(profile)
        await self.store.commit()

        task = await self.store.reload(Task, task.id)
        logger.info(f"Task {task.id} assigned to volunteer {profile.id} by {caller.id}")

        events = fanout.task_assigned(task)
        await self.dispatcher.publish(events)
        return TransitionResult(task, events)

    async def respond(
        self, caller: Caller, volunteer_id: str, task_id: str, decision: int
    ) -> TransitionResult[Task]:
        """Volunteer accepts (2) or rejects (3) an assigned task."""
        if decision not in TASK_DECISIONS:
            raise ValidationError(
                [{"field": "status", "message": "Status must be 2 (accept) or 3 (reject)"}]
            )
        caller.require_role(Role.VOLUNTEER, Role.ADMIN, action="respond to tasks")

        profile = await self.store.get_or_raise(VolunteerProfile, volunteer_id, "Volunteer")
        if caller.role == Role.VOLUNTEER and not caller.owns(profile.user_id):
            raise AuthorizationError()

        task = await self.store.get_or_raise(Task, task_id)
        if task.volunteer_id != volunteer_id:
            raise ValidationError(
                [{"field": "volunteer_id", "message": "Task is not assigned to this volunteer"}]
            )

        target = TaskStatus(decision)
        values: dict[str, Any] = {"status": target}
        if target == TaskStatus.ACCEPTED:
            values["accepted_at"] = utcnow()

        await self._transition(task_id, TaskStatus.ASSIGNED, target, values)
        await self._project(profile)
        await self.store.commit()

        task = await self.store.reload(Task, task_id)
        logger.info(f"Task {task_id} {status_label(target)} by volunteer {volunteer_id}")

        events = [fanout.task_status_updated(task)]
        await self.dispatcher.publish(events)
        return TransitionResult(task, events)

    async def complete(self, caller: Caller, task_id: str) -> TransitionResult[Task]:
        caller.require_role(Role.ADMIN, action="complete tasks")

        task = await self.store.get_or_raise(Task, task_id)
        profile = await self.store.get_or_raise(VolunteerProfile, task.volunteer_id, "Volunteer")
        await self._transition(
            task_id,
            TaskStatus.ACCEPTED,
            TaskStatus.COMPLETED,
            {"status": TaskStatus.COMPLETED, "completed_at": utcnow()},
        )
        await self._project(profile)
        await self.store.commit()

        task = await self.store.reload(Task, task_id)
        logger.info(f"Task {task_id} completed, confirmed by {caller.id}")

        events = [fanout.task_status_updated(task)]
        await self.dispatcher.publish(events)
        return TransitionResult(task, events)

    async def _transition(
        self, task_id: str, source: TaskStatus, target: TaskStatus, values: dict[str, Any]
    ) -> None:
        won = await self.store.compare_and_set(Task, task_id, [Task.status == source], values)
        if won:
            return
        current = await self.store.get(Task, task_id)
        if current is None:
            raise NotFoundError("Task", task_id)
        status = TaskStatus(current.status)
        if status == source:
            raise ConflictError("Task was updated concurrently, refresh and retry")
        require_transition(TASK_TRANSITIONS, status, target, "Task")
        raise InvalidStateError(f"Task is already {status_label(status)}")

    async def _project(self, profile: VolunteerProfile) -> None:
        """
        Mirror the volunteer's most recent Task onto the profile.

        Answering an older task leaves the projection on the newer one.
        """
        latest = await latest_task_status(self.db, profile.id)
        profile.task_status = expected_task_status(latest)

    # Reads

    async def list_all(self, caller: Caller) -> list[Task]:
        caller.require_role(Role.ADMIN, action="list all tasks")
        return await self.store.find(Task, order_by=(Task.created_at.desc(),))

    async def for_volunteer(
        self, caller: Caller, volunteer_id: str, accepted_only: bool = False
    ) -> list[Task]:
        """Tasks for one volunteer; volunteers may only list their own."""
        profile = await self.store.get_or_raise(VolunteerProfile, volunteer_id, "Volunteer")
        if caller.role == Role.CIVILIAN:
            raise AuthorizationError()
        if caller.role == Role.VOLUNTEER and not caller.owns(profile.user_id):
            raise AuthorizationError()

        criteria = [Task.volunteer_id == volunteer_id]
        if accepted_only:
            criteria.append(Task.status == TaskStatus.ACCEPTED)
        return await self.store.find(Task, *criteria, order_by=(Task.created_at.desc(),))

    async def skills(self, caller: Caller) -> list[str]:
        """Distinct skills across accepted volunteers, sorted."""
        caller.require_role(Role.ADMIN, action="list volunteer skills")
        result = await self.db.execute(
            select(VolunteerProfile.skills).where(
                VolunteerProfile.application_status == ApplicationStatus.ACCEPTED
            )
        )
        found: set[str] = set()
        for skills in result.scalars().all():
            found.update(skill.strip() for skill in skills or [] if skill and skill.strip())
        return sorted(found)

    async def volunteers_with_skill(self, caller: Caller, skill: str) -> list[VolunteerProfile]:
        """Every profile carrying the skill, whatever its status."""
        caller.require_role(Role.ADMIN, action="search volunteers by skill")
        wanted = skill.strip().lower()
        profiles = await self.store.find(VolunteerProfile, order_by=(VolunteerProfile.created_at,))
        return [
            profile
            for profile in profiles
            if any(s.strip().lower() == wanted for s in profile.skills or [])
        ]
