"""API routes for task assignment."""

from typing import Annotated

from fastapi import APIRouter, Depends

from crisisconnect.dependencies import CurrentCaller, get_task_service
from crisisconnect.schemas.task import TaskAssignIn, TaskDecisionIn, TaskOut, TasksResponse
from crisisconnect.schemas.volunteer_profile import VolunteerProfileOut
from crisisconnect.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

Service = Annotated[TaskService, Depends(get_task_service)]


def _listing(tasks) -> TasksResponse:
    return TasksResponse(tasks=[TaskOut.model_validate(task) for task in tasks], total=len(tasks))


@router.post("", response_model=TaskOut, status_code=201)
async def assign_task(data: TaskAssignIn, caller: CurrentCaller, service: Service) -> TaskOut:
    """
    Assign a task to a volunteer.

    Admins only. A referenced incident must be verified. The volunteer's
    task_status becomes Assigned in the same transaction.
    """
    result = await service.assign(caller, data)
    return TaskOut.model_validate(result.entity)


@router.get("", response_model=TasksResponse)
async def list_tasks(caller: CurrentCaller, service: Service) -> TasksResponse:
    return _listing(await service.list_all(caller))


@router.get("/skills", response_model=list[str])
async def list_skills(caller: CurrentCaller, service: Service) -> list[str]:
    """Distinct skills across accepted volunteers."""
    return await service.skills(caller)


@router.get("/volunteers/{skill}", response_model=list[VolunteerProfileOut])
async def volunteers_by_skill(
    skill: str, caller: CurrentCaller, service: Service
) -> list[VolunteerProfileOut]:
    profiles = await service.volunteers_with_skill(caller, skill)
    return [VolunteerProfileOut.model_validate(profile) for profile in profiles]


@router.get("/volunteer/{volunteer_id}", response_model=TasksResponse)
async def volunteer_tasks(
    volunteer_id: str, caller: CurrentCaller, service: Service
) -> TasksResponse:
    return _listing(await service.for_volunteer(caller, volunteer_id))


@router.get("/volunteer/{volunteer_id}/accepted", response_model=TasksResponse)
async def volunteer_accepted_tasks(
    volunteer_id: str, caller: CurrentCaller, service: Service
) -> TasksResponse:
    return _listing(await service.for_volunteer(caller, volunteer_id, accepted_only=True))


@router.put("/volunteer/{volunteer_id}/{task_id}/status", response_model=TaskOut)
async def respond_to_task(
    volunteer_id: str,
    task_id: str,
    decision: TaskDecisionIn,
    caller: CurrentCaller,
    service: Service,
) -> TaskOut:
    """
    Accept (2) or reject (3) an assigned task.

    Rejecting makes the volunteer available again immediately.
    """
    result = await service.respond(caller, volunteer_id, task_id, decision.status)
    return TaskOut.model_validate(result.entity)


@router.put("/{task_id}/complete", response_model=TaskOut)
async def complete_task(task_id: str, caller: CurrentCaller, service: Service) -> TaskOut:
    """Admin confirms an accepted task is done."""
    result = await service.complete(caller, task_id)
    return TaskOut.model_validate(result.entity)
