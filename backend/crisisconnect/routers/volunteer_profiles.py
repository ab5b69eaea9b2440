"""API routes for volunteer profiles."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from crisisconnect.dependencies import CurrentCaller, get_volunteer_profile_service
from crisisconnect.schemas.volunteer_profile import (
    ApplicationStatusIn,
    SkillsIn,
    VolunteerApplicationIn,
    VolunteerProfileOut,
    VolunteerProfilesResponse,
    VolunteerProfileUpdateIn,
)
from crisisconnect.services.volunteers import VolunteerProfileService

router = APIRouter(prefix="/volunteer-profiles", tags=["volunteer-profiles"])

Service = Annotated[VolunteerProfileService, Depends(get_volunteer_profile_service)]


@router.post("", response_model=VolunteerProfileOut, status_code=201)
async def apply(
    data: VolunteerApplicationIn, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    """Submit the caller's volunteer application."""
    return VolunteerProfileOut.model_validate(await service.apply(caller, data))


@router.get("", response_model=VolunteerProfilesResponse)
async def list_profiles(
    caller: CurrentCaller,
    service: Service,
    application_status: int | None = Query(None, ge=0, le=2),
) -> VolunteerProfilesResponse:
    profiles = await service.list_visible(caller, application_status)
    return VolunteerProfilesResponse(
        profiles=[VolunteerProfileOut.model_validate(profile) for profile in profiles],
        total=len(profiles),
    )


@router.get("/by-user/{user_id}", response_model=VolunteerProfileOut)
async def profile_by_user(
    user_id: str, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    return VolunteerProfileOut.model_validate(await service.by_user(caller, user_id))


@router.get("/{profile_id}", response_model=VolunteerProfileOut)
async def get_profile(
    profile_id: str, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    return VolunteerProfileOut.model_validate(await service.get(caller, profile_id))


@router.put("/{profile_id}", response_model=VolunteerProfileOut)
async def update_profile(
    profile_id: str, patch: VolunteerProfileUpdateIn, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    return VolunteerProfileOut.model_validate(
        await service.update_profile(caller, profile_id, patch)
    )


@router.put("/{profile_id}/application-status", response_model=VolunteerProfileOut)
async def set_application_status(
    profile_id: str, data: ApplicationStatusIn, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    """Accept or reject a volunteer application. Admins only."""
    profile = await service.set_application_status(caller, profile_id, data.application_status)
    return VolunteerProfileOut.model_validate(profile)


@router.put("/{profile_id}/skills", response_model=VolunteerProfileOut)
async def update_skills(
    profile_id: str, data: SkillsIn, caller: CurrentCaller, service: Service
) -> VolunteerProfileOut:
    profile = await service.update_skills(caller, profile_id, data.skills)
    return VolunteerProfileOut.model_validate(profile)
