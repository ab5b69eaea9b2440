"""API routes for relief resources."""

from typing import Annotated

from fastapi import APIRouter, Depends

from crisisconnect.dependencies import CurrentCaller, get_resource_service
from crisisconnect.models.enums import ResourceType
from crisisconnect.schemas.common import DeletedOut
from crisisconnect.schemas.resource import (
    ResourceIn,
    ResourceOut,
    ResourcesResponse,
    ResourceUpdateIn,
)
from crisisconnect.services.resources import ResourceService

router = APIRouter(prefix="/resources", tags=["resources"])

Service = Annotated[ResourceService, Depends(get_resource_service)]


@router.get("", response_model=ResourcesResponse)
async def list_resources(
    caller: CurrentCaller, service: Service, type: ResourceType | None = None
) -> ResourcesResponse:
    resources = await service.list_active(type)
    return ResourcesResponse(
        resources=[ResourceOut.model_validate(resource) for resource in resources],
        total=len(resources),
    )


@router.get("/{resource_id}", response_model=ResourceOut)
async def get_resource(resource_id: str, caller: CurrentCaller, service: Service) -> ResourceOut:
    return ResourceOut.model_validate(await service.get(resource_id))


@router.post("", response_model=ResourceOut, status_code=201)
async def create_resource(
    data: ResourceIn, caller: CurrentCaller, service: Service
) -> ResourceOut:
    result = await service.create(caller, data)
    return ResourceOut.model_validate(result.entity)


@router.put("/{resource_id}", response_model=ResourceOut)
async def update_resource(
    resource_id: str, patch: ResourceUpdateIn, caller: CurrentCaller, service: Service
) -> ResourceOut:
    result = await service.update(caller, resource_id, patch)
    return ResourceOut.model_validate(result.entity)


@router.delete("/{resource_id}", response_model=DeletedOut)
async def delete_resource(
    resource_id: str, caller: CurrentCaller, service: Service
) -> DeletedOut:
    await service.delete(caller, resource_id)
    return DeletedOut(id=resource_id, message="Resource deactivated")
