"""Relief resources (shelters, food points, medical posts)."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.models import Resource
from crisisconnect.models.enums import Role
from crisisconnect.schemas.resource import ResourceIn, ResourceUpdateIn
from crisisconnect.services import fanout
from crisisconnect.services.fanout import EventDispatcher
from crisisconnect.services.state_machine import TransitionResult
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)


class ResourceService:
    def __init__(self, db: AsyncSession, dispatcher: EventDispatcher):
        self.db = db
        self.store = EntityStore(db)
        self.dispatcher = dispatcher

    async def list_active(self, resource_type: str | None = None) -> list[Resource]:
        criteria = [Resource.is_active.is_(True)]
        if resource_type:
            criteria.append(Resource.type == resource_type)
        return await self.store.find(Resource, *criteria, order_by=(Resource.created_at.desc(),))

    async def get(self, resource_id: str) -> Resource:
        return await self.store.get_or_raise(Resource, resource_id)

    async def create(self, caller: Caller, data: ResourceIn) -> TransitionResult[Resource]:
        caller.require_role(Role.ADMIN, action="create resources")
        resource = Resource(
            name=data.name,
            type=data.type,
            description=data.description,
            latitude=data.location.latitude,
            longitude=data.location.longitude,
            address=data.location.address,
            capacity=data.capacity,
            current_occupancy=data.current_occupancy,
            contact_phone=data.contact.phone,
            contact_email=data.contact.email,
            is_active=True,
            created_by_id=caller.id,
        )
        self.store.add(resource)
        await self.store.commit()

        resource = await self.store.reload(Resource, resource.id)
        logger.info(f"Resource {resource.id} ({resource.type}) created by {caller.id}")
        events = [fanout.new_resource(resource)]
        await self.dispatcher.publish(events)
        return TransitionResult(resource, events)

    async def update(
        self, caller: Caller, resource_id: str, patch: ResourceUpdateIn
    ) -> TransitionResult[Resource]:
        caller.require_role(Role.ADMIN, action="update resources")
        resource = await self.store.get_or_raise(Resource, resource_id)
        changes = patch.model_dump(exclude_unset=True, exclude={"location", "contact"})
        for name, value in changes.items():
            if value is not None:
                setattr(resource, name, value)
        if patch.location is not None:
            resource.latitude = patch.location.latitude
            resource.longitude = patch.location.longitude
            resource.address = patch.location.address
        if patch.contact is not None:
            resource.contact_phone = patch.contact.phone
            resource.contact_email = patch.contact.email
        await self.store.commit()

        resource = await self.store.reload(Resource, resource_id)
        events = [fanout.resource_updated(resource)]
        await self.dispatcher.publish(events)
        return TransitionResult(resource, events)

    async def delete(self, caller: Caller, resource_id: str) -> TransitionResult[str]:
        """Soft delete: the resource stays stored but inactive."""
        caller.require_role(Role.ADMIN, action="delete resources")
        resource = await self.store.get_or_raise(Resource, resource_id)
        resource.is_active = False
        await self.store.commit()
        logger.info(f"Resource {resource_id} deactivated by {caller.id}")

        events = [fanout.resource_deleted(resource_id)]
        await self.dispatcher.publish(events)
        return TransitionResult(resource_id, events)
