"""HelpRequest transitions and reads."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.database import utcnow
from crisisconnect.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from crisisconnect.models import HelpRequest
from crisisconnect.models.enums import HelpRequestStatus, Role
from crisisconnect.schemas.common import NoteIn
from crisisconnect.schemas.help_request import HelpRequestCreateIn, HelpRequestUpdateIn
from crisisconnect.services import fanout
from crisisconnect.services.fanout import EventDispatcher
from crisisconnect.services.notifications import NotificationChannel
from crisisconnect.services.queries import (
    RequestFilters,
    available_only,
    filter_help_requests,
    rank_by_distance,
    scope_help_requests,
)
from crisisconnect.services.state_machine import (
    HELP_REQUEST_TRANSITIONS,
    TransitionResult,
    require_transition,
)
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)

# Plain fields a patch may overwrite directly
PATCHABLE_FIELDS = ("title", "description", "category", "priority")


class HelpRequestService:
    """
    Service for civilian help requests.

    Claims are a single conditional update on (pending, unclaimed) so that
    exactly one of any number of racing volunteers wins.
    """

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: EventDispatcher,
        notifications: NotificationChannel | None = None,
    ):
        self.db = db
        self.store = EntityStore(db)
        self.dispatcher = dispatcher
        self.notifications = notifications

    async def create(
        self, caller: Caller, data: HelpRequestCreateIn
    ) -> TransitionResult[HelpRequest]:
        caller.require_role(Role.CIVILIAN, action="create help requests")

        request = HelpRequest(
            title=data.title,
            description=data.description,
            civilian_id=caller.id,
            category=data.category,
            priority=data.priority,
            status=HelpRequestStatus.PENDING,
            claimed_by_id=None,
            is_verified=False,
            notes=[],
        )
        request.place(data.location.latitude, data.location.longitude, data.location.address)
        self.store.add(request)
        await self.store.commit()

        request = await self.store.reload(HelpRequest, request.id)
        logger.info(f"Help request {request.id} created by {caller.id} ({request.category})")

        events = [fanout.new_request(request)]
        await self.dispatcher.publish(events)
        return TransitionResult(request, events)

    async def claim(self, caller: Caller, request_id: str) -> TransitionResult[HelpRequest]:
        caller.require_role(Role.VOLUNTEER, action="claim help requests")

        won = await self.store.compare_and_set(
            HelpRequest,
            request_id,
            [
                HelpRequest.status == HelpRequestStatus.PENDING,
                HelpRequest.claimed_by_id.is_(None),
            ],
            {"status": HelpRequestStatus.CLAIMED, "claimed_by_id": caller.id},
        )
        if not won:
            current = await self.store.get(HelpRequest, request_id)
            if current is None:
                raise NotFoundError("Help request", request_id)
            if current.status == HelpRequestStatus.CANCELLED:
                raise InvalidStateError("Help request was cancelled and can no longer be claimed")
            logger.info(f"Claim on {request_id} by {caller.id} lost to {current.claimed_by_id}")
            raise ConflictError("Help request has already been claimed")
        await self.store.commit()

        request = await self.store.reload(HelpRequest, request_id)
        logger.info(f"Help request {request_id} claimed by {caller.id}")

        events = [fanout.request_claimed(request)]
        await self.dispatcher.publish(events)

        if self.notifications is not None and request.civilian and request.claimed_by:
            self.notifications.request_claimed(request.civilian, request.claimed_by, request)
        return TransitionResult(request, events)

    async def update(
        self, caller: Caller, request_id: str, patch: HelpRequestUpdateIn
    ) -> TransitionResult[HelpRequest]:
        """
        Generic field patch.

        Civilians may patch their own requests. Volunteers may only move the
        status of requests they claimed. Admins may patch anything and set
        the verification flag. Claiming goes through claim() only.
        """
        request = await self.store.get_or_raise(HelpRequest, request_id, "Help request")
        changes = patch.model_dump(exclude_unset=True)

        if caller.role == Role.CIVILIAN:
            if not caller.owns(request.civilian_id):
                raise AuthorizationError()
        elif caller.role == Role.VOLUNTEER:
            if not caller.owns(request.claimed_by_id):
                raise AuthorizationError()
            if set(changes) - {"status"}:
                raise AuthorizationError("Volunteers can only change the status of a request")
        if "is_verified" in changes and not caller.is_admin:
            raise AuthorizationError("Only admins can verify help requests")

        values: dict[str, Any] = {}
        for name in PATCHABLE_FIELDS:
            if changes.get(name) is not None:
                values[name] = changes[name]

        if patch.location is not None:
            values.update(
                latitude=patch.location.latitude,
                longitude=patch.location.longitude,
                address=patch.location.address,
                coordinates=[patch.location.longitude, patch.location.latitude],
            )

        if patch.is_verified is not None:
            values["is_verified"] = patch.is_verified
            values["verified_by_id"] = caller.id if patch.is_verified else None

        target = patch.status
        if target is not None and target != request.status:
            if target == HelpRequestStatus.CLAIMED:
                raise InvalidStateError("Use claim to take ownership of a help request")
            require_transition(HELP_REQUEST_TRANSITIONS, request.status, target, "Help request")
            values["status"] = target
            if target == HelpRequestStatus.CANCELLED:
                values["claimed_by_id"] = None

        if not values:
            return TransitionResult(request, [])

        won = await self.store.compare_and_set(
            HelpRequest, request_id, [HelpRequest.status == request.status], values
        )
        if not won:
            if await self.store.get(HelpRequest, request_id) is None:
                raise NotFoundError("Help request", request_id)
            raise ConflictError("Help request was changed by someone else, refresh and retry")
        await self.store.commit()

        request = await self.store.reload(HelpRequest, request_id)
        logger.info(f"Help request {request_id} updated by {caller.id}: {sorted(values)}")

        events = [fanout.request_updated(request)]
        await self.dispatcher.publish(events)
        return TransitionResult(request, events)

    async def delete(self, caller: Caller, request_id: str) -> TransitionResult[str]:
        request = await self.store.get_or_raise(HelpRequest, request_id, "Help request")
        if not (caller.is_admin or caller.owns(request.civilian_id)):
            raise AuthorizationError()

        if not await self.store.delete(HelpRequest, request_id):
            raise NotFoundError("Help request", request_id)
        await self.store.commit()
        logger.info(f"Help request {request_id} deleted by {caller.id}")

        events = [fanout.request_deleted(request_id)]
        await self.dispatcher.publish(events)
        return TransitionResult(request_id, events)

    async def add_note(
        self, caller: Caller, request_id: str, note: NoteIn
    ) -> TransitionResult[HelpRequest]:
        """Append a note, failing if the request changed since the caller loaded it."""
        request = await self.store.get_or_raise(HelpRequest, request_id, "Help request")
        if not (
            caller.is_admin
            or caller.owns(request.civilian_id)
            or caller.owns(request.claimed_by_id)
        ):
            raise AuthorizationError()

        expected = note.expected_updated_at or request.updated_at
        notes = list(request.notes or [])
        notes.append(
            {"text": note.text, "author_id": caller.id, "added_at": utcnow().isoformat()}
        )

        won = await self.store.compare_and_set(
            HelpRequest, request_id, [HelpRequest.updated_at == expected], {"notes": notes}
        )
        if not won:
            raise ConflictError("Help request was changed by someone else, refresh and retry")
        await self.store.commit()

        request = await self.store.reload(HelpRequest, request_id)
        events = [fanout.request_updated(request)]
        await self.dispatcher.publish(events)
        return TransitionResult(request, events)

    # Reads

    async def get(self, caller: Caller, request_id: str) -> HelpRequest:
        request = await self.store.get_or_raise(HelpRequest, request_id, "Help request")
        if caller.role == Role.CIVILIAN and not caller.owns(request.civilian_id):
            raise AuthorizationError()
        return request

    async def list_visible(
        self, caller: Caller, filters: RequestFilters | None = None, limit: int = 500
    ) -> list[HelpRequest]:
        query = scope_help_requests(select(HelpRequest), caller)
        query = filter_help_requests(query, filters or RequestFilters())
        query = query.order_by(HelpRequest.created_at.desc()).limit(limit)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def available(self, caller: Caller) -> list[HelpRequest]:
        caller.require_role(Role.VOLUNTEER, Role.ADMIN, action="browse available requests")
        query = available_only(select(HelpRequest)).order_by(HelpRequest.created_at.desc())
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def nearby(
        self,
        caller: Caller,
        latitude: float,
        longitude: float,
        radius_km: float | None = None,
    ) -> list[tuple[HelpRequest, float]]:
        """Available requests ranked by distance from the given point."""
        caller.require_role(Role.VOLUNTEER, Role.ADMIN, action="search nearby requests")
        candidates = await self.available(caller)
        return rank_by_distance(candidates, latitude, longitude, radius_km)

    async def map_data(self) -> list[HelpRequest]:
        return await self.store.find(HelpRequest, order_by=(HelpRequest.created_at.desc(),))

    async def claims_for(self, caller: Caller, user_id: str) -> list[HelpRequest]:
        """Requests claimed by a volunteer. Volunteers may only see their own."""
        if not (caller.is_admin or (caller.role == Role.VOLUNTEER and caller.owns(user_id))):
            raise AuthorizationError()
        return await self.store.find(
            HelpRequest,
            HelpRequest.claimed_by_id == user_id,
            order_by=(HelpRequest.created_at.desc(),),
        )

    async def stats_for(self, caller: Caller) -> dict[str, int]:
        caller.require_role(Role.VOLUNTEER, action="view claim statistics")
        result = await self.db.execute(
            select(HelpRequest.status, func.count())
            .where(HelpRequest.claimed_by_id == caller.id)
            .group_by(HelpRequest.status)
        )
        counts = {status: count for status, count in result.all()}
        active = counts.get(HelpRequestStatus.CLAIMED, 0) + counts.get(
            HelpRequestStatus.IN_PROGRESS, 0
        )
        return {
            "total_claims": sum(counts.values()),
            "active_claims": active,
            "resolved_claims": counts.get(HelpRequestStatus.RESOLVED, 0),
        }
