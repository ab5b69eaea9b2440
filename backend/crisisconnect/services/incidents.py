"""Incident transitions: report, verify, mark ongoing, mark completed."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.database import utcnow
from crisisconnect.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from crisisconnect.models import Incident, User, VolunteerProfile
from crisisconnect.models.enums import ApplicationStatus, IncidentStatus, Role
from crisisconnect.schemas.incident import IncidentReportIn
from crisisconnect.services import fanout
from crisisconnect.services.fanout import EventDispatcher
from crisisconnect.services.notifications import NotificationChannel
from crisisconnect.services.queries import IncidentFilters, filter_incidents, scope_incidents
from crisisconnect.services.state_machine import (
    INCIDENT_TRANSITIONS,
    TransitionResult,
    require_transition,
    status_label,
)
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)


class IncidentService:
    """
    Service for the admin-mediated incident workflow.

    Each transition commits, then publishes its events. Verification also
    schedules an email to every accepted volunteer.
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

    async def report(self, caller: Caller, data: IncidentReportIn) -> TransitionResult[Incident]:
        caller.require_role(Role.CIVILIAN, action="report incidents")

        incident = Incident(
            location=data.location,
            type=data.type,
            severity=data.severity,
            description=data.description,
            status=IncidentStatus.PENDING,
            reported_by_id=caller.id,
        )
        incident.place(data.latitude, data.longitude)
        self.store.add(incident)
        await self.store.commit()

        incident = await self.store.reload(Incident, incident.id)
        logger.info(f"Incident {incident.id} reported by {caller.id} (severity {incident.severity})")

        events = [fanout.new_incident(incident)]
        await self.dispatcher.publish(events)
        return TransitionResult(incident, events)

    async def verify(self, caller: Caller, incident_id: str) -> TransitionResult[Incident]:
        caller.require_role(Role.ADMIN, action="verify incidents")

        won = await self.store.compare_and_set(
            Incident,
            incident_id,
            [Incident.status == IncidentStatus.PENDING],
            {
                "status": IncidentStatus.VERIFIED,
                "verified_by_id": caller.id,
                "verified_at": utcnow(),
            },
        )
        if not won:
            await self._raise_for(incident_id, IncidentStatus.VERIFIED)
        await self.store.commit()

        incident = await self.store.reload(Incident, incident_id)
        logger.info(f"Incident {incident_id} verified by {caller.id}")

        events = [fanout.incident_verified(incident)]
        await self.dispatcher.publish(events)

        if self.notifications is not None:
            recipients = await self._accepted_volunteer_emails()
            self.notifications.incident_verified(recipients, incident)
        return TransitionResult(incident, events)

    async def mark_ongoing(self, caller: Caller, incident_id: str) -> TransitionResult[Incident]:
        return await self._advance(caller, incident_id, IncidentStatus.ONGOING)

    async def mark_completed(self, caller: Caller, incident_id: str) -> TransitionResult[Incident]:
        return await self._advance(caller, incident_id, IncidentStatus.COMPLETED)

    async def _advance(
        self, caller: Caller, incident_id: str, target: IncidentStatus
    ) -> TransitionResult[Incident]:
        caller.require_role(Role.ADMIN, action="update incident status")
        source = IncidentStatus(target - 1)

        won = await self.store.compare_and_set(
            Incident, incident_id, [Incident.status == source], {"status": target}
        )
        if not won:
            await self._raise_for(incident_id, target)
        await self.store.commit()

        incident = await self.store.reload(Incident, incident_id)
        logger.info(f"Incident {incident_id} moved to {status_label(target)} by {caller.id}")

        events = [fanout.incident_updated(incident)]
        await self.dispatcher.publish(events)
        return TransitionResult(incident, events)

    async def _raise_for(self, incident_id: str, target: IncidentStatus) -> None:
        """Explain why a conditional transition matched no row."""
        incident = await self.store.get(Incident, incident_id)
        if incident is None:
            raise NotFoundError("Incident", incident_id)
        current = IncidentStatus(incident.status)
        if current >= target:
            raise InvalidStateError(f"Incident is already {status_label(current)}")
        require_transition(INCIDENT_TRANSITIONS, current, target, "Incident")
        # Legal from the state we now see, so another request moved it in between
        raise ConflictError("Incident was updated concurrently, refresh and retry")

    async def _accepted_volunteer_emails(self) -> list[str]:
        try:
            result = await self.db.execute(
                select(User.email)
                .join(VolunteerProfile, VolunteerProfile.user_id == User.id)
                .where(
                    VolunteerProfile.application_status == ApplicationStatus.ACCEPTED,
                    User.email.is_not(None),
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Could not load volunteer recipients: {e}")
            return []
        return [email for email in result.scalars().all() if email]

    # Reads

    async def get(self, caller: Caller, incident_id: str) -> Incident:
        incident = await self.store.get_or_raise(Incident, incident_id)
        if caller.role == Role.CIVILIAN and not caller.owns(incident.reported_by_id):
            raise AuthorizationError()
        return incident

    async def list_visible(
        self, caller: Caller, filters: IncidentFilters | None = None, limit: int = 500
    ) -> list[Incident]:
        """Incidents visible to the caller, newest first."""
        query = scope_incidents(select(Incident), caller)
        query = filter_incidents(query, filters or IncidentFilters())
        query = query.order_by(Incident.created_at.desc()).limit(limit)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def pending_queue(self, caller: Caller) -> list[Incident]:
        """Admin review queue: most severe first."""
        caller.require_role(Role.ADMIN, action="review pending incidents")
        return await self.store.find(
            Incident,
            Incident.status == IncidentStatus.PENDING,
            order_by=(Incident.severity.desc(), Incident.created_at.desc()),
        )

    async def verified(self, caller: Caller) -> list[Incident]:
        """Verified incidents available for task assignment."""
        caller.require_role(Role.ADMIN, Role.VOLUNTEER, action="view verified incidents")
        return await self.store.find(
            Incident,
            Incident.status == IncidentStatus.VERIFIED,
            order_by=(Incident.severity.desc(), Incident.created_at.desc()),
        )

    async def mine(self, caller: Caller) -> list[Incident]:
        return await self.store.find(
            Incident,
            Incident.reported_by_id == caller.id,
            order_by=(Incident.created_at.desc(),),
        )

    async def map_data(self) -> list[Incident]:
        """Every incident, for map markers. All roles see the full map."""
        return await self.store.find(Incident, order_by=(Incident.created_at.desc(),))
