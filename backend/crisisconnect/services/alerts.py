"""Alert broadcasts managed by admins."""

import logging

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller
from crisisconnect.models import Alert
from crisisconnect.models.enums import AlertAudience, Role
from crisisconnect.schemas.alert import AlertIn, AlertUpdateIn
from crisisconnect.services import fanout
from crisisconnect.services.fanout import EventDispatcher
from crisisconnect.services.state_machine import TransitionResult
from crisisconnect.services.store import EntityStore

logger = logging.getLogger(__name__)

ACTIVE_ALERT_LIMIT = 10

_AUDIENCE_FOR_ROLE = {
    Role.CIVILIAN: AlertAudience.CIVILIANS,
    Role.VOLUNTEER: AlertAudience.VOLUNTEERS,
}


class AlertService:
    def __init__(self, db: AsyncSession, dispatcher: EventDispatcher):
        self.db = db
        self.store = EntityStore(db)
        self.dispatcher = dispatcher

    async def active_for(self, caller: Caller) -> list[Alert]:
        """Latest active alerts addressed to the caller's audience."""
        criteria = [Alert.is_active.is_(True)]
        audience = _AUDIENCE_FOR_ROLE.get(caller.role)
        if audience is not None:
            criteria.append(
                or_(Alert.target_audience == AlertAudience.ALL, Alert.target_audience == audience)
            )
        return await self.store.find(
            Alert, *criteria, order_by=(Alert.created_at.desc(),), limit=ACTIVE_ALERT_LIMIT
        )

    async def list_all(self, caller: Caller) -> list[Alert]:
        caller.require_role(Role.ADMIN, action="manage alerts")
        return await self.store.find(Alert, order_by=(Alert.created_at.desc(),))

    async def get(self, alert_id: str) -> Alert:
        return await self.store.get_or_raise(Alert, alert_id)

    async def create(self, caller: Caller, data: AlertIn) -> TransitionResult[Alert]:
        caller.require_role(Role.ADMIN, action="create alerts")
        alert = Alert(
            title=data.title,
            message=data.message,
            type=data.type,
            target_audience=data.target_audience,
            is_active=True,
            created_by_id=caller.id,
        )
        self.store.add(alert)
        await self.store.commit()

        alert = await self.store.reload(Alert, alert.id)
        logger.info(f"Alert {alert.id} created for {alert.target_audience}")
        events = [fanout.new_alert(alert)]
        await self.dispatcher.publish(events)
        return TransitionResult(alert, events)

    async def update(
        self, caller: Caller, alert_id: str, patch: AlertUpdateIn
    ) -> TransitionResult[Alert]:
        caller.require_role(Role.ADMIN, action="update alerts")
        alert = await self.store.get_or_raise(Alert, alert_id)
        for name, value in patch.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(alert, name, value)
        await self.store.commit()

        alert = await self.store.reload(Alert, alert_id)
        events = [fanout.alert_updated(alert)]
        await self.dispatcher.publish(events)
        return TransitionResult(alert, events)

    async def delete(self, caller: Caller, alert_id: str) -> TransitionResult[str]:
        """Soft delete: the alert stays stored but inactive."""
        caller.require_role(Role.ADMIN, action="delete alerts")
        alert = await self.store.get_or_raise(Alert, alert_id)
        alert.is_active = False
        await self.store.commit()
        logger.info(f"Alert {alert_id} deactivated by {caller.id}")

        events = [fanout.alert_deleted(alert_id)]
        await self.dispatcher.publish(events)
        return TransitionResult(alert_id, events)
