"""Tests for the incident workflow service."""

import pytest

from crisisconnect.errors import AuthorizationError, InvalidStateError, NotFoundError
from crisisconnect.models.enums import IncidentStatus
from crisisconnect.schemas.incident import IncidentReportIn
from crisisconnect.services import IncidentService


def _report(**overrides) -> IncidentReportIn:
    data = {
        "location": "Sector 9 market",
        "type": "Fire",
        "severity": 4,
        "description": "Smoke from the north stalls",
        "latitude": 28.61,
        "longitude": 77.21,
    }
    data.update(overrides)
    return IncidentReportIn(**data)


@pytest.fixture
def service(db_session, dispatcher, notifications) -> IncidentService:
    return IncidentService(db_session, dispatcher, notifications)


class TestReport:
    """Tests for IncidentService.report."""

    @pytest.mark.asyncio
    async def test_report_creates_pending_incident(self, service, callers, transport):
        result = await service.report(callers["civilian"], _report())

        incident = result.entity
        assert incident.status == IncidentStatus.PENDING
        assert incident.reported_by.id == callers["civilian"].id
        assert incident.coordinates == [77.21, 28.61]
        assert incident.verified_by is None
        assert result.event_names == ["new-incident"]
        assert transport.rooms_for("new-incident") == [None]

    @pytest.mark.asyncio
    async def test_only_civilians_report(self, service, callers, transport):
        with pytest.raises(AuthorizationError):
            await service.report(callers["volunteer"], _report())
        assert transport.emitted == []


class TestVerify:
    """Tests for IncidentService.verify."""

    @pytest.mark.asyncio
    async def test_verify_sets_verifier(self, service, callers, profiles, notifications, notifier):
        reported = (await service.report(callers["civilian"], _report())).entity

        result = await service.verify(callers["admin"], reported.id)
        await notifications.drain()

        incident = result.entity
        assert incident.status == IncidentStatus.VERIFIED
        assert incident.verified_by.id == callers["admin"].id
        assert incident.verified_at is not None
        assert result.event_names == ["incident-verified"]

        # Only the accepted volunteer is emailed
        recipients, notified = notifier.verified[0]
        assert recipients == ["vera@example.org"]
        assert notified.id == incident.id

    @pytest.mark.asyncio
    async def test_verify_twice_is_invalid(self, service, callers, transport):
        reported = (await service.report(callers["civilian"], _report())).entity
        await service.verify(callers["admin"], reported.id)
        emitted = len(transport.emitted)

        with pytest.raises(InvalidStateError) as exc_info:
            await service.verify(callers["admin"], reported.id)

        assert "already verified" in str(exc_info.value)
        assert len(transport.emitted) == emitted

    @pytest.mark.asyncio
    async def test_only_admins_verify(self, service, callers):
        reported = (await service.report(callers["civilian"], _report())).entity
        with pytest.raises(AuthorizationError):
            await service.verify(callers["volunteer"], reported.id)

    @pytest.mark.asyncio
    async def test_verify_missing(self, service, callers):
        with pytest.raises(NotFoundError):
            await service.verify(callers["admin"], "does-not-exist")

    @pytest.mark.asyncio
    async def test_notifier_failure_keeps_verification(
        self, db_session, dispatcher, callers, profiles, failing_notifications
    ):
        channel = failing_notifications
        service = IncidentService(db_session, dispatcher, channel)
        reported = (await service.report(callers["civilian"], _report())).entity

        result = await service.verify(callers["admin"], reported.id)
        await channel.drain()

        assert result.entity.status == IncidentStatus.VERIFIED
        assert (await service.get(callers["admin"], reported.id)).status == IncidentStatus.VERIFIED


class TestAdvance:
    """Admin-driven Verified -> Ongoing -> Completed."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, service, callers):
        reported = (await service.report(callers["civilian"], _report())).entity
        await service.verify(callers["admin"], reported.id)

        ongoing = await service.mark_ongoing(callers["admin"], reported.id)
        assert ongoing.entity.status == IncidentStatus.ONGOING

        completed = await service.mark_completed(callers["admin"], reported.id)

        assert ongoing.events[0].payload["status"] == IncidentStatus.ONGOING
        assert completed.entity.status == IncidentStatus.COMPLETED
        assert completed.event_names == ["incident-updated"]

    @pytest.mark.asyncio
    async def test_cannot_skip_verification(self, service, callers):
        reported = (await service.report(callers["civilian"], _report())).entity
        with pytest.raises(InvalidStateError):
            await service.mark_ongoing(callers["admin"], reported.id)


class TestReads:
    """Role-scoped incident reads."""

    @pytest.mark.asyncio
    async def test_civilian_cannot_read_foreign_incident(self, service, callers):
        reported = (await service.report(callers["civilian"], _report())).entity
        with pytest.raises(AuthorizationError):
            await service.get(callers["civilian2"], reported.id)

    @pytest.mark.asyncio
    async def test_pending_queue_orders_by_severity(self, service, callers):
        await service.report(callers["civilian"], _report(severity=2, type="Storm"))
        await service.report(callers["civilian"], _report(severity=5, type="Flood"))

        queue = await service.pending_queue(callers["admin"])

        assert [incident.type for incident in queue] == ["Flood", "Storm"]

    @pytest.mark.asyncio
    async def test_pending_queue_admin_only(self, service, callers):
        with pytest.raises(AuthorizationError):
            await service.pending_queue(callers["volunteer"])

    @pytest.mark.asyncio
    async def test_mine_and_list_visible(self, service, callers):
        await service.report(callers["civilian"], _report())
        await service.report(callers["civilian2"], _report(type="Storm"))

        mine = await service.mine(callers["civilian"])
        visible = await service.list_visible(callers["civilian2"])
        everything = await service.list_visible(callers["admin"])

        assert [incident.type for incident in mine] == ["Fire"]
        assert [incident.type for incident in visible] == ["Storm"]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_verified_visible_to_volunteers(self, service, callers, verified_incident):
        found = await service.verified(callers["volunteer"])
        assert [incident.id for incident in found] == [verified_incident.id]

        with pytest.raises(AuthorizationError):
            await service.verified(callers["civilian"])
