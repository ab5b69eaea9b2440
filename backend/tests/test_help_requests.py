"""Tests for the help request service."""

import asyncio
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from crisisconnect.auth import Caller
from crisisconnect.database import Base
from crisisconnect.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from crisisconnect.models import HelpRequest, User
from crisisconnect.models.enums import HelpRequestStatus, Role
from crisisconnect.schemas.common import NoteIn
from crisisconnect.schemas.help_request import HelpRequestCreateIn, HelpRequestUpdateIn
from crisisconnect.services import EventDispatcher, HelpRequestService


def _create(**overrides) -> HelpRequestCreateIn:
    data = {
        "title": "Need insulin",
        "description": "Diabetic, ran out this morning",
        "location": {"latitude": 28.62, "longitude": 77.21, "address": "Block C"},
        "category": "medical",
        "priority": "critical",
    }
    data.update(overrides)
    return HelpRequestCreateIn(**data)


@pytest.fixture
def service(db_session, dispatcher, notifications) -> HelpRequestService:
    return HelpRequestService(db_session, dispatcher, notifications)


async def _pending(service, callers) -> HelpRequest:
    return (await service.create(callers["civilian"], _create())).entity


class TestCreate:
    """Tests for HelpRequestService.create."""

    @pytest.mark.asyncio
    async def test_create_defaults(self, service, callers, transport):
        result = await service.create(callers["civilian"], _create())

        request = result.entity
        assert request.status == HelpRequestStatus.PENDING
        assert request.claimed_by_id is None
        assert request.is_verified is False
        assert request.coordinates == [77.21, 28.62]
        assert request.civilian.name == "Carlos Civilian"

        # Room delivery plus the broadcast backstop
        assert transport.rooms_for("new-request") == ["volunteers", None]
        _, _, payload = transport.emitted[0]
        assert payload["claimed_by"] is None
        assert payload["civilian"]["id"] == callers["civilian"].id

    @pytest.mark.asyncio
    async def test_only_civilians_create(self, service, callers):
        with pytest.raises(AuthorizationError):
            await service.create(callers["admin"], _create())


class TestClaim:
    """Tests for HelpRequestService.claim."""

    @pytest.mark.asyncio
    async def test_claim(self, service, callers, transport, notifications, notifier):
        pending = await _pending(service, callers)

        result = await service.claim(callers["volunteer"], pending.id)
        await notifications.drain()

        request = result.entity
        assert request.status == HelpRequestStatus.CLAIMED
        assert request.claimed_by.id == callers["volunteer"].id
        assert result.event_names == ["request-claimed"]
        assert transport.rooms_for("request-claimed") == ["volunteers", None]

        civilian, volunteer, claimed = notifier.claimed[0]
        assert civilian.id == callers["civilian"].id
        assert volunteer.id == callers["volunteer"].id
        assert claimed.id == pending.id

    @pytest.mark.asyncio
    async def test_second_claim_conflicts(self, service, callers, transport):
        pending = await _pending(service, callers)
        await service.claim(callers["volunteer"], pending.id)
        emitted = len(transport.emitted)

        with pytest.raises(ConflictError):
            await service.claim(callers["volunteer2"], pending.id)

        request = await service.get(callers["admin"], pending.id)
        assert request.claimed_by_id == callers["volunteer"].id
        assert len(transport.emitted) == emitted

    @pytest.mark.asyncio
    async def test_claim_cancelled_is_invalid(self, service, callers):
        pending = await _pending(service, callers)
        await service.update(
            callers["civilian"], pending.id, HelpRequestUpdateIn(status="cancelled")
        )

        with pytest.raises(InvalidStateError):
            await service.claim(callers["volunteer"], pending.id)

    @pytest.mark.asyncio
    async def test_claim_missing(self, service, callers):
        with pytest.raises(NotFoundError):
            await service.claim(callers["volunteer"], "nope")

    @pytest.mark.asyncio
    async def test_only_volunteers_claim(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(AuthorizationError):
            await service.claim(callers["admin"], pending.id)

    @pytest.mark.asyncio
    async def test_notifier_failure_keeps_claim(
        self, db_session, dispatcher, callers, failing_notifications
    ):
        service = HelpRequestService(db_session, dispatcher, failing_notifications)
        pending = await _pending(service, callers)

        result = await service.claim(callers["volunteer"], pending.id)
        await failing_notifications.drain()

        assert result.entity.status == HelpRequestStatus.CLAIMED
        assert result.event_names == ["request-claimed"]


class TestConcurrentClaims:
    """Racing claims from separate sessions: exactly one wins."""

    @pytest.mark.asyncio
    async def test_exactly_one_claim_wins(self, tmp_path, transport):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
            connect_args={"timeout": 30},
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async with session_maker() as setup:
            civilian = User(name="Carlos", role=Role.CIVILIAN, email="c@example.org")
            first = User(name="Vera", role=Role.VOLUNTEER, email="v@example.org")
            second = User(name="Victor", role=Role.VOLUNTEER, email="w@example.org")
            setup.add_all([civilian, first, second])
            await setup.commit()
            creator = HelpRequestService(setup, EventDispatcher(transport))
            request_id = (
                await creator.create(Caller(civilian.id, Role.CIVILIAN), _create())
            ).entity.id

        async def attempt(volunteer: User):
            async with session_maker() as session:
                service = HelpRequestService(session, EventDispatcher(transport))
                return await service.claim(Caller(volunteer.id, Role.VOLUNTEER), request_id)

        outcomes = await asyncio.gather(
            attempt(first), attempt(second), return_exceptions=True
        )

        wins = [outcome for outcome in outcomes if not isinstance(outcome, BaseException)]
        losses = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        assert len(wins) == 1
        assert len(losses) == 1
        assert isinstance(losses[0], ConflictError)
        assert transport.names.count("request-claimed") == 2  # room + broadcast, once

        async with session_maker() as check:
            stored = await check.get(HelpRequest, request_id)
            assert stored.claimed_by_id == wins[0].entity.claimed_by_id
            assert stored.status == HelpRequestStatus.CLAIMED

        await engine.dispose()


class TestUpdate:
    """Tests for HelpRequestService.update."""

    @pytest.mark.asyncio
    async def test_volunteer_moves_own_claim(self, service, callers):
        pending = await _pending(service, callers)
        await service.claim(callers["volunteer"], pending.id)

        result = await service.update(
            callers["volunteer"], pending.id, HelpRequestUpdateIn(status="in-progress")
        )
        assert result.entity.status == HelpRequestStatus.IN_PROGRESS

        resolved = await service.update(
            callers["volunteer"], pending.id, HelpRequestUpdateIn(status="resolved")
        )

        # The emitted payload keeps the status as of that transition
        assert result.events[0].payload["status"] == "in-progress"
        assert resolved.entity.status == HelpRequestStatus.RESOLVED
        assert resolved.entity.claimed_by_id == callers["volunteer"].id
        assert resolved.event_names == ["request-updated"]

    @pytest.mark.asyncio
    async def test_volunteer_cannot_touch_unclaimed(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(AuthorizationError):
            await service.update(
                callers["volunteer"], pending.id, HelpRequestUpdateIn(status="resolved")
            )

    @pytest.mark.asyncio
    async def test_volunteer_limited_to_status(self, service, callers):
        pending = await _pending(service, callers)
        await service.claim(callers["volunteer"], pending.id)
        with pytest.raises(AuthorizationError):
            await service.update(
                callers["volunteer"], pending.id, HelpRequestUpdateIn(title="Changed")
            )

    @pytest.mark.asyncio
    async def test_civilian_cannot_patch_foreign(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(AuthorizationError):
            await service.update(
                callers["civilian2"], pending.id, HelpRequestUpdateIn(title="Mine now")
            )

    @pytest.mark.asyncio
    async def test_claim_via_patch_refused(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(InvalidStateError):
            await service.update(callers["admin"], pending.id, HelpRequestUpdateIn(status="claimed"))

    @pytest.mark.asyncio
    async def test_cancel_clears_claimant(self, service, callers):
        pending = await _pending(service, callers)
        await service.claim(callers["volunteer"], pending.id)

        result = await service.update(
            callers["civilian"], pending.id, HelpRequestUpdateIn(status="cancelled")
        )

        assert result.entity.status == HelpRequestStatus.CANCELLED
        assert result.entity.claimed_by_id is None

    @pytest.mark.asyncio
    async def test_resolved_is_terminal(self, service, callers):
        pending = await _pending(service, callers)
        await service.claim(callers["volunteer"], pending.id)
        await service.update(
            callers["volunteer"], pending.id, HelpRequestUpdateIn(status="resolved")
        )
        with pytest.raises(InvalidStateError):
            await service.update(
                callers["civilian"], pending.id, HelpRequestUpdateIn(status="cancelled")
            )

    @pytest.mark.asyncio
    async def test_only_admin_verifies(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(AuthorizationError):
            await service.update(
                callers["civilian"], pending.id, HelpRequestUpdateIn(is_verified=True)
            )

        result = await service.update(
            callers["admin"], pending.id, HelpRequestUpdateIn(is_verified=True)
        )
        assert result.entity.is_verified is True
        assert result.entity.verified_by.id == callers["admin"].id

    @pytest.mark.asyncio
    async def test_empty_patch_emits_nothing(self, service, callers, transport):
        pending = await _pending(service, callers)
        emitted = len(transport.emitted)

        result = await service.update(callers["civilian"], pending.id, HelpRequestUpdateIn())

        assert result.events == []
        assert len(transport.emitted) == emitted

    @pytest.mark.asyncio
    async def test_location_patch_rederives_coordinates(self, service, callers):
        pending = await _pending(service, callers)
        result = await service.update(
            callers["civilian"],
            pending.id,
            HelpRequestUpdateIn(location={"latitude": 19.07, "longitude": 72.88}),
        )
        assert result.entity.coordinates == [72.88, 19.07]
        assert result.entity.address is None


class TestDeleteAndNotes:
    """Hard delete and optimistic note appends."""

    @pytest.mark.asyncio
    async def test_owner_deletes(self, service, callers, transport):
        pending = await _pending(service, callers)

        result = await service.delete(callers["civilian"], pending.id)

        assert result.event_names == ["request-deleted"]
        assert transport.emitted[-1] == ("request-deleted", None, {"id": pending.id})
        with pytest.raises(NotFoundError):
            await service.get(callers["admin"], pending.id)

    @pytest.mark.asyncio
    async def test_stranger_cannot_delete(self, service, callers):
        pending = await _pending(service, callers)
        with pytest.raises(AuthorizationError):
            await service.delete(callers["civilian2"], pending.id)

    @pytest.mark.asyncio
    async def test_add_note(self, service, callers):
        pending = await _pending(service, callers)

        result = await service.add_note(callers["civilian"], pending.id, NoteIn(text="Gate is blue"))

        assert result.entity.notes[0]["text"] == "Gate is blue"
        assert result.entity.notes[0]["author_id"] == callers["civilian"].id

    @pytest.mark.asyncio
    async def test_stale_note_conflicts(self, service, callers):
        pending = await _pending(service, callers)
        stale = NoteIn(text="second", expected_updated_at=datetime(2000, 1, 1))

        with pytest.raises(ConflictError):
            await service.add_note(callers["civilian"], pending.id, stale)


class TestReads:
    """Availability, proximity and claim statistics."""

    @pytest.mark.asyncio
    async def test_available_hides_claimed(self, service, callers):
        first = await _pending(service, callers)
        second = await _pending(service, callers)
        await service.claim(callers["volunteer"], first.id)

        available = await service.available(callers["volunteer"])

        assert [request.id for request in available] == [second.id]

    @pytest.mark.asyncio
    async def test_nearby_ranks_by_distance(self, service, callers):
        far = (
            await service.create(
                callers["civilian"],
                _create(title="far", location={"latitude": 28.6939, "longitude": 77.2090}),
            )
        ).entity
        near = (
            await service.create(
                callers["civilian"],
                _create(title="near", location={"latitude": 28.62, "longitude": 77.21}),
            )
        ).entity
        await service.create(
            callers["civilian"],
            _create(title="outside", location={"latitude": 28.70, "longitude": 77.10}),
        )

        ranked = await service.nearby(callers["volunteer"], 28.6139, 77.2090, 10)

        assert [request.id for request, _ in ranked] == [near.id, far.id]

    @pytest.mark.asyncio
    async def test_civilians_cannot_search_nearby(self, service, callers):
        with pytest.raises(AuthorizationError):
            await service.nearby(callers["civilian"], 28.6, 77.2, 10)

    @pytest.mark.asyncio
    async def test_stats_for_volunteer(self, service, callers):
        first = await _pending(service, callers)
        second = await _pending(service, callers)
        await service.claim(callers["volunteer"], first.id)
        await service.claim(callers["volunteer"], second.id)
        await service.update(callers["volunteer"], second.id, HelpRequestUpdateIn(status="resolved"))

        stats = await service.stats_for(callers["volunteer"])

        assert stats == {"total_claims": 2, "active_claims": 1, "resolved_claims": 1}

    @pytest.mark.asyncio
    async def test_claims_for_other_volunteer_refused(self, service, callers):
        with pytest.raises(AuthorizationError):
            await service.claims_for(callers["volunteer2"], callers["volunteer"].id)
