"""Tests for visibility scoping, list filters and distance ranking."""

from datetime import UTC, date, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy import select

from crisisconnect.auth import Caller
from crisisconnect.models import HelpRequest, Incident
from crisisconnect.models.enums import HelpRequestStatus, IncidentStatus, Role
from crisisconnect.services.queries import (
    IncidentFilters,
    RequestFilters,
    available_only,
    filter_help_requests,
    filter_incidents,
    rank_by_distance,
    scope_help_requests,
    scope_incidents,
)


def _request(lat: float, lon: float, title: str = "Need help") -> HelpRequest:
    request = HelpRequest(title=title, description="details", civilian_id="c1")
    request.place(lat, lon)
    return request


class TestRankByDistance:
    """Tests for rank_by_distance."""

    def test_radius_excludes_far_requests(self):
        near = _request(28.62, 77.21, "near")
        farther = _request(28.6939, 77.2090, "farther")
        outside = _request(28.70, 77.10, "outside")

        ranked = rank_by_distance([outside, farther, near], 28.6139, 77.2090, 10)

        assert [request.title for request, _ in ranked] == ["near", "farther"]
        assert ranked[0][1] < ranked[1][1] <= 10

    def test_zero_radius_means_unbounded(self):
        requests = [_request(19.0760, 72.8777), _request(28.62, 77.21)]

        ranked = rank_by_distance(requests, 28.6139, 77.2090, 0)

        assert len(ranked) == 2
        assert ranked[-1][1] > 1000

    def test_no_radius(self):
        assert len(rank_by_distance([_request(10.0, 10.0)], 0.5, 0.5)) == 1

    def test_empty_input(self):
        assert rank_by_distance([], 28.6139, 77.2090, 10) == []


@pytest_asyncio.fixture
async def seeded(db_session, users):
    """Incidents and requests from two civilians across a few days."""
    now = datetime.now(UTC)
    rows = [
        Incident(
            location="Old Town Bridge",
            type="Flood",
            severity=5,
            description="Bridge underwater",
            status=IncidentStatus.PENDING,
            reported_by_id=users["civilian"].id,
            created_at=now,
        ),
        Incident(
            location="Market 100%",
            type="Fire",
            severity=3,
            description="Stall fire",
            status=IncidentStatus.VERIFIED,
            reported_by_id=users["civilian2"].id,
            created_at=now - timedelta(days=3),
        ),
    ]
    for incident in rows:
        incident.place(28.6, 77.2)

    requests = [
        HelpRequest(
            title="Insulin needed",
            description="Diabetic neighbour",
            civilian_id=users["civilian"].id,
            category="medical",
            priority="critical",
            status=HelpRequestStatus.PENDING,
            created_at=now,
        ),
        HelpRequest(
            title="Food for six",
            description="Family stranded",
            civilian_id=users["civilian2"].id,
            category="food",
            priority="high",
            status=HelpRequestStatus.CLAIMED,
            claimed_by_id=users["volunteer"].id,
            created_at=now - timedelta(days=2),
        ),
    ]
    for request in requests:
        request.place(28.6, 77.2)

    db_session.add_all(rows + requests)
    await db_session.commit()
    return {"now": now}


async def _incidents(db, query) -> list[Incident]:
    return list((await db.execute(query)).scalars().all())


async def _requests(db, query) -> list[HelpRequest]:
    return list((await db.execute(query)).scalars().all())


class TestScoping:
    """Civilians see only their own rows; other roles see everything."""

    @pytest.mark.asyncio
    async def test_civilian_sees_own_incidents(self, db_session, users, seeded):
        caller = Caller(users["civilian"].id, Role.CIVILIAN)
        found = await _incidents(db_session, scope_incidents(select(Incident), caller))
        assert [incident.type for incident in found] == ["Flood"]

    @pytest.mark.asyncio
    async def test_volunteer_sees_all_requests(self, db_session, users, seeded):
        caller = Caller(users["volunteer"].id, Role.VOLUNTEER)
        found = await _requests(db_session, scope_help_requests(select(HelpRequest), caller))
        assert len(found) == 2


class TestFilters:
    """Ad-hoc filters combine with AND."""

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db_session, seeded):
        query = filter_incidents(select(Incident), IncidentFilters(search="BRIDGE"))
        found = await _incidents(db_session, query)
        assert [incident.type for incident in found] == ["Flood"]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, db_session, seeded):
        query = filter_incidents(select(Incident), IncidentFilters(search="100%"))
        found = await _incidents(db_session, query)
        assert [incident.type for incident in found] == ["Fire"]

        query = filter_incidents(select(Incident), IncidentFilters(search="%"))
        assert len(await _incidents(db_session, query)) == 1

    @pytest.mark.asyncio
    async def test_filters_combine(self, db_session, seeded):
        query = filter_incidents(
            select(Incident), IncidentFilters(category="Fire", severity=5)
        )
        assert await _incidents(db_session, query) == []

    @pytest.mark.asyncio
    async def test_status_filter(self, db_session, seeded):
        query = filter_incidents(
            select(Incident), IncidentFilters(status=IncidentStatus.VERIFIED)
        )
        found = await _incidents(db_session, query)
        assert [incident.type for incident in found] == ["Fire"]

    @pytest.mark.asyncio
    async def test_date_range_is_inclusive_by_day(self, db_session, seeded):
        today = seeded["now"].date()
        query = filter_help_requests(
            select(HelpRequest),
            RequestFilters(start_date=today - timedelta(days=2), end_date=today - timedelta(days=2)),
        )
        found = await _requests(db_session, query)
        assert [request.title for request in found] == ["Food for six"]

    @pytest.mark.asyncio
    async def test_open_ended_dates(self, db_session, seeded):
        query = filter_help_requests(
            select(HelpRequest), RequestFilters(start_date=date(2000, 1, 1))
        )
        assert len(await _requests(db_session, query)) == 2

    @pytest.mark.asyncio
    async def test_request_category_and_priority(self, db_session, seeded):
        query = filter_help_requests(
            select(HelpRequest), RequestFilters(category="medical", priority="critical")
        )
        found = await _requests(db_session, query)
        assert [request.title for request in found] == ["Insulin needed"]

    @pytest.mark.asyncio
    async def test_available_only_excludes_claimed(self, db_session, seeded):
        found = await _requests(db_session, available_only(select(HelpRequest)))
        assert [request.title for request in found] == ["Insulin needed"]
