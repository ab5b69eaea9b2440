"""
Role-scoped visibility and ad-hoc list filters.

Visibility is applied before any filter. Filters combine with AND.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import Select, or_

from crisisconnect.auth import Caller
from crisisconnect.models import HelpRequest, Incident
from crisisconnect.models.enums import HelpRequestStatus, Role
from crisisconnect.services.geo import haversine_km


@dataclass
class IncidentFilters:
    search: str | None = None
    category: str | None = None  # matches Incident.type
    severity: int | None = None
    status: int | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass
class RequestFilters:
    search: str | None = None
    category: str | None = None
    priority: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def scope_incidents(query: Select, caller: Caller) -> Select:
    """Civilians see only their own reports."""
    if caller.role == Role.CIVILIAN:
        query = query.where(Incident.reported_by_id == caller.id)
    return query


def scope_help_requests(query: Select, caller: Caller) -> Select:
    """Civilians see only their own requests."""
    if caller.role == Role.CIVILIAN:
        query = query.where(HelpRequest.civilian_id == caller.id)
    return query


def _created_between(query: Select, column, start: date | None, end: date | None) -> Select:
    # Both bounds inclusive at day granularity
    if start:
        query = query.where(column >= _day_start(start))
    if end:
        query = query.where(column < _day_start(end + timedelta(days=1)))
    return query


def filter_incidents(query: Select, filters: IncidentFilters) -> Select:
    if filters.search:
        term = filters.search.strip()
        query = query.where(
            or_(
                Incident.description.icontains(term, autoescape=True),
                Incident.location.icontains(term, autoescape=True),
                Incident.type.icontains(term, autoescape=True),
            )
        )
    if filters.category:
        query = query.where(Incident.type == filters.category)
    if filters.severity is not None:
        query = query.where(Incident.severity == filters.severity)
    if filters.status is not None:
        query = query.where(Incident.status == filters.status)
    return _created_between(query, Incident.created_at, filters.start_date, filters.end_date)


def filter_help_requests(query: Select, filters: RequestFilters) -> Select:
    if filters.search:
        term = filters.search.strip()
        query = query.where(
            or_(
                HelpRequest.title.icontains(term, autoescape=True),
                HelpRequest.description.icontains(term, autoescape=True),
            )
        )
    if filters.category:
        query = query.where(HelpRequest.category == filters.category)
    if filters.priority:
        query = query.where(HelpRequest.priority == filters.priority)
    if filters.status:
        query = query.where(HelpRequest.status == filters.status)
    return _created_between(query, HelpRequest.created_at, filters.start_date, filters.end_date)


def available_only(query: Select) -> Select:
    """Pending requests nobody has claimed."""
    return query.where(
        HelpRequest.status == HelpRequestStatus.PENDING,
        HelpRequest.claimed_by_id.is_(None),
    )


def rank_by_distance(
    requests: list[HelpRequest],
    latitude: float,
    longitude: float,
    radius_km: float | None = None,
) -> list[tuple[HelpRequest, float]]:
    """
    Pair each request with its distance from the query point.

    A positive radius excludes requests farther than it. Results are sorted
    ascending by distance.
    """
    ranked = []
    for request in requests:
        distance = haversine_km(latitude, longitude, request.latitude, request.longitude)
        if radius_km and radius_km > 0 and distance > radius_km:
            continue
        ranked.append((request, distance))
    ranked.sort(key=lambda pair: pair[1])
    return ranked
