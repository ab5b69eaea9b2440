"""Services for state transitions, fanout and queries."""

from crisisconnect.services.alerts import AlertService
from crisisconnect.services.fanout import Event, EventDispatcher
from crisisconnect.services.help_requests import HelpRequestService
from crisisconnect.services.incidents import IncidentService
from crisisconnect.services.notifications import EmailSmsNotifier, NotificationChannel
from crisisconnect.services.resources import ResourceService
from crisisconnect.services.store import EntityStore
from crisisconnect.services.tasks import TaskService
from crisisconnect.services.volunteers import VolunteerProfileService

__all__ = [
    "AlertService",
    "EmailSmsNotifier",
    "EntityStore",
    "Event",
    "EventDispatcher",
    "HelpRequestService",
    "IncidentService",
    "NotificationChannel",
    "ResourceService",
    "TaskService",
    "VolunteerProfileService",
]
