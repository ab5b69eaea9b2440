"""Database models."""

from crisisconnect.models.alert import Alert
from crisisconnect.models.help_request import HelpRequest
from crisisconnect.models.incident import Incident
from crisisconnect.models.resource import Resource
from crisisconnect.models.task import Task
from crisisconnect.models.user import User
from crisisconnect.models.volunteer_profile import VolunteerProfile

__all__ = [
    "Alert",
    "HelpRequest",
    "Incident",
    "Resource",
    "Task",
    "User",
    "VolunteerProfile",
]
