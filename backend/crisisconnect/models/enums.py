"""Status and category enumerations stored on the models."""

from enum import IntEnum, StrEnum


class Role(StrEnum):
    CIVILIAN = "civilian"
    VOLUNTEER = "volunteer"
    ADMIN = "admin"


class IncidentStatus(IntEnum):
    PENDING = 0
    VERIFIED = 1
    ONGOING = 2
    COMPLETED = 3


class HelpRequestStatus(StrEnum):
    PENDING = "pending"
    CLAIMED = "claimed"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class HelpRequestCategory(StrEnum):
    MEDICAL = "medical"
    SHELTER = "shelter"
    FOOD = "food"
    RESCUE = "rescue"
    OTHER = "other"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(IntEnum):
    ASSIGNED = 1
    ACCEPTED = 2
    REJECTED = 3
    COMPLETED = 4


class ApplicationStatus(IntEnum):
    PENDING = 0
    ACCEPTED = 1
    REJECTED = 2


class VolunteerTaskStatus(IntEnum):
    AVAILABLE = 0
    ASSIGNED = 1
    ACCEPTED = 2
    REJECTED = 3
    COMPLETED = 4


class AlertType(StrEnum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"
    SUCCESS = "success"


class AlertAudience(StrEnum):
    ALL = "all"
    VOLUNTEERS = "volunteers"
    CIVILIANS = "civilians"


class ResourceType(StrEnum):
    SHELTER = "shelter"
    FOOD = "food"
    MEDICAL = "medical"
    WATER = "water"
    OTHER = "other"
