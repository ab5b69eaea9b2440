"""API routers."""

from crisisconnect.routers.alerts import router as alerts_router
from crisisconnect.routers.health import router as health_router
from crisisconnect.routers.incidents import router as incidents_router
from crisisconnect.routers.requests import router as requests_router
from crisisconnect.routers.resources import router as resources_router
from crisisconnect.routers.tasks import router as tasks_router
from crisisconnect.routers.volunteer_profiles import router as volunteer_profiles_router
from crisisconnect.routers.volunteers import router as volunteers_router

__all__ = [
    "alerts_router",
    "health_router",
    "incidents_router",
    "requests_router",
    "resources_router",
    "tasks_router",
    "volunteer_profiles_router",
    "volunteers_router",
]
