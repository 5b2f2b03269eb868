"""API routers."""

from carelink.routers.emergencies import router as emergencies_router
from carelink.routers.health import router as health_router
from carelink.routers.patients import router as patients_router
from carelink.routers.session import router as session_router

__all__ = ["emergencies_router", "health_router", "patients_router", "session_router"]
