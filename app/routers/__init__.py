"""API routers."""

from app.routers.admin_messages import router as admin_messages_router
from app.routers.display_messages import router as display_messages_router
from app.routers.upload import router as upload_router

__all__ = ["upload_router", "admin_messages_router", "display_messages_router"]
