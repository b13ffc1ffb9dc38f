"""Event domain - live booking events for the dashboard and the landing page"""

from .router import public_router, router

__all__ = ["router", "public_router"]
