"""Service catalog domain - the salon's bookable services"""

from .router import public_router, router

__all__ = ["router", "public_router"]
