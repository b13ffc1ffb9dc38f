"""Booking domain - booking lifecycle and completion settlement"""

from .router import public_router, router

__all__ = ["router", "public_router"]
