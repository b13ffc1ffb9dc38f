"""Stats domain - dashboard overview figures"""

from .router import router

__all__ = ["router"]
