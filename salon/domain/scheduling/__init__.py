"""Scheduling domain - bookable time slots in the salon's timezone"""

from .router import router
from .slots import Slot, generate_slots

__all__ = ["router", "Slot", "generate_slots"]
