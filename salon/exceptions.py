"""
Booking engine error taxonomy

Services raise these; salon.main maps them to HTTP responses.
"""


class BookingEngineError(Exception):
    """Base class for every error the booking engine raises on purpose"""

    status_code = 400
    code = "booking_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingEngineError):
    """Malformed input - the caller should correct it and retry"""

    status_code = 422
    code = "validation_error"


class NotFoundError(BookingEngineError):
    """Unknown id or token"""

    status_code = 404
    code = "not_found"


class InvalidStateError(BookingEngineError):
    """Operation is not legal for the entity's current state"""

    status_code = 409
    code = "invalid_state"


class InvalidTransitionError(InvalidStateError):
    """Requested status change is not an edge of the booking graph"""

    code = "invalid_transition"


class ExpiredError(BookingEngineError):
    """Time-bounded credential lapsed or was already used"""

    status_code = 410
    code = "expired"


class AlreadyCompletedError(BookingEngineError):
    """Completion already happened; safe to treat as success by the caller"""

    status_code = 409
    code = "already_completed"
