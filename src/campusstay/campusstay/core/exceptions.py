class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(ValidationError):
    """Raised when a room, request, student, parcel, ... id is unknown."""


class AlreadyBookedError(ValidationError):
    """Raised when a student who already has a room tries to book another."""


class RoomFullError(ValidationError):
    """Raised when a room has no free seat."""


class NoCurrentRoomError(ValidationError):
    """Raised when moving a student who is not housed anywhere."""


class InvalidOrExpiredQRError(ValidationError):
    """Raised when no usable attendance session matches a token."""


class QRExpiredError(InvalidOrExpiredQRError):
    """Raised when the matching attendance session is past its expiry."""


class OutsideGeofenceError(ValidationError):
    """Raised when attendance is marked from outside the hostel geofence."""


class InvalidOptionError(ValidationError):
    """Raised when voting for an option a poll does not offer."""


class ClosedError(ValidationError):
    """Raised when acting on a poll, request, event or parcel that is closed."""
